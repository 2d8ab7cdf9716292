"""
Condo Sync - Documents API
Upload de arquivos e metadados dos documentos do condomínio
"""
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from condosync.schemas import DocumentCreate
from condosync.sync import MutationGateway
from condosync.api.deps import get_gateway, done

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.get("")
async def list_documents(gateway: MutationGateway = Depends(get_gateway)):
    """Fixados primeiro, depois os mais recentes"""
    return [d.model_dump(mode="json") for d in gateway.entities.sorted_documents()]


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    folder: str = Form("documents"),
    gateway: MutationGateway = Depends(get_gateway)
):
    """Envia arquivo (foto ou documento) e devolve a URL pública"""
    content = await file.read()
    url = await gateway.upload(file.filename, content, folder)
    return {
        "url": url,
        "file_name": file.filename,
        "file_type": file.content_type or "",
        "file_size": len(content),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_document(data: DocumentCreate, gateway: MutationGateway = Depends(get_gateway)):
    document_id = await gateway.add_document(data)
    return done(gateway, id=document_id)


@router.delete("/{document_id}")
async def delete_document(document_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.delete_document(document_id)
    return done(gateway, id=document_id)


@router.post("/{document_id}/pin")
async def toggle_pin(document_id: str, gateway: MutationGateway = Depends(get_gateway)):
    pinned = await gateway.toggle_document_pin(document_id)
    return done(gateway, id=document_id, is_pinned=pinned)
