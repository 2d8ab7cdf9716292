"""
Condo Sync - Document (Arquivo) Schemas
"""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional


class CondoDocument(BaseModel):
    """Documento do condomínio (coleção documents)"""
    id: str = ""
    title: str
    description: str = ""
    category: str = "Geral"
    file_url: str
    file_name: str
    file_type: str = ""
    file_size: int = 0
    uploaded_by: str = ""
    is_pinned: bool = False
    created_at: Optional[datetime] = None


class DocumentCreate(BaseModel):
    title: str
    description: str = ""
    category: str = "Geral"
    file_url: str
    file_name: str
    file_type: str = ""
    file_size: int = Field(0, ge=0)
