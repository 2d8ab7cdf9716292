"""
Condo Sync - Real-time Stream
WebSocket que entrega snapshots completos das coleções pedidas pelo cliente.

Cliente envia: {"collections": ["requests", "notifications"]}
Servidor envia: {"type": "snapshot", "collection", "version", "documents"}
               {"type": "error", "collection", "message"}
"""
import asyncio
import logging
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from condosync.core import verify_access_token, is_management, RemoteError
from condosync.schemas import BROADCAST
from condosync.sync import COLLECTIONS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["Sync"])


def _visible_documents(collection: str, documents, user: dict):
    if collection == "users" and not is_management(user.get("role")):
        return [{**d, "cpf": ""} if d.get("id") != user.get("id") else d for d in documents]
    if collection == "notifications":
        return [d for d in documents if d.get("user_id", BROADCAST) in (BROADCAST, user.get("id"))]
    return list(documents)


@router.websocket("/ws")
async def sync_stream(websocket: WebSocket, token: str = Query(...)):
    payload = verify_access_token(token)
    sync = websocket.app.state.sync
    user = await sync.store.get("users", payload.get("sub")) if payload else None
    if not user:
        await websocket.close(code=4401)
        return

    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    watches = {}

    async def pump():
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    def on_snapshot(snapshot):
        queue.put_nowait({
            "type": "snapshot",
            "collection": snapshot.collection,
            "version": snapshot.version,
            "documents": _visible_documents(snapshot.collection, snapshot.documents, user),
        })

    def on_error(error: RemoteError, collection: str):
        watches.pop(collection, None)
        queue.put_nowait({"type": "error", "collection": collection, "message": error.message})

    sender = asyncio.create_task(pump())
    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                logger.warning(f"[SYNC] Mensagem inválida de {user.get('username')}")
                continue
            if sender.done():
                break
            if not isinstance(message, dict) or not isinstance(message.get("collections"), list):
                continue
            for collection in message["collections"]:
                if not isinstance(collection, str) or collection not in COLLECTIONS or collection in watches:
                    continue
                try:
                    watches[collection] = await sync.store.subscribe(
                        collection,
                        on_snapshot,
                        lambda error, c=collection: on_error(error, c)
                    )
                except RemoteError as e:
                    on_error(e, collection)
    except WebSocketDisconnect:
        pass
    finally:
        for watch in watches.values():
            watch.close()
        sender.cancel()
        result, = await asyncio.gather(sender, return_exceptions=True)
        if isinstance(result, Exception):
            logger.warning(f"[SYNC] Falha no envio para {user.get('username')}: {result}")
        logger.info(f"[SYNC] Stream encerrado para {user.get('username')}")
