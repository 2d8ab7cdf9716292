"""
Condo Sync - Notifications API
"""
from fastapi import APIRouter, Depends

from condosync.sync import MutationGateway, unread_count, visible_to
from condosync.api.deps import get_gateway, done

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("")
async def list_notifications(gateway: MutationGateway = Depends(get_gateway)):
    """Notificações visíveis ao usuário (próprias + gerais) e total não lido"""
    user_id = gateway.actor.id
    notifications = gateway.entities.notifications
    return {
        "unread": unread_count(notifications, user_id),
        "items": [
            {**n.model_dump(mode="json"), "read": user_id in n.read_by}
            for n in visible_to(notifications, user_id)
        ],
    }


@router.post("/read-all")
async def mark_all_read(gateway: MutationGateway = Depends(get_gateway)):
    changed = await gateway.mark_all_notifications_read()
    return done(gateway, changed=changed)


@router.delete("")
async def delete_all(gateway: MutationGateway = Depends(get_gateway)):
    removed = await gateway.delete_all_notifications()
    return done(gateway, removed=removed)


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, gateway: MutationGateway = Depends(get_gateway)):
    await gateway.delete_notification(notification_id)
    return done(gateway, id=notification_id)
