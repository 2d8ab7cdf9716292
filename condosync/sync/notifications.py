"""
Condo Sync - Notification Fanout Tracker
Leitura por usuário (read_by) e remoção individual ou em lote
"""
import logging
from typing import Iterable, List

from condosync.schemas import BROADCAST, Notification

logger = logging.getLogger(__name__)

COLLECTION = "notifications"


def is_visible(notification: Notification, user_id: str) -> bool:
    return notification.user_id == BROADCAST or notification.user_id == user_id


def visible_to(notifications: Iterable[Notification], user_id: str) -> List[Notification]:
    return [n for n in notifications if is_visible(n, user_id)]


def unread_count(notifications: Iterable[Notification], user_id: str) -> int:
    return sum(1 for n in visible_to(notifications, user_id) if user_id not in n.read_by)


class NotificationTracker:
    """Opera direto no store; o Entity Store reflete o resultado pelo snapshot"""

    def __init__(self, store):
        self.store = store

    async def mark_all_read(self, user_id: str) -> int:
        """Idempotente: só acrescenta user_id onde ainda não está. Retorna quantas mudaram."""
        changed = 0
        async with self.store.transaction() as tx:
            for document in await tx.query(COLLECTION):
                notification = Notification.model_validate(document)
                if not is_visible(notification, user_id) or user_id in notification.read_by:
                    continue
                await tx.update(COLLECTION, notification.id, {"read_by": [*notification.read_by, user_id]})
                changed += 1
        return changed

    async def mark_read(self, notification_id: str, user_id: str) -> bool:
        async with self.store.transaction() as tx:
            document = await tx.get(COLLECTION, notification_id)
            if document is None or user_id in document.get("read_by", []):
                return False
            await tx.update(COLLECTION, notification_id, {"read_by": [*document.get("read_by", []), user_id]})
        return True

    async def delete(self, notification_id: str) -> bool:
        return await self.store.delete(COLLECTION, notification_id)

    async def delete_all(self, user_id: str) -> int:
        """Remove em um único lote todas as notificações visíveis ao usuário"""
        batch = self.store.batch()
        for document in await self.store.list(COLLECTION):
            notification = Notification.model_validate(document)
            if is_visible(notification, user_id):
                batch.delete(COLLECTION, notification.id)
        if not len(batch):
            return 0
        removed = await batch.commit()
        logger.info(f"[SYNC] {removed} notificação(ões) removida(s) para {user_id}")
        return removed
