"""
Condo Sync - Notification Schemas
"""
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List

# Destinatário sentinela: visível para todos, leitura rastreada por usuário
BROADCAST = "all"


class Notification(BaseModel):
    """Notificação (coleção notifications)"""
    id: str = ""
    message: str
    user_id: str = BROADCAST
    request_id: Optional[str] = None
    created_at: datetime
    read_by: List[str] = Field(default_factory=list)

    @property
    def is_broadcast(self) -> bool:
        return self.user_id == BROADCAST

    def is_visible_to(self, user_id: str) -> bool:
        return self.user_id == BROADCAST or self.user_id == user_id

    def is_read_by(self, user_id: str) -> bool:
        return user_id in self.read_by
