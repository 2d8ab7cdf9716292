"""
Condo Sync - Notice (Aviso) Schemas
"""
import enum
from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional, List


class ReactionKind(str, enum.Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class Notice(BaseModel):
    """Aviso publicado pela gestão (coleção notices)"""
    id: str = ""
    title: str
    content: str
    author_id: str
    author_name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    photos: List[str] = Field(default_factory=list)
    likes: List[str] = Field(default_factory=list)
    dislikes: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

    def is_active(self, today: date) -> bool:
        if self.start_date and today < self.start_date:
            return False
        if self.end_date and today > self.end_date:
            return False
        return True


class NoticeCreate(BaseModel):
    title: str
    content: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    photos: List[str] = Field(default_factory=list)


class ReactionToggle(BaseModel):
    kind: ReactionKind
