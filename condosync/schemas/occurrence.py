"""
Condo Sync - Occurrence Schemas
"""
import enum
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List


class OccurrenceStatus(str, enum.Enum):
    ABERTO = "Aberto"
    RESOLVIDO = "Resolvido"


class Occurrence(BaseModel):
    """Ocorrência registrada por um morador (coleção occurrences)"""
    id: str = ""
    author_id: str
    author_name: str
    house_number: int = 0
    phone: str = ""
    subject: str
    description: str = ""
    photos: List[str] = Field(default_factory=list)
    status: OccurrenceStatus = OccurrenceStatus.ABERTO
    admin_response: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_editable(self) -> bool:
        """Autor só edita enquanto aberta e sem resposta da gestão"""
        return self.status == OccurrenceStatus.ABERTO and not self.admin_response


class OccurrenceCreate(BaseModel):
    phone: str
    subject: str
    description: str
    photos: List[str] = Field(default_factory=list)


class OccurrenceUpdate(BaseModel):
    phone: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    photos: Optional[List[str]] = None


class OccurrenceResponse(BaseModel):
    response: str
    resolve: bool = True
