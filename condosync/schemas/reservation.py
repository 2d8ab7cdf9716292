"""
Condo Sync - Reservation Schemas
"""
import enum
from datetime import date, datetime
from pydantic import BaseModel
from typing import Optional


class AreaKind(str, enum.Enum):
    """Classe da área (uma unidade não pode ter as duas no mesmo dia)"""
    CHURRASCO = "churrasco"
    SALAO = "salao"


class Area(str, enum.Enum):
    CHURRASCO_1 = "churrasco1"
    CHURRASCO_2 = "churrasco2"
    SALAO_FESTAS = "salao_festas"

    @property
    def kind(self) -> AreaKind:
        if self is Area.SALAO_FESTAS:
            return AreaKind.SALAO
        return AreaKind.CHURRASCO


class Reservation(BaseModel):
    """Reserva de área comum por dia (coleção reservations)"""
    id: str = ""
    user_id: str
    user_name: str
    house_number: int
    date: date
    area: Area
    created_at: Optional[datetime] = None


class ReservationCreate(BaseModel):
    date: date
    area: Area
    # Apenas ADMIN/SINDICO podem reservar em nome de outra unidade
    house_number: Optional[int] = None
    user_name: Optional[str] = None
