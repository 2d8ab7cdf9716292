"""
Condo Sync - Voting Schemas
"""
import enum
from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import Optional, List


class VotingPhase(str, enum.Enum):
    """Derivado das datas, nunca persistido"""
    FUTURE = "future"
    ACTIVE = "active"
    CLOSED = "closed"


class VotingOption(BaseModel):
    id: str
    text: str
    image_url: Optional[str] = None


class Ballot(BaseModel):
    """Voto imutável de uma unidade"""
    user_id: str
    user_name: str
    house_number: int
    option_ids: List[str]
    timestamp: datetime

    class Config:
        frozen = True


class Voting(BaseModel):
    """Votação (coleção votings) com o livro de votos embutido"""
    id: str = ""
    title: str
    description: str = ""
    start_date: date
    end_date: date
    options: List[VotingOption]
    allow_multiple_choices: bool = False
    created_by: str = ""
    created_at: Optional[datetime] = None
    votes: List[Ballot] = Field(default_factory=list)


class VotingOptionCreate(BaseModel):
    text: str
    image_url: Optional[str] = None


class VotingCreate(BaseModel):
    title: str
    description: str = ""
    start_date: date
    end_date: date
    options: List[VotingOptionCreate]
    allow_multiple_choices: bool = False


class VoteCast(BaseModel):
    option_ids: List[str]


class OptionResult(BaseModel):
    option_id: str
    text: str
    count: int
    percentage: int
    is_winner: bool
