"""
Condo Sync - Request (Pendência) Schemas
"""
import enum
from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List


class RequestStatus(str, enum.Enum):
    PENDENTE = "Pendente"
    EM_ANALISE = "Em Análise"
    EM_ANDAMENTO = "Em Andamento"
    APROVADA = "Aprovada"
    RECUSADA = "Recusada"
    CONCLUIDO = "Concluído"
    EM_VOTACAO = "Em Votação"


class Priority(str, enum.Enum):
    BAIXA = "Baixa"
    MEDIA = "Média"
    ALTA = "Alta"
    URGENTE = "Urgente"


class Sector(str, enum.Enum):
    CHURRASCO_1 = "Area de churrasco 1"
    CHURRASCO_2 = "Area de churrasco 2"
    SALAO_FESTAS = "Salão de festas"
    PISCINA_AREA = "Piscina"
    QUADRA_VOLEI = "Quadra de vôlei"
    QUADRA_FUTEBOL = "Quadra de futebol"
    PARQUINHO = "Parquinho"
    BANHEIROS = "Banheiros"
    RUAS = "Ruas"
    PORTARIA = "Portaria"
    JARDINS = "Jardins"


class RequestType(str, enum.Enum):
    ELETRICA = "Elétrica"
    HIDRAULICA = "Hidráulica"
    PREDIAL = "Predial"
    SEGURANCA = "Sistemas de segurança"
    INCENDIO = "Sistemas de incêndio"
    AR_CONDICIONADO = "Ar condicionado e ventilação"
    JARDINAGEM = "Jardinagem e paisagismo"
    LIMPEZA = "Limpeza e conservação"
    PORTOES = "Portões"
    PISCINA = "Piscina"


class CommentType(str, enum.Enum):
    MANUAL = "manual"
    STATUS_CHANGE = "status_change"


class Comment(BaseModel):
    """Comentário ou registro de mudança de status (histórico append-only)"""
    id: str
    author_id: str
    author_name: str
    text: str
    created_at: datetime
    type: CommentType = CommentType.MANUAL
    from_status: Optional[RequestStatus] = None
    to_status: Optional[RequestStatus] = None


class Request(BaseModel):
    """Pendência / chamado de manutenção (coleção requests)"""
    id: str = ""
    title: str
    description: str = ""
    sector: Sector
    type: RequestType
    status: RequestStatus = RequestStatus.PENDENTE
    priority: Priority = Priority.MEDIA
    photos: List[str] = Field(default_factory=list)
    author_id: str
    author_name: str
    created_at: datetime
    comments: List[Comment] = Field(default_factory=list)
    likes: List[str] = Field(default_factory=list)
    admin_response: Optional[str] = None
    status_updated_at: Optional[datetime] = None


class RequestCreate(BaseModel):
    title: str
    description: str = ""
    sector: Sector
    type: RequestType
    priority: Priority = Priority.MEDIA
    photos: List[str] = Field(default_factory=list)


class RequestUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    sector: Optional[Sector] = None
    type: Optional[RequestType] = None
    priority: Optional[Priority] = None
    photos: Optional[List[str]] = None


class StatusChange(BaseModel):
    status: RequestStatus
    justification: Optional[str] = None


class CommentCreate(BaseModel):
    text: str
