"""
Condo Sync - Auth Account Model
Credenciais do provedor de identidade (separadas do perfil do morador)
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime

from condosync.database import Base


class AuthAccount(Base):
    """Conta de autenticação (usuario@dominio + senha)"""
    __tablename__ = "auth_accounts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    identifier = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    display_name = Column(String(255))

    is_active = Column(Boolean, default=True)

    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "identifier": self.identifier,
            "display_name": self.display_name,
            "is_active": self.is_active,
            "last_login_at": self.last_login_at.isoformat() if self.last_login_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
