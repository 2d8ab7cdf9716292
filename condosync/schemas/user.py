"""
Condo Sync - User Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional

from condosync.core.policy import Role


class User(BaseModel):
    """Perfil do morador/funcionário (coleção users)"""
    id: str = ""
    name: str
    username: str
    cpf: str = ""
    house_number: int = 0
    role: Role = Role.MORADOR
    email: str = ""
    auth_uid: Optional[str] = None

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    name: str
    username: str
    cpf: str
    house_number: int = Field(0, ge=0)
    password: str


class UserRoleUpdate(BaseModel):
    role: Role
