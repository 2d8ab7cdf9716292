"""
Condo Sync - Auth Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional


class LoginRequest(BaseModel):
    username: str
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


class DeviceRegistration(BaseModel):
    token: Optional[str] = None


class PushRequest(BaseModel):
    """Payload do endpoint de fan-out"""
    target: str = "all"
    title: str
    body: str
    data: dict = Field(default_factory=dict)


class AlertRequest(BaseModel):
    message: str
