"""
Condo Sync - Security
Hash de senhas, tokens de sessão e identificadores de login
"""
import re
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
import bcrypt

from .config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verifica password usando bcrypt"""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """Gera hash bcrypt do password"""
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def normalize_username(username: str) -> str:
    """Forma canônica do username: minúsculo e sem espaços"""
    return re.sub(r"\s+", "", (username or "").lower())


def username_to_identifier(username: str, domain: Optional[str] = None) -> str:
    """
    Transforma username -> identificador de login (usuario@dominio).
    Não é um email real, apenas uma chave determinística.
    """
    return f"{normalize_username(username)}@{domain or settings.IDENTITY_DOMAIN}"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Cria JWT token de sessão"""
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm="HS256")


def verify_access_token(token: str) -> Optional[dict]:
    """Verifica JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except JWTError:
        return None
