"""
Condo Sync - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Carrega .env com override para sobrescrever variáveis do sistema
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Condo Sync"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Database (accepts DATABASE_URL or CONDO_DATABASE_URL)
    DATABASE_URL: Optional[str] = None
    CONDO_DATABASE_URL: str = "sqlite+aiosqlite:///./condominio.db"

    @property
    def db_url(self) -> str:
        """Returns DATABASE_URL if set, otherwise CONDO_DATABASE_URL"""
        return self.DATABASE_URL or self.CONDO_DATABASE_URL

    # Security
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    LOGIN_RATE_LIMIT: str = "10/minute"

    # Identity (usuário -> identificador usuario@dominio)
    IDENTITY_DOMAIN: str = "condominio-ps1.local"
    MIN_PASSWORD_LENGTH: int = 6

    # Admin semeado no primeiro boot
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "change-me-in-production"
    ADMIN_NAME: str = "Administrador"

    # Regras de reserva
    TIMEZONE: str = "America/Sao_Paulo"
    CHURRASCO_LEAD_DAYS: int = 14
    SALAO_LEAD_DAYS: int = 180

    # Mensagens efêmeras (toasts)
    TOAST_TTL_SECONDS: float = 4.5

    # Subscriptions
    SUBSCRIPTION_RETRY_ATTEMPTS: int = 5
    SUBSCRIPTION_RETRY_BASE_SECONDS: float = 0.5
    SUBSCRIPTION_RETRY_MAX_SECONDS: float = 10.0

    # Object storage
    UPLOAD_DIR: str = "uploads"
    PUBLIC_BASE_URL: str = "http://localhost:8080"

    # Push notifications
    PUSH_ENDPOINT_URL: Optional[str] = None
    FCM_PROJECT_ID: Optional[str] = None
    FCM_ACCESS_TOKEN: Optional[str] = None
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # CORS
    CORS_ORIGINS: list = ["*"]

    class Config:
        extra = "ignore"
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
