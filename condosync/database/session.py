"""
Condo Sync - Database Session
"""
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base

from condosync.core.config import settings

logger = logging.getLogger(__name__)

# Engine assíncrono
engine = create_async_engine(
    settings.db_url,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False
)

# Base para models
Base = declarative_base()


def make_session_factory(db_engine) -> async_sessionmaker:
    """Session factory para um engine arbitrário (testes, scripts)"""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def create_tables(db_engine=None):
    """Cria as tabelas no engine informado (ou no engine padrão)"""
    # Garante que os models estão registrados no metadata
    import condosync.models  # noqa: F401

    async with (db_engine or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    """Inicializa banco de dados (cria tabelas)"""
    await create_tables(engine)
    logger.info(f"[DB] Tabelas verificadas em {settings.db_url.split('@')[-1]}")
