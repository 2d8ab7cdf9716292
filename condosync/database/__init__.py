from .session import (
    Base,
    engine,
    AsyncSessionLocal,
    make_session_factory,
    create_tables,
    init_db
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionLocal",
    "make_session_factory",
    "create_tables",
    "init_db"
]
