from .auth import router as auth_router
from .users import router as users_router
from .requests import router as requests_router
from .reservations import router as reservations_router
from .occurrences import router as occurrences_router
from .votings import router as votings_router
from .notices import router as notices_router
from .notifications import router as notifications_router
from .documents import router as documents_router
from .push import router as push_router
from .sync import router as sync_router

__all__ = [
    "auth_router",
    "users_router",
    "requests_router",
    "reservations_router",
    "occurrences_router",
    "votings_router",
    "notices_router",
    "notifications_router",
    "documents_router",
    "push_router",
    "sync_router"
]
