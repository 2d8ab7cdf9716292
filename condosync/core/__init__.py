from .config import settings, get_settings
from .errors import (
    Reason,
    CondoError,
    ValidationError,
    ConflictError,
    PolicyError,
    RemoteError,
    NotFoundError,
    PartialFailureError,
    friendly_message
)
from .policy import Role, Action, can, require, is_management, MANAGEMENT_ROLES
from .security import (
    verify_password,
    get_password_hash,
    normalize_username,
    username_to_identifier,
    create_access_token,
    verify_access_token
)

__all__ = [
    "settings",
    "get_settings",
    "Reason",
    "CondoError",
    "ValidationError",
    "ConflictError",
    "PolicyError",
    "RemoteError",
    "NotFoundError",
    "PartialFailureError",
    "friendly_message",
    "Role",
    "Action",
    "can",
    "require",
    "is_management",
    "MANAGEMENT_ROLES",
    "verify_password",
    "get_password_hash",
    "normalize_username",
    "username_to_identifier",
    "create_access_token",
    "verify_access_token"
]
