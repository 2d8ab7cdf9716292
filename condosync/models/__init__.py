from .document import StoredDocument
from .claim import UniqueClaim
from .account import AuthAccount

__all__ = [
    "StoredDocument",
    "UniqueClaim",
    "AuthAccount"
]
