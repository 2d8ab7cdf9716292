from .document_store import SqlDocumentStore, Transaction, WriteBatch, Watch, Snapshot, Claim
from .identity import LocalIdentityProvider, AuthSession
from .storage import LocalObjectStorage
from .push import PushFanout, PushNotifier, PermissionState, PUSH_TOKENS

__all__ = [
    "SqlDocumentStore",
    "Transaction",
    "WriteBatch",
    "Watch",
    "Snapshot",
    "Claim",
    "LocalIdentityProvider",
    "AuthSession",
    "LocalObjectStorage",
    "PushFanout",
    "PushNotifier",
    "PermissionState",
    "PUSH_TOKENS"
]
