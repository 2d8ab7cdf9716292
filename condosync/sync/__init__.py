from .toasts import Toast, ToastKind, ToastQueue
from .entity_store import EntityStore, COLLECTIONS
from .subscriptions import SubscriptionManager, SubscriptionHandle
from .reservations import ReservationDecision, resolve_reservation, check_reservation
from .votes import tally, validate_ballot, voting_phase, winners
from .notifications import NotificationTracker, unread_count, is_visible, visible_to
from .reports import request_stats
from .gateway import MutationGateway
from .context import SyncContext, build_context, build_default_context

__all__ = [
    "Toast",
    "ToastKind",
    "ToastQueue",
    "EntityStore",
    "COLLECTIONS",
    "SubscriptionManager",
    "SubscriptionHandle",
    "ReservationDecision",
    "resolve_reservation",
    "check_reservation",
    "tally",
    "validate_ballot",
    "voting_phase",
    "winners",
    "NotificationTracker",
    "unread_count",
    "is_visible",
    "visible_to",
    "request_stats",
    "MutationGateway",
    "SyncContext",
    "build_context",
    "build_default_context"
]
