from .user import User, UserCreate, UserRoleUpdate
from .request import (
    RequestStatus,
    Priority,
    Sector,
    RequestType,
    CommentType,
    Comment,
    Request,
    RequestCreate,
    RequestUpdate,
    StatusChange,
    CommentCreate
)
from .reservation import Area, AreaKind, Reservation, ReservationCreate
from .occurrence import (
    OccurrenceStatus,
    Occurrence,
    OccurrenceCreate,
    OccurrenceUpdate,
    OccurrenceResponse
)
from .voting import (
    VotingPhase,
    VotingOption,
    Ballot,
    Voting,
    VotingOptionCreate,
    VotingCreate,
    VoteCast,
    OptionResult
)
from .notice import ReactionKind, Notice, NoticeCreate, ReactionToggle
from .notification import BROADCAST, Notification
from .document import CondoDocument, DocumentCreate
from .auth import LoginRequest, LoginResponse, DeviceRegistration, PushRequest, AlertRequest

__all__ = [
    "User",
    "UserCreate",
    "UserRoleUpdate",
    "RequestStatus",
    "Priority",
    "Sector",
    "RequestType",
    "CommentType",
    "Comment",
    "Request",
    "RequestCreate",
    "RequestUpdate",
    "StatusChange",
    "CommentCreate",
    "Area",
    "AreaKind",
    "Reservation",
    "ReservationCreate",
    "OccurrenceStatus",
    "Occurrence",
    "OccurrenceCreate",
    "OccurrenceUpdate",
    "OccurrenceResponse",
    "VotingPhase",
    "VotingOption",
    "Ballot",
    "Voting",
    "VotingOptionCreate",
    "VotingCreate",
    "VoteCast",
    "OptionResult",
    "ReactionKind",
    "Notice",
    "NoticeCreate",
    "ReactionToggle",
    "BROADCAST",
    "Notification",
    "CondoDocument",
    "DocumentCreate",
    "LoginRequest",
    "LoginResponse",
    "DeviceRegistration",
    "PushRequest",
    "AlertRequest"
]
