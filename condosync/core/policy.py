"""
Condo Sync - Roles & Capabilities
Verificação centralizada de permissões: (papel, ação) -> permitido
"""
import enum

from .errors import PolicyError, Reason


class Role(str, enum.Enum):
    """Papéis de usuário"""
    MORADOR = "morador"
    GESTAO = "gestao"
    SINDICO = "sindico"
    SUBSINDICO = "subsindico"
    ADMIN = "admin"


class Action(str, enum.Enum):
    """Ações protegidas por papel"""
    USER_CHANGE_ROLE = "user.change_role"
    USER_DELETE = "user.delete"
    REQUEST_CHANGE_STATUS = "request.change_status"
    REQUEST_MODERATE = "request.moderate"
    RESERVATION_ANY_DATE = "reservation.any_date"
    RESERVATION_FOR_HOUSE = "reservation.for_house"
    RESERVATION_CANCEL_ANY = "reservation.cancel_any"
    OCCURRENCE_RESPOND = "occurrence.respond"
    OCCURRENCE_DELETE = "occurrence.delete"
    VOTING_MANAGE = "voting.manage"
    NOTICE_MANAGE = "notice.manage"
    DOCUMENT_MANAGE = "document.manage"
    DATA_PURGE = "data.purge"


MANAGEMENT_ROLES = frozenset({Role.ADMIN, Role.GESTAO, Role.SINDICO, Role.SUBSINDICO})
BOOKING_EXEMPT_ROLES = frozenset({Role.ADMIN, Role.SINDICO})
ADMIN_ONLY = frozenset({Role.ADMIN})

CAPABILITIES = {
    Action.USER_CHANGE_ROLE: ADMIN_ONLY,
    Action.USER_DELETE: ADMIN_ONLY,
    Action.REQUEST_CHANGE_STATUS: MANAGEMENT_ROLES,
    Action.REQUEST_MODERATE: MANAGEMENT_ROLES,
    Action.RESERVATION_ANY_DATE: BOOKING_EXEMPT_ROLES,
    Action.RESERVATION_FOR_HOUSE: BOOKING_EXEMPT_ROLES,
    Action.RESERVATION_CANCEL_ANY: MANAGEMENT_ROLES,
    Action.OCCURRENCE_RESPOND: MANAGEMENT_ROLES,
    Action.OCCURRENCE_DELETE: ADMIN_ONLY,
    Action.VOTING_MANAGE: MANAGEMENT_ROLES,
    Action.NOTICE_MANAGE: MANAGEMENT_ROLES,
    Action.DOCUMENT_MANAGE: MANAGEMENT_ROLES,
    Action.DATA_PURGE: ADMIN_ONLY,
}


def can(role, action: Action) -> bool:
    """Retorna se o papel pode executar a ação"""
    if role is None:
        return False
    try:
        role = Role(role)
    except ValueError:
        return False
    return role in CAPABILITIES.get(action, frozenset())


def require(role, action: Action) -> None:
    """Levanta PolicyError se o papel não pode executar a ação"""
    if not can(role, action):
        raise PolicyError(Reason.FORBIDDEN)


def is_management(role) -> bool:
    try:
        return Role(role) in MANAGEMENT_ROLES
    except ValueError:
        return False
