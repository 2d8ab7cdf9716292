"""
Condo Sync - Reservation Conflict Resolver
Regras de exclusividade e antecedência para reservas de áreas comuns
"""
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from condosync.core.errors import ConflictError, PolicyError, Reason, DEFAULT_MESSAGES
from condosync.core.policy import Role, BOOKING_EXEMPT_ROLES
from condosync.schemas import Area, Reservation

CHURRASCO_LEAD_DAYS = 14
SALAO_LEAD_DAYS = 180


@dataclass(frozen=True)
class ReservationDecision:
    accepted: bool
    reason: Optional[Reason] = None
    message: Optional[str] = None

    @classmethod
    def accept(cls) -> "ReservationDecision":
        return cls(True)

    @classmethod
    def reject(cls, reason: Reason, message: Optional[str] = None) -> "ReservationDecision":
        return cls(False, reason, message or DEFAULT_MESSAGES[reason])


def _is_exempt(role) -> bool:
    try:
        return Role(role) in BOOKING_EXEMPT_ROLES
    except ValueError:
        return False


def resolve_reservation(
    target_date: date,
    area: Area,
    house_number: int,
    role,
    reservations: Iterable[Reservation],
    *,
    today: date,
    churrasco_days: int = CHURRASCO_LEAD_DAYS,
    salao_days: int = SALAO_LEAD_DAYS
) -> ReservationDecision:
    """
    Decide se a reserva pode ser feita. Função pura: não consulta o store.

    Ordem das verificações:
      1. área já reservada no dia -> AreaTaken
      2. unidade já tem reserva da outra classe (churrasco x salão) no dia -> CrossExclusivity
      3. fora de ADMIN/SINDICO: data passada -> PastDate;
         churrasco além de 14 dias ou salão além de 180 -> LeadTimeExceeded
    """
    area = Area(area)
    same_day = [r for r in reservations if r.date == target_date]

    if any(r.area == area for r in same_day):
        return ReservationDecision.reject(Reason.AREA_TAKEN)

    household = [r for r in same_day if r.house_number == house_number]
    if any(r.area.kind != area.kind for r in household):
        return ReservationDecision.reject(Reason.CROSS_EXCLUSIVITY)

    if not _is_exempt(role):
        days_ahead = (target_date - today).days
        if days_ahead < 0:
            return ReservationDecision.reject(Reason.PAST_DATE)

        limit = salao_days if area is Area.SALAO_FESTAS else churrasco_days
        if days_ahead > limit:
            return ReservationDecision.reject(
                Reason.LEAD_TIME_EXCEEDED,
                f"Reservas desta área só podem ser feitas com até {limit} dias de antecedência."
            )

    return ReservationDecision.accept()


def check_reservation(*args, **kwargs) -> None:
    """Mesmo que resolve_reservation, mas levanta o erro correspondente"""
    decision = resolve_reservation(*args, **kwargs)
    if decision.accepted:
        return
    if decision.reason == Reason.AREA_TAKEN:
        raise ConflictError(decision.reason, decision.message)
    raise PolicyError(decision.reason, decision.message)


def slot_key(target_date: date, area: Area) -> str:
    return f"{target_date.isoformat()}:{Area(area).value}"
