"""
Condo Sync - Reports
Contagens de pendências por status, setor e tipo em um período
"""
from collections import Counter
from datetime import date, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from condosync.core.config import settings
from condosync.schemas import Request


def local_day(moment, tz: Optional[str] = None) -> date:
    """Dia do registro no fuso do condomínio (horários sem fuso são UTC)"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(ZoneInfo(tz or settings.TIMEZONE)).date()


def request_stats(
    requests: Iterable[Request],
    start: Optional[date] = None,
    end: Optional[date] = None,
    tz: Optional[str] = None
) -> dict:
    """Período inclusivo nas duas pontas; sem datas considera tudo"""
    selected = []
    for request in requests:
        created = local_day(request.created_at, tz)
        if start and created < start:
            continue
        if end and created > end:
            continue
        selected.append(request)

    return {
        "total": len(selected),
        "by_status": dict(Counter(r.status.value for r in selected)),
        "by_sector": dict(Counter(r.sector.value for r in selected)),
        "by_type": dict(Counter(r.type.value for r in selected)),
    }
