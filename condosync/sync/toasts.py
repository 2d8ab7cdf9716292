"""
Condo Sync - Toast Queue
Mensagens efêmeras de feedback, locais e com expiração automática
"""
import enum
import itertools
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from condosync.core.config import settings


class ToastKind(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Toast:
    id: str
    message: str
    kind: ToastKind
    created_at: float


class ToastQueue:
    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = settings.TOAST_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._toasts: List[Toast] = []

    def add(self, message: str, kind: ToastKind = ToastKind.SUCCESS) -> Toast:
        toast = Toast(
            id=f"toast-{next(self._ids)}",
            message=message,
            kind=ToastKind(kind),
            created_at=self._clock()
        )
        self._toasts.append(toast)
        return toast

    def dismiss(self, toast_id: str) -> bool:
        before = len(self._toasts)
        self._toasts = [t for t in self._toasts if t.id != toast_id]
        return len(self._toasts) != before

    def active(self) -> List[Toast]:
        """Toasts ainda visíveis (expirados são descartados)"""
        now = self._clock()
        self._toasts = [t for t in self._toasts if now - t.created_at < self.ttl_seconds]
        return list(self._toasts)

    @property
    def last(self) -> Optional[Toast]:
        return self._toasts[-1] if self._toasts else None

    def __len__(self):
        return len(self._toasts)
