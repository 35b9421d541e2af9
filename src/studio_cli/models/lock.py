"""Resource lock data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class LockType(str, Enum):
    """Kind of structural edit a lock protects."""

    FIELD_EDIT = "field_edit"
    SCHEMA_EDIT = "schema_edit"
    CRITICAL = "critical"


# Minutes
DEFAULT_LOCK_DURATIONS: dict[LockType, int] = {
    LockType.FIELD_EDIT: 30,
    LockType.SCHEMA_EDIT: 120,
    LockType.CRITICAL: 240,
}
MAX_LOCK_DURATION = 480
MAX_EXTENSION = 120
MAX_REASON_LENGTH = 200


class ResourceLock(BaseModel):
    """A time-bounded exclusive grant over one resource to one holder."""

    model_config = ConfigDict(frozen=True)

    resource_id: str
    holder_id: str
    token: str
    lock_type: LockType = LockType.FIELD_EDIT
    acquired_at: datetime
    expires_at: datetime
    reason: str | None = None

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at

    def held_at(self, instant: datetime) -> bool:
        """True when *instant* falls inside ``[acquired_at, expires_at)``."""
        return self.acquired_at <= instant < self.expires_at


def time_remaining(lock: ResourceLock, now: datetime) -> int:
    """Whole minutes until *lock* expires (0 once expired)."""
    seconds = (lock.expires_at - now).total_seconds()
    return int(seconds // 60) if seconds > 0 else 0


def format_remaining(lock: ResourceLock, now: datetime) -> str:
    """Human readable remaining time, e.g. ``1h 05m``, ``12m`` or ``Expired``."""
    if not lock.is_valid(now):
        return "Expired"
    minutes = time_remaining(lock, now)
    hours, mins = divmod(minutes, 60)
    if hours:
        return f"{hours}h {mins:02d}m"
    return f"{mins}m"
