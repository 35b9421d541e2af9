"""Resource lock manager: acquire, release, extend and renew leases."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from studio_cli.errors import (
    InvalidLockRequest,
    LockConflict,
    LockError,
    LockExpired,
    LockNotFound,
    LockTokenMismatch,
)
from studio_cli.locking.store import LockStore
from studio_cli.logging_config import get_logger
from studio_cli.models.lock import (
    DEFAULT_LOCK_DURATIONS,
    MAX_EXTENSION,
    MAX_LOCK_DURATION,
    MAX_REASON_LENGTH,
    LockType,
    ResourceLock,
)

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_token() -> str:
    return secrets.token_urlsafe(32)


class LockManager:
    """Grants time-bounded exclusive locks through a compare-and-set store.

    Expired locks are never swept eagerly; they are treated as absent and
    reclaimed by the next ``acquire``.
    """

    def __init__(
        self,
        store: LockStore,
        *,
        clock: Clock = utcnow,
        token_factory: Callable[[], str] = new_token,
    ) -> None:
        self.store = store
        self._clock = clock
        self._token_factory = token_factory

    def now(self) -> datetime:
        return self._clock()

    def acquire(
        self,
        resource_id: str,
        holder_id: str,
        lock_type: LockType | str = LockType.FIELD_EDIT,
        duration_minutes: int | None = None,
        reason: str | None = None,
    ) -> ResourceLock:
        """Grant (or refresh for the same holder) the lock on *resource_id*.

        Raises:
            LockConflict: Another holder has a valid lock.
            InvalidLockRequest: Duration or reason out of range.
        """
        lock_type = LockType(lock_type)
        duration = DEFAULT_LOCK_DURATIONS[lock_type] if duration_minutes is None else duration_minutes
        if not 1 <= duration <= MAX_LOCK_DURATION:
            raise InvalidLockRequest(
                f"Lock duration must be between 1 and {MAX_LOCK_DURATION} minutes, got {duration}"
            )
        if reason is not None and len(reason) > MAX_REASON_LENGTH:
            raise InvalidLockRequest(
                f"Lock reason must be at most {MAX_REASON_LENGTH} characters"
            )

        # One retry from a fresh read when a concurrent writer wins the swap
        for _attempt in range(2):
            now = self._clock()
            current = self.store.get(resource_id)
            if current is not None and current.is_valid(now):
                if current.holder_id != holder_id:
                    logger.info(
                        "lock_conflict",
                        resource_id=resource_id, holder_id=holder_id,
                        current_holder=current.holder_id,
                    )
                    raise LockConflict(resource_id, current.holder_id, current.expires_at)
                candidate = current.model_copy(
                    update={
                        "lock_type": lock_type,
                        "expires_at": now + timedelta(minutes=duration),
                        "reason": reason if reason is not None else current.reason,
                    },
                )
                expected = current.token
            else:
                candidate = ResourceLock(
                    resource_id=resource_id,
                    holder_id=holder_id,
                    token=self._token_factory(),
                    lock_type=lock_type,
                    acquired_at=now,
                    expires_at=now + timedelta(minutes=duration),
                    reason=reason,
                )
                expected = current.token if current is not None else None
            if self.store.compare_and_set(resource_id, expected, candidate):
                logger.info(
                    "lock_acquired",
                    resource_id=resource_id, holder_id=holder_id,
                    lock_type=lock_type.value, expires_at=candidate.expires_at.isoformat(),
                    reclaimed=current is not None and expected != candidate.token,
                )
                return candidate
            logger.debug("lock_swap_lost", resource_id=resource_id, holder_id=holder_id)

        current = self.store.get(resource_id)
        if current is not None and current.holder_id != holder_id and current.is_valid(self._clock()):
            raise LockConflict(resource_id, current.holder_id, current.expires_at)
        raise LockError(f"Could not acquire lock on '{resource_id}' due to concurrent updates")

    def release(self, resource_id: str, token: str, *, strict: bool = False) -> bool:
        """Delete the lock when *token* owns it.

        Returns ``False`` when nothing was stored (unless *strict*, which
        raises :class:`LockNotFound` instead).
        """
        current = self.store.get(resource_id)
        if current is None:
            if strict:
                raise LockNotFound(resource_id)
            return False
        if current.token != token:
            raise LockTokenMismatch(resource_id)
        if not self.store.compare_and_set(resource_id, token, None):
            if self.store.get(resource_id) is None:
                if strict:
                    raise LockNotFound(resource_id)
                return False
            raise LockTokenMismatch(resource_id)
        logger.info("lock_released", resource_id=resource_id, holder_id=current.holder_id)
        return True

    def extend(self, resource_id: str, token: str, additional_minutes: int) -> ResourceLock:
        """Push the expiry of a still-valid lock forward."""
        if not 1 <= additional_minutes <= MAX_EXTENSION:
            raise InvalidLockRequest(
                f"Extension must be between 1 and {MAX_EXTENSION} minutes, got {additional_minutes}"
            )
        now = self._clock()
        current = self.store.get(resource_id)
        if current is None:
            raise LockNotFound(resource_id)
        if current.token != token:
            raise LockTokenMismatch(resource_id)
        if not current.is_valid(now):
            raise LockExpired(resource_id, current.expires_at)

        expires_at = max(now, current.expires_at) + timedelta(minutes=additional_minutes)
        if expires_at - current.acquired_at > timedelta(minutes=MAX_LOCK_DURATION):
            raise InvalidLockRequest(
                f"Extension would hold '{resource_id}' longer than "
                f"{MAX_LOCK_DURATION} minutes in total"
            )
        extended = current.model_copy(update={"expires_at": expires_at})
        if not self.store.compare_and_set(resource_id, token, extended):
            if self.store.get(resource_id) is None:
                raise LockNotFound(resource_id)
            raise LockTokenMismatch(resource_id)
        logger.info(
            "lock_extended",
            resource_id=resource_id, holder_id=current.holder_id,
            expires_at=expires_at.isoformat(),
        )
        return extended

    def is_valid(self, lock: ResourceLock) -> bool:
        return lock.is_valid(self._clock())

    def get_lock(self, resource_id: str) -> ResourceLock | None:
        """The currently valid lock on *resource_id*, if any."""
        current = self.store.get(resource_id)
        if current is None or not current.is_valid(self._clock()):
            return None
        return current

    def list_active(self, resource_id: str | None = None) -> list[ResourceLock]:
        now = self._clock()
        return [
            lock for lock in self.store.list()
            if lock.is_valid(now) and (resource_id is None or lock.resource_id == resource_id)
        ]

    def cleanup_expired(self) -> int:
        removed = self.store.delete_expired(self._clock())
        if removed:
            logger.info("locks_cleaned_up", removed=removed)
        return removed

    def needs_renewal(self, lock: ResourceLock, threshold_minutes: int) -> bool:
        """True when *lock* is valid but expires within *threshold_minutes*."""
        now = self._clock()
        return lock.is_valid(now) and lock.expires_at - now <= timedelta(minutes=threshold_minutes)

    def renew_if_due(
        self,
        lock: ResourceLock,
        threshold_minutes: int,
        additional_minutes: int,
    ) -> ResourceLock:
        if not self.needs_renewal(lock, threshold_minutes):
            return lock
        return self.extend(lock.resource_id, lock.token, additional_minutes)
