"""Lock storage port and the in-process implementation."""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Protocol

from studio_cli.models.lock import ResourceLock


class LockStore(Protocol):
    """Persistence for lock rows.

    ``compare_and_set`` is the only write: it replaces the row of
    *resource_id* with *new_lock* (``None`` deletes it) only when the stored
    token equals *expected_token* (``None`` meaning no row may exist), and
    reports whether the swap happened.
    """

    def get(self, resource_id: str) -> ResourceLock | None: ...

    def compare_and_set(
        self,
        resource_id: str,
        expected_token: str | None,
        new_lock: ResourceLock | None,
    ) -> bool: ...

    def list(self) -> list[ResourceLock]: ...

    def delete_expired(self, now: datetime) -> int: ...


class MemoryLockStore:
    """Dict-backed store, safe for concurrent use within one process."""

    def __init__(self) -> None:
        self._rows: dict[str, ResourceLock] = {}
        self._mutex = threading.Lock()

    def get(self, resource_id: str) -> ResourceLock | None:
        with self._mutex:
            return self._rows.get(resource_id)

    def compare_and_set(
        self,
        resource_id: str,
        expected_token: str | None,
        new_lock: ResourceLock | None,
    ) -> bool:
        with self._mutex:
            current = self._rows.get(resource_id)
            current_token = current.token if current is not None else None
            if current_token != expected_token:
                return False
            if new_lock is None:
                self._rows.pop(resource_id, None)
            else:
                self._rows[resource_id] = new_lock
            return True

    def list(self) -> list[ResourceLock]:
        with self._mutex:
            return sorted(self._rows.values(), key=lambda lock: lock.resource_id)

    def delete_expired(self, now: datetime) -> int:
        with self._mutex:
            expired = [rid for rid, lock in self._rows.items() if not lock.is_valid(now)]
            for rid in expired:
                del self._rows[rid]
            return len(expired)
