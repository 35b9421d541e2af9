"""Designer session: edits to one design under one resource lock."""

from __future__ import annotations

from typing import Any

from studio_cli.config.models import DesignerSettings
from studio_cli.designer.autosave import AutosaveQueue
from studio_cli.designer.responsive import ResponsiveResolver
from studio_cli.designer.tree import DesignTree
from studio_cli.errors import LockNotHeld
from studio_cli.locking.manager import LockManager
from studio_cli.logging_config import get_logger
from studio_cli.models.component import (
    ComponentInstance,
    ResolvedStyle,
    ResponsiveConflict,
    ResponsiveRule,
)
from studio_cli.models.lock import MAX_EXTENSION, LockType, ResourceLock

logger = get_logger(__name__)


class DesignerSession:
    """Wires a :class:`DesignTree` to a lock and an autosave queue.

    Every mutation requires a valid lock held by this session and is
    recorded for autosave. Usable as a context manager (``begin``/``end``).
    """

    def __init__(
        self,
        tree: DesignTree,
        locks: LockManager,
        resource_id: str,
        holder_id: str,
        *,
        settings: DesignerSettings | None = None,
        autosave: AutosaveQueue | None = None,
        lock_type: LockType = LockType.FIELD_EDIT,
    ) -> None:
        self.tree = tree
        self.locks = locks
        self.resource_id = resource_id
        self.holder_id = holder_id
        self.settings = settings or DesignerSettings()
        self.autosave = autosave
        self.lock_type = lock_type
        self.resolver = ResponsiveResolver(
            tree.breakpoints, mobile_first=self.settings.mobile_first,
        )
        self._lock: ResourceLock | None = None

    def __enter__(self) -> DesignerSession:
        self.begin()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end()

    @property
    def lock(self) -> ResourceLock | None:
        return self._lock

    @property
    def holds_lock(self) -> bool:
        return self._lock is not None and self.locks.is_valid(self._lock)

    def begin(self, reason: str | None = None) -> ResourceLock:
        self._lock = self.locks.acquire(
            self.resource_id,
            self.holder_id,
            self.lock_type,
            self.settings.lock_duration_minutes,
            reason,
        )
        logger.info("session_started", resource_id=self.resource_id, holder_id=self.holder_id)
        return self._lock

    def renew_if_due(self) -> ResourceLock | None:
        """Extend the held lock when it is within the auto-renew threshold."""
        if self._lock is None:
            return None
        self._lock = self.locks.renew_if_due(
            self._lock,
            self.settings.auto_renew_minutes,
            min(self.settings.lock_duration_minutes, MAX_EXTENSION),
        )
        return self._lock

    def end(self) -> None:
        """Flush pending saves, then release the lock.

        The lock is released even when the flush fails; unsaved records stay
        queued and the flush error propagates.
        """
        try:
            if self.autosave is not None:
                self.autosave.flush()
        finally:
            lock, self._lock = self._lock, None
            if lock is not None:
                self.locks.release(self.resource_id, lock.token)
            logger.info("session_ended", resource_id=self.resource_id, holder_id=self.holder_id)

    def _require_lock(self) -> None:
        if not self.holds_lock:
            raise LockNotHeld(
                f"Editing '{self.resource_id}' requires a valid lock held by {self.holder_id}"
            )

    def _record(self, operation: str, instance_id: str | None, **details: Any) -> None:
        if self.autosave is not None:
            self.autosave.record(operation, instance_id, **details)

    # Mutations

    def insert(
        self,
        parent_id: str,
        type_name: str,
        index: int | None = None,
        **kwargs: Any,
    ) -> ComponentInstance:
        self._require_lock()
        instance = self.tree.insert(parent_id, type_name, index, **kwargs)
        self._record("insert", instance.id, parent_id=parent_id, type=type_name)
        return instance

    def move(self, instance_id: str, new_parent_id: str, index: int | None = None) -> None:
        self._require_lock()
        self.tree.move(instance_id, new_parent_id, index)
        self._record("move", instance_id, parent_id=new_parent_id, index=index)

    def remove(self, instance_id: str) -> list[str]:
        self._require_lock()
        removed = self.tree.remove(instance_id)
        self._record("remove", instance_id, removed=removed)
        return removed

    def update(
        self,
        instance_id: str,
        *,
        props: dict[str, Any] | None = None,
        styles: dict[str, Any] | None = None,
    ) -> ComponentInstance:
        self._require_lock()
        instance = self.tree.update(instance_id, props=props, styles=styles)
        self._record("update", instance_id)
        return instance

    def set_responsive(
        self,
        instance_id: str,
        breakpoint: str,
        rule: ResponsiveRule | dict[str, Any] | None,
    ) -> ComponentInstance:
        self._require_lock()
        instance = self.tree.set_responsive(instance_id, breakpoint, rule)
        self._record("responsive", instance_id, breakpoint=breakpoint)
        return instance

    def undo(self) -> bool:
        self._require_lock()
        done = self.tree.undo()
        if done:
            self._record("undo", None)
        return done

    def redo(self) -> bool:
        self._require_lock()
        done = self.tree.redo()
        if done:
            self._record("redo", None)
        return done

    # Queries (no lock needed)

    def resolve(self, instance_id: str, breakpoint: str) -> ResolvedStyle:
        return self.resolver.resolve(self.tree.get(instance_id), breakpoint)

    def check(self, instance_id: str) -> list[ResponsiveConflict]:
        return self.resolver.validate_responsive_config(
            self.tree.get(instance_id), self.tree.siblings(instance_id),
        )
