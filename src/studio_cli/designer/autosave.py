"""Debounced autosave queue for design mutations."""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from studio_cli.locking.manager import Clock, utcnow
from studio_cli.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_DELAY_SECONDS = 2.0


class SaveRecord(BaseModel):
    """One mutation waiting to be persisted."""

    operation: str
    instance_id: str | None = None
    recorded_at: datetime
    details: dict[str, Any] = Field(default_factory=dict)


Sink = Callable[[list[SaveRecord]], None]


class AutosaveQueue:
    """Collects mutation records and hands them to *sink* in batches.

    A batch becomes due once no record has arrived for ``delay_seconds``.
    If the sink raises, the batch is put back in front of newer records and
    the error propagates.
    """

    def __init__(
        self,
        sink: Sink,
        *,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        self._sink = sink
        self._delay = timedelta(seconds=delay_seconds)
        self._clock = clock
        self._pending: list[SaveRecord] = []
        self._last_recorded: datetime | None = None
        self._mutex = threading.Lock()

    @property
    def pending(self) -> int:
        with self._mutex:
            return len(self._pending)

    def record(self, operation: str, instance_id: str | None = None, **details: Any) -> None:
        now = self._clock()
        with self._mutex:
            self._pending.append(
                SaveRecord(
                    operation=operation,
                    instance_id=instance_id,
                    recorded_at=now,
                    details=details,
                )
            )
            self._last_recorded = now

    def is_due(self) -> bool:
        with self._mutex:
            if not self._pending or self._last_recorded is None:
                return False
            return self._clock() - self._last_recorded >= self._delay

    def flush_due(self) -> int:
        """Flush only when the quiet period has elapsed; returns records flushed."""
        if not self.is_due():
            return 0
        return self.flush()

    def flush(self) -> int:
        with self._mutex:
            batch, self._pending = self._pending, []
        if not batch:
            return 0
        try:
            self._sink(batch)
        except Exception:
            with self._mutex:
                self._pending[:0] = batch
            logger.warning("autosave_failed", records=len(batch))
            raise
        logger.debug("autosave_flushed", records=len(batch))
        return len(batch)
