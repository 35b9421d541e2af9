"""Tests for the autosave queue."""

from __future__ import annotations

import pytest

from studio_cli.designer.autosave import AutosaveQueue, SaveRecord


@pytest.fixture
def batches() -> list[list[SaveRecord]]:
    return []


@pytest.fixture
def queue(batches, clock) -> AutosaveQueue:
    return AutosaveQueue(batches.append, delay_seconds=2.0, clock=clock)


class TestAutosaveQueue:
    def test_debounces_until_quiet(self, queue, batches, clock):
        queue.record("insert", "text-2", parent_id="container-1")
        clock.advance(seconds=1.5)
        queue.record("update", "text-2")
        clock.advance(seconds=1.5)
        assert queue.flush_due() == 0
        clock.advance(seconds=0.5)
        assert queue.flush_due() == 2
        [batch] = batches
        assert [r.operation for r in batch] == ["insert", "update"]
        assert batch[0].details == {"parent_id": "container-1"}
        assert queue.pending == 0

    def test_flush_ignores_delay(self, queue, batches):
        queue.record("remove", "a")
        assert queue.flush() == 1
        assert queue.flush() == 0
        assert len(batches) == 1

    def test_nothing_due_when_empty(self, queue, clock):
        clock.advance(minutes=5)
        assert not queue.is_due()

    def test_failed_sink_requeues(self, clock):
        calls = []

        def sink(batch):
            calls.append(batch)
            if len(calls) == 1:
                raise OSError("disk full")

        queue = AutosaveQueue(sink, clock=clock)
        queue.record("insert", "a")
        with pytest.raises(OSError):
            queue.flush()
        queue.record("insert", "b")
        assert queue.pending == 2
        assert queue.flush() == 2
        assert [r.instance_id for r in calls[1]] == ["a", "b"]
