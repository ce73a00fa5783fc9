"""
Tests for the periodic upvote refresh.
"""

import asyncio
import random

import pytest

from emergency_ops.incidents.enums import IncidentStatus
from emergency_ops.incidents.live_updates import LiveUpdateTask


class TestTick:

    def test_tick_only_moves_upvotes_of_live_incidents(self, authority):
        before = {i.id: i for i in authority.repository.snapshot()}
        task = LiveUpdateTask(authority, interval=1.0, max_increment=3, rng=random.Random(7))

        for _ in range(20):
            task.tick()

        assert task.ticks == 20
        for incident in authority.repository.snapshot():
            previous = before[incident.id]
            assert incident.status == previous.status
            assert incident.severity == previous.severity
            assert incident.updated_at == previous.updated_at
            if incident.status == IncidentStatus.RESOLVED:
                assert incident.upvotes == previous.upvotes
            else:
                assert incident.upvotes >= previous.upvotes
        assert sum(i.upvotes for i in authority.repository.snapshot()) > 0

    def test_zero_increment_changes_nothing(self, authority):
        task = LiveUpdateTask(authority, interval=1.0, max_increment=0)
        assert task.tick() == 0

    def test_invalid_interval(self, authority):
        with pytest.raises(ValueError):
            LiveUpdateTask(authority, interval=0)


class TestLifecycle:

    async def test_start_stop_toggle(self, authority):
        task = LiveUpdateTask(authority, interval=0.01, max_increment=1, rng=random.Random(1))

        task.start()
        task.start()
        assert task.is_running
        await asyncio.sleep(0.05)
        await task.stop()

        assert not task.is_running
        assert task.ticks >= 1

        assert await task.toggle() is True
        assert await task.toggle() is False

    async def test_stop_when_not_started(self, authority):
        task = LiveUpdateTask(authority)
        await task.stop()
        assert not task.is_running

    async def test_tick_failure_does_not_kill_the_loop(self, authority, monkeypatch):
        task = LiveUpdateTask(authority, interval=0.01)
        calls = []

        def failing_tick():
            calls.append(1)
            raise RuntimeError("boom")

        monkeypatch.setattr(task, "tick", failing_tick)
        task.start()
        await asyncio.sleep(0.06)

        assert task.is_running
        assert len(calls) >= 2
        await task.stop()
