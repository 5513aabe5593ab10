"""Tests for sentinel.core.event_bus — fan-out, isolation of failing handlers, stop."""

import pytest

from sentinel.core.event_bus import AsyncEventBus


class TestEmit:
    @pytest.mark.asyncio
    async def test_all_handlers_receive(self):
        bus = AsyncEventBus()
        received = []

        async def a(event):
            received.append(("a", event))

        async def b(event):
            received.append(("b", event))

        bus.subscribe("workflow.plan_ready", a)
        bus.subscribe("workflow.plan_ready", b)
        await bus.emit("workflow.plan_ready", {"n": 1})

        assert sorted(received) == [("a", {"n": 1}), ("b", {"n": 1})]

    @pytest.mark.asyncio
    async def test_failing_handler_isolated(self):
        bus = AsyncEventBus()
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        async def fine(event):
            received.append(event)

        bus.subscribe("workflow.error", broken)
        bus.subscribe("workflow.error", fine)
        await bus.emit("workflow.error", "x")

        assert received == ["x"]
        assert bus.stats()["total_errors"] == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = AsyncEventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe("c", handler)
        bus.unsubscribe("c", handler)
        await bus.emit("c", 1)
        assert received == []

    @pytest.mark.asyncio
    async def test_history_recorded_without_handlers(self):
        bus = AsyncEventBus(max_history=2)
        await bus.emit("a", 1)
        await bus.emit("b", 2)
        await bus.emit("c", 3)
        assert bus.history == [("b", 2), ("c", 3)]
        assert bus.stats()["total_emitted"] == 3

    @pytest.mark.asyncio
    async def test_stopped_bus_drops(self):
        bus = AsyncEventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe("c", handler)
        bus.stop()
        await bus.emit("c", 1)
        assert received == []
        assert bus.stats()["stopped"] is True
