"""
sentinel.core.event_bus — Async publish-subscribe bus for workflow progress.

The orchestrator publishes on these channels; presenters subscribe:

  workflow.state_changed   {"previous", "state", "correlation_id"}
  workflow.plan_ready      {"plan", "correlation_id"}
  workflow.verdict_ready   {"verdict", "assessment", "correlation_id"}
  workflow.error           {"message", "stage", "correlation_id"}

A failing handler never breaks the publisher or the other handlers.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict, deque
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)


class AsyncEventBus:
    """Channel-keyed fan-out of events to async handlers."""

    def __init__(self, max_history: int = 200):
        self._handlers: dict[str, list[Callable[..., Coroutine]]] = defaultdict(list)
        self._history: deque[tuple[str, Any]] = deque(maxlen=max_history)
        self._stopped = False
        self._total_emitted = 0
        self._total_errors = 0

    def subscribe(self, channel: str, handler: Callable[..., Coroutine]):
        """Register an async handler for a channel."""
        self._handlers[channel].append(handler)
        logger.debug("Subscribed %s to channel '%s'", handler.__qualname__, channel)

    def unsubscribe(self, channel: str, handler: Callable[..., Coroutine]):
        """Remove a handler from a channel."""
        if handler in self._handlers[channel]:
            self._handlers[channel].remove(handler)

    def stop(self):
        """Prevent any new events from being dispatched."""
        self._stopped = True
        logger.info("EventBus stopped — no further events will be dispatched")

    async def emit(self, channel: str, event: Any = None):
        """Publish an event to all subscribers of a channel."""
        if self._stopped:
            logger.debug("EventBus stopped — dropping event on '%s'", channel)
            return

        self._total_emitted += 1
        self._history.append((channel, event))

        handlers = list(self._handlers.get(channel, []))
        if not handlers:
            logger.debug("No handlers for channel '%s'", channel)
            return

        results = await asyncio.gather(
            *(h(event) for h in handlers), return_exceptions=True
        )
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                self._total_errors += 1
                logger.error(
                    "Handler %s on '%s' raised: %s",
                    handler.__qualname__,
                    channel,
                    result,
                )

    @property
    def channels(self) -> list[str]:
        return list(self._handlers.keys())

    @property
    def history(self) -> list[tuple[str, Any]]:
        return list(self._history)

    def stats(self) -> dict:
        return {
            "total_emitted": self._total_emitted,
            "total_errors": self._total_errors,
            "channels": len(self._handlers),
            "stopped": self._stopped,
        }
