"""
taskclock Event Bus

Asyncio publish/subscribe bus. The engine announces task lifecycle changes
and ranking refreshes here; persistence and notification subsystems subscribe.

Usage:
    from taskclock.events import EventBus, Event, TaskEvents

    bus = EventBus()

    async def persist(event: Event):
        save(event.payload["task"])

    bus.subscribe("task.*", persist)
    await bus.emit(TaskEvents.CREATED, {"task": task.to_dict()})
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable
from uuid import uuid4

import structlog

logger = structlog.get_logger(__name__)


class TaskEvents(str, Enum):
    """Names of the events emitted by the engine."""

    CREATED = "task.created"
    UPDATED = "task.updated"
    COMPLETED = "task.completed"
    UNCOMPLETED = "task.uncompleted"
    DELETED = "task.deleted"
    NO_SPEECH = "capture.no_speech"
    CAPTURE_CANCELLED = "capture.cancelled"
    RANKING_UPDATED = "ranking.updated"


@dataclass
class Event:
    """An event that can be emitted and handled."""

    name: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)
    event_id: str = field(default_factory=lambda: str(uuid4()))

    def __str__(self) -> str:
        return f"Event({self.name}, id={self.event_id[:8]})"


EventHandler = Callable[[Event], Awaitable[None]]


class EventBus:
    """
    Async event bus for pub/sub messaging.

    Handlers may subscribe to an exact name, a prefix wildcard ("task.*")
    or everything ("*"). A failing or slow handler is logged and skipped;
    it never affects the emitter or the other handlers.
    """

    def __init__(
        self,
        max_queue_size: int = 1000,
        handler_timeout: float = 30.0,
    ):
        self._handlers: dict[str, list[EventHandler]] = {}
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=max_queue_size)
        self._handler_timeout = handler_timeout
        self._running = False
        self._processor_task: asyncio.Task[None] | None = None

    def subscribe(self, event_name: str | TaskEvents, handler: EventHandler) -> None:
        """Subscribe a handler to an event name or wildcard."""
        name = _event_name(event_name)
        self._handlers.setdefault(name, []).append(handler)
        logger.debug("handler_subscribed", event_name=name, handler=handler.__name__)

    def unsubscribe(self, event_name: str | TaskEvents, handler: EventHandler) -> bool:
        """
        Unsubscribe a handler from an event.

        Returns True if handler was found and removed.
        """
        handlers = self._handlers.get(_event_name(event_name))
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def _get_handlers(self, event_name: str) -> list[EventHandler]:
        """Get all handlers that match an event name, including wildcards."""
        handlers = list(self._handlers.get(event_name, []))

        parts = event_name.split(".")
        for i in range(len(parts)):
            wildcard = ".".join(parts[: i + 1]) + ".*"
            handlers.extend(self._handlers.get(wildcard, []))

        handlers.extend(self._handlers.get("*", []))
        return handlers

    async def emit(
        self, event_name: str | TaskEvents, payload: dict[str, Any] | None = None
    ) -> Event:
        """
        Emit an event to all subscribed handlers.

        Queued when the bus is started, otherwise dispatched inline.
        """
        ev = Event(name=_event_name(event_name), payload=payload or {})
        logger.debug("event_emitted", event_obj=str(ev), payload_keys=list(ev.payload))

        if self._running:
            await self._queue.put(ev)
        else:
            await self._process_event(ev)

        return ev

    async def _process_event(self, ev: Event) -> None:
        """Call every matching handler, isolating failures."""
        for handler in self._get_handlers(ev.name):
            try:
                await asyncio.wait_for(handler(ev), timeout=self._handler_timeout)
            except asyncio.TimeoutError:
                logger.error(
                    "handler_timeout",
                    event_obj=str(ev),
                    handler=handler.__name__,
                    timeout=self._handler_timeout,
                )
            except Exception as e:
                logger.error(
                    "handler_error",
                    event_obj=str(ev),
                    handler=handler.__name__,
                    error=str(e),
                    exc_info=True,
                )

    async def _process_queue(self) -> None:
        """Background task that drains the queue."""
        while self._running:
            try:
                ev = await asyncio.wait_for(self._queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break
            try:
                await self._process_event(ev)
            finally:
                self._queue.task_done()

    async def start(self) -> None:
        """Switch to queued dispatch."""
        if self._running:
            return

        self._running = True
        self._processor_task = asyncio.create_task(self._process_queue())
        logger.info("event_bus_started")

    async def stop(self) -> None:
        """Drain outstanding events and stop the processor."""
        if not self._running:
            return

        if not self._queue.empty():
            logger.info("draining_event_queue", remaining=self._queue.qsize())
        # join() also waits for an event already taken off the queue
        try:
            await asyncio.wait_for(self._queue.join(), timeout=5.0)
        except asyncio.TimeoutError:
            logger.warning("event_queue_drain_timeout")

        self._running = False
        if self._processor_task:
            self._processor_task.cancel()
            try:
                await self._processor_task
            except asyncio.CancelledError:
                pass
            self._processor_task = None

        logger.info("event_bus_stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def queue_size(self) -> int:
        return self._queue.qsize()


def _event_name(name: str | TaskEvents) -> str:
    return name.value if isinstance(name, TaskEvents) else name


# Global event bus instance (lazy-initialized)
_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    global _event_bus
    if _event_bus is None:
        from taskclock.config import get_config

        config = get_config()
        _event_bus = EventBus(
            max_queue_size=config.events.max_queue_size,
            handler_timeout=config.events.handler_timeout,
        )
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus (useful for testing)."""
    global _event_bus
    _event_bus = None
