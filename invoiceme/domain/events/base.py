"""
Base classes for domain events and event handling.
Aggregates record events as plain data; dispatching is done by the caller.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone
from dataclasses import dataclass, field
import uuid


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DomainEvent(ABC):
    """Base class for all domain events."""

    event_id: str = field(default_factory=lambda: str(uuid.uuid4()), kw_only=True)
    occurred_at: datetime = field(default_factory=_utcnow, kw_only=True)
    event_type: str = field(init=False, default="")
    version: int = field(default=1, kw_only=True)

    def __post_init__(self):
        """Set event type based on class name."""
        if not self.event_type:
            self.event_type = self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
            "data": self._get_event_data()
        }

    @abstractmethod
    def _get_event_data(self) -> Dict[str, Any]:
        """Get event-specific data for serialization."""
        pass


class EventHandler(ABC):
    """Base class for event handlers."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """Handle a domain event."""
        pass

    @abstractmethod
    def can_handle(self, event: DomainEvent) -> bool:
        """Check if this handler can process the given event."""
        pass


class EventDispatcher:
    """Dispatches domain events to registered handlers."""

    def __init__(self):
        self._handlers: Dict[str, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []
        self._event_log: List[Dict[str, Any]] = []

    def register_handler(self, event_type: str, handler: EventHandler) -> None:
        """Register an event handler for specific event type."""
        self._handlers.setdefault(event_type, []).append(handler)
        logger.info(f"Registered handler {handler.__class__.__name__} for {event_type}")

    def register_global_handler(self, handler: EventHandler) -> None:
        """Register a handler that receives all events."""
        self._global_handlers.append(handler)
        logger.info(f"Registered global handler {handler.__class__.__name__}")

    async def dispatch(self, event: DomainEvent) -> None:
        """Dispatch event to all registered handlers."""
        self._event_log.append(event.to_dict())

        logger.info(f"Dispatching event: {event.event_type} (ID: {event.event_id})")

        specific_handlers = self._handlers.get(event.event_type, [])
        all_handlers = specific_handlers + [
            h for h in self._global_handlers
            if h.can_handle(event)
        ]

        if not all_handlers:
            logger.debug(f"No handlers registered for event: {event.event_type}")
            return

        await asyncio.gather(*(self._safe_handle(handler, event) for handler in all_handlers))

        logger.debug(f"Dispatched {event.event_type} to {len(all_handlers)} handler(s)")

    async def dispatch_all(self, events: List[DomainEvent]) -> None:
        """Dispatch events in the order they were recorded."""
        for event in events:
            await self.dispatch(event)

    async def _safe_handle(self, handler: EventHandler, event: DomainEvent) -> None:
        """Run one handler; a failing handler does not affect the others."""
        try:
            await handler.handle(event)
        except Exception:
            logger.exception(
                f"Handler {handler.__class__.__name__} failed to process {event.event_type}"
            )

    def get_event_log(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Get recent events from the log, newest first."""
        events = list(reversed(self._event_log))
        return events[:limit] if limit else events

    def clear_event_log(self) -> None:
        """Clear the event log."""
        self._event_log.clear()

    def get_registered_handlers(self) -> Dict[str, List[str]]:
        """Get information about registered handlers."""
        result = {
            event_type: [h.__class__.__name__ for h in handlers]
            for event_type, handlers in self._handlers.items()
        }

        if self._global_handlers:
            result["global"] = [h.__class__.__name__ for h in self._global_handlers]

        return result
