"""Notification surface shared by the command registry and the log notifier.

A NotificationSink receives `(channel, payload)` pairs. The runtime uses
EventBroadcaster, which fans events out to every connected front-end
subscriber (see runtime/api/command_routes.py).
"""

import asyncio
import logging
from typing import Any, List, Optional, Protocol, Set

from .models.api_models import EventMessage


logger = logging.getLogger(__name__)

LOG_UPDATE_CHANNEL = "log-update"


class NotificationSink(Protocol):
    def send(self, channel: str, payload: Optional[Any] = None) -> None:
        ...


class EventBroadcaster:
    """Fan-out of notifications to subscriber queues.

    Each subscriber gets its own bounded asyncio.Queue. A subscriber that
    falls behind loses its oldest events rather than blocking senders.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self.max_queue_size = max_queue_size
        self._subscribers: Set[asyncio.Queue] = set()

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def send(self, channel: str, payload: Optional[Any] = None) -> None:
        message = EventMessage(channel=channel, payload=payload)
        for queue in list(self._subscribers):
            if queue.full():
                queue.get_nowait()
                logger.warning("Dropping oldest event for a slow subscriber")
            queue.put_nowait(message)


class RecordingSink:
    """Keeps every notification in a list. Handy for the CLI and tests."""

    def __init__(self) -> None:
        self.events: List[EventMessage] = []

    def send(self, channel: str, payload: Optional[Any] = None) -> None:
        self.events.append(EventMessage(channel=channel, payload=payload))

    def on(self, channel: str) -> List[EventMessage]:
        return [e for e in self.events if e.channel == channel]
