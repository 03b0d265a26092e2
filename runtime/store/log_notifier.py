"""Throttled "log updated" signal for the front end's log viewer.

The notifier observes a LogStore. After each write it decides whether the
viewer should be told to refresh, and debounces the signal so a burst of
writes produces a single event.

Rules:
- ERROR entries always signal, with a short delay.
- Other entries signal only if the last read was more than a second ago,
  or this is the first write since that read.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..models.log_models import LogEntry, LogLevel
from ..notifications import LOG_UPDATE_CHANNEL, NotificationSink
from .log_store import LogStore


logger = logging.getLogger(__name__)


@dataclass
class _Pending:
    handle: asyncio.TimerHandle
    delay: float


class Debouncer:
    """One pending timer per event kind, with cancel-and-reschedule.

    Rescheduling a kind that is already pending keeps the shorter of the
    two delays, so an ERROR inside a burst of INFO writes still fires
    quickly.
    """

    def __init__(self) -> None:
        self._pending: Dict[str, _Pending] = {}

    def schedule(self, kind: str, callback: Callable[[], None], delay: float) -> None:
        existing = self._pending.pop(kind, None)
        if existing is not None:
            existing.handle.cancel()
            delay = min(delay, existing.delay)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No event loop (CLI / sync callers): nothing to coalesce with.
            callback()
            return

        handle = loop.call_later(delay, self._fire, kind, callback)
        self._pending[kind] = _Pending(handle=handle, delay=delay)

    def _fire(self, kind: str, callback: Callable[[], None]) -> None:
        self._pending.pop(kind, None)
        try:
            callback()
        except Exception:
            logger.exception("Debounced callback for %r failed", kind)

    def pending(self, kind: str) -> bool:
        return kind in self._pending

    def cancel(self, kind: str) -> None:
        pending = self._pending.pop(kind, None)
        if pending is not None:
            pending.handle.cancel()

    def cancel_all(self) -> None:
        for kind in list(self._pending):
            self.cancel(kind)


class LogUpdateNotifier:
    """Subscribes to a LogStore and emits `log-update` on the sink.

    Parameters
    ----------
    log_store:
        Store to observe.
    sink:
        Where the signal is sent; `send("log-update", None)`.
    normal_delay / error_delay:
        Debounce delays in seconds for regular and ERROR writes.
    throttle:
        Minimum seconds since the last read before a non-error write
        signals again.
    """

    def __init__(
        self,
        log_store: LogStore,
        sink: NotificationSink,
        normal_delay: float = 0.5,
        error_delay: float = 0.1,
        throttle: float = 1.0,
        debouncer: Optional[Debouncer] = None,
    ) -> None:
        self.log_store = log_store
        self.sink = sink
        self.normal_delay = normal_delay
        self.error_delay = error_delay
        self.throttle = throttle
        self.debouncer = debouncer or Debouncer()
        self._unsubscribe: Optional[Callable[[], None]] = None

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.log_store.subscribe(self.on_entry)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.debouncer.cancel(LOG_UPDATE_CHANNEL)

    def should_signal(self, entry: LogEntry) -> bool:
        if entry.level == LogLevel.ERROR:
            return True
        return (
            self.log_store.get_time_since_last_request() > self.throttle
            or self.log_store.update_count == 1
        )

    def on_entry(self, entry: LogEntry) -> None:
        if not self.should_signal(entry):
            return
        delay = self.error_delay if entry.level == LogLevel.ERROR else self.normal_delay
        self.debouncer.schedule(LOG_UPDATE_CHANNEL, self._emit, delay)

    def _emit(self) -> None:
        self.sink.send(LOG_UPDATE_CHANNEL, None)
