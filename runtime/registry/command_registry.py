"""CommandRegistry: named operations exposed to the front end.

Responsible for:
- keeping at most one handler per channel (re-registration is refused)
- wrapping every invocation so that no exception reaches the caller
- logging requests to the LogStore, with suppression of identical
  requests that arrive within a few seconds of each other
- pushing a status notification after each call

Handlers receive the dispatch arguments as a single value and may be
either coroutine functions or plain callables.
"""

import inspect
import json
import logging
import time
import traceback
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from ..models.api_models import CommandResult, StatusNotification
from ..notifications import NotificationSink
from ..store.log_store import LogStore


logger = logging.getLogger(__name__)

# Channels that should never be logged to prevent feedback loops.
NEVER_LOG_CHANNELS = frozenset({"get-logs"})

Handler = Callable[[Any], Union[Any, Awaitable[Any]]]


class RequestLogThrottle:
    """Remembers when each request key was last logged.

    `should_log(key)` is true at most once per `window` seconds for the
    same key. Once more than `max_keys` keys are held, keys older than
    `max_age` seconds are swept.
    """

    def __init__(
        self,
        window: float = 5.0,
        max_keys: int = 100,
        max_age: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.window = window
        self.max_keys = max_keys
        self.max_age = max_age
        self._clock = clock
        self._last_logged: Dict[str, float] = {}

    def should_log(self, key: str) -> bool:
        now = self._clock()
        last = self._last_logged.get(key)
        if last is not None and now - last <= self.window:
            return False

        self._last_logged[key] = now
        if len(self._last_logged) > self.max_keys:
            self._sweep(now)
        return True

    def _sweep(self, now: float) -> None:
        stale = [k for k, ts in self._last_logged.items() if now - ts > self.max_age]
        for key in stale:
            del self._last_logged[key]

    def __len__(self) -> int:
        return len(self._last_logged)


@dataclass
class CommandRegistration:
    channel: str
    handler: Handler
    notification_channel: str
    notify: bool = True
    log_requests: bool = True


def _request_key(channel: str, args: Any) -> str:
    return f"{channel}:{json.dumps(args, sort_keys=True, default=str)}"


class CommandRegistry:
    """Maps channel names to handlers with isolation and notification.

    Parameters
    ----------
    log_store:
        Receives registration, request and error entries.
    sink:
        Receives status notifications. Optional; without it nothing is
        pushed.
    throttle:
        Request log suppression cache. A default one is created if omitted.
    """

    def __init__(
        self,
        log_store: LogStore,
        sink: Optional[NotificationSink] = None,
        throttle: Optional[RequestLogThrottle] = None,
    ) -> None:
        self.log_store = log_store
        self.sink = sink
        self.throttle = throttle or RequestLogThrottle()
        self._registrations: Dict[str, CommandRegistration] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        channel: str,
        handler: Handler,
        *,
        notify: bool = True,
        notification_channel: Optional[str] = None,
        log_requests: bool = True,
    ) -> bool:
        """Register `handler` on `channel`.

        Returns False (and keeps the existing handler) if the channel is
        already taken, e.g. when the host re-initializes its modules.
        """
        if channel in self._registrations:
            self.log_store.info(f"IPC handler for '{channel}' already registered, skipping")
            return False

        self._registrations[channel] = CommandRegistration(
            channel=channel,
            handler=handler,
            notification_channel=notification_channel or f"{channel}-status",
            notify=notify,
            log_requests=log_requests and channel not in NEVER_LOG_CHANNELS,
        )
        if channel not in NEVER_LOG_CHANNELS:
            self.log_store.info(f"Registered IPC handler for channel: {channel}")
        return True

    def unregister(self, channel: str) -> None:
        """Remove the handler for `channel`. Unknown channels are ignored."""
        if self._registrations.pop(channel, None) is None:
            return
        # Don't write to the log store here; this also runs during shutdown.
        logger.debug("Unregistered handler for channel %s", channel)

    def unregister_all(self) -> None:
        for channel in list(self._registrations):
            self.unregister(channel)

    def is_registered(self, channel: str) -> bool:
        return channel in self._registrations

    def channels(self) -> List[str]:
        return sorted(self._registrations)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, channel: str, args: Any = None) -> CommandResult:
        """Invoke the handler for `channel`. Never raises."""
        registration = self._registrations.get(channel)
        if registration is None:
            return CommandResult(
                success=False,
                error=f"No handler registered for channel: {channel}",
            )

        try:
            if registration.log_requests and self.throttle.should_log(
                _request_key(channel, args)
            ):
                self.log_store.info(f"Handling IPC request: {channel}", {"args": args})

            result = registration.handler(args)
            if inspect.isawaitable(result):
                result = await result

        except Exception as e:
            if channel not in NEVER_LOG_CHANNELS:
                self.log_store.error(
                    f"Error handling IPC request: {channel}",
                    {
                        "error": str(e),
                        "stack": "".join(
                            traceback.format_exception(type(e), e, e.__traceback__)
                        ),
                    },
                )
            self._notify(
                registration,
                StatusNotification(success=False, message=str(e)),
            )
            return CommandResult(success=False, error=str(e))

        self._notify(
            registration,
            StatusNotification(
                success=True,
                message=f"Operation {channel} completed successfully",
                data=result,
            ),
        )
        return CommandResult(success=True, data=result)

    def _notify(self, registration: CommandRegistration, status: StatusNotification) -> None:
        if not registration.notify or self.sink is None:
            return
        try:
            self.sink.send(
                registration.notification_channel,
                status.model_dump(),
            )
        except Exception:
            logger.exception(
                "Failed to send notification on %s", registration.notification_channel
            )
