"""
LogStore: append-only logging for PrintDesk runtime events.

Entries are kept in a bounded in-memory cache (newest first) for the
front end's log viewer, and written as JSON lines to:

    <log_dir>/app-YYYY-MM-DD.log

Operator diagnostics (e.g. a failed file append) go to the standard
`logging` module instead; they never interrupt the write path.
"""

import json
import logging
import os
import platform
import time
import traceback
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Deque, List, Optional

from ..models.log_models import LogEntry, LogLevel, OsInfo, ProcessInfo


logger = logging.getLogger(__name__)

MAX_RECENT_LOGS = 100

LogObserver = Callable[[LogEntry], None]


def _jsonable(value: Any) -> Any:
    """Coerce arbitrary details into plain JSON types."""
    if value is None:
        return None
    return json.loads(json.dumps(value, default=str))


def normalize_error(error: Any) -> Any:
    """Turn an error-like value into {message, stack, name}.

    Mappings are kept as-is so callers can pass structured context.
    """
    if error is None:
        return None
    if isinstance(error, BaseException):
        return {
            "message": str(error),
            "stack": "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
            "name": type(error).__name__,
        }
    if isinstance(error, dict):
        return error
    return str(error)


class LogStore:
    """In-memory + file-backed log store.

    Parameters
    ----------
    log_dir:
        Directory for the daily `app-<date>.log` files. Created on
        construction.
    env:
        Runtime mode recorded in each entry. In "development" every entry
        is also echoed to the module logger.
    max_entries:
        Capacity of the in-memory cache; the oldest entry is evicted first.
    clock:
        Returns the current time in seconds. Overridable for tests.
    """

    def __init__(
        self,
        log_dir: str = "logs",
        env: Optional[str] = None,
        max_entries: int = MAX_RECENT_LOGS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.log_dir = Path(log_dir)
        self.env = env
        self.max_entries = max_entries
        self._clock = clock

        # Newest entry at index 0.
        self._recent: Deque[LogEntry] = deque(maxlen=max_entries)

        # Read bookkeeping used by the log update notifier.
        self.last_request: float = 0.0
        self.update_count: int = 0

        self._observers: List[LogObserver] = []

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.exception("Could not create log directory %s", self.log_dir)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def log_file_for(self, moment: datetime) -> Path:
        return self.log_dir / f"app-{moment.date().isoformat()}.log"

    @property
    def log_file(self) -> Path:
        """Today's log file."""
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        return self.log_file_for(now)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: LogObserver) -> Callable[[], None]:
        """Call `observer(entry)` after every write. Returns an unsubscribe hook."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def info(self, message: str, details: Any = None) -> LogEntry:
        return self._write(LogLevel.INFO, message, details)

    def warn(self, message: str, details: Any = None) -> LogEntry:
        return self._write(LogLevel.WARN, message, details)

    def error(self, message: str, error: Any = None) -> LogEntry:
        return self._write(LogLevel.ERROR, message, normalize_error(error))

    def _write(self, level: LogLevel, message: str, details: Any) -> LogEntry:
        now = datetime.fromtimestamp(self._clock(), tz=timezone.utc)
        entry = LogEntry(
            timestamp=now.isoformat().replace("+00:00", "Z"),
            level=level,
            message=message,
            details=_jsonable(details),
            os=OsInfo(platform=platform.system().lower(), release=platform.release()),
            process=ProcessInfo(pid=os.getpid(), env=self.env),
        )

        # deque(maxlen) drops from the right, i.e. the oldest entry.
        self._recent.appendleft(entry)
        self.update_count += 1

        try:
            with self.log_file_for(now).open("a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")
        except OSError:
            logger.exception("Error writing to log file")

        if self.env == "development":
            logger.info("[%s] %s %s", level.value, message, details or "")

        for observer in list(self._observers):
            try:
                observer(entry)
            except Exception:
                logger.exception("Log observer failed")

        return entry

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_recent_logs(self, limit: int = MAX_RECENT_LOGS) -> List[LogEntry]:
        """Return up to `limit` entries, newest first.

        Lookup order:
        1. The in-memory cache.
        2. Today's log file, if the cache is empty (e.g. after a restart).
           Lines that fail to parse are replaced by an ERROR placeholder.

        Resets the update counter and records the read time.
        """
        self.last_request = self._clock()
        self.update_count = 0

        if self._recent:
            return list(self._recent)[:limit]

        path = self.log_file
        if not path.is_file():
            return []

        # Decoded per line so one corrupt line cannot fail the whole read.
        try:
            with path.open("rb") as f:
                lines = [line for line in f.read().splitlines() if line.strip()]
        except OSError:
            logger.exception("Error reading logs from %s", path)
            return []

        entries = [self._parse_line(line) for line in reversed(lines)]

        # Refill the cache, oldest first so the newest ends up at the front.
        for entry in reversed(entries[: self.max_entries]):
            self._recent.appendleft(entry)

        return entries[:limit]

    @staticmethod
    def _parse_line(raw: bytes) -> LogEntry:
        try:
            return LogEntry.model_validate_json(raw.decode("utf-8"))
        except ValueError:
            # Covers UnicodeDecodeError and pydantic's ValidationError.
            return LogEntry(
                level=LogLevel.ERROR,
                message="Failed to parse log entry",
                details=raw.decode("utf-8", errors="replace"),
            )

    def have_logs_updated(self) -> bool:
        """True if anything was written since the last read."""
        return self.update_count > 0

    def get_time_since_last_request(self) -> float:
        """Seconds elapsed since the last `get_recent_logs` call."""
        return self._clock() - self.last_request
