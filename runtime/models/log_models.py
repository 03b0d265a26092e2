"""
Log-related models for the PrintDesk runtime.

These describe:
- LogLevel enum (INFO, WARN, ERROR)
- LogEntry, one immutable record in the log store / log file
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class LogLevel(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class OsInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: Optional[str] = None
    release: Optional[str] = None


class ProcessInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    pid: Optional[int] = None
    env: Optional[str] = None


class LogEntry(BaseModel):
    """
    A single log record.

    Serialized as one JSON object per line in the daily log file:

        {"timestamp": ..., "level": ..., "message": ..., "details": ...,
         "os": {"platform": ..., "release": ...},
         "process": {"pid": ..., "env": ...}}

    Entries read back from a file may lack the metadata blocks (for
    example the placeholder used for unparseable lines), so every field
    other than level and message is optional.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: Optional[str] = None
    level: LogLevel
    message: str
    details: Optional[Any] = None
    os: OsInfo = OsInfo()
    process: ProcessInfo = ProcessInfo()
