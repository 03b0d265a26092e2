"""
Command and notification models for the PrintDesk runtime API.
"""

from pydantic import BaseModel
from typing import Optional, Any


class CommandRequest(BaseModel):
    args: Optional[Any] = None


class CommandResult(BaseModel):
    """
    Result of dispatching a command.

    - success: data holds the handler's return value
    - failure: error holds the error message
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class StatusNotification(BaseModel):
    """Payload pushed on a command's status channel after it completes."""
    success: bool
    message: str
    data: Optional[Any] = None


class EventMessage(BaseModel):
    """Envelope used when streaming notifications to the front end."""
    channel: str
    payload: Optional[Any] = None
