"""HTTP / WebSocket routes through which the front end talks to the runtime.

Exposes endpoints like:

- GET  /commands            -> list of registered channels
- POST /commands/{channel}  -> dispatch a command, returns {success, data|error}
- WS   /events              -> stream of {channel, payload} notifications
                               (status events and "log-update")
"""

import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from typing import Optional

from ..context import AppContext
from ..models.api_models import CommandRequest, CommandResult
from ..notifications import EventBroadcaster


logger = logging.getLogger(__name__)

# Router for all command-related endpoints
router = APIRouter()


# Module-level references, to be initialized by the server.
_CONTEXT: Optional[AppContext] = None
_BROADCASTER: Optional[EventBroadcaster] = None


def init_routes(context: AppContext, broadcaster: EventBroadcaster) -> None:
    """Initialize module-level references used by the route handlers."""
    global _CONTEXT, _BROADCASTER
    _CONTEXT = context
    _BROADCASTER = broadcaster


def _require_context() -> AppContext:
    if _CONTEXT is None:
        raise HTTPException(
            status_code=500,
            detail="AppContext is not configured on the server.",
        )
    return _CONTEXT


@router.get("/commands")
async def list_commands() -> dict:
    context = _require_context()
    return {"channels": context.registry.channels()}


@router.post("/commands/{channel}", response_model=CommandResult)
async def dispatch_command(channel: str, request: Optional[CommandRequest] = None) -> CommandResult:
    """Dispatch a command by channel name.

    The registry never raises; handler failures come back as
    {success: false, error}. Unknown channels are reported the same way.
    """
    context = _require_context()
    args = request.args if request is not None else None
    try:
        return await context.registry.dispatch(channel, args)
    except Exception:
        # Should not happen; dispatch isolates handler errors.
        logger.exception("[COMMAND] Unexpected error dispatching channel=%s", channel)
        raise


@router.websocket("/events")
async def stream_events(websocket: WebSocket) -> None:
    """Push notifications to a connected front end until it disconnects."""
    if _BROADCASTER is None:
        await websocket.close(code=1011)
        return

    queue = _BROADCASTER.subscribe()
    await websocket.accept()
    try:
        while True:
            message = await queue.get()
            await websocket.send_json(message.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.debug("Event subscriber disconnected")
    finally:
        _BROADCASTER.unsubscribe(queue)

# --------------------------------------------------------
# Endpoint: GET /healthz
# --------------------------------------------------------
@router.get("/healthz")
def health_check():
    """
    Simple health check endpoint for uptime monitoring.
    """
    return {"status": "ok"}
