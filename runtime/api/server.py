"""
FastAPI application entry point for the PrintDesk runtime.

Responsibilities:
- construct the shared AppContext (LogStore, CommandRegistry, PrintPipeline)
  and the EventBroadcaster that carries notifications to the front end
- start the context when the app starts and shut it down on exit
- include the command routes

Run with:

    uvicorn runtime.api.server:app
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from configs.settings import settings
from runtime.context import AppContext
from runtime.notifications import EventBroadcaster
from . import command_routes


def create_app(
    context: Optional[AppContext] = None,
    broadcaster: Optional[EventBroadcaster] = None,
) -> FastAPI:
    """Build the FastAPI app around a context (defaults come from settings)."""
    broadcaster = broadcaster or EventBroadcaster()
    context = context or AppContext.from_settings(settings, sink=broadcaster)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context.start()
        try:
            yield
        finally:
            context.shutdown()

    app = FastAPI(title="PrintDesk Runtime", lifespan=lifespan)
    app.state.context = context
    app.state.broadcaster = broadcaster

    # Initialize the router module with our shared objects, then include it.
    command_routes.init_routes(context=context, broadcaster=broadcaster)
    app.include_router(command_routes.router)
    return app


# ---------------------------------------------------------------------------
# Shared app instance
# ---------------------------------------------------------------------------

app = create_app()
