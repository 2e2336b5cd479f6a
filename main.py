"""
Sentinels Map FastAPI Application

Main entry point for the Sentinels Map application, serving the REST API
and real-time updates for the marker dashboard.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-10-19
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.responses import StreamingResponse

from logic.config import BACKEND_REMOTE, Settings, load_settings
from server.broadcast import build_view_update, event_generator
from server.documents import SqlDocumentStore
from server.markers import router as markers_router
from server.routes import router as routes_router
from server.session import ClientSession, SessionRegistry, get_session

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings (for testing); read from the environment
            when omitted.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the document store at startup and release it at shutdown."""
        shared_store = None
        if settings.backend == BACKEND_REMOTE:
            shared_store = SqlDocumentStore(settings.database_url)
        app.state.registry = SessionRegistry(settings, shared_store)
        logger.info("Started with %s backend", settings.backend)
        try:
            yield
        finally:
            await app.state.registry.close_all()
            if shared_store is not None:
                shared_store.close()
            logger.info("Document store closed")

    app = FastAPI(title="Sentinels Map", lifespan=lifespan)
    app.state.settings = settings

    # Include all routers
    app.include_router(routes_router)
    app.include_router(markers_router)

    # ============================================================
    # SSE Endpoint
    # ============================================================

    @app.get("/api/stream")
    async def stream(session: ClientSession = Depends(get_session)):
        """Server-Sent Events (SSE) endpoint for real-time updates.

        Clients connect to this endpoint to receive their composed view
        whenever markers, layers, selection or sync status change.

        Returns:
            StreamingResponse with text/event-stream content type.
        """
        queue = asyncio.Queue()
        queue.put_nowait(build_view_update(session.view()))
        session.subscribers.add(queue)

        async def events():
            try:
                async for event in event_generator(queue):
                    yield event
            finally:
                session.subscribers.discard(queue)

        return StreamingResponse(events(), media_type="text/event-stream")

    return app


app_settings = load_settings()
configure_logging(app_settings.log_level)
app = create_app(app_settings)
