# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
FastAPI application hosting one shared browsing session.

Every participant opens a WebSocket on ``/ws``. Frames in both directions
are JSON objects ``{"event": <name>, "data": <payload>}``. On connect the
participant receives ``connected{id}`` followed by the current queue, URL
and loading state, and from then on the live ``screen`` stream.

Example Usage:
    Start the service:
    ```bash
    uvicorn sharebrowser.service.app:app --host 0.0.0.0 --port 3000
    ```

    Take control and navigate (first participant to connect holds control):
    ```javascript
    const ws = new WebSocket("ws://localhost:3000/ws");
    ws.send(JSON.stringify({event: "navigate", data: {url: "example.com"}}));
    ```

The service must run with a single worker: the session, its browser and
its participants live in this process.
"""

from __future__ import annotations

import json
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from sharebrowser import __version__
from sharebrowser.config import SessionConfig
from sharebrowser.service.events import handle_inbound
from sharebrowser.service.models import ErrorResponse, HealthResponse, SessionStateResponse
from sharebrowser.service.transport import ConnectionHub
from sharebrowser.session.session import SharedSession
from sharebrowser.utils.logger import logger, setup_logger

# Global state
session: SharedSession = None
hub: ConnectionHub = None
start_time: float = 0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup and shutdown.

    This function handles:
    - Startup: Launch the browser and start the shared session
    - Shutdown: Close participant connections and the browser

    Args:
        app: FastAPI application instance

    Yields:
        None during application runtime
    """
    global session, hub, start_time

    # Startup
    logger.info("Starting ShareBrowser service...")
    config = SessionConfig.from_env()
    setup_logger(level=config.log_level)
    hub = ConnectionHub()
    session = SharedSession(transport=hub, config=config)
    await session.start()
    start_time = time.time()
    logger.info("ShareBrowser service started successfully")

    yield

    # Shutdown
    logger.info("Shutting down ShareBrowser service...")
    await hub.close_all()
    await session.stop()
    logger.info("ShareBrowser service shut down")


app = FastAPI(
    title="ShareBrowser API",
    description="One live browser page shared by many participants, one controller at a time.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    license_info={
        "name": "Apache 2.0",
        "url": "https://www.apache.org/licenses/LICENSE-2.0.html",
    },
    openapi_tags=[
        {
            "name": "Health",
            "description": "Health check and service status endpoints",
        },
        {
            "name": "Session",
            "description": "State of the shared session",
        },
    ],
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception handlers
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="InternalServerError",
            message="An unexpected error occurred",
            details={"exception": str(exc)},
        ).model_dump(),
    )


# Health endpoints
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns service status, uptime, the number of connected participants
    and whether the frame stream is running.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - start_time,
        participants=len(hub) if hub is not None else 0,
        streaming=session.streamer.is_streaming if session is not None else False,
    )


@app.get("/api/session", response_model=SessionStateResponse, tags=["Session"])
async def get_session_state():
    """Current URL, loading state, control holder and queue order."""
    state = session.state()
    return SessionStateResponse(
        url=state.url,
        loading=state.loading,
        navigating=state.navigating,
        holder=state.holder,
        queue=state.queue,
        stats=session.stats(),
    )


@app.websocket("/ws")
async def session_socket(websocket: WebSocket):
    """
    Participant channel.

    The participant joins the back of the control queue on connect and
    leaves it on disconnect. Frames that are not valid JSON are dropped.
    """
    await websocket.accept()
    participant_id = uuid.uuid4().hex
    hub.register(participant_id, websocket)

    try:
        await session.connect(participant_id)
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except ValueError:
                logger.warning(f"[WS] Dropped non-JSON frame from {participant_id}")
                continue
            await handle_inbound(session, participant_id, message)
    except WebSocketDisconnect:
        pass
    finally:
        hub.unregister(participant_id)
        await session.disconnect(participant_id)


# Optional static client, mounted last so API routes take precedence
_static_dir = os.environ.get("SHAREBROWSER_STATIC_DIR")
if _static_dir and os.path.isdir(_static_dir):
    app.mount("/", StaticFiles(directory=_static_dir, html=True), name="static")
