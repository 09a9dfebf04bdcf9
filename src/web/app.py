"""
FastAPI application factory for the operator surface.

Routes:
- /api/status     -> render status, fps, dispatch state
- /api/logs       -> bounded event log
- /api/detections -> latest display-space detections
- /api/display    -> report the display surface size (PUT)
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runtime.context import PipelineContext
from .routes import api


def create_app(ctx: PipelineContext) -> FastAPI:
    """Create the FastAPI app bound to a pipeline context."""
    app = FastAPI(
        title="Detection Relay",
        version="0.1.0",
        description="On-device detection relay operator API",
    )
    app.state.ctx = ctx

    # CORS for a locally served display client
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    return app
