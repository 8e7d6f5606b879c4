"""
FastAPI application factory for the pass monitor.

Routes:
- /api/signaling -> rendezvous endpoint (offer/answer/candidate exchange)
- /api/status, /api/health, /api/frame.jpg -> observation status
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from models.config import SignalingConfig
from signaling.protocol import SignalingHandler
from signaling.store import NegotiationStore
from signaling.sweeper import ExpirySweeper
from .routes import api
from .routes import signaling as signaling_routes


def create_app(
    config: Optional[Dict[str, Any]] = None,
    store: Optional[NegotiationStore] = None,
) -> FastAPI:
    """
    Create the FastAPI app and wire routes.

    The negotiation store is created here (unless one is injected) and its
    expiry sweeper runs for the lifetime of the app.
    """
    config = config or {}
    signaling_cfg = SignalingConfig.from_dict(config.get("signaling", {}) or {})
    store = store if store is not None else NegotiationStore()
    sweeper = ExpirySweeper(
        store,
        interval_s=signaling_cfg.sweep_interval_s,
        retention_s=signaling_cfg.retention_s,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper.start()
        try:
            yield
        finally:
            sweeper.stop()
            logging.info("Signaling store shut down")

    app = FastAPI(
        title="Pass Monitor",
        version="0.1.0",
        description="Camera rendezvous and people pass counting",
        lifespan=lifespan,
    )

    # Camera and observer pages may be served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.negotiation_store = store
    app.state.signaling_handler = SignalingHandler(store)
    app.state.expiry_sweeper = sweeper

    app.include_router(signaling_routes.router, prefix="/api")
    app.include_router(api.router, prefix="/api")

    return app


# Exported application instance for uvicorn
app = create_app()
