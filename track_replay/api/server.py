"""
FastAPI control surface for a replay session.

Exposes playback control (play/pause/seek/speed/reset), layer visibility,
entity inspection and direct delta injection. Endpoints are async so clock
frames are scheduled on the server's event loop.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from track_replay.layers.registry import EntityLayer
from track_replay.replay.session import ReplaySession
from track_replay.shared.protocol import delta_from_dict, delta_to_dict

logger = logging.getLogger(__name__)


class ControlRequest(BaseModel):
    action: str
    time_ms: Optional[float] = None
    speed: Optional[float] = None


class VisibilityUpdate(BaseModel):
    visible: bool


def create_app(session: ReplaySession) -> FastAPI:
    """Create and configure the FastAPI application for one session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Replay API starting up")
        session.start()

        yield

        session.stop()
        logger.info("Replay API shutting down")

    app = FastAPI(
        title="Track Replay API",
        description="Playback control for time-stamped track replays",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app, session)

    return app


def _entity_layer(session: ReplaySession, layer_id: str) -> EntityLayer:
    layer = session.registry.get_layer(layer_id)
    if layer is None:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    if not isinstance(layer, EntityLayer):
        raise HTTPException(status_code=400, detail=f"Layer is not replay-capable: {layer_id}")
    return layer


def register_routes(app: FastAPI, session: ReplaySession):
    """Register all API routes."""

    # ==================== Playback ====================

    @app.get("/api/replay")
    async def get_state():
        return session.to_dict()

    @app.post("/api/replay/control")
    async def control(request: ControlRequest):
        """
        Control playback.

        Actions: play, pause, toggle, seek, speed, reset
        """
        clock = session.clock
        action = request.action

        if action == "play":
            clock.play()
        elif action == "pause":
            clock.pause()
        elif action == "toggle":
            if clock.is_playing():
                clock.pause()
            else:
                clock.play()
        elif action == "seek":
            if request.time_ms is None:
                raise HTTPException(status_code=400, detail="seek requires time_ms")
            clock.seek(request.time_ms)
        elif action == "speed":
            if request.speed is None:
                raise HTTPException(status_code=400, detail="speed requires speed")
            clock.set_speed(request.speed)
        elif action == "reset":
            session.reset()
        else:
            raise HTTPException(status_code=400, detail=f"Unknown action: {action}")

        return session.to_dict()

    # ==================== Layers ====================

    @app.get("/api/replay/layers")
    async def list_layers():
        return {"layers": [layer.to_dict() for layer in session.registry.list_layers()]}

    @app.post("/api/replay/layers/{layer_id}/visibility")
    async def set_visibility(layer_id: str, update: VisibilityUpdate):
        layer = session.registry.get_layer(layer_id)
        if layer is None:
            raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")

        session.registry.set_layer_visible(layer_id, update.visible)
        return layer.to_dict()

    @app.get("/api/replay/layers/{layer_id}/entities")
    async def get_entities(layer_id: str):
        layer = _entity_layer(session, layer_id)

        entities = []
        for entity_id, entity in layer.reconciler.items():
            if hasattr(entity, "to_dict"):
                entities.append(entity.to_dict())
            else:
                entities.append({"id": entity_id})

        return {"layer_id": layer_id, "count": len(entities), "entities": entities}

    @app.post("/api/replay/layers/{layer_id}/apply")
    async def apply_delta(layer_id: str, delta: dict = Body(...)):
        layer = _entity_layer(session, layer_id)

        try:
            parsed = delta_from_dict(delta)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        session.registry.apply_to_layer(layer_id, parsed)
        return {"applied": delta_to_dict(parsed), "entity_count": len(layer.reconciler)}

    # ==================== Metrics ====================

    @app.get("/metrics", response_class=PlainTextResponse)
    async def metrics():
        return session.metrics.render_prometheus()
