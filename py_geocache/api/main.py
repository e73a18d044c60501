"""FastAPI main application."""

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
import threading
import structlog

from ..config import settings, world_settings_from
from ..core.coordinates import LatLng
from ..core.errors import InteractionError, MovementLocked, UnknownCellError
from ..core.geolocation import PushedPositionSource
from ..core.session import SessionContext
from ..core.windowing import WindowReport
from ..db.connection import db
from ..db.store import SqlSaveStore
from ..logging_config import configure_logging

# Configure logging
configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Geocache World API",
    description="Procedural geocaching grid with pick-up, place and craft interactions",
    version="0.1.0"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Live sessions, keyed by session id
sessions: Dict[str, SessionContext] = {}
sessions_lock = threading.Lock()


# Request/Response models
class SessionCreateRequest(BaseModel):
    """Request to start a new game session."""

    value_profile: Optional[str] = Field(None, description="Cache value band preset (classic, generous)")
    lat: Optional[float] = Field(None, ge=-90, le=90, description="Starting latitude, defaults to the world origin")
    lng: Optional[float] = Field(None, ge=-180, le=180, description="Starting longitude, defaults to the world origin")


class PlayerState(BaseModel):
    """Player and world summary for a session."""

    session_id: str
    held_value: int
    lat: float
    lng: float
    cell_i: int
    cell_j: int
    status: str
    geolocation_enabled: bool
    active_cells: int
    archived_cells: int


class MoveRequest(BaseModel):
    """Absolute movement target."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class WindowResponse(BaseModel):
    """Result of a movement."""

    spawned: int
    restored: int
    archived: int
    discarded: int
    player: PlayerState


class CellView(BaseModel):
    """An active cell as drawn on the map."""

    key: str
    i: int
    j: int
    value: int
    original_value: int
    modified: bool
    in_range: bool
    color: Optional[str]
    label: Optional[str]
    lat_min: float
    lng_min: float
    lat_max: float
    lng_max: float


class OfferResponse(BaseModel):
    """Contents of an opened popup."""

    i: int
    j: int
    interaction: str
    message: str
    button: Optional[str] = None
    offer_id: Optional[str] = None
    cell_value: int
    held_value: int


class ConfirmRequest(BaseModel):
    offer_id: str


class ConfirmResponse(BaseModel):
    cell_value: int
    held_value: int
    status: str
    notifications: List[str]


class SlotResponse(BaseModel):
    """Outcome of a save or load."""

    key: str
    ok: bool
    notifications: List[str]
    player: PlayerState


class GeolocationRequest(BaseModel):
    enabled: bool


class GeolocationResponse(BaseModel):
    enabled: bool
    notifications: List[str]


def get_save_store():
    """Save store backing the save/load endpoints."""
    if not db.initialized:
        db.initialize()
    return SqlSaveStore(db)


def get_session(session_id: str) -> SessionContext:
    with sessions_lock:
        game = sessions.get(session_id)
    if game is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return game


def player_state(game: SessionContext) -> PlayerState:
    cell_i, cell_j = game.player_cell
    return PlayerState(
        session_id=game.session_id,
        held_value=game.player.held_value,
        lat=game.player.position.lat,
        lng=game.player.position.lng,
        cell_i=cell_i,
        cell_j=cell_j,
        status=game.messages.status,
        geolocation_enabled=game.geolocation.enabled,
        active_cells=len(game.store.active),
        archived_cells=len(game.store.archive),
    )


def window_response(game: SessionContext, report: WindowReport) -> WindowResponse:
    return WindowResponse(
        spawned=report.spawned,
        restored=report.restored,
        archived=report.archived,
        discarded=report.discarded,
        player=player_state(game),
    )


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Log service startup."""
    logger.info("Starting Geocache World API")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Geocache World API")
    db.dispose()


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Geocache World API",
        "version": "0.1.0",
        "status": "running"
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    with sessions_lock:
        count = len(sessions)
    return {"status": "healthy", "sessions": count}


@app.post("/sessions", response_model=PlayerState, status_code=201)
def create_session(request: SessionCreateRequest):
    """Start a new session with the active window around the start position."""
    try:
        world = world_settings_from(settings, request.value_profile)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e.args[0]))

    game = SessionContext(world=world, position_source=PushedPositionSource())
    if request.lat is not None or request.lng is not None:
        origin = game.mapper.origin
        game.move_to(LatLng(
            request.lat if request.lat is not None else origin.lat,
            request.lng if request.lng is not None else origin.lng,
        ))

    with sessions_lock:
        sessions[game.session_id] = game

    logger.info("Session started", session_id=game.session_id, profile=request.value_profile)
    return player_state(game)


@app.get("/sessions/{session_id}", response_model=PlayerState)
def read_session(session_id: str):
    game = get_session(session_id)
    with game.lock:
        return player_state(game)


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    with sessions_lock:
        game = sessions.pop(session_id, None)
    if game is None:
        raise HTTPException(status_code=404, detail="Session not found")
    with game.lock:
        game.store.clear_active()
    logger.info("Session ended", session_id=session_id)


@app.post("/sessions/{session_id}/move", response_model=WindowResponse)
def move_player(session_id: str, request: MoveRequest):
    """Move the player to an absolute position."""
    game = get_session(session_id)
    with game.lock:
        report = game.move_to(LatLng(request.lat, request.lng))
        return window_response(game, report)


@app.post("/sessions/{session_id}/step/{direction}", response_model=WindowResponse)
def step_player(session_id: str, direction: str):
    """Move the player one tile north, east, south or west."""
    game = get_session(session_id)
    with game.lock:
        try:
            report = game.step(direction)
        except MovementLocked as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return window_response(game, report)


@app.get("/sessions/{session_id}/cells", response_model=List[CellView])
def list_cells(session_id: str, in_range_only: bool = False):
    """List active cells with their map styling."""
    game = get_session(session_id)
    with game.lock:
        views = []
        for cell in game.store:
            in_range = game.in_range(cell.i, cell.j)
            if in_range_only and not in_range:
                continue
            shape = game.renderer.shapes.get(cell.handle)
            bounds = game.mapper.cell_bounds(cell.i, cell.j)
            views.append(CellView(
                key=cell.key,
                i=cell.i,
                j=cell.j,
                value=cell.value,
                original_value=cell.original_value,
                modified=cell.modified,
                in_range=in_range,
                color=shape.color if shape else None,
                label=shape.label if shape else None,
                lat_min=bounds.lat_min,
                lng_min=bounds.lng_min,
                lat_max=bounds.lat_max,
                lng_max=bounds.lng_max,
            ))
        return sorted(views, key=lambda view: (view.i, view.j))


@app.get("/sessions/{session_id}/cells/{i}/{j}/popup", response_model=OfferResponse)
def open_popup(session_id: str, i: int, j: int):
    """Open the popup for a cell and return what it offers."""
    game = get_session(session_id)
    with game.lock:
        try:
            offer = game.open_popup(i, j)
        except UnknownCellError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return OfferResponse(
            i=offer.i,
            j=offer.j,
            interaction=offer.interaction.value,
            message=offer.message,
            button=offer.button,
            offer_id=offer.offer_id,
            cell_value=offer.cell_value,
            held_value=offer.held_value,
        )


@app.post("/sessions/{session_id}/cells/{i}/{j}/confirm", response_model=ConfirmResponse)
def confirm_offer(session_id: str, i: int, j: int, request: ConfirmRequest):
    """Apply the action of an open popup."""
    game = get_session(session_id)
    with game.lock:
        try:
            effect = game.confirm(i, j, request.offer_id)
        except UnknownCellError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except InteractionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return ConfirmResponse(
            cell_value=effect.cell_value,
            held_value=effect.held_value,
            status=game.messages.status,
            notifications=game.messages.drain(),
        )


@app.post("/sessions/{session_id}/save", response_model=SlotResponse)
def save_session(session_id: str, key: Optional[str] = None, store=Depends(get_save_store)):
    """Save the session under a slot key."""
    game = get_session(session_id)
    slot = key or settings.save_key
    with game.lock:
        game.save_game(store, slot)
        return SlotResponse(key=slot, ok=True, notifications=game.messages.drain(), player=player_state(game))


@app.post("/sessions/{session_id}/load", response_model=SlotResponse)
def load_session(session_id: str, key: Optional[str] = None, store=Depends(get_save_store)):
    """Replace the session state with the game saved under a slot key."""
    game = get_session(session_id)
    slot = key or settings.save_key
    with game.lock:
        ok = game.load_game(store, slot)
        return SlotResponse(key=slot, ok=ok, notifications=game.messages.drain(), player=player_state(game))


@app.get("/slots", response_model=List[str])
def list_slots(store=Depends(get_save_store)):
    """List the keys that hold a saved game."""
    return store.keys()


@app.delete("/slots/{key}", status_code=204)
def delete_slot(key: str, store=Depends(get_save_store)):
    """Remove a saved game."""
    if not store.delete(key):
        raise HTTPException(status_code=404, detail="Save slot not found")
    logger.info("Save slot deleted", key=key)


@app.post("/sessions/{session_id}/geolocation", response_model=GeolocationResponse)
def toggle_geolocation(session_id: str, request: GeolocationRequest):
    """Switch between geolocation-driven and button-driven movement."""
    game = get_session(session_id)
    with game.lock:
        if request.enabled:
            game.enable_geolocation()
        else:
            game.disable_geolocation()
        return GeolocationResponse(enabled=game.geolocation.enabled, notifications=game.messages.drain())


@app.post("/sessions/{session_id}/geolocation/samples", response_model=PlayerState)
def push_location_sample(session_id: str, request: MoveRequest):
    """Feed a location fix; the player follows it while geolocation is on."""
    game = get_session(session_id)
    with game.lock:
        if not game.geolocation.enabled:
            raise HTTPException(status_code=409, detail="Geolocation is not enabled")
        game.position_source.push(request.lat, request.lng)
        game.poll_geolocation()
        return player_state(game)


@app.get("/sessions/{session_id}/notifications", response_model=List[str])
def drain_notifications(session_id: str):
    game = get_session(session_id)
    with game.lock:
        return game.messages.drain()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
