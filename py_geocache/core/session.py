"""
Game session context.

A ``SessionContext`` owns one player, one cell store and the collaborators
the core talks to (renderer, status line, notifier, position source). All
state changes go through it, so several sessions can live side by side in
one process.
"""

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

import structlog

from ..config.world_settings import WorldSettings
from .cells import Cell, CellStore, cell_key
from .coordinates import GridMapper, LatLng
from .errors import (
    InteractionError,
    LoadError,
    MovementLocked,
    NoSaveFound,
    GeolocationUnavailable,
    UnknownCellError,
)
from .geolocation import GeolocationTracker, PositionSource
from .interaction import (
    BUTTON_LABELS,
    Effect,
    Interaction,
    apply,
    decide,
    describe,
    inventory_text,
)
from .persistence import SessionSnapshot, decode, encode
from .rendering import Renderer, ShapeLayer
from .value_generator import ValueGenerator
from .windowing import WindowManager, WindowReport

logger = structlog.get_logger()

# (d_lat, d_lng) in tiles
DIRECTIONS = {
    "north": (1, 0),
    "east": (0, 1),
    "south": (-1, 0),
    "west": (0, -1),
}


class StatusSink(Protocol):
    def show_status(self, text: str) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class SaveStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MessageLog:
    """Status line and notification queue kept in memory."""

    def __init__(self):
        self.status = ""
        self.notifications: List[str] = []

    def show_status(self, text: str) -> None:
        self.status = text

    def notify(self, message: str) -> None:
        self.notifications.append(message)

    def drain(self) -> List[str]:
        pending, self.notifications = self.notifications, []
        return pending


@dataclass
class Player:
    """The single player of a session."""
    position: LatLng
    held_value: int = 0


@dataclass(frozen=True)
class Offer:
    """What an opened popup shows and, when actionable, lets the user confirm."""
    i: int
    j: int
    interaction: Interaction
    message: str
    cell_value: int
    held_value: int
    offer_id: Optional[str] = None

    @property
    def key(self) -> str:
        return cell_key(self.i, self.j)

    @property
    def button(self) -> Optional[str]:
        return BUTTON_LABELS.get(self.interaction)


@dataclass
class SessionContext:
    """One running game."""

    world: WorldSettings = field(default_factory=WorldSettings)
    renderer: Optional[Renderer] = None
    status: Optional[StatusSink] = None
    notifier: Optional[Notifier] = None
    position_source: Optional[PositionSource] = None
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        messages = MessageLog()
        self.messages = messages
        if self.renderer is None:
            self.renderer = ShapeLayer()
        if self.status is None:
            self.status = messages
        if self.notifier is None:
            self.notifier = messages

        self.lock = threading.Lock()
        self.mapper = GridMapper(
            origin=LatLng(self.world.origin_lat, self.world.origin_lng),
            tile_degrees=self.world.tile_degrees,
        )
        self.generator = ValueGenerator(self.world.value_bands, self.world.discriminator)
        self.store = CellStore(self.renderer)
        self.windows = WindowManager(
            self.mapper,
            self.store,
            self.generator,
            neighborhood_size=self.world.neighborhood_size,
            player_range=self.world.player_range,
        )
        self.geolocation = GeolocationTracker(self.move_to, self.position_source)
        self.player = Player(position=self.mapper.origin)
        self._offers: Dict[str, Offer] = {}

        logger.info("Session created", session_id=self.session_id)
        self.refresh_inventory()
        self.windows.update(self.player.position)

    # Movement

    def move_to(self, position: LatLng) -> WindowReport:
        """Put the player at ``position`` and reconcile the active window."""
        self.player.position = LatLng(float(position[0]), float(position[1]))
        return self.windows.update(self.player.position)

    def step(self, direction: str) -> WindowReport:
        """Move one tile in a compass direction."""
        if self.geolocation.enabled:
            raise MovementLocked("Movement buttons are disabled while geolocation is on")
        try:
            d_lat, d_lng = DIRECTIONS[direction.lower()]
        except KeyError:
            raise ValueError(f"Unknown direction '{direction}'") from None
        return self.move_to(self.mapper.step(self.player.position, d_lat, d_lng))

    def enable_geolocation(self) -> bool:
        try:
            self.geolocation.enable()
        except GeolocationUnavailable as e:
            self.notifier.notify(str(e))
            return False
        return True

    def disable_geolocation(self) -> None:
        self.geolocation.disable()

    def poll_geolocation(self) -> bool:
        return self.geolocation.poll()

    # Cells and interaction

    @property
    def player_cell(self):
        return self.mapper.cell_index(*self.player.position)

    def cell(self, i: int, j: int) -> Cell:
        cell = self.store.get(cell_key(i, j))
        if cell is None:
            raise UnknownCellError(f"Cell {i},{j} is not active")
        return cell

    def in_range(self, i: int, j: int) -> bool:
        return self.windows.in_range(i, j)

    def open_popup(self, i: int, j: int) -> Offer:
        """Decide what the popup for cell (i, j) offers."""
        cell = self.cell(i, j)
        held = self.player.held_value
        interaction = decide(cell.value, held, self.in_range(i, j))
        offer = Offer(
            i=i,
            j=j,
            interaction=interaction,
            message=describe(interaction, i, j, cell.value, held),
            cell_value=cell.value,
            held_value=held,
            offer_id=uuid.uuid4().hex if interaction.actionable else None,
        )
        if interaction.actionable:
            self._offers[offer.key] = offer
        else:
            self._offers.pop(offer.key, None)
        self.renderer.open_popup(cell.handle)
        return offer

    def close_popup(self, i: int, j: int) -> None:
        self._offers.pop(cell_key(i, j), None)
        cell = self.store.get(cell_key(i, j))
        if cell is not None:
            self.renderer.close_popup(cell.handle)

    def confirm(self, i: int, j: int, offer_id: str) -> Effect:
        """
        Apply the action of an open offer exactly once.

        Raises:
            InteractionError: If there is no matching open offer, or the cell
                or player changed since the popup was opened
            UnknownCellError: If the cell left the active window
        """
        key = cell_key(i, j)
        offer = self._offers.get(key)
        if offer is None or offer.offer_id != offer_id:
            raise InteractionError(f"No open offer {offer_id!r} for cell {key}")
        del self._offers[key]

        cell = self.cell(i, j)
        held = self.player.held_value
        current = decide(cell.value, held, self.in_range(i, j))
        if current is not offer.interaction or (cell.value, held) != (offer.cell_value, offer.held_value):
            raise InteractionError(f"Offer for cell {key} is stale")

        effect = apply(current, cell.value, held)
        cell.value = effect.cell_value
        self.player.held_value = effect.held_value

        logger.info(
            "Interaction applied",
            session_id=self.session_id,
            cell=key,
            action=current.value,
            cell_value=cell.value,
            held=self.player.held_value,
        )
        self.refresh_inventory()
        self.store.refresh_label(cell)
        self.renderer.close_popup(cell.handle)
        return effect

    def refresh_inventory(self) -> None:
        held = self.player.held_value
        if held >= self.world.win_threshold:
            self.notifier.notify("you won the game")
        self.status.show_status(inventory_text(held))

    # Persistence

    def snapshot(self) -> SessionSnapshot:
        """Archive plus modified active cells, with the player state."""
        return SessionSnapshot(
            mementos=tuple(self.store.reconciled_mementos()),
            player_held=self.player.held_value,
            player_position=self.player.position,
        )

    def save(self) -> str:
        return encode(self.snapshot())

    def load(self, blob) -> SessionSnapshot:
        """
        Replace the session state with a saved game.

        Raises:
            LoadError: If the blob is malformed; the session is left untouched
        """
        snapshot = decode(blob, default_position=self.mapper.origin)
        try:
            self.windows.window(self.mapper.cell_index(*snapshot.player_position))
        except (OverflowError, ValueError) as e:
            raise LoadError(f"Saved position {snapshot.player_position} is off the grid") from e
        self.load_snapshot(snapshot)
        return snapshot

    def load_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.store.replace_archive(snapshot.mementos)
        released = self.store.clear_active()
        self._offers.clear()
        self.player.held_value = snapshot.player_held
        self.player.position = snapshot.player_position
        self.refresh_inventory()
        self.windows.update(self.player.position)

        logger.info(
            "Session loaded",
            session_id=self.session_id,
            archived=len(snapshot.mementos),
            released=released,
            held=snapshot.player_held,
        )

    def save_game(self, store: SaveStore, key: str = "savedGame") -> str:
        blob = self.save()
        store.set(key, blob)
        self.notifier.notify("game saved")
        logger.info("Game saved", session_id=self.session_id, key=key, size=len(blob))
        return blob

    def read_save(self, store: SaveStore, key: str = "savedGame") -> str:
        raw = store.get(key)
        if not raw:
            raise NoSaveFound(f"No save data under '{key}'")
        return raw

    def load_game(self, store: SaveStore, key: str = "savedGame") -> bool:
        """Load from a save slot, reporting failures to the notifier."""
        try:
            self.load(self.read_save(store, key))
        except NoSaveFound:
            self.notifier.notify("No save data found.")
            return False
        except LoadError as e:
            logger.error("Failed to load save", session_id=self.session_id, key=key, error=str(e))
            self.notifier.notify("Failed to load save (parse error).")
            return False
        return True
