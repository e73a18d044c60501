"""
Save-file codec.

A saved game is a JSON object::

    {
        "modifiedEntries": [["i,j", {"i": .., "j": .., "value": .., "originalValue": ..}], ...],
        "playerHeld": 0,
        "playerLat": 36.99,
        "playerLng": -122.05
    }

Entries are an explicit list of key/memento pairs so the format does not
depend on mapping iteration order. Decoding validates everything before
returning, so callers can apply a snapshot knowing it is well formed.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import structlog
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .cells import CellMemento, parse_cell_key
from .coordinates import LatLng
from .errors import LoadError

logger = structlog.get_logger()


class MementoRecord(BaseModel):
    """Wire form of a cell memento."""

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    i: int
    j: int
    value: int = Field(..., ge=0)
    original_value: int = Field(
        ...,
        ge=0,
        alias="originalValue",
        validation_alias=AliasChoices("originalValue", "originalvalue", "original_value"),
    )


class SavedGame(BaseModel):
    """Wire form of a whole session."""

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    modified_entries: Optional[List[Tuple[str, MementoRecord]]] = Field(default=None, alias="modifiedEntries")
    player_held: Optional[int] = Field(default=None, ge=0, alias="playerHeld")
    player_lat: Optional[float] = Field(default=None, ge=-90, le=90, allow_inf_nan=False, alias="playerLat")
    player_lng: Optional[float] = Field(default=None, ge=-180, le=180, allow_inf_nan=False, alias="playerLng")


@dataclass(frozen=True)
class SessionSnapshot:
    """Unit of save and load: archived cells plus player state."""
    mementos: Tuple[CellMemento, ...]
    player_held: int
    player_position: LatLng

    def entries(self) -> List[Tuple[str, CellMemento]]:
        return [(memento.key, memento) for memento in self.mementos]


def encode(snapshot: SessionSnapshot) -> str:
    """Serialize a snapshot to its JSON save form."""
    record = SavedGame(
        modified_entries=[
            (
                key,
                MementoRecord(
                    i=memento.i,
                    j=memento.j,
                    value=memento.value,
                    original_value=memento.original_value,
                ),
            )
            for key, memento in sorted(snapshot.entries(), key=lambda entry: entry[0])
        ],
        player_held=snapshot.player_held,
        player_lat=snapshot.player_position.lat,
        player_lng=snapshot.player_position.lng,
    )
    return record.model_dump_json(by_alias=True)


def decode(blob, default_position: LatLng) -> SessionSnapshot:
    """
    Parse a saved game.

    Args:
        blob: JSON text (str or bytes)
        default_position: Position used when the record has none

    Returns:
        The decoded snapshot

    Raises:
        LoadError: If the record is not valid JSON, has the wrong shape or
            types, or contains keys that disagree with their mementos
    """
    try:
        record = SavedGame.model_validate_json(blob)
    except (ValidationError, TypeError) as e:
        logger.warning("Rejected saved game", error=str(e))
        raise LoadError(f"Malformed saved game: {e}") from e

    mementos = {}
    for key, entry in record.modified_entries or []:
        try:
            i, j = parse_cell_key(key)
        except ValueError as e:
            raise LoadError(str(e)) from e
        if (i, j) != (entry.i, entry.j):
            raise LoadError(f"Entry key {key!r} does not match cell ({entry.i}, {entry.j})")
        if key in mementos:
            raise LoadError(f"Duplicate entry for cell {key!r}")
        mementos[key] = CellMemento(entry.i, entry.j, entry.value, entry.original_value)

    position = LatLng(
        record.player_lat if record.player_lat is not None else default_position.lat,
        record.player_lng if record.player_lng is not None else default_position.lng,
    )
    return SessionSnapshot(
        mementos=tuple(mementos[key] for key in sorted(mementos)),
        player_held=record.player_held or 0,
        player_position=position,
    )
