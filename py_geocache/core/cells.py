"""
Cell records and the store that owns them.

Active cells are materialized: they hold a render handle and are what the
player sees and touches. Archived cells are mementos of modified cells that
left the active window. A key lives in at most one of the two mappings.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import structlog

from .rendering import IN_RANGE_COLOR, Renderer

logger = structlog.get_logger()

_KEY_PATTERN = re.compile(r"^(-?\d+),(-?\d+)$")


def cell_key(i: int, j: int) -> str:
    """Canonical identity key for cell (i, j)."""
    return f"{i},{j}"


def parse_cell_key(key: str) -> Tuple[int, int]:
    """Inverse of ``cell_key``."""
    match = _KEY_PATTERN.match(key) if isinstance(key, str) else None
    if match is None:
        raise ValueError(f"Malformed cell key: {key!r}")
    return int(match.group(1)), int(match.group(2))


@dataclass(frozen=True)
class CellMemento:
    """Durable projection of a cell, without any rendering state."""
    i: int
    j: int
    value: int
    original_value: int

    @property
    def key(self) -> str:
        return cell_key(self.i, self.j)

    @property
    def modified(self) -> bool:
        return self.value != self.original_value


@dataclass
class Cell:
    """A materialized cache cell."""
    i: int
    j: int
    value: int
    original_value: int
    handle: Optional[int] = None

    @property
    def key(self) -> str:
        return cell_key(self.i, self.j)

    @property
    def modified(self) -> bool:
        return self.value != self.original_value

    def to_memento(self) -> CellMemento:
        return CellMemento(self.i, self.j, self.value, self.original_value)

    @classmethod
    def from_memento(cls, memento: CellMemento) -> "Cell":
        return cls(memento.i, memento.j, memento.value, memento.original_value)


class CellStore:
    """Active and archived cells, plus ownership of their render handles."""

    def __init__(self, renderer: Renderer):
        self.renderer = renderer
        self.active: Dict[str, Cell] = {}
        self.archive: Dict[str, CellMemento] = {}

    def __contains__(self, key: str) -> bool:
        return key in self.active

    def __iter__(self) -> Iterator[Cell]:
        return iter(list(self.active.values()))

    def get(self, key: str) -> Optional[Cell]:
        return self.active.get(key)

    def materialize(self, cell: Cell, bounds) -> Cell:
        """Add a cell to the active mapping and draw it."""
        if cell.key in self.active:
            raise ValueError(f"Cell {cell.key} is already active")
        cell.handle = self.renderer.draw_rectangle(bounds)
        self.renderer.set_style(cell.handle, IN_RANGE_COLOR)
        self.refresh_label(cell)
        self.active[cell.key] = cell
        return cell

    def take_memento(self, key: str) -> Optional[CellMemento]:
        """Remove and return the archived memento for ``key``, if any."""
        return self.archive.pop(key, None)

    def evict(self, key: str) -> Tuple[Cell, bool]:
        """
        Drop an active cell, archiving it when modified.

        Returns the cell and whether it was archived. The render handle is
        released in either case.
        """
        cell = self.active.pop(key)
        archived = cell.modified
        if archived:
            self.archive[key] = cell.to_memento()
        self._release(cell)
        return cell, archived

    def clear_active(self) -> int:
        """Release every active cell without archiving anything."""
        count = len(self.active)
        for cell in self.active.values():
            self._release(cell)
        self.active.clear()
        return count

    def replace_archive(self, mementos: Iterable[CellMemento]) -> None:
        self.archive = {memento.key: memento for memento in mementos}

    def reconciled_mementos(self) -> List[CellMemento]:
        """Archive plus every modified active cell, ordered by key."""
        merged = dict(self.archive)
        for key, cell in self.active.items():
            if cell.modified:
                merged[key] = cell.to_memento()
            else:
                merged.pop(key, None)
        return [merged[key] for key in sorted(merged)]

    def refresh_label(self, cell: Cell) -> None:
        if cell.handle is None:
            return
        if cell.value != 0:
            self.renderer.bind_label(cell.handle, str(cell.value))
        else:
            self.renderer.unbind_label(cell.handle)

    def _release(self, cell: Cell) -> None:
        if cell.handle is not None:
            self.renderer.remove(cell.handle)
            cell.handle = None
