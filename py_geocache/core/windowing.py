"""
Active window lifecycle.

On every position update the manager makes the active mapping equal to the
square of cells within ``neighborhood_size`` of the player's cell (inclusive
on both sides). Cells entering the window come back from the archive when a
memento exists and are generated otherwise; cells leaving it are archived if
modified and discarded if not.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import numpy as np
import structlog

from .cells import Cell, CellStore, cell_key
from .coordinates import GridMapper, LatLng
from .rendering import IN_RANGE_COLOR, OUT_OF_RANGE_COLOR

logger = structlog.get_logger()

# Largest cell index the int64 window grid can hold with room for offsets
MAX_CELL_INDEX = np.iinfo(np.int64).max // 2


@dataclass
class WindowReport:
    """What a single window update changed."""
    center: Tuple[int, int]
    spawned: int = 0
    restored: int = 0
    archived: int = 0
    discarded: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.spawned or self.restored or self.archived or self.discarded)


class WindowManager:
    """Keeps the cell store in step with the player's position."""

    def __init__(
        self,
        mapper: GridMapper,
        store: CellStore,
        generate_value: Callable[[int, int], int],
        neighborhood_size: int = 19,
        player_range: float = 5,
    ):
        if neighborhood_size < 0:
            raise ValueError("neighborhood_size must not be negative")
        self.mapper = mapper
        self.store = store
        self.generate_value = generate_value
        self.neighborhood_size = neighborhood_size
        self.player_range = player_range
        self.center: Optional[Tuple[int, int]] = None

    def window(self, center: Tuple[int, int]) -> Dict[str, Tuple[int, int]]:
        """All cells of the window around ``center``, keyed by cell key."""
        pi, pj = center
        if abs(pi) > MAX_CELL_INDEX or abs(pj) > MAX_CELL_INDEX:
            raise ValueError(f"Cell {pi},{pj} is outside the indexable grid")
        offsets = np.arange(-self.neighborhood_size, self.neighborhood_size + 1)
        grid_i, grid_j = np.meshgrid(pi + offsets, pj + offsets, indexing="ij")
        return {
            cell_key(int(i), int(j)): (int(i), int(j))
            for i, j in zip(grid_i.ravel(), grid_j.ravel())
        }

    def in_range(self, i: int, j: int) -> bool:
        """Whether cell (i, j) is within reach of the player's cell."""
        if self.center is None:
            return False
        pi, pj = self.center
        return math.hypot(i - pi, j - pj) < self.player_range

    def update(self, position: LatLng) -> WindowReport:
        """Reconcile the active cells with the window around ``position``."""
        center = self.mapper.cell_index(position.lat, position.lng)
        desired = self.window(center)
        report = WindowReport(center=center)

        for key in [key for key in self.store.active if key not in desired]:
            _, archived = self.store.evict(key)
            if archived:
                report.archived += 1
            else:
                report.discarded += 1

        for key, (i, j) in desired.items():
            if key in self.store:
                continue
            memento = self.store.take_memento(key)
            if memento is not None:
                cell = Cell.from_memento(memento)
                report.restored += 1
            else:
                value = self.generate_value(i, j)
                cell = Cell(i=i, j=j, value=value, original_value=value)
                report.spawned += 1
            self.store.materialize(cell, self.mapper.cell_bounds(i, j))

        self.center = center
        self.restyle()

        if report.changed:
            logger.info(
                "Window updated",
                center=center,
                spawned=report.spawned,
                restored=report.restored,
                archived=report.archived,
                discarded=report.discarded,
                active=len(self.store.active),
                archive=len(self.store.archive),
            )
        return report

    def restyle(self) -> None:
        """Flag out-of-range cells on the map."""
        cells = list(self.store)
        if not cells or self.center is None:
            return
        di = np.array([cell.i for cell in cells]) - self.center[0]
        dj = np.array([cell.j for cell in cells]) - self.center[1]
        reachable = np.hypot(di, dj) < self.player_range
        for cell, ok in zip(cells, reachable):
            color = IN_RANGE_COLOR if ok else OUT_OF_RANGE_COLOR
            self.store.renderer.set_style(cell.handle, color)
