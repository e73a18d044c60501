"""
Rendering collaborator used by the cell store.

The game core never draws anything itself. It asks a ``Renderer`` for a
handle when a cell becomes active and hands the handle back on eviction.
``ShapeLayer`` is the in-process implementation: it keeps the shapes a map
widget would show so that the API can serve them and tests can inspect them.
"""

import itertools
from dataclasses import dataclass
from typing import Dict, Optional, Protocol

import structlog

from .coordinates import CellBounds

logger = structlog.get_logger()

IN_RANGE_COLOR = "#3388ff"
OUT_OF_RANGE_COLOR = "red"


class Renderer(Protocol):
    """What the core needs from a map widget."""

    def draw_rectangle(self, bounds: CellBounds) -> int: ...

    def set_style(self, handle: int, color: str) -> None: ...

    def bind_label(self, handle: int, text: str) -> None: ...

    def unbind_label(self, handle: int) -> None: ...

    def open_popup(self, handle: int) -> None: ...

    def close_popup(self, handle: int) -> None: ...

    def remove(self, handle: int) -> None: ...


@dataclass
class Shape:
    """A rectangle on the map."""
    handle: int
    bounds: CellBounds
    color: str = IN_RANGE_COLOR
    label: Optional[str] = None
    popup_open: bool = False


class ShapeLayer:
    """In-memory map layer that tracks live shapes by handle."""

    def __init__(self):
        self.shapes: Dict[int, Shape] = {}
        self._handles = itertools.count(1)

    def __len__(self) -> int:
        return len(self.shapes)

    def _shape(self, handle: int) -> Shape:
        try:
            return self.shapes[handle]
        except KeyError:
            raise KeyError(f"Shape {handle} is not on the layer") from None

    def draw_rectangle(self, bounds: CellBounds) -> int:
        handle = next(self._handles)
        self.shapes[handle] = Shape(handle=handle, bounds=bounds)
        return handle

    def set_style(self, handle: int, color: str) -> None:
        self._shape(handle).color = color

    def bind_label(self, handle: int, text: str) -> None:
        self._shape(handle).label = text

    def unbind_label(self, handle: int) -> None:
        self._shape(handle).label = None

    def open_popup(self, handle: int) -> None:
        self._shape(handle).popup_open = True

    def close_popup(self, handle: int) -> None:
        self._shape(handle).popup_open = False

    def remove(self, handle: int) -> None:
        if self.shapes.pop(handle, None) is None:
            logger.warning("Removing unknown shape", handle=handle)
