"""
Core game world functionality.
"""

from .coordinates import GridMapper, LatLng, CellBounds
from .value_generator import ValueGenerator
from .cells import Cell, CellMemento, CellStore, cell_key, parse_cell_key
from .interaction import Interaction, Effect, decide, apply
from .windowing import WindowManager, WindowReport
from .persistence import SessionSnapshot, encode, decode
from .session import SessionContext, Offer, Player

__all__ = ['GridMapper', 'LatLng', 'CellBounds', 'ValueGenerator',
           'Cell', 'CellMemento', 'CellStore', 'cell_key', 'parse_cell_key',
           'Interaction', 'Effect', 'decide', 'apply',
           'WindowManager', 'WindowReport', 'SessionSnapshot', 'encode', 'decode',
           'SessionContext', 'Offer', 'Player']
