"""
Interaction rules for a single cache.

``decide`` looks at the cell value, the held value and whether the cell is
in range, and names the one interaction the popup may offer. ``apply`` turns
an actionable interaction into the new (cell value, held value) pair. Both
are pure; the session applies the result.
"""

from enum import Enum
from typing import NamedTuple

from .errors import InteractionError


class Interaction(str, Enum):
    """Popup states. Only PLACE, PICK_UP and CRAFT carry an action."""

    NOT_IN_RANGE = "not_in_range"
    EMPTY = "empty"
    PLACE = "place"
    PICK_UP = "pick_up"
    CRAFT = "craft"
    BLOCKED = "blocked"

    @property
    def actionable(self) -> bool:
        return self in (Interaction.PLACE, Interaction.PICK_UP, Interaction.CRAFT)


BUTTON_LABELS = {
    Interaction.PLACE: "Place",
    Interaction.PICK_UP: "Pick up?",
    Interaction.CRAFT: "craft",
}


class Effect(NamedTuple):
    """Result of applying an interaction."""
    cell_value: int
    held_value: int


def decide(cell_value: int, held_value: int, in_range: bool) -> Interaction:
    if not in_range:
        return Interaction.NOT_IN_RANGE
    if cell_value == 0:
        return Interaction.PLACE if held_value != 0 else Interaction.EMPTY
    if held_value == 0:
        return Interaction.PICK_UP
    if cell_value == held_value:
        return Interaction.CRAFT
    return Interaction.BLOCKED


def apply(interaction: Interaction, cell_value: int, held_value: int) -> Effect:
    """Compute the effect of an actionable interaction."""
    if interaction is Interaction.PLACE:
        return Effect(cell_value=held_value, held_value=0)
    if interaction is Interaction.PICK_UP:
        return Effect(cell_value=0, held_value=cell_value)
    if interaction is Interaction.CRAFT:
        return Effect(cell_value=cell_value * 2, held_value=0)
    raise InteractionError(f"'{interaction.value}' has no action to apply")


def describe(interaction: Interaction, i: int, j: int, cell_value: int, held_value: int) -> str:
    """User-facing popup text."""
    if interaction is Interaction.NOT_IN_RANGE:
        return "You are not in range!"
    if interaction is Interaction.PLACE:
        return (
            "there is currently nothing in this cell. "
            f"Do you want to place your {held_value} in the cell?"
        )
    if interaction is Interaction.EMPTY:
        return "there is currently nothing in this cell."
    if interaction is Interaction.CRAFT:
        return (
            f'There is a cache here at "{i},{j}". '
            f"Would you like to spend your {held_value} to place a {held_value * 2}."
        )
    if interaction is Interaction.PICK_UP:
        return f'There is a cache here at "{i},{j}". It has value {cell_value}.'
    return "You must have the same number as the cell to craft a bigger number"


def inventory_text(held_value: int) -> str:
    if held_value != 0:
        return f"You are holding the number = {held_value}"
    return "You are not holding anything"
