"""Deterministic cache contents for grid cells."""

from typing import Sequence

import numpy as np
import structlog

from .alea_prng import luck

logger = structlog.get_logger()


class ValueGenerator:
    """
    Pure function from cell indices to an initial cache value.

    The seed for cell (i, j) is the string "i,j,<discriminator>". Its first
    Alea draw is mapped through the band table, so the same cell yields the
    same value for the lifetime of the world.
    """

    def __init__(self, bands: Sequence, discriminator: str = "initialValue"):
        if not bands:
            raise ValueError("at least one value band is required")
        self.uppers = np.array([band.upper for band in bands], dtype=float)
        self.values = [int(band.value) for band in bands]
        self.discriminator = discriminator

        logger.debug(
            "Value generator ready",
            bands=len(self.values),
            discriminator=discriminator,
        )

    def seed_for(self, i: int, j: int) -> str:
        return f"{i},{j},{self.discriminator}"

    def draw(self, i: int, j: int) -> float:
        """Deterministic number in [0, 1) for the cell."""
        return luck(self.seed_for(i, j))

    def value_for_draw(self, draw: float) -> int:
        """Map a draw onto the band table."""
        band = int(np.searchsorted(self.uppers, draw, side="right"))
        # A table whose last bound is below 1.0 falls back to its top band
        return self.values[min(band, len(self.values) - 1)]

    def generate_value(self, i: int, j: int) -> int:
        return self.value_for_draw(self.draw(i, j))

    def __call__(self, i: int, j: int) -> int:
        return self.generate_value(i, j)
