"""Location sources feeding the movement path."""

from typing import Optional, Protocol

import structlog

from .coordinates import LatLng
from .errors import GeolocationUnavailable

logger = structlog.get_logger()


class PositionSource(Protocol):
    """Yields the device's current position, or None when a fix failed."""

    def current_position(self) -> Optional[LatLng]: ...


class PushedPositionSource:
    """Source fed by a client that reports samples as they arrive."""

    def __init__(self):
        self._latest: Optional[LatLng] = None

    def push(self, lat: float, lng: float) -> None:
        self._latest = LatLng(lat, lng)

    def current_position(self) -> Optional[LatLng]:
        sample, self._latest = self._latest, None
        return sample


class GeolocationTracker:
    """Polls a position source and forwards fixes to a move callback."""

    def __init__(self, move, source: Optional[PositionSource] = None):
        self.move = move
        self.source = source
        self.enabled = False

    def enable(self) -> None:
        if self.source is None:
            raise GeolocationUnavailable("Geolocation is not supported by this browser.")
        self.enabled = True
        logger.info("Geolocation enabled")

    def disable(self) -> None:
        self.enabled = False
        logger.info("Geolocation disabled")

    def poll(self) -> bool:
        """Move the player to the latest fix. Returns whether a move happened."""
        if not self.enabled:
            return False
        position = self.source.current_position()
        if position is None:
            logger.warning("error getting location")
            return False
        self.move(position)
        return True
