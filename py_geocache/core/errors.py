"""Exceptions raised by the game core."""


class GeocacheError(Exception):
    """Base class for all game errors."""


class LoadError(GeocacheError):
    """A persisted record could not be parsed or failed validation."""


class NoSaveFound(GeocacheError):
    """Nothing is stored under the requested save key."""


class GeolocationUnavailable(GeocacheError):
    """The platform offers no location source."""


class InteractionError(GeocacheError):
    """A popup confirmation was stale, repeated or not allowed."""


class UnknownCellError(GeocacheError):
    """The referenced cell is not in the active window."""


class MovementLocked(GeocacheError):
    """Manual movement was requested while geolocation drives the player."""
