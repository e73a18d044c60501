"""
Configuration for the game service and the procedural world.
"""

from .config import Settings, settings
from .world_settings import ValueBand, WorldSettings, VALUE_PROFILES, get_value_profile, world_settings_from

__all__ = ['Settings', 'settings', 'ValueBand', 'WorldSettings', 'VALUE_PROFILES',
           'get_value_profile', 'world_settings_from']
