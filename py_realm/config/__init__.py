"""
Configuration modules for map layout.
"""

from .settings import Settings, settings
from .shape_params import DEFAULT_SHAPE_PARAMETERS, RegionShape, ShapeParameters

__all__ = ['Settings', 'settings', 'ShapeParameters', 'RegionShape', 'DEFAULT_SHAPE_PARAMETERS']
