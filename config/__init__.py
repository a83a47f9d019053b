"""
Configuration management for labelbag.
"""
from .args import Args
from .config_manager import (
    ConfigManager,
    get_config_manager,
    load_config,
)
from .presets import ConfigPresets

__all__ = [
    'Args',
    'ConfigManager',
    'get_config_manager',
    'load_config',
    'ConfigPresets',
]
