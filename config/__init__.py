"""Configuration management package for gchatctl"""

from .loader import ConfigLoader, default_config_dir, get_config_loader

__all__ = [
    "ConfigLoader",
    "default_config_dir",
    "get_config_loader",
]
