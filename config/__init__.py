"""Configuration management for rabinfp."""
from .settings import Settings, get_settings, load_config_file, Defaults

__all__ = ["Settings", "get_settings", "load_config_file", "Defaults"]
