# Configuration module for the log appender
from .settings import Settings, Environment, get_settings, clear_settings_cache

__all__ = ["Settings", "Environment", "get_settings", "clear_settings_cache"]
