"""Configuration module for ReviewZone backend."""

from reviewzone.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
