"""Infrastructure helpers."""

from .settings import get_settings, load_settings, AppSettings

__all__ = ["get_settings", "load_settings", "AppSettings"]
