"""Browser management for the tee sheet automation."""

from .manager import BrowserManager

__all__ = ["BrowserManager"]
