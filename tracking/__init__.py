"""Function usage tracking shared by every package in the bot."""

from .runtime import seen_functions, t, tracking_file

__all__ = ["t", "seen_functions", "tracking_file"]
