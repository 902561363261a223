"""Queue storage, eligibility and scheduling services."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .eligibility import is_near_horizon, select_eligible
    from .reservation_queue import BookingQueue
    from .reservation_repository import QueueFileError, QueueRepository

__all__ = [
    "BookingQueue",
    "QueueFileError",
    "QueueRepository",
    "is_near_horizon",
    "select_eligible",
]


def __getattr__(name: str):
    if name == "BookingQueue":
        module = import_module("reservations.queue.reservation_queue")
    elif name in {"QueueRepository", "QueueFileError"}:
        module = import_module("reservations.queue.reservation_repository")
    elif name in {"is_near_horizon", "select_eligible"}:
        module = import_module("reservations.queue.eligibility")
    else:
        raise AttributeError(name)
    return getattr(module, name)
