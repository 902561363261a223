"""Queue domain models: booking requests and their requested time windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


def clock_to_hours(value: str) -> float:
    """Convert ``HH:MM`` into fractional hours (``"09:30"`` -> ``9.5``)."""

    hour_str, minute_str = value.strip().split(":")
    hour = int(hour_str)
    minute = int(minute_str)
    if not (0 <= hour <= 23) or not (0 <= minute <= 59):
        raise ValueError(f"Time {value!r} out of range")
    return hour + minute / 60


class RequestStatus(Enum):
    """Lifecycle of a queued request."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING


@dataclass(frozen=True)
class TimeRange:
    """Requested tee time window, inclusive at both ends."""

    start: str
    end: str

    def __post_init__(self) -> None:
        if clock_to_hours(self.start) > clock_to_hours(self.end):
            raise ValueError(f"Time range start {self.start} is after end {self.end}")

    def contains(self, time_str: str) -> bool:
        value = clock_to_hours(time_str)
        return clock_to_hours(self.start) <= value <= clock_to_hours(self.end)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass
class BookingRequest:
    """A queued request for a tee time on ``play_date`` within ``time_range``.

    Outcome fields stay empty until the request reaches a terminal status,
    which happens at most once (see ``reservation_transitions``).
    """

    id: str
    request_date: str
    play_date: date
    time_range: TimeRange
    status: RequestStatus = RequestStatus.PENDING
    requested_by: Optional[str] = None
    processed_date: Optional[str] = None
    booked_time: Optional[str] = None
    confirmation_number: Optional[str] = None
    failure_reason: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING


@dataclass
class QueueData:
    """Pending and already processed requests, kept disjoint."""

    pending: List[BookingRequest] = field(default_factory=list)
    processed: List[BookingRequest] = field(default_factory=list)
