"""Domain model definitions for the tee-time queue."""

from .booking_request import (
    BookingRequest,
    QueueData,
    RequestStatus,
    TimeRange,
    clock_to_hours,
)

__all__ = ["BookingRequest", "QueueData", "RequestStatus", "TimeRange", "clock_to_hours"]
