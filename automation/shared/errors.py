"""Failure taxonomy shared by the retry policies, executors and the run pipeline."""

from __future__ import annotations

from typing import Optional

from infrastructure import constants


class BookingRunError(RuntimeError):
    """Base error for expected booking failures.

    ``reason`` is the text recorded on the request as its failure reason.
    """

    default_reason = "Booking failed"

    def __init__(self, reason: Optional[str] = None) -> None:
        self.reason = reason or self.default_reason
        super().__init__(self.reason)


class AuthenticationError(BookingRunError):
    """Raised when credentials are missing or the login does not stick."""

    default_reason = "Golf course credentials not found in environment variables"


class SelectionFailure(BookingRunError):
    """Raised when the play date could not be established on the tee sheet."""

    default_reason = constants.FAILURE_DATE_SELECTION


class NoAvailability(BookingRunError):
    """Raised when the retry policy finished without discovering a slot."""

    default_reason = constants.FAILURE_NO_AVAILABILITY


class AcquisitionConflict(BookingRunError):
    """A competing golfer already holds the candidate slot."""

    default_reason = constants.FAILURE_SLOT_LOCKED

    def __init__(self, slot_time: Optional[str] = None, reason: Optional[str] = None) -> None:
        super().__init__(reason)
        self.slot_time = slot_time


class AcquisitionError(BookingRunError):
    """The confirmation sequence for a candidate could not be completed."""

    default_reason = constants.FAILURE_BOOKING_INCOMPLETE

    def __init__(self, slot_time: Optional[str] = None, reason: Optional[str] = None) -> None:
        super().__init__(reason)
        self.slot_time = slot_time


__all__ = [
    "BookingRunError",
    "AuthenticationError",
    "SelectionFailure",
    "NoAvailability",
    "AcquisitionConflict",
    "AcquisitionError",
]
