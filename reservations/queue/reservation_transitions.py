"""State transition helpers for queued booking requests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from tracking import t

from reservations.models import BookingRequest, RequestStatus


class TerminalTransitionError(RuntimeError):
    """Raised when a request that already has an outcome is finalized again."""


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and ``Z``."""

    moment = now or datetime.now(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def apply_terminal_status(
    request: BookingRequest,
    status: RequestStatus,
    *,
    failure_reason: Optional[str] = None,
    booked_time: Optional[str] = None,
    confirmation_number: Optional[str] = None,
    processed_at: Optional[datetime] = None,
) -> BookingRequest:
    """Move a pending request to its single terminal status."""

    t('reservations.queue.reservation_transitions.apply_terminal_status')
    if not status.is_terminal:
        raise ValueError("A request can only be finalized with a terminal status")
    if request.status.is_terminal:
        raise TerminalTransitionError(
            f"Request {request.id} already finalized as {request.status.value}"
        )

    request.status = status
    request.processed_date = utc_timestamp(processed_at)
    if failure_reason is not None:
        request.failure_reason = failure_reason
    if booked_time is not None:
        request.booked_time = booked_time
    if confirmation_number is not None:
        request.confirmation_number = confirmation_number
    return request


def mark_success(
    request: BookingRequest,
    booked_time: str,
    *,
    confirmation_number: Optional[str] = None,
    processed_at: Optional[datetime] = None,
) -> BookingRequest:
    t('reservations.queue.reservation_transitions.mark_success')
    return apply_terminal_status(
        request,
        RequestStatus.SUCCESS,
        booked_time=booked_time,
        confirmation_number=confirmation_number,
        processed_at=processed_at,
    )


def mark_failed(
    request: BookingRequest,
    reason: str,
    *,
    processed_at: Optional[datetime] = None,
) -> BookingRequest:
    t('reservations.queue.reservation_transitions.mark_failed')
    return apply_terminal_status(
        request, RequestStatus.FAILED, failure_reason=reason, processed_at=processed_at
    )


def mark_error(
    request: BookingRequest,
    message: str,
    *,
    processed_at: Optional[datetime] = None,
) -> BookingRequest:
    t('reservations.queue.reservation_transitions.mark_error')
    return apply_terminal_status(
        request, RequestStatus.ERROR, failure_reason=message, processed_at=processed_at
    )
