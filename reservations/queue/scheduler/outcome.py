"""Helpers for recording a request's terminal outcome."""

from __future__ import annotations

import logging
from typing import Optional

from automation.executors.core import AcquisitionResult
from automation.shared.errors import BookingRunError
from reservations.models import BookingRequest
from reservations.queue.reservation_transitions import mark_error, mark_failed, mark_success

logger = logging.getLogger('BookingOrchestrator')


def record_booked(request: BookingRequest, result: AcquisitionResult) -> BookingRequest:
    """Mark ``request`` booked for the slot ``result`` acquired."""

    if result.booked is None:
        raise ValueError("Acquisition result has no booked slot")
    logger.info("Request %s booked for %s", request.id, result.booked.time)
    return mark_success(
        request,
        result.booked.time,
        confirmation_number=result.confirmation_number,
    )


def record_failure(request: BookingRequest, error: BookingRunError) -> BookingRequest:
    logger.info("Request %s failed: %s", request.id, error.reason)
    return mark_failed(request, error.reason)


def record_error(request: BookingRequest, error: Exception, message: Optional[str] = None) -> BookingRequest:
    """Mark ``request`` as errored, keeping the raw exception message."""

    text = message or str(error) or type(error).__name__
    logger.error("Request %s errored: %s", request.id, text)
    return mark_error(request, text)
