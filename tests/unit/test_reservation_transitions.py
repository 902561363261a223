from datetime import date, datetime

import pytest

from reservations.models import RequestStatus
from reservations.queue.reservation_transitions import (
    TerminalTransitionError,
    apply_terminal_status,
    mark_error,
    mark_failed,
    mark_success,
    utc_timestamp,
)
from tests.helpers import make_request


PROCESSED_AT = datetime(2025, 6, 10, 11, 0, 3, 120500)


def test_mark_success_mutates_request():
    request = make_request(date(2025, 6, 15))

    updated = mark_success(request, "09:40", confirmation_number="778812", processed_at=PROCESSED_AT)

    assert updated is request
    assert request.status is RequestStatus.SUCCESS
    assert request.booked_time == "09:40"
    assert request.confirmation_number == "778812"
    assert request.processed_date == "2025-06-10T11:00:03.120Z"
    assert request.failure_reason is None


def test_mark_failed_and_error_record_reason():
    failed = mark_failed(make_request(date(2025, 6, 15)), "No available times")
    errored = mark_error(make_request(date(2025, 6, 16)), "frame detached")

    assert failed.status is RequestStatus.FAILED
    assert failed.failure_reason == "No available times"
    assert failed.booked_time is None
    assert errored.status is RequestStatus.ERROR
    assert errored.failure_reason == "frame detached"
    assert errored.processed_date.endswith("Z")


def test_request_is_finalized_only_once():
    request = make_request(date(2025, 6, 15))
    mark_failed(request, "Could not select date")

    with pytest.raises(TerminalTransitionError):
        mark_success(request, "09:40")

    assert request.status is RequestStatus.FAILED
    assert request.booked_time is None


def test_pending_is_not_a_terminal_status():
    with pytest.raises(ValueError):
        apply_terminal_status(make_request(date(2025, 6, 15)), RequestStatus.PENDING)


def test_utc_timestamp_format():
    assert utc_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05.000Z"
