from tracking import t
from datetime import date, datetime

import pytest

from reservations.queue.reservation_transitions import mark_error, mark_failed, mark_success
from reservations.queue.scheduler.metrics import (
    NO_REQUESTS_MESSAGE,
    RunSummary,
    format_reference_time,
    format_request_message,
)
from tests.helpers import make_request


AT = "06/10/2025, 07:00:04"


def test_reference_time_format():
    assert format_reference_time(datetime(2025, 6, 10, 7, 0, 4)) == AT
    assert format_reference_time(datetime(2025, 6, 10, 19, 5, 0)) == "06/10/2025, 19:05:00"


def test_request_messages_per_status():
    t('tests.unit.test_scheduler_metrics.test_request_messages_per_status')
    booked = mark_success(make_request(date(2025, 7, 10)), "10:50")
    no_times = mark_failed(make_request(date(2025, 6, 12)), "No available times")
    no_date = mark_failed(make_request(date(2025, 6, 13)), "Could not select date")
    errored = mark_error(make_request(date(2025, 6, 14), request_id="r-14"), "boom")

    assert format_request_message(booked, AT) == f"✅ Request for 2025-07-10 booked for 10:50 at {AT}\n"
    assert format_request_message(no_times, AT) == f"❌ Request for 2025-06-12: No available times at {AT}\n"
    assert format_request_message(no_date, AT) == "❌ Request for 2025-06-13: Failed to select date\n"
    assert format_request_message(errored, AT) == "⚠️ Request r-14: Error - boom\n"


def test_pending_request_has_no_message():
    with pytest.raises(ValueError):
        format_request_message(make_request(date(2025, 7, 10)), AT)


def test_run_summary_counts_and_status():
    t('tests.unit.test_scheduler_metrics.test_run_summary_counts_and_status')
    summary = RunSummary()
    assert summary.status == "success"
    assert summary.results_text == NO_REQUESTS_MESSAGE

    failed = mark_failed(make_request(date(2025, 6, 12)), "No available times")
    summary.record(failed, "first\n")
    assert summary.status == "failure"
    assert summary.failure_count == 1

    booked = mark_success(make_request(date(2025, 7, 10)), "10:50")
    summary.record(booked, "second\n")
    assert summary.status == "success"
    assert summary.success_count == 1
    assert summary.results_text == "first\nsecond\n"
    assert summary.processed == [failed, booked]
