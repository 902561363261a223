"""Run orchestration for the booking queue."""

from .metrics import NO_REQUESTS_MESSAGE, RunSummary, format_request_message
from .outcome import record_booked, record_error, record_failure
from .pipeline import BookingOrchestrator, OrchestratorOptions, process_queue
from .time_gate import TimeGate, add_days, next_top_of_hour, seconds_until, today, wait_until

__all__ = [
    "NO_REQUESTS_MESSAGE",
    "RunSummary",
    "format_request_message",
    "record_booked",
    "record_error",
    "record_failure",
    "BookingOrchestrator",
    "OrchestratorOptions",
    "process_queue",
    "TimeGate",
    "add_days",
    "next_top_of_hour",
    "seconds_until",
    "today",
    "wait_until",
]
