"""Run summaries and the per-request result lines."""

from __future__ import annotations
from tracking import t

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from reservations.models import BookingRequest, RequestStatus
from infrastructure.constants import FAILURE_DATE_SELECTION

NO_REQUESTS_MESSAGE = "No booking requests for today."


def format_reference_time(moment: datetime) -> str:
    """Render a timestamp as ``MM/DD/YYYY, HH:MM:SS`` (24-hour)."""

    t('reservations.queue.scheduler.metrics.format_reference_time')
    return moment.strftime("%m/%d/%Y, %H:%M:%S")


def format_request_message(request: BookingRequest, at: str) -> str:
    """One result line for a finished request; ``at`` is the reference-zone time."""

    t('reservations.queue.scheduler.metrics.format_request_message')
    play_date = request.play_date.isoformat()
    if request.status is RequestStatus.SUCCESS:
        return f"✅ Request for {play_date} booked for {request.booked_time} at {at}\n"
    if request.status is RequestStatus.FAILED:
        if request.failure_reason == FAILURE_DATE_SELECTION:
            return f"❌ Request for {play_date}: Failed to select date\n"
        return f"❌ Request for {play_date}: {request.failure_reason} at {at}\n"
    if request.status is RequestStatus.ERROR:
        return f"⚠️ Request {request.id}: Error - {request.failure_reason}\n"
    raise ValueError(f"Request {request.id} has not been processed")


@dataclass
class RunSummary:
    """What a processing run did: handled requests, successes, result lines."""

    processed: List[BookingRequest] = field(default_factory=list)
    success_count: int = 0
    messages: List[str] = field(default_factory=list)

    def record(self, request: BookingRequest, message: str) -> None:
        t('reservations.queue.scheduler.metrics.RunSummary.record')
        self.processed.append(request)
        self.messages.append(message)
        if request.status is RequestStatus.SUCCESS:
            self.success_count += 1

    @property
    def failure_count(self) -> int:
        return len(self.processed) - self.success_count

    @property
    def status(self) -> str:
        if not self.processed or self.success_count > 0:
            return "success"
        return "failure"

    @property
    def results_text(self) -> str:
        if not self.processed:
            return NO_REQUESTS_MESSAGE
        return "".join(self.messages)
