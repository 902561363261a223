"""Per-request and per-run orchestration of the booking queue."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from tracking import t

from automation.availability.retry_policy import (
    FAR_HORIZON_POLICY,
    NEAR_HORIZON_POLICY,
    HorizonPolicy,
    SlotSampler,
    poll_for_slots,
)
from automation.executors.booking import acquire_first_available
from automation.executors.core import DEFAULT_ACQUISITION_CONFIG, AcquisitionConfig
from automation.shared.booking_contracts import TeeSheetSite
from automation.shared.errors import (
    AcquisitionConflict,
    AcquisitionError,
    NoAvailability,
    SelectionFailure,
)
from infrastructure.constants import (
    DEFAULT_FAR_HORIZON_DAYS,
    DEFAULT_NEAR_HORIZON_DAYS,
    DEFAULT_PARTY_SIZE,
    DEFAULT_TEE_SHEET_API_FRAGMENT,
    TIMEOUTS,
)
from reservations.models import BookingRequest
from reservations.queue.eligibility import is_near_horizon, select_eligible
from reservations.queue.reservation_queue import BookingQueue
from reservations.queue.scheduler.metrics import (
    RunSummary,
    format_reference_time,
    format_request_message,
)
from reservations.queue.scheduler.outcome import record_booked, record_error, record_failure
from reservations.queue.scheduler.time_gate import TimeGate

Sleeper = Callable[[float], Awaitable[None]]

EXPECTED_FAILURES = (SelectionFailure, NoAvailability, AcquisitionConflict, AcquisitionError)


@dataclass(frozen=True)
class OrchestratorOptions:
    """Knobs the orchestrator needs from the application settings."""

    far_horizon_days: int = DEFAULT_FAR_HORIZON_DAYS
    near_horizon_days: int = DEFAULT_NEAR_HORIZON_DAYS
    party_size: int = DEFAULT_PARTY_SIZE
    tee_sheet_api_fragment: str = DEFAULT_TEE_SHEET_API_FRAGMENT
    capture_timeout_ms: int = TIMEOUTS['availability_capture']
    is_scheduled_run: bool = False
    release_time: Optional[Tuple[int, int]] = None
    date_override: Optional[date] = None

    @classmethod
    def from_settings(cls, settings: Any) -> "OrchestratorOptions":
        t('reservations.queue.scheduler.pipeline.OrchestratorOptions.from_settings')
        return cls(
            far_horizon_days=settings.far_horizon_days,
            near_horizon_days=settings.near_horizon_days,
            party_size=settings.party_size,
            tee_sheet_api_fragment=settings.tee_sheet_api_fragment,
            is_scheduled_run=settings.is_scheduled_run,
            release_time=settings.release_time,
            date_override=settings.date_override,
        )


class BookingOrchestrator:
    """Run eligible requests one after another over a single tee sheet session."""

    def __init__(
        self,
        site: TeeSheetSite,
        *,
        options: OrchestratorOptions = OrchestratorOptions(),
        time_gate: Optional[TimeGate] = None,
        acquisition_config: AcquisitionConfig = DEFAULT_ACQUISITION_CONFIG,
        far_policy: HorizonPolicy = FAR_HORIZON_POLICY,
        near_policy: HorizonPolicy = NEAR_HORIZON_POLICY,
        sleep: Sleeper = asyncio.sleep,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('reservations.queue.scheduler.pipeline.BookingOrchestrator.__init__')
        self.site = site
        self.options = options
        self.time_gate = time_gate or TimeGate()
        self.acquisition_config = acquisition_config
        self.far_policy = far_policy
        self.near_policy = near_policy
        self.sleep = sleep
        self.rng = rng
        self.logger = logger or logging.getLogger('BookingOrchestrator')

    def reference_time(self) -> str:
        return format_reference_time(self.time_gate.local_now())

    def policy_for(self, request: BookingRequest, today: date) -> HorizonPolicy:
        t('reservations.queue.scheduler.pipeline.BookingOrchestrator.policy_for')
        if is_near_horizon(request.play_date, today, self.options.near_horizon_days):
            return self.near_policy
        return self.far_policy

    async def _diagnostic(self, session: Any, label: str, request: BookingRequest) -> None:
        await self.site.capture_diagnostic(session, f"{label}-{request.play_date.isoformat()}")

    async def process_request(
        self,
        session: Any,
        request: BookingRequest,
        *,
        is_first: bool,
        today: date,
    ) -> str:
        """Drive one request to a terminal status and return its result line.

        Expected failures mark the request ``failed``; anything unexpected
        marks it ``error``. Nothing raised while processing escapes.
        """

        t('reservations.queue.scheduler.pipeline.BookingOrchestrator.process_request')
        self.logger.info(
            "Processing request %s for %s (%s)",
            request.id,
            request.play_date,
            request.time_range,
        )
        try:
            policy = self.policy_for(request, today)
            if policy.full_refresh:
                # The poll navigates and confirms the date before its first look.
                view = None
            else:
                if is_first:
                    view = await self.site.current_view(session)
                else:
                    view = await self.site.navigate_to_resource_view(session, request.play_date)

                if not await self.site.confirm_date_selection(view, request.play_date):
                    await self._diagnostic(session, "date-selection-failure", request)
                    raise SelectionFailure()

            sampler = SlotSampler(
                site=self.site,
                session=session,
                request=request,
                party_size=self.options.party_size,
                url_fragment=self.options.tee_sheet_api_fragment,
                capture_timeout_ms=self.options.capture_timeout_ms,
            )
            discovery = await poll_for_slots(policy, sampler, view, sleep=self.sleep, rng=self.rng)
            if not discovery.slots:
                await self._diagnostic(session, "failure", request)
                raise NoAvailability()

            result = await acquire_first_available(
                self.site,
                discovery.view,
                discovery.slots,
                config=self.acquisition_config,
            )
            if not result.success:
                await self._diagnostic(session, "booking-failure", request)
                result.raise_for_failure()

            await self._diagnostic(session, "success", request)
            record_booked(request, result)
        except EXPECTED_FAILURES as exc:
            record_failure(request, exc)
        except Exception as exc:
            self.logger.exception("Unexpected error while processing request %s", request.id)
            record_error(request, exc)

        return format_request_message(request, self.reference_time())

    async def wait_for_release(self) -> None:
        """Sleep until the configured release time, or the next full hour."""

        t('reservations.queue.scheduler.pipeline.BookingOrchestrator.wait_for_release')
        hour, minute = self.options.release_time or self.time_gate.next_top_of_hour()
        self.logger.info("Sleeping until %02d:%02d %s", hour, minute, self.time_gate.timezone_name)
        await self.time_gate.wait_until(hour, minute)

    async def run(self, requests: Sequence[BookingRequest], today: date) -> RunSummary:
        """Authenticate once, optionally wait for release, then process ``requests`` in order."""

        t('reservations.queue.scheduler.pipeline.BookingOrchestrator.run')
        summary = RunSummary()
        if not requests:
            return summary

        try:
            session = await self.site.authenticate(requests[0].play_date)
            self.logger.info("Logged in at %s", self.reference_time())
            if self.options.is_scheduled_run:
                await self.wait_for_release()

            for index, request in enumerate(requests):
                message = await self.process_request(
                    session, request, is_first=index == 0, today=today
                )
                summary.record(request, message)
        finally:
            await self.site.close()

        return summary


async def process_queue(
    queue: BookingQueue,
    orchestrator: BookingOrchestrator,
    *,
    logger: Optional[logging.Logger] = None,
) -> RunSummary:
    """Load the queue, process today's eligible requests, and write the queue back.

    The queue file is written once, after every eligible request reached a
    terminal status. A fatal error (unreadable queue, failed login) leaves it
    untouched.
    """

    t('reservations.queue.scheduler.pipeline.process_queue')
    log = logger or logging.getLogger('BookingQueue')
    queue.load()

    options = orchestrator.options
    today = orchestrator.time_gate.today(options.date_override)
    if options.date_override:
        log.info("Using date override: %s", today)

    eligible: List[BookingRequest] = select_eligible(
        queue.pending,
        today,
        far_horizon_days=options.far_horizon_days,
        near_horizon_days=options.near_horizon_days,
    )
    if not eligible:
        log.info("No booking requests for today")
        return RunSummary()

    log.info("Found %s requests for today", len(eligible))
    log.info("Processing order (furthest dates first):")
    for request in eligible:
        log.info("  - %s (%s)", request.play_date, request.time_range)

    summary = await orchestrator.run(eligible, today)

    queue.complete_run(summary.processed)
    queue.save()
    log.info("Processed %s requests, %s booked", len(summary.processed), summary.success_count)
    return summary
