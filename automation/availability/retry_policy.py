"""Horizon-dependent polling for bookable tee times.

A far-horizon request (the release day) and a near-horizon request (the next
few days) are polled by the same loop. What differs is captured in a
:class:`HorizonPolicy`: how a refresh is done, how long to wait in each page
state, and when to give up.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from tracking import t

from automation.availability.page_state import classify_page_state
from automation.availability.slot_discovery import discover_slots
from automation.availability.tee_sheet_api import AvailabilityCapture, capture_availability_signal
from automation.shared.booking_contracts import AvailabilitySignal, PageState, Slot, TeeSheetSite
from automation.shared.errors import SelectionFailure
from infrastructure.constants import (
    ALL_BOOKED_STOP_AFTER_ATTEMPTS,
    DEFAULT_PARTY_SIZE,
    DEFAULT_TEE_SHEET_API_FRAGMENT,
    EMPTY_RESULT_BACKOFF_BASE_SECONDS,
    EMPTY_RESULT_BACKOFF_JITTER_SECONDS,
    EMPTY_RESULT_BACKOFF_STEPS,
    MAX_POLL_ATTEMPTS,
    SETTLE_DELAY_SECONDS,
    TIMEOUTS,
    TOO_EARLY_DELAY_SECONDS,
)
from reservations.models import BookingRequest

logger = logging.getLogger('RetryPolicy')

Sleeper = Callable[[float], Awaitable[None]]


class StopReason(Enum):
    SLOTS_FOUND = "slots-found"
    EMPTY_RESULT = "empty-result"
    ALL_BOOKED = "all-booked"
    ATTEMPTS_EXHAUSTED = "attempts-exhausted"


@dataclass(frozen=True)
class HorizonPolicy:
    """Cadence and stop conditions for one polling mode."""

    name: str
    full_refresh: bool
    retry_on_empty: bool
    max_attempts: int = MAX_POLL_ATTEMPTS
    empty_result_grace: int = 0
    all_booked_stop_after: Optional[int] = None
    too_early_delay: float = TOO_EARLY_DELAY_SECONDS
    settle_delay: float = SETTLE_DELAY_SECONDS
    backoff_steps: Tuple[float, ...] = EMPTY_RESULT_BACKOFF_STEPS
    backoff_base: float = EMPTY_RESULT_BACKOFF_BASE_SECONDS
    backoff_jitter: float = EMPTY_RESULT_BACKOFF_JITTER_SECONDS


FAR_HORIZON_POLICY = HorizonPolicy(
    name="far-horizon",
    full_refresh=False,
    retry_on_empty=False,
)

NEAR_HORIZON_POLICY = HorizonPolicy(
    name="near-horizon",
    full_refresh=True,
    retry_on_empty=True,
    all_booked_stop_after=ALL_BOOKED_STOP_AFTER_ATTEMPTS,
)


@dataclass
class PollState:
    """Mutable bookkeeping for one :func:`poll_for_slots` run."""

    view: Any
    needs_refresh: bool = False
    attempt: int = 0
    empty_results: int = 0
    last_state: Optional[PageState] = None
    last_signal: Optional[AvailabilitySignal] = None


@dataclass(frozen=True)
class DiscoveryResult:
    slots: List[Slot]
    view: Any
    attempts: int
    last_state: Optional[PageState]
    last_signal: Optional[AvailabilitySignal]
    stop_reason: StopReason

    @property
    def found(self) -> bool:
        return bool(self.slots)


def escalating_backoff(
    index: int,
    steps: Sequence[float] = EMPTY_RESULT_BACKOFF_STEPS,
    base: float = EMPTY_RESULT_BACKOFF_BASE_SECONDS,
    jitter: float = EMPTY_RESULT_BACKOFF_JITTER_SECONDS,
    rng: Optional[random.Random] = None,
) -> float:
    """Delay before the ``index``-th (0-based) retry after an empty sheet."""

    t('automation.availability.retry_policy.escalating_backoff')
    if index < len(steps):
        return float(steps[index])
    return base + (rng or random).uniform(0, jitter)


@dataclass
class SlotSampler:
    """The capability set the poll loop needs, bound to one request."""

    site: TeeSheetSite
    session: Any
    request: BookingRequest
    party_size: int = DEFAULT_PARTY_SIZE
    url_fragment: str = DEFAULT_TEE_SHEET_API_FRAGMENT
    capture_timeout_ms: int = field(default=TIMEOUTS['availability_capture'])

    async def observe(self, view: Any) -> PageState:
        t('automation.availability.retry_policy.SlotSampler.observe')
        snapshot = await self.site.observe_view(view)
        return classify_page_state(snapshot, self.request.play_date)

    async def discover(self, view: Any) -> List[Slot]:
        t('automation.availability.retry_policy.SlotSampler.discover')
        rows = await self.site.list_slot_rows(view)
        return discover_slots(rows, self.request.time_range, self.party_size)

    async def reload(self, view: Any) -> Any:
        t('automation.availability.retry_policy.SlotSampler.reload')
        return await self.site.reload_view(view)

    async def refresh(self) -> AvailabilityCapture:
        """Navigate to the tee sheet again while capturing the data fetch."""

        t('automation.availability.retry_policy.SlotSampler.refresh')
        play_date = self.request.play_date

        async def navigate() -> Any:
            view = await self.site.navigate_to_resource_view(self.session, play_date)
            if not await self.site.confirm_date_selection(view, play_date):
                logger.error("Date %s not confirmed after refresh", play_date)
                await self.site.capture_diagnostic(
                    self.session, f"date-selection-failure-{play_date.isoformat()}"
                )
                raise SelectionFailure()
            return view

        return await capture_availability_signal(
            self.site,
            self.session,
            play_date,
            self.request.time_range,
            navigate,
            url_fragment=self.url_fragment,
            party_size=self.party_size,
            timeout_ms=self.capture_timeout_ms,
        )


def _finish(state: PollState, reason: StopReason, slots: Optional[List[Slot]] = None) -> DiscoveryResult:
    return DiscoveryResult(
        slots=list(slots or []),
        view=state.view,
        attempts=state.attempt,
        last_state=state.last_state,
        last_signal=state.last_signal,
        stop_reason=reason,
    )


async def poll_for_slots(
    policy: HorizonPolicy,
    sampler: SlotSampler,
    view: Any,
    *,
    sleep: Sleeper = asyncio.sleep,
    rng: Optional[random.Random] = None,
) -> DiscoveryResult:
    """Poll the tee sheet under ``policy`` until slots show up or it gives up.

    Full-refresh policies navigate (and capture the secondary channel) before
    the first observation and after every empty or too-early observation;
    frame-reload policies start from ``view`` as-is.
    """

    t('automation.availability.retry_policy.poll_for_slots')
    state = PollState(view=view, needs_refresh=policy.full_refresh)
    label = f"{sampler.request.play_date} {sampler.request.time_range}"

    for attempt in range(1, policy.max_attempts + 1):
        state.attempt = attempt

        if state.needs_refresh:
            if policy.full_refresh:
                capture = await sampler.refresh()
                state.view = capture.view
                state.last_signal = capture.signal
            else:
                state.view = await sampler.reload(state.view)
            state.needs_refresh = False

        if (
            policy.all_booked_stop_after is not None
            and state.last_signal is AvailabilitySignal.ALL_BOOKED
            and attempt > policy.all_booked_stop_after
        ):
            logger.info(
                "[%s] %s fully booked per tee sheet data after %s attempts; stopping",
                policy.name,
                label,
                attempt,
            )
            return _finish(state, StopReason.ALL_BOOKED)

        page_state = await sampler.observe(state.view)
        state.last_state = page_state

        if page_state is PageState.READY:
            slots = await sampler.discover(state.view)
            if slots:
                logger.info(
                    "[%s] %s: %s candidate slots on attempt %s",
                    policy.name,
                    label,
                    len(slots),
                    attempt,
                )
                return _finish(state, StopReason.SLOTS_FOUND, slots)

            state.empty_results += 1
            if not policy.retry_on_empty:
                if state.empty_results > policy.empty_result_grace:
                    logger.info("[%s] %s: no open slots in range", policy.name, label)
                    return _finish(state, StopReason.EMPTY_RESULT)
                await sleep(policy.settle_delay)
                state.needs_refresh = True
                continue

            delay = escalating_backoff(
                state.empty_results - 1,
                policy.backoff_steps,
                policy.backoff_base,
                policy.backoff_jitter,
                rng,
            )
            logger.info(
                "[%s] %s: no open slots (attempt %s/%s), retrying in %.1fs",
                policy.name,
                label,
                attempt,
                policy.max_attempts,
                delay,
            )
            await sleep(delay)
            state.needs_refresh = True
            continue

        if page_state is PageState.TOO_EARLY:
            logger.info(
                "[%s] %s not released yet (attempt %s/%s)",
                policy.name,
                label,
                attempt,
                policy.max_attempts,
            )
            await sleep(policy.too_early_delay)
            state.needs_refresh = True
            continue

        logger.debug(
            "[%s] %s page state %s (attempt %s/%s); waiting",
            policy.name,
            label,
            page_state.value,
            attempt,
            policy.max_attempts,
        )
        await sleep(policy.settle_delay)

    logger.warning("[%s] %s: unable to find slots after %s attempts", policy.name, label, policy.max_attempts)
    return _finish(state, StopReason.ATTEMPTS_EXHAUSTED)
