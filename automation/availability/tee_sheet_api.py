"""Secondary availability channel built on the tee sheet's background data fetch.

Navigating to the tee sheet makes the page request its tee times as JSON.
Capturing that response gives an independent read on capacity that does not
depend on how far the DOM has rendered. The verdict is advisory: it can end a
futile near-horizon poll early but never stands in for the DOM ``ready`` check.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence
from urllib.parse import unquote

from tracking import t

from automation.availability.slot_discovery import normalize_clock
from automation.shared.booking_contracts import AvailabilitySignal, ResponseMatcher, TeeSheetSite
from infrastructure.constants import DEFAULT_PARTY_SIZE, DEFAULT_TEE_SHEET_API_FRAGMENT, TIMEOUTS
from reservations.models import TimeRange

logger = logging.getLogger('AvailabilityDetector')

_LIST_KEYS = ("teeTimes", "TeeTimes", "data")
_TIME_KEYS = ("time", "Time", "teeTime", "TeeTime", "startTime", "StartTime")
_CAPACITY_KEYS = (
    "availableSpots",
    "AvailableSpots",
    "openSlots",
    "OpenSlots",
    "remaining",
    "Remaining",
    "available",
    "Available",
)
_ISO_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_US_DATE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")


@dataclass(frozen=True)
class TeeSheetEntry:
    """One tee time from the structured payload: ``HH:MM`` and open spots."""

    time: str
    capacity: int


@dataclass(frozen=True)
class AvailabilityCapture:
    """Outcome of one navigation joined with its background capture."""

    view: Any
    signal: AvailabilitySignal


def _dates_in_url(url: str) -> List[date]:
    decoded = unquote(url)
    found: List[date] = []
    for year, month, day in _ISO_DATE.findall(decoded):
        try:
            found.append(date(int(year), int(month), int(day)))
        except ValueError:
            continue
    for month, day, year in _US_DATE.findall(decoded):
        try:
            found.append(date(int(year), int(month), int(day)))
        except ValueError:
            continue
    return found


def tee_sheet_response_matcher(
    play_date: date,
    url_fragment: str = DEFAULT_TEE_SHEET_API_FRAGMENT,
) -> ResponseMatcher:
    """Match tee sheet data requests for ``play_date``.

    URLs that carry no recognizable date still match; URLs that name a
    different date do not.
    """

    t('automation.availability.tee_sheet_api.tee_sheet_response_matcher')
    fragment = url_fragment.lower()

    def matcher(url: str) -> bool:
        if fragment not in (url or "").lower():
            return False
        dates = _dates_in_url(url)
        return not dates or play_date in dates

    return matcher


def _first_present(entry: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if key in entry and entry[key] is not None:
            return entry[key]
    return None


def parse_tee_sheet_payload(payload: Any) -> Optional[List[TeeSheetEntry]]:
    """Extract ``TeeSheetEntry`` items; ``None`` when the payload shape is unknown."""

    t('automation.availability.tee_sheet_api.parse_tee_sheet_payload')
    items: Any = payload
    if isinstance(payload, Mapping):
        items = _first_present(payload, _LIST_KEYS)
    if not isinstance(items, list):
        return None

    entries: List[TeeSheetEntry] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        raw_time = _first_present(item, _TIME_KEYS)
        raw_capacity = _first_present(item, _CAPACITY_KEYS)
        clock = normalize_clock(str(raw_time)) if raw_time is not None else None
        if clock is None or raw_capacity is None:
            continue
        try:
            capacity = int(raw_capacity)
        except (TypeError, ValueError):
            continue
        entries.append(TeeSheetEntry(time=clock, capacity=max(capacity, 0)))
    return entries


def classify_availability(
    entries: Optional[Sequence[TeeSheetEntry]],
    time_range: TimeRange,
    party_size: int = DEFAULT_PARTY_SIZE,
) -> AvailabilitySignal:
    """Reduce payload entries to a single :class:`AvailabilitySignal`.

    Entries with some but not all spots open count as booked: a partial
    group cannot take them.
    """

    t('automation.availability.tee_sheet_api.classify_availability')
    if entries is None:
        return AvailabilitySignal.TIMEOUT
    in_window = [entry for entry in entries if time_range.contains(entry.time)]
    if not in_window:
        return AvailabilitySignal.NOT_RELEASED
    if any(entry.capacity >= party_size for entry in in_window):
        return AvailabilitySignal.AVAILABLE
    return AvailabilitySignal.ALL_BOOKED


async def capture_availability_signal(
    site: TeeSheetSite,
    session: Any,
    play_date: date,
    time_range: TimeRange,
    navigate: Callable[[], Awaitable[Any]],
    *,
    url_fragment: str = DEFAULT_TEE_SHEET_API_FRAGMENT,
    party_size: int = DEFAULT_PARTY_SIZE,
    timeout_ms: int = TIMEOUTS['availability_capture'],
) -> AvailabilityCapture:
    """Run ``navigate`` while listening for the tee sheet payload.

    The listener starts before navigation so the fetch the navigation
    triggers is not missed. It is joined with a bounded wait afterwards.
    """

    t('automation.availability.tee_sheet_api.capture_availability_signal')
    matcher = tee_sheet_response_matcher(play_date, url_fragment)
    capture = asyncio.ensure_future(
        site.intercept_next_matching_response(session, matcher, timeout_ms)
    )
    try:
        view = await navigate()
    except BaseException:
        capture.cancel()
        raise

    try:
        payload = await asyncio.wait_for(capture, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.debug("No tee sheet payload for %s within %sms", play_date, timeout_ms)
        payload = None

    if payload is None:
        signal = AvailabilitySignal.TIMEOUT
    else:
        entries = parse_tee_sheet_payload(payload)
        if entries is None:
            logger.warning("Unrecognized tee sheet payload shape: %s", type(payload).__name__)
        signal = classify_availability(entries, time_range, party_size)
    logger.info("Secondary channel for %s %s: %s", play_date, time_range, signal.value)
    return AvailabilityCapture(view=view, signal=signal)
