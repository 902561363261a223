"""Turn scraped tee sheet rows into bookable candidate slots."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from tracking import t

from automation.shared.booking_contracts import Slot, SlotRow
from infrastructure.constants import DEFAULT_PARTY_SIZE
from reservations.models import TimeRange

logger = logging.getLogger('AvailabilityDetector')

_TWELVE_HOUR = re.compile(r"(\d{1,2}):(\d{2})\s*([AP]M)", re.IGNORECASE)
_TWENTY_FOUR_HOUR = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})(?!\d)")


def normalize_clock(value: str) -> Optional[str]:
    """Return ``HH:MM`` for ``"8:10 AM"``, ``"12:05 pm"`` or ``"14:30"``; ``None`` otherwise."""

    t('automation.availability.slot_discovery.normalize_clock')
    if not value:
        return None
    match = _TWELVE_HOUR.search(value)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2))
        is_pm = match.group(3).upper() == "PM"
        if hour < 1 or hour > 12:
            return None
        if is_pm and hour != 12:
            hour += 12
        if not is_pm and hour == 12:
            hour = 0
    else:
        match = _TWENTY_FOUR_HOUR.search(value)
        if not match:
            return None
        hour = int(match.group(1))
        minute = int(match.group(2))
        if hour > 23:
            return None
    if minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def parse_capacity(value: str) -> Optional[int]:
    t('automation.availability.slot_discovery.parse_capacity')
    match = re.search(r"\d+", value or "")
    return int(match.group(0)) if match else None


def sort_latest_first(slots: Iterable[Slot]) -> List[Slot]:
    return sorted(slots, key=lambda slot: slot.time, reverse=True)


def discover_slots(
    rows: Iterable[SlotRow],
    time_range: TimeRange,
    party_size: int = DEFAULT_PARTY_SIZE,
) -> List[Slot]:
    """Keep rows inside ``time_range`` that can seat the whole party.

    Rows with unreadable times or capacities are skipped. The result is
    ordered latest time first.
    """

    t('automation.availability.slot_discovery.discover_slots')
    slots: List[Slot] = []
    for row in rows:
        capacity = parse_capacity(row.capacity_text)
        if capacity is None or capacity < party_size:
            continue
        clock = normalize_clock(row.time_text)
        if clock is None:
            logger.debug("Skipping row with unreadable time %r", row.time_text)
            continue
        if not time_range.contains(clock):
            continue
        slots.append(Slot(time=clock, handle=row.handle))
    return sort_latest_first(slots)
