"""Reference-timezone clock for the queue processor.

"Today" and the release instant are always computed in the reference zone
(Eastern by default) so a run behaves the same on any host.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Awaitable, Callable, Optional, Tuple, Union
from zoneinfo import ZoneInfo

import pytz

from tracking import t

from infrastructure.constants import DEFAULT_REFERENCE_TIMEZONE

Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[None]]

logger = logging.getLogger('TimeGate')


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def _resolve_zone(timezone_name: str) -> tzinfo:
    t('reservations.queue.scheduler.time_gate._resolve_zone')
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("pytz does not know %s; using the system tz database", timezone_name)
        return ZoneInfo(timezone_name)


def _as_utc(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return utc_now()
    if moment.tzinfo is None:
        return pytz.utc.localize(moment)
    return moment.astimezone(pytz.utc)


def today(
    override: Optional[Union[str, date]] = None,
    timezone_name: str = DEFAULT_REFERENCE_TIMEZONE,
    now: Optional[datetime] = None,
) -> date:
    """Return the override when given, else the calendar date in ``timezone_name``."""

    t('reservations.queue.scheduler.time_gate.today')
    if override:
        if isinstance(override, date):
            return override
        return date.fromisoformat(str(override).strip())
    zone = _resolve_zone(timezone_name)
    return _as_utc(now).astimezone(zone).date()


def add_days(day: date, days: int) -> date:
    t('reservations.queue.scheduler.time_gate.add_days')
    return day + timedelta(days=days)


def seconds_until(
    hour: int,
    minute: int,
    timezone_name: str = DEFAULT_REFERENCE_TIMEZONE,
    now: Optional[datetime] = None,
) -> float:
    """Seconds from ``now`` until ``hour:minute`` on the zone's current date.

    The target is anchored with the zone's offset at ``now``. Returns ``0.0``
    when the target is already reached; there is no rollover to tomorrow.
    """

    t('reservations.queue.scheduler.time_gate.seconds_until')
    if not (0 <= hour <= 23) or not (0 <= minute <= 59):
        raise ValueError(f"Invalid target time {hour:02d}:{minute:02d}")

    current = _as_utc(now)
    local_now = current.astimezone(_resolve_zone(timezone_name))
    offset = local_now.utcoffset() or timedelta(0)
    target_local = datetime.combine(local_now.date(), time(hour, minute))
    target_utc = pytz.utc.localize(target_local - offset)
    remaining = (target_utc - current).total_seconds()
    return remaining if remaining > 0 else 0.0


def next_top_of_hour(
    timezone_name: str = DEFAULT_REFERENCE_TIMEZONE,
    now: Optional[datetime] = None,
) -> Tuple[int, int]:
    """Return the next full hour in ``timezone_name`` as ``(hour, 0)``."""

    t('reservations.queue.scheduler.time_gate.next_top_of_hour')
    local_now = _as_utc(now).astimezone(_resolve_zone(timezone_name))
    return (local_now.hour + 1) % 24, 0


async def wait_until(
    hour: int,
    minute: int,
    timezone_name: str = DEFAULT_REFERENCE_TIMEZONE,
    *,
    now: Optional[datetime] = None,
    sleep: Sleeper = asyncio.sleep,
) -> float:
    """Suspend once until ``hour:minute``; returns the seconds waited."""

    t('reservations.queue.scheduler.time_gate.wait_until')
    delay = seconds_until(hour, minute, timezone_name, now=now)
    if delay <= 0:
        logger.info("Target %02d:%02d %s already reached; continuing", hour, minute, timezone_name)
        return 0.0
    logger.info(
        "Waiting %.1f seconds until %02d:%02d %s", delay, hour, minute, timezone_name
    )
    await sleep(delay)
    return delay


class TimeGate:
    """Bundle of the clock helpers bound to one timezone, clock and sleeper."""

    def __init__(
        self,
        timezone_name: str = DEFAULT_REFERENCE_TIMEZONE,
        *,
        clock: Clock = utc_now,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        t('reservations.queue.scheduler.time_gate.TimeGate.__init__')
        self.timezone_name = timezone_name
        self._clock = clock
        self._sleep = sleep

    def now(self) -> datetime:
        return _as_utc(self._clock())

    def today(self, override: Optional[Union[str, date]] = None) -> date:
        t('reservations.queue.scheduler.time_gate.TimeGate.today')
        return today(override, self.timezone_name, now=self.now())

    def local_now(self) -> datetime:
        return self.now().astimezone(_resolve_zone(self.timezone_name))

    def seconds_until(self, hour: int, minute: int) -> float:
        return seconds_until(hour, minute, self.timezone_name, now=self.now())

    def next_top_of_hour(self) -> Tuple[int, int]:
        return next_top_of_hour(self.timezone_name, now=self.now())

    async def wait_until(self, hour: int, minute: int) -> float:
        t('reservations.queue.scheduler.time_gate.TimeGate.wait_until')
        return await wait_until(
            hour, minute, self.timezone_name, now=self.now(), sleep=self._sleep
        )
