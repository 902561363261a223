"""Centralized application settings.

Every runtime knob of the queue processor is loaded here once and handed to
the orchestration code explicitly; nothing below ``process_queue`` reads the
environment on its own.
"""

from __future__ import annotations
from tracking import t

import os
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import load_dotenv

from . import constants


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    """Normalize environment strings such as "true"/"1" into booleans."""
    t('infrastructure.settings._to_bool')

    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(env: Mapping[str, str], key: str, default: int) -> int:
    t('infrastructure.settings._to_int')
    raw = env.get(key)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = int(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{key} must not be negative, got {value}")
    return value


def parse_clock_time(value: str) -> Tuple[int, int]:
    """Parse ``HH:MM`` into an ``(hour, minute)`` tuple."""
    t('infrastructure.settings.parse_clock_time')

    try:
        parsed = datetime.strptime(value.strip(), "%H:%M")
    except ValueError as exc:
        raise ValueError(f"Invalid time {value!r} (expected HH:MM)") from exc
    return parsed.hour, parsed.minute


@dataclass(frozen=True)
class AppSettings:
    """Immutable snapshot of the queue processor configuration."""

    username: Optional[str]
    password: Optional[str]
    booking_url: str
    headless: bool
    take_screenshots: bool
    date_override: Optional[date]
    is_scheduled_run: bool
    release_time: Optional[Tuple[int, int]]
    reference_timezone: str
    browser_timezone: str
    browser_locale: str
    far_horizon_days: int
    near_horizon_days: int
    party_size: int
    queue_file: Path
    log_directory: Path
    tee_sheet_api_fragment: str
    production_mode: bool

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


def load_settings(env: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Load configuration from the environment and fall back to defaults."""
    t('infrastructure.settings.load_settings')

    if env is None:
        load_dotenv(override=False)
        env = os.environ

    raw_override = (env.get("DATE_OVERRIDE") or "").strip()
    date_override = None
    if raw_override:
        try:
            date_override = date.fromisoformat(raw_override)
        except ValueError as exc:
            raise ValueError(f"DATE_OVERRIDE must be YYYY-MM-DD, got {raw_override!r}") from exc

    raw_release = (env.get("RELEASE_TIME") or "").strip()
    release_time = parse_clock_time(raw_release) if raw_release else None

    party_size = _to_int(env, "PARTY_SIZE", constants.DEFAULT_PARTY_SIZE)
    if party_size == 0:
        raise ValueError("PARTY_SIZE must be at least 1")

    return AppSettings(
        username=env.get("GOLF_USERNAME") or None,
        password=env.get("GOLF_PASSWORD") or None,
        booking_url=env.get("BOOKING_URL", constants.BOOKING_URL),
        # Both flags are opt-out: anything but an explicit "false" keeps them on.
        headless=(env.get("HEADLESS", "true").strip().lower() != "false"),
        take_screenshots=(env.get("TAKE_SCREENSHOTS", "true").strip().lower() != "false"),
        date_override=date_override,
        is_scheduled_run=_to_bool(env.get("IS_SCHEDULED_RUN"), default=False),
        release_time=release_time,
        reference_timezone=env.get("REFERENCE_TIMEZONE", constants.DEFAULT_REFERENCE_TIMEZONE),
        browser_timezone=env.get("BROWSER_TIMEZONE", constants.DEFAULT_BROWSER_TIMEZONE),
        browser_locale=env.get("BROWSER_LOCALE", constants.DEFAULT_BROWSER_LOCALE),
        far_horizon_days=_to_int(env, "FAR_HORIZON_DAYS", constants.DEFAULT_FAR_HORIZON_DAYS),
        near_horizon_days=_to_int(env, "NEAR_HORIZON_DAYS", constants.DEFAULT_NEAR_HORIZON_DAYS),
        party_size=party_size,
        queue_file=Path(env.get("QUEUE_FILE", "booking-queue.json")),
        log_directory=Path(env.get("LOG_DIRECTORY", "logs")),
        tee_sheet_api_fragment=env.get(
            "TEE_SHEET_API_FRAGMENT", constants.DEFAULT_TEE_SHEET_API_FRAGMENT
        ),
        production_mode=_to_bool(env.get("PRODUCTION_MODE"), default=False),
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached :class:`AppSettings` instance."""
    t('infrastructure.settings.get_settings')

    return load_settings()
