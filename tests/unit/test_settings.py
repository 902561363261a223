from datetime import date
from pathlib import Path

import pytest

from infrastructure import constants
from infrastructure.settings import get_settings, load_settings, parse_clock_time


def test_defaults_with_empty_environment():
    settings = load_settings({})

    assert settings.username is None
    assert not settings.has_credentials
    assert settings.booking_url == constants.BOOKING_URL
    assert settings.headless is True
    assert settings.take_screenshots is True
    assert settings.date_override is None
    assert settings.is_scheduled_run is False
    assert settings.release_time is None
    assert settings.reference_timezone == "America/New_York"
    assert settings.far_horizon_days == 30
    assert settings.near_horizon_days == 3
    assert settings.party_size == 4
    assert settings.queue_file == Path("booking-queue.json")
    assert settings.log_directory == Path("logs")


def test_environment_values():
    settings = load_settings(
        {
            "GOLF_USERNAME": "member",
            "GOLF_PASSWORD": "secret",
            "HEADLESS": "false",
            "TAKE_SCREENSHOTS": "FALSE",
            "DATE_OVERRIDE": "2025-06-11",
            "IS_SCHEDULED_RUN": "true",
            "RELEASE_TIME": "07:00",
            "FAR_HORIZON_DAYS": "21",
            "PARTY_SIZE": "2",
            "QUEUE_FILE": "data/queue.json",
        }
    )

    assert settings.has_credentials
    assert settings.headless is False
    assert settings.take_screenshots is False
    assert settings.date_override == date(2025, 6, 11)
    assert settings.is_scheduled_run is True
    assert settings.release_time == (7, 0)
    assert settings.far_horizon_days == 21
    assert settings.party_size == 2
    assert settings.queue_file == Path("data/queue.json")


def test_headless_is_opt_out():
    assert load_settings({"HEADLESS": "0"}).headless is True
    assert load_settings({"IS_SCHEDULED_RUN": "no"}).is_scheduled_run is False


@pytest.mark.parametrize(
    "env",
    [
        {"DATE_OVERRIDE": "06/11/2025"},
        {"RELEASE_TIME": "7am"},
        {"FAR_HORIZON_DAYS": "thirty"},
        {"NEAR_HORIZON_DAYS": "-1"},
        {"PARTY_SIZE": "0"},
    ],
)
def test_invalid_values_raise(env):
    with pytest.raises(ValueError):
        load_settings(env)


def test_parse_clock_time():
    assert parse_clock_time(" 19:05 ") == (19, 5)


@pytest.fixture
def fresh_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_get_settings_reads_environment_once(monkeypatch, fresh_settings_cache):
    monkeypatch.setenv("PARTY_SIZE", "2")

    settings = get_settings()
    monkeypatch.setenv("PARTY_SIZE", "3")

    assert get_settings() is settings
    assert settings.party_size == 2
