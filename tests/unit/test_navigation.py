import asyncio
from datetime import date

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeout

from automation.executors.navigation import (
    TeeSheetNavigator,
    date_label,
    first_visible,
    session_date_script,
)
from automation.shared.errors import AuthenticationError
from tracking import t


class FakeFrame:
    """Frame whose selectors appear after scripted delays (``None`` never appears)."""

    def __init__(self, delays):
        self.delays = delays
        self.cancelled = []

    async def wait_for_selector(self, selector, state="visible", timeout=0):
        delay = self.delays.get(selector)
        try:
            if delay is None:
                await asyncio.sleep(timeout / 1000)
                raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            self.cancelled.append(selector)
            raise


def test_date_label_and_session_script():
    t('tests.unit.test_navigation.test_date_label_and_session_script')
    assert date_label(date(2025, 6, 5)) == "Jun 5"
    assert date_label(date(2025, 12, 25)) == "Dec 25"
    assert session_date_script(date(2025, 6, 5)) == (
        'sessionStorage.setItem("CHO.TT.selectedDate", "\\"2025-06-05T04:00:00.000Z\\"");'
    )


@pytest.mark.asyncio
async def test_first_visible_returns_winner_and_cancels_losers():
    frame = FakeFrame({"#form": 0.01, "#conflict": 0.5})

    winner = await first_visible(frame, {"conflict": "#conflict", "form": "#form"}, 1000)

    assert winner == "form"
    assert frame.cancelled == ["#conflict"]


@pytest.mark.asyncio
async def test_first_visible_returns_none_when_nothing_appears():
    frame = FakeFrame({})

    assert await first_visible(frame, {"conflict": "#conflict", "form": "#form"}, 20) is None


@pytest.mark.asyncio
async def test_login_without_credentials_fails_before_navigation():
    class NoPage:
        async def goto(self, *args, **kwargs):
            raise AssertionError("should not navigate")

    navigator = TeeSheetNavigator("https://club.example/TeeSheet.aspx")

    with pytest.raises(AuthenticationError, match="credentials not found"):
        await navigator.login(NoPage(), "member", None)
