"""Navigation helpers for the Clubhouse Online tee sheet."""

from __future__ import annotations
from tracking import t

import asyncio
import json
import logging
from datetime import date
from typing import Dict, Optional

from playwright.async_api import Frame, Page, TimeoutError as PlaywrightTimeout

from automation.shared.errors import AuthenticationError
from infrastructure.constants import (
    AVAILABLE_CAPACITY_SELECTOR,
    BOOKING_FRAME_SELECTOR,
    COURSE_FIELD_SELECTOR,
    DATE_ITEM_SELECTOR,
    DATE_LABEL_SELECTOR,
    LOGIN_BUTTON_NAME,
    LOGIN_PASSWORD_PLACEHOLDER,
    LOGIN_USERNAME_PLACEHOLDER,
    NO_TIMES_WAIT_PATTERN,
    SELECTED_DATE_SELECTOR,
    SESSION_DATE_STORAGE_KEY,
    TIMEOUTS,
    TOO_EARLY_WAIT_PATTERN,
    session_date_value,
)

logger = logging.getLogger('TeeSheetSite')


def date_label(play_date: date) -> str:
    """Label the date carousel shows for a day, e.g. ``Jun 5``."""

    t('automation.executors.navigation.date_label')
    return f"{play_date.strftime('%b')} {play_date.day}"


def session_date_script(play_date: date) -> str:
    t('automation.executors.navigation.session_date_script')
    key = json.dumps(SESSION_DATE_STORAGE_KEY)
    value = json.dumps(session_date_value(play_date.isoformat()))
    return f"sessionStorage.setItem({key}, {value});"


class TeeSheetNavigator:
    """Page-level navigation: login, date preselection and frame lookup."""

    def __init__(self, booking_url: str, *, navigation_timeout_ms: int = TIMEOUTS['navigation']) -> None:
        t('automation.executors.navigation.TeeSheetNavigator.__init__')
        self.booking_url = booking_url
        self.navigation_timeout_ms = navigation_timeout_ms

    async def preselect_date(self, page: Page, play_date: date) -> None:
        """Seed the tee sheet's stored date so the next load opens on ``play_date``."""

        t('automation.executors.navigation.TeeSheetNavigator.preselect_date')
        logger.info("Setting date %s in sessionStorage", play_date)
        await page.add_init_script(script=session_date_script(play_date))

    async def login(self, page: Page, username: Optional[str], password: Optional[str]) -> None:
        t('automation.executors.navigation.TeeSheetNavigator.login')
        if not username or not password:
            raise AuthenticationError("Golf course credentials not found in environment variables")

        logger.info("Performing initial login to %s", self.booking_url)
        try:
            await page.goto(self.booking_url, timeout=self.navigation_timeout_ms)
            await page.get_by_placeholder(LOGIN_USERNAME_PLACEHOLDER).fill(username)
            await page.get_by_placeholder(LOGIN_PASSWORD_PLACEHOLDER).fill(password)
            await page.get_by_role("button", name=LOGIN_BUTTON_NAME).click()
            await page.wait_for_load_state("networkidle", timeout=self.navigation_timeout_ms)
        except PlaywrightTimeout as exc:
            raise AuthenticationError(f"Login did not complete: {exc}") from exc

    async def open_tee_sheet(self, page: Page, play_date: date) -> None:
        t('automation.executors.navigation.TeeSheetNavigator.open_tee_sheet')
        logger.info("Navigating to booking page for %s", play_date)
        await self.preselect_date(page, play_date)
        await page.goto(self.booking_url, timeout=self.navigation_timeout_ms)
        await page.wait_for_load_state("networkidle", timeout=self.navigation_timeout_ms)

    @staticmethod
    async def booking_frame(page: Page) -> Frame:
        t('automation.executors.navigation.TeeSheetNavigator.booking_frame')
        handle = await page.locator(BOOKING_FRAME_SELECTOR).element_handle()
        if handle is None:
            raise RuntimeError("Booking iframe not found")
        frame = await handle.content_frame()
        if frame is None:
            raise RuntimeError("Unable to resolve content frame")
        return frame


async def first_visible(frame: Frame, markers: Dict[str, str], timeout_ms: int) -> Optional[str]:
    """Return the name of the first selector in ``markers`` to become visible.

    ``None`` when none shows up within ``timeout_ms``. Losing waiters are cancelled.
    """

    t('automation.executors.navigation.first_visible')

    async def _watch(name: str, selector: str) -> str:
        await frame.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        return name

    tasks = [asyncio.ensure_future(_watch(name, selector)) for name, selector in markers.items()]
    winner: Optional[str] = None
    try:
        for finished in asyncio.as_completed(tasks):
            try:
                winner = await finished
                break
            except PlaywrightTimeout:
                continue
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
    return winner


async def wait_for_date_data(frame: Frame, timeout_ms: int = TIMEOUTS['date_data_load']) -> Optional[str]:
    """Wait until the frame shows tee times, a no-times notice, or a release notice.

    Returns which one appeared first, or ``None`` when none did in time.
    """

    t('automation.executors.navigation.wait_for_date_data')
    winner = await first_visible(
        frame,
        {
            "available": AVAILABLE_CAPACITY_SELECTOR,
            "no-times": NO_TIMES_WAIT_PATTERN,
            "too-early": TOO_EARLY_WAIT_PATTERN,
        },
        timeout_ms,
    )
    if winner is None:
        logger.warning("Timed out waiting for tee sheet data after %sms", timeout_ms)
    else:
        logger.debug("Tee sheet data state: %s", winner)
        await frame.wait_for_timeout(200)
    return winner


async def is_date_selected(frame: Frame, play_date: date) -> bool:
    t('automation.executors.navigation.is_date_selected')
    label = date_label(play_date)
    return bool(
        await frame.evaluate(
            """([selectedSelector, labelSelector, expected]) => {
                const selected = document.querySelector(selectedSelector);
                if (!selected) return false;
                const dateDiv = selected.querySelector(labelSelector);
                return !!(dateDiv && dateDiv.textContent && dateDiv.textContent.includes(expected));
            }""",
            [SELECTED_DATE_SELECTOR, DATE_LABEL_SELECTOR, label],
        )
    )


async def select_date_by_click(
    frame: Frame,
    play_date: date,
    timeout_ms: int = TIMEOUTS['date_click_confirm'],
) -> bool:
    """Click the date in the carousel and wait for the sheet to switch to it."""

    t('automation.executors.navigation.select_date_by_click')
    label = date_label(play_date)
    logger.info('Attempting to select date "%s" by clicking', label)
    clicked = await frame.evaluate(
        """([itemSelector, labelSelector, expected]) => {
            for (const el of document.querySelectorAll(itemSelector)) {
                const dateDiv = el.querySelector(labelSelector);
                if (dateDiv && dateDiv.textContent && dateDiv.textContent.trim().includes(expected)) {
                    el.click();
                    return true;
                }
            }
            return false;
        }""",
        [DATE_ITEM_SELECTOR, DATE_LABEL_SELECTOR, label],
    )
    if not clicked:
        return False

    selected = f'{SELECTED_DATE_SELECTOR}:has({DATE_LABEL_SELECTOR}:text-is("{label}"))'
    try:
        await frame.wait_for_selector(selected, timeout=timeout_ms)
        await frame.wait_for_selector(COURSE_FIELD_SELECTOR, timeout=timeout_ms)
    except PlaywrightTimeout as exc:
        logger.warning("Failed to select date by clicking: %s", exc)
        return False
    return True
