"""Playwright implementation of :class:`TeeSheetSite` for Clubhouse Online.

The session handle is the authenticated :class:`Page`; view handles are the
tee sheet :class:`Frame` inside ``iframe#module``.
"""

from __future__ import annotations
from tracking import t

import logging
import re
import time
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Frame, Page, Response
from playwright.async_api import TimeoutError as PlaywrightTimeout

from automation.availability.dom_extraction import (
    extract_page_text,
    handle_selector,
    scrape_slot_rows,
    snapshot_view,
)
from automation.browser.manager import BrowserManager
from automation.executors.navigation import (
    TeeSheetNavigator,
    first_visible,
    is_date_selected,
    select_date_by_click,
    wait_for_date_data,
)
from automation.shared.booking_contracts import (
    ConfirmationOutcome,
    ResponseMatcher,
    SelectionOutcome,
    SlotRow,
    ViewSnapshot,
)
from infrastructure.constants import (
    ADD_GROUP_TEXT,
    BOOK_NOW_SELECTOR,
    CONFIRMATION_NUMBER_PATTERN,
    CONFLICT_DISMISS_SELECTORS,
    CONFLICT_TEXT_SELECTOR,
    PARTICIPANT_GROUP_PATTERN,
    TIMEOUTS,
)


class PlaywrightTeeSheetSite:
    """Drive the tee sheet through one shared, authenticated page."""

    def __init__(
        self,
        browser: BrowserManager,
        *,
        booking_url: str,
        username: Optional[str],
        password: Optional[str],
        diagnostics_dir: Optional[Path] = None,
        take_screenshots: bool = True,
        navigator: Optional[TeeSheetNavigator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.__init__')
        self.browser = browser
        self.navigator = navigator or TeeSheetNavigator(booking_url)
        self.diagnostics_dir = Path(diagnostics_dir or "logs")
        self.take_screenshots = take_screenshots
        self.logger = logger or logging.getLogger('TeeSheetSite')
        self._username = username
        self._password = password

    @classmethod
    def from_settings(cls, settings: Any, browser: Optional[BrowserManager] = None) -> "PlaywrightTeeSheetSite":
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.from_settings')
        return cls(
            browser or BrowserManager.from_settings(settings),
            booking_url=settings.booking_url,
            username=settings.username,
            password=settings.password,
            diagnostics_dir=settings.log_directory,
            take_screenshots=settings.take_screenshots,
        )

    # ------------------------------------------------------------------
    # Session and views
    # ------------------------------------------------------------------
    async def authenticate(self, initial_play_date: date) -> Page:
        """Log in with the first request's date preselected; returns the page."""

        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.authenticate')
        page = await self.browser.start()
        await self.navigator.preselect_date(page, initial_play_date)
        await self.navigator.login(page, self._username, self._password)
        self.logger.info("Logged in")
        return page

    async def navigate_to_resource_view(self, session: Page, play_date: date) -> Frame:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.navigate_to_resource_view')
        await self.navigator.open_tee_sheet(session, play_date)
        return await self.current_view(session)

    async def current_view(self, session: Page) -> Frame:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.current_view')
        frame = await self.navigator.booking_frame(session)
        await wait_for_date_data(frame)
        return frame

    async def reload_view(self, view: Frame) -> Frame:
        """Reload only the tee sheet frame."""

        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.reload_view')
        await view.goto(view.url)
        await view.wait_for_load_state("networkidle")
        return view

    async def confirm_date_selection(self, view: Frame, play_date: date) -> bool:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.confirm_date_selection')
        if await is_date_selected(view, play_date):
            self.logger.info("Date %s pre-selected via sessionStorage", play_date)
            return True
        self.logger.info("Date %s not pre-selected, falling back to click", play_date)
        return await select_date_by_click(view, play_date)

    async def observe_view(self, view: Frame) -> ViewSnapshot:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.observe_view')
        return await snapshot_view(view)

    async def list_slot_rows(self, view: Frame) -> List[SlotRow]:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.list_slot_rows')
        return await scrape_slot_rows(view)

    async def intercept_next_matching_response(
        self,
        session: Page,
        matcher: ResponseMatcher,
        timeout_ms: int,
    ) -> Optional[Any]:
        """Wait for the next response whose URL satisfies ``matcher`` and decode its JSON."""

        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.intercept_next_matching_response')

        def predicate(response: Response) -> bool:
            return matcher(response.url)

        try:
            response = await session.wait_for_event("response", predicate=predicate, timeout=timeout_ms)
        except PlaywrightTimeout:
            return None
        try:
            return await response.json()
        except (PlaywrightError, ValueError) as exc:
            self.logger.warning("Could not decode tee sheet payload from %s: %s", response.url, exc)
            return None

    # ------------------------------------------------------------------
    # Acquisition
    # ------------------------------------------------------------------
    async def select_candidate(self, view: Frame, handle: str, timeout_ms: int) -> SelectionOutcome:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.select_candidate')
        await view.click(handle_selector(handle))
        winner = await first_visible(
            view,
            {
                SelectionOutcome.CONFLICT.value: CONFLICT_TEXT_SELECTOR,
                SelectionOutcome.FORM.value: BOOK_NOW_SELECTOR,
            },
            timeout_ms,
        )
        if winner is None:
            return SelectionOutcome.TIMEOUT
        return SelectionOutcome(winner)

    async def dismiss_conflict(self, view: Frame) -> None:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.dismiss_conflict')
        for selector in CONFLICT_DISMISS_SELECTORS:
            button = view.locator(selector).first
            if await button.is_visible():
                await button.click(timeout=TIMEOUTS['conflict_dismiss'])
                return
        self.logger.debug("No conflict dialog button to dismiss")

    async def confirm_acquisition(self, view: Frame, timeout_ms: int) -> ConfirmationOutcome:
        """Add the fixed participant group, press BOOK NOW and wait for the page to settle."""

        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.confirm_acquisition')
        try:
            await view.get_by_text(ADD_GROUP_TEXT).click(timeout=timeout_ms)
            await view.get_by_text(re.compile(PARTICIPANT_GROUP_PATTERN, re.IGNORECASE)).click(
                timeout=timeout_ms
            )
            await view.locator(BOOK_NOW_SELECTOR).click(timeout=timeout_ms)
            self.logger.info("Waiting for booking confirmation...")
            await view.wait_for_load_state("networkidle", timeout=timeout_ms)
        except PlaywrightTimeout as exc:
            return ConfirmationOutcome(confirmed=False, detail=str(exc))

        match = re.search(CONFIRMATION_NUMBER_PATTERN, await extract_page_text(view), re.IGNORECASE)
        return ConfirmationOutcome(
            confirmed=True,
            confirmation_number=match.group(1) if match else None,
        )

    # ------------------------------------------------------------------
    # Diagnostics and teardown
    # ------------------------------------------------------------------
    async def capture_diagnostic(self, session: Page, label: str) -> Optional[Path]:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.capture_diagnostic')
        if not self.take_screenshots:
            return None
        self.diagnostics_dir.mkdir(parents=True, exist_ok=True)
        path = self.diagnostics_dir / f"{label}-{int(time.time() * 1000)}.png"
        try:
            await session.screenshot(path=str(path), full_page=True)
        except PlaywrightError as exc:
            self.logger.warning("Screenshot %s failed: %s", path.name, exc)
            return None
        self.logger.info("Saved screenshot %s", path)
        return path

    async def close(self) -> None:
        t('automation.executors.tee_sheet_site.PlaywrightTeeSheetSite.close')
        await self.browser.stop()
