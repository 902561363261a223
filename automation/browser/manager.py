"""Browser manager owning the single Playwright browser of a processing run."""

from __future__ import annotations
from tracking import t

import logging
from typing import Any, Dict, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from infrastructure.constants import (
    BROWSER_USER_AGENT,
    BROWSER_VIEWPORT,
    DEFAULT_BROWSER_LOCALE,
    DEFAULT_BROWSER_TIMEZONE,
    TIMEOUTS,
)


class BrowserManager:
    """Launch Chromium once, hand out one page, and always tear it down."""

    def __init__(
        self,
        *,
        headless: bool = True,
        timezone_id: str = DEFAULT_BROWSER_TIMEZONE,
        locale: str = DEFAULT_BROWSER_LOCALE,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: str = BROWSER_USER_AGENT,
        default_timeout_ms: int = TIMEOUTS['navigation'],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        t('automation.browser.manager.BrowserManager.__init__')
        self.headless = headless
        self.timezone_id = timezone_id
        self.locale = locale
        self.viewport = dict(viewport or BROWSER_VIEWPORT)
        self.user_agent = user_agent
        self.default_timeout_ms = default_timeout_ms
        self.logger = logger or logging.getLogger("BrowserManager")
        self._playwright: Any = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> "BrowserManager":
        t('automation.browser.manager.BrowserManager.from_settings')
        options: Dict[str, Any] = {
            "headless": settings.headless,
            "timezone_id": settings.browser_timezone,
            "locale": settings.browser_locale,
        }
        options.update(overrides)
        return cls(**options)

    async def start(self) -> Page:
        """Launch the browser and return the run's page."""
        t('automation.browser.manager.BrowserManager.start')

        if self.page is not None:
            return self.page

        self.logger.info(
            "Launching Chromium (headless=%s, timezone=%s, locale=%s)",
            self.headless,
            self.timezone_id,
            self.locale,
        )
        self._playwright = await async_playwright().start()
        self.browser = await self._playwright.chromium.launch(headless=self.headless)
        self.context = await self.browser.new_context(
            viewport=self.viewport,
            user_agent=self.user_agent,
            timezone_id=self.timezone_id,
            locale=self.locale,
        )
        self.context.set_default_timeout(self.default_timeout_ms)
        self.page = await self.context.new_page()
        return self.page

    async def stop(self) -> None:
        """Close context, browser and driver; safe to call more than once."""
        t('automation.browser.manager.BrowserManager.stop')

        try:
            if self.context:
                await self.context.close()
        finally:
            self.context = None
            self.page = None

        try:
            if self.browser:
                await self.browser.close()
        finally:
            self.browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
            self.logger.info("Browser closed")

    async def __aenter__(self) -> Page:
        return await self.start()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
