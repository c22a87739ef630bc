# Copyright 2026 Firefly Software Solutions Inc
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Browser management for ShareBrowser.

This module provides the BrowserManager class which owns the one Playwright
browser a shared session runs on. It launches the browser, creates the
context with the fixed capture viewport, opens the initial page and reports
pages the site opens by itself (new tabs, popups).
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Optional, Union

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from sharebrowser.exceptions import BrowserError
from sharebrowser.utils.logger import logger

PageHandler = Callable[[Page], Union[None, Awaitable[None]]]

# Hide the most obvious automation markers from the pages being browsed
SPOOF_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
"""


class BrowserManager:
    """
    Manages the Playwright browser behind a shared session.

    This class handles:
    - Browser launching with configurable options
    - Context creation with a fixed viewport and user agent
    - The initial page
    - New-page notifications
    - Resource cleanup

    Example:
        >>> manager = BrowserManager(width=1280, height=720)
        >>> await manager.start()
        >>> manager.on_page_created(lambda page: print(page.url))
        >>> await manager.stop()
    """

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        width: int = 1280,
        height: int = 720,
        user_agent: Optional[str] = None,
        **launch_options: Any,
    ) -> None:
        """
        Initialize the browser manager with configuration.

        Args:
            headless: Whether to run browser in headless mode (no visible window)
            browser_type: "chromium" (default), "firefox" or "webkit"
            width: Viewport width of every page
            height: Viewport height of every page
            user_agent: User agent override for the context
            **launch_options: Additional Playwright launch options (args, proxy, ...)
        """
        self.headless = headless
        self.browser_type = browser_type
        self.width = width
        self.height = height
        self.user_agent = user_agent
        self.launch_options = launch_options
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._page_handlers: List[PageHandler] = []

    async def start(self) -> None:
        """
        Start the browser and open the initial page.

        Raises:
            BrowserError: If browser fails to start or unsupported browser type
        """
        try:
            logger.info(f"Starting {self.browser_type} browser (headless={self.headless})")
            self._playwright = await async_playwright().start()

            if self.browser_type == "chromium":
                browser_launcher = self._playwright.chromium
            elif self.browser_type == "firefox":
                browser_launcher = self._playwright.firefox
            elif self.browser_type == "webkit":
                browser_launcher = self._playwright.webkit
            else:
                raise BrowserError(f"Unsupported browser type: {self.browser_type}")

            self._browser = await browser_launcher.launch(
                headless=self.headless, **self.launch_options
            )

            context_options: dict = {
                "viewport": {"width": self.width, "height": self.height},
                "device_scale_factor": 1,
            }
            if self.user_agent:
                context_options["user_agent"] = self.user_agent
            self._context = await self._browser.new_context(**context_options)
            await self._context.add_init_script(SPOOF_SCRIPT)
            self._context.on("page", self._on_context_page)

            self._page = await self._context.new_page()

            logger.info("Browser started successfully")
        except BrowserError:
            raise
        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            raise BrowserError(f"Failed to start browser: {e}") from e

    async def stop(self) -> None:
        """
        Stop the browser and cleanup all resources.

        Raises:
            BrowserError: If cleanup fails
        """
        try:
            logger.info("Stopping browser")
            if self._context:
                self._context.remove_listener("page", self._on_context_page)
                await self._context.close()
            if self._browser:
                await self._browser.close()
            if self._playwright:
                await self._playwright.stop()
            logger.info("Browser stopped successfully")
        except Exception as e:
            logger.error(f"Error stopping browser: {e}")
            raise BrowserError(f"Failed to stop browser: {e}") from e
        finally:
            self._page = None
            self._context = None
            self._browser = None
            self._playwright = None

    def on_page_created(self, handler: PageHandler) -> None:
        """Register a handler for pages opened after the initial one."""
        self._page_handlers.append(handler)

    async def _on_context_page(self, page: Page) -> None:
        # The initial page fires "page" too; only later pages are reported
        if self._page is None or page is self._page:
            return
        logger.info(f"[TAB] New page opened: {page.url}")
        for handler in list(self._page_handlers):
            try:
                result = handler(page)
                if result is not None:
                    await result
            except Exception as e:
                logger.error(f"[TAB] New page handler error: {e}")

    def open_pages(self) -> List[Page]:
        """Pages of the context that are still open."""
        if not self._context:
            return []
        return [p for p in self._context.pages if not p.is_closed()]

    @property
    def page(self) -> Page:
        """Get the initial page."""
        if not self._page:
            raise BrowserError("No active page. Call start() first.")
        return self._page

    @property
    def context(self) -> BrowserContext:
        """Get the browser context."""
        if not self._context:
            raise BrowserError("Browser context not initialized. Call start() first.")
        return self._context

    @property
    def browser(self) -> Browser:
        """Get the browser instance."""
        if not self._browser:
            raise BrowserError("Browser not initialized. Call start() first.")
        return self._browser

    async def __aenter__(self) -> "BrowserManager":
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.stop()
