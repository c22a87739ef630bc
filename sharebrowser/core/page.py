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
Shared page handle for a ShareBrowser session.

This module provides the SharedPage class, the single live page every
participant looks at. The underlying Playwright page can be replaced at any
time (a site opened a new tab, the page was closed and another one was
picked up). Code that needs page events subscribes through SharedPage
instead of the Playwright page directly, so listeners follow the handle
across replacements without ever being registered twice.

The page-level wrappers (goto, reload, screenshot, evaluate) raise
NavigationError/PageError with logging, mirroring how the rest of the
package reports engine failures.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Sequence

from playwright.async_api import Page

from sharebrowser.exceptions import NavigationError, PageError
from sharebrowser.utils.logger import logger


class Subscription:
    """
    Handle for one event listener registered through a SharedPage.

    The listener is attached to whatever page the SharedPage currently
    holds, and moved when the page is replaced.

    Example:
        >>> sub = shared.subscribe("framenavigated", on_frame)
        >>> sub.unsubscribe()
    """

    def __init__(self, owner: "SharedPage", event: str, handler: Callable[..., Any]) -> None:
        self.owner = owner
        self.event = event
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        """Detach the listener. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self.owner._remove(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "closed"
        return f"<Subscription {self.event} {state}>"


class SharedPage:
    """
    The one live page of a shared session.

    Attributes:
        page: The current Playwright page, or None before a page is adopted

    Example:
        >>> shared = SharedPage()
        >>> shared.subscribe("close", on_close)
        >>> shared.adopt(browser.page)
        >>> await shared.goto("https://example.com")
        >>> old = shared.adopt(new_tab)  # on_close now listens on new_tab
    """

    def __init__(self, page: Optional[Page] = None) -> None:
        self._page: Optional[Page] = None
        self._subscriptions: List[Subscription] = []
        if page is not None:
            self.adopt(page)

    @property
    def page(self) -> Optional[Page]:
        """Current Playwright page."""
        return self._page

    def require(self) -> Page:
        """
        Get the current page, failing if it is missing or closed.

        Raises:
            PageError: If there is no usable page
        """
        if not self.is_valid():
            raise PageError("Shared page is not available")
        return self._page

    def is_valid(self) -> bool:
        """Whether a page is held and still open."""
        if self._page is None:
            return False
        try:
            return not self._page.is_closed()
        except Exception:
            return False

    @property
    def url(self) -> str:
        """URL of the current page, empty when there is none."""
        if self._page is None:
            return ""
        try:
            return self._page.url
        except Exception as e:
            logger.debug(f"[PAGE] Could not read url: {e}")
            return ""

    def subscribe(self, event: str, handler: Callable[..., Any]) -> Subscription:
        """
        Listen to a page event on the current and all future pages.

        Args:
            event: Playwright page event name ("framenavigated", "close", ...)
            handler: Listener, sync or async

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, event, handler)
        self._subscriptions.append(subscription)
        if self._page is not None:
            self._page.on(event, handler)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        if self._page is not None:
            self._detach_listener(self._page, subscription)

    @property
    def subscriptions(self) -> Sequence[Subscription]:
        return tuple(self._subscriptions)

    def adopt(self, page: Page) -> Optional[Page]:
        """
        Make ``page`` the shared page and move every listener onto it.

        Args:
            page: The new Playwright page

        Returns:
            The previously held page (not closed here), or None
        """
        old = self._page
        if page is old:
            return None

        if old is not None:
            for subscription in self._subscriptions:
                self._detach_listener(old, subscription)

        self._page = page
        for subscription in self._subscriptions:
            page.on(subscription.event, subscription.handler)

        logger.debug(f"[PAGE] Adopted page ({len(self._subscriptions)} listeners moved)")
        return old

    @staticmethod
    def first_open(candidates: Sequence[Page]) -> Optional[Page]:
        """
        Pick a replacement after the current page became invalid.

        Args:
            candidates: Pages of the browser context

        Returns:
            The first page that is still open, or None
        """
        for candidate in candidates:
            try:
                if not candidate.is_closed():
                    return candidate
            except Exception:
                continue
        return None

    @staticmethod
    def _detach_listener(page: Page, subscription: Subscription) -> None:
        try:
            page.remove_listener(subscription.event, subscription.handler)
        except Exception as e:
            logger.debug(f"[PAGE] Listener already detached ({subscription.event}): {e}")

    async def goto(self, url: str, wait_until: str = "domcontentloaded", timeout: int = 30000) -> None:
        """
        Navigate the shared page.

        Raises:
            NavigationError: If navigation fails or times out
        """
        page = self._navigable_page()
        try:
            logger.info(f"[NAV] Navigating to {url}")
            await page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as e:
            logger.error(f"[NAV] Navigation failed: {e}")
            raise NavigationError(f"Failed to navigate to {url}: {e}") from e

    async def reload(self, wait_until: str = "domcontentloaded", timeout: int = 30000) -> None:
        """
        Reload the current document.

        Raises:
            NavigationError: If the reload fails or times out
        """
        page = self._navigable_page()
        try:
            await page.reload(wait_until=wait_until, timeout=timeout)
        except Exception as e:
            logger.error(f"[NAV] Reload failed: {e}")
            raise NavigationError(f"Failed to reload: {e}") from e

    def _navigable_page(self) -> Page:
        try:
            return self.require()
        except PageError as e:
            raise NavigationError(str(e)) from e

    async def screenshot(self, quality: int = 60, timeout: int = 2000) -> bytes:
        """
        Capture the viewport as JPEG.

        Raises:
            PageError: If capture fails
        """
        page = self.require()
        try:
            return await page.screenshot(type="jpeg", quality=quality, timeout=timeout)
        except Exception as e:
            raise PageError(f"Failed to take screenshot: {e}") from e

    async def evaluate(self, script: str) -> Any:
        """
        Execute JavaScript in the page context.

        Raises:
            PageError: If evaluation fails
        """
        page = self.require()
        try:
            return await page.evaluate(script)
        except Exception as e:
            logger.error(f"[PAGE] Script evaluation failed: {e}")
            raise PageError(f"Failed to evaluate script: {e}") from e
