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
Navigation and history for the shared page.

NavigationModel runs the navigation commands (navigate, back, forward,
refresh) and keeps the session's own back/forward stacks. History is
driven by what the page actually did: every main-frame navigation the
engine reports is recorded, whether it came from a command, a redirect or a
link the page followed on its own.

While a navigation command is in flight ``is_navigating`` is set and the
frame streamer skips capture.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from sharebrowser.config import SessionConfig
from sharebrowser.core.page import SharedPage
from sharebrowser.exceptions import InvalidURLError, NavigationError
from sharebrowser.session.broadcaster import SessionStateBroadcaster
from sharebrowser.utils.logger import logger
from sharebrowser.utils.urls import is_blank, is_self_target, normalize_url, validate_url

ResetHook = Callable[[], Awaitable[None]]


@dataclass
class NavigationState:
    """Current URL, back/forward stacks and the in-flight flag."""
    current_url: str = ""
    history: List[str] = field(default_factory=list)
    forward_stack: List[str] = field(default_factory=list)
    is_navigating: bool = False

    def record(self, url: str) -> bool:
        """Append an observed URL unless it is blank or repeats the top."""
        if is_blank(url):
            return False
        if self.history and self.history[-1] == url:
            return False
        self.history.append(url)
        return True

    @property
    def can_go_back(self) -> bool:
        return len(self.history) > 1

    @property
    def can_go_forward(self) -> bool:
        return bool(self.forward_stack)


class NavigationModel:
    """
    Executes navigation commands and tracks history.

    Args:
        shared_page: The session's page handle
        broadcaster: Where loading and URL updates go
        config: Session configuration (URLs, timeouts, viewport)
        reset_input: Coroutine releasing held keys/buttons before a navigation
    """

    def __init__(
        self,
        shared_page: SharedPage,
        broadcaster: SessionStateBroadcaster,
        config: SessionConfig,
        reset_input: Optional[ResetHook] = None,
    ) -> None:
        self.shared_page = shared_page
        self.broadcaster = broadcaster
        self.config = config
        self.reset_input = reset_input
        self.state = NavigationState()

    @property
    def is_navigating(self) -> bool:
        return self.state.is_navigating

    def resolve(self, text: str) -> str:
        """
        Turn address bar input into a URL the page may load.

        Raises:
            InvalidURLError: If the target is malformed or is this service
        """
        url = validate_url(normalize_url(text, self.config.home_url, self.config.search_url))
        if is_self_target(url, self.config.self_hosts):
            raise InvalidURLError(f"Refusing to navigate to own server: {url}", url=url)
        return url

    async def navigate(self, text: str) -> None:
        """Load a new page. Clears the forward stack."""
        try:
            url = self.resolve(text)
        except InvalidURLError as e:
            logger.warning(f"[NAV] Blocked navigation: {e}")
            await self.broadcaster.loading(False, "Navigation blocked")
            return

        self.state.forward_stack.clear()
        await self._run("Navigating…", lambda: self._load(url))

    async def back(self) -> None:
        """Go back one entry. No-op without a previous entry."""
        if not self.state.can_go_back:
            logger.debug("[NAV] Back ignored, no previous entry")
            return
        self.state.forward_stack.append(self.state.history.pop())
        previous = self.state.history[-1]
        await self._run("Going back…", lambda: self._load(previous))

    async def forward(self) -> None:
        """Go forward one entry. No-op with an empty forward stack."""
        if not self.state.can_go_forward:
            logger.debug("[NAV] Forward ignored, forward stack empty")
            return
        upcoming = self.state.forward_stack.pop()
        self.state.history.append(upcoming)
        await self._run("Going forward…", lambda: self._load(upcoming))

    async def refresh(self) -> None:
        """Reload the current document."""
        await self._run("Refreshing…", lambda: self.shared_page.reload(
            wait_until=self.config.wait_until,
            timeout=self.config.navigation_timeout_ms,
        ))

    def _load(self, url: str) -> Awaitable[None]:
        return self.shared_page.goto(
            url,
            wait_until=self.config.wait_until,
            timeout=self.config.navigation_timeout_ms,
        )

    async def _run(self, message: str, load: Callable[[], Awaitable[None]]) -> None:
        self.state.is_navigating = True
        try:
            if self.reset_input is not None:
                await self.reset_input()
            await self.broadcaster.loading(True, message)
            await load()
        except NavigationError as e:
            logger.error(f"[NAV] {message.rstrip('…')} failed: {e}")
        finally:
            self.state.is_navigating = False
            await self.broadcaster.loading(False)
            await self._publish_url()

    async def _publish_url(self) -> None:
        url = self.shared_page.url
        if url:
            self.state.current_url = url
        await self.broadcaster.url_changed(self.state.current_url)

    async def on_frame_navigated(self, frame: Any) -> None:
        """Record a main-frame navigation reported by the engine."""
        page = self.shared_page.page
        if page is None or frame != page.main_frame:
            return

        url = frame.url
        logger.info(f"[NAV] Main frame navigated: {url}")
        await self.broadcaster.loading(True)
        if self.state.record(url):
            logger.debug(f"[NAV] History +{url} (depth {len(self.state.history)})")
        if not is_blank(url):
            self.state.current_url = url
        await self.broadcaster.url_changed(url)

    async def adopt_page(self, page: Any) -> None:
        """
        Switch the session onto a newly opened page.

        The new page is brought to the front and takes over every listener,
        the fixed viewport is applied, and the previous page is closed so
        exactly one shared page stays open.
        """
        logger.info(f"[TAB] Switching to new page: {page.url}")
        try:
            await page.bring_to_front()
            old = self.shared_page.adopt(page)
            await page.set_viewport_size(self.config.viewport)
            if old is not None and not old.is_closed():
                await old.close()
                logger.info("[TAB] Closed previous page")
        except Exception as e:
            logger.error(f"[TAB] Error handling new page: {e}")
        await self._publish_url()
