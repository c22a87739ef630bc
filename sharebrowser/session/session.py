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
The shared browsing session.

SharedSession wires the coordination components around one browser:

    participant action
      -> ControlScheduler (is the sender the holder?)
      -> CommandSerializer (one command at a time, FIFO)
      -> NavigationModel / InputController (engine calls)
    FrameStreamer samples the page independently
    SessionStateBroadcaster fans the resulting state out to everyone

Exactly one session exists per service process. It is constructed and torn
down explicitly (see ``sharebrowser.service.app``).

Example:
    >>> session = SharedSession(transport=hub, config=SessionConfig())
    >>> await session.start()
    >>> await session.connect("a")
    >>> await session.submit("a", Navigate("example.com"))
    >>> await session.stop()
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Tuple

from sharebrowser.config import SessionConfig
from sharebrowser.core.browser import BrowserManager
from sharebrowser.core.page import SharedPage
from sharebrowser.exceptions import InputError
from sharebrowser.session.broadcaster import (
    SessionState,
    SessionStateBroadcaster,
    Transport,
    derive_state,
)
from sharebrowser.session.commands import (
    AdoptPage,
    Back,
    Command,
    Forward,
    KeyEvent,
    Navigate,
    PointerEvent,
    Refresh,
    ReleaseInput,
    WheelEvent,
)
from sharebrowser.session.input import InputController
from sharebrowser.session.navigation import NavigationModel
from sharebrowser.session.scheduler import ControlScheduler
from sharebrowser.session.serializer import CommandSerializer
from sharebrowser.session.streamer import FrameStreamer
from sharebrowser.utils.logger import logger


class SharedSession:
    """
    One shared page, many participants, one controller at a time.

    Args:
        transport: Delivers outbound events to participants
        config: Session configuration
        browser: Browser manager (built from ``config`` when omitted)
    """

    def __init__(
        self,
        transport: Transport,
        config: Optional[SessionConfig] = None,
        browser: Optional[BrowserManager] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.browser = browser or BrowserManager(
            headless=self.config.headless,
            browser_type=self.config.browser_type,
            width=self.config.width,
            height=self.config.height,
            user_agent=self.config.user_agent,
            args=self.config.launch_args,
        )

        self.shared_page = SharedPage()
        self.scheduler = ControlScheduler()
        self.broadcaster = SessionStateBroadcaster(transport)
        self.input = InputController(
            self.shared_page,
            self.broadcaster,
            width=self.config.width,
            height=self.config.height,
            type_delay_ms=self.config.type_delay_ms,
        )
        self.navigation = NavigationModel(
            self.shared_page,
            self.broadcaster,
            self.config,
            reset_input=self.input.release_all,
        )
        self.serializer = CommandSerializer(
            executor=self.execute,
            authorizer=self.scheduler.is_holder,
            recheck_on_execute=self.config.recheck_control_on_execute,
        )
        self.streamer = FrameStreamer(
            self.shared_page,
            self.navigation,
            self.broadcaster,
            self.config,
            page_source=self.browser.open_pages,
            adopt=self.request_adopt,
        )

        # Viewport size each participant renders the stream at
        self._client_viewports: Dict[str, Tuple[float, float]] = {}
        self._started = False

    async def start(self) -> None:
        """Launch the browser, attach to its page and begin streaming."""
        if self._started:
            return
        await self.browser.start()
        self.browser.on_page_created(self._on_page_created)

        self.shared_page.subscribe("framenavigated", self.navigation.on_frame_navigated)
        self.shared_page.adopt(self.browser.page)

        self.serializer.start()
        self._started = True

        if self.config.start_url:
            self.serializer.submit(Navigate(self.config.start_url))
        self.streamer.start()
        logger.info(f"[SESSION] Session started ({self.config.width}x{self.config.height})")

    async def stop(self) -> None:
        """Stop streaming, drop queued commands and close the browser."""
        if not self._started:
            return
        self._started = False
        await self.streamer.stop()
        await self.serializer.stop()
        for subscription in self.shared_page.subscriptions:
            subscription.unsubscribe()
        await self.browser.stop()
        logger.info("[SESSION] Session stopped")

    async def connect(self, participant_id: str) -> None:
        """Register a participant at the back of the control queue."""
        self.scheduler.join(participant_id)
        await self.broadcaster.send_snapshot(participant_id, self.state())
        await self.broadcaster.queue_changed(self.scheduler.ordered_ids())

    async def disconnect(self, participant_id: str) -> None:
        """Remove a participant. If it held control the next one takes over."""
        previous = self.scheduler.current_holder()
        removed = self.scheduler.leave(participant_id)
        self._client_viewports.pop(participant_id, None)
        if not removed:
            return
        self._handoff_if_changed(previous)
        await self.broadcaster.queue_changed(self.scheduler.ordered_ids())

    async def release_control(self, participant_id: str) -> bool:
        """
        Voluntary release by the holder; control rotates to the next participant.

        Returns:
            False if the sender did not hold control
        """
        if not self.scheduler.is_holder(participant_id):
            logger.debug(f"[SESSION] Ignoring release from non-holder {participant_id}")
            return False
        previous = self.scheduler.current_holder()
        self.scheduler.advance()
        self._handoff_if_changed(previous)
        await self.broadcaster.queue_changed(self.scheduler.ordered_ids())
        return True

    def _handoff_if_changed(self, previous: Optional[str]) -> None:
        if self.scheduler.current_holder() != previous:
            self.serializer.submit(ReleaseInput())

    def set_client_viewport(self, participant_id: str, width: float, height: float) -> None:
        """Record the size a participant renders the stream at."""
        if width <= 0 or height <= 0:
            logger.debug(f"[SESSION] Ignoring viewport {width}x{height} from {participant_id}")
            return
        self._client_viewports[participant_id] = (width, height)
        logger.debug(f"[SESSION] Client {participant_id} viewport: {width}x{height}")

    def client_viewport(self, participant_id: str) -> Optional[Tuple[float, float]]:
        return self._client_viewports.get(participant_id)

    def submit(self, participant_id: str, command: Command) -> Optional["asyncio.Future[bool]"]:
        """
        Queue a control-affecting command from a participant.

        Commands from anyone but the current holder are dropped without a
        reply. Authorization is checked here, at submission; a command
        already queued when control changes hands still runs unless
        ``recheck_control_on_execute`` is enabled.

        Returns:
            Completion future, or None if the command was dropped
        """
        if not self.scheduler.is_holder(participant_id):
            logger.debug(f"[SESSION] Dropped {command.name} from non-holder {participant_id}")
            return None

        command.participant_id = participant_id
        if isinstance(command, PointerEvent) and command.client_width is None:
            viewport = self._client_viewports.get(participant_id)
            if viewport:
                command.client_width, command.client_height = viewport
        return self.serializer.submit(command)

    async def execute(self, command: Command) -> None:
        """Run one command. Called by the serializer only."""
        if isinstance(command, Navigate):
            await self.navigation.navigate(command.url)
        elif isinstance(command, Back):
            await self.navigation.back()
        elif isinstance(command, Forward):
            await self.navigation.forward()
        elif isinstance(command, Refresh):
            await self.navigation.refresh()
        elif isinstance(command, PointerEvent):
            await self.input.pointer(command)
        elif isinstance(command, KeyEvent):
            await self.input.key(command)
        elif isinstance(command, WheelEvent):
            await self.input.wheel(command)
        elif isinstance(command, ReleaseInput):
            await self.input.release_all()
        elif isinstance(command, AdoptPage):
            await self.navigation.adopt_page(command.page)
        else:
            raise InputError(f"Unknown command: {command.name}")

    def request_adopt(self, page: Any) -> "asyncio.Future[bool]":
        """Queue a switch onto ``page`` behind the commands already submitted."""
        return self.serializer.submit(AdoptPage(page=page))

    def _on_page_created(self, page: Any) -> None:
        self.request_adopt(page)

    def state(self) -> SessionState:
        """Current observable state."""
        url = self.shared_page.url or self.navigation.state.current_url
        return derive_state(
            self.scheduler.ordered_ids(),
            url=url,
            navigating=self.navigation.is_navigating,
            loading=self.broadcaster.is_loading,
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "participants": len(self.scheduler),
            "history_depth": len(self.navigation.state.history),
            "forward_depth": len(self.navigation.state.forward_stack),
            "commands_pending": self.serializer.pending,
            "commands_executed": self.serializer.executed,
            "commands_failed": self.serializer.failed,
            "commands_dropped": self.serializer.dropped,
            "streaming": self.streamer.is_streaming,
            "stream": self.streamer.metrics.to_dict(),
        }

    async def __aenter__(self) -> "SharedSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()
