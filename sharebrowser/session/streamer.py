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
Self-healing frame capture for the shared page.

FrameStreamer polls the shared page at a fixed cadence and broadcasts a
JPEG of the viewport to every participant. It runs beside the command
serializer, not inside it: it only reads the page and copes with the page
being swapped or closed underneath it.

Each cycle:
- page missing or closed: adopt another open page of the browser, or wait
  and retry
- navigation in flight, or blank page: skip
- otherwise: capture, broadcast ``screen``, then signal loading ended

A failed capture is reported as a transient loading signal and the loop
keeps its cadence. When the page fires ``close`` the loop halts, waits a
cooldown and starts itself again.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from sharebrowser.config import SessionConfig
from sharebrowser.core.page import SharedPage, Subscription
from sharebrowser.session.broadcaster import SessionStateBroadcaster
from sharebrowser.session.navigation import NavigationModel
from sharebrowser.utils.logger import logger
from sharebrowser.utils.urls import is_blank

PageSource = Callable[[], Sequence[Any]]
AdoptRequest = Callable[[Any], Awaitable[bool]]

CAPTURE_FAILED_MSG = "Screen update failed… retrying"


@dataclass
class StreamMetrics:
    """Counters for the capture loop."""
    frames_sent: int = 0
    bytes_sent: int = 0
    capture_failures: int = 0
    skipped_cycles: int = 0
    recoveries: int = 0
    restarts: int = 0
    last_frame_at: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames_sent": self.frames_sent,
            "bytes_sent": self.bytes_sent,
            "capture_failures": self.capture_failures,
            "skipped_cycles": self.skipped_cycles,
            "recoveries": self.recoveries,
            "restarts": self.restarts,
            "last_frame_at": self.last_frame_at,
        }


class FrameStreamer:
    """
    Polling capture loop over the shared page.

    Args:
        shared_page: The session's page handle
        navigation: Consulted for the in-flight navigation flag
        broadcaster: Where frames and loading signals go
        config: Cadence, JPEG quality, timeouts and delays
        page_source: Returns the browser's pages, used for recovery
        adopt: Queues adoption of a recovered page behind pending commands;
            without it the page is adopted directly
    """

    def __init__(
        self,
        shared_page: SharedPage,
        navigation: NavigationModel,
        broadcaster: SessionStateBroadcaster,
        config: SessionConfig,
        page_source: Optional[PageSource] = None,
        adopt: Optional[AdoptRequest] = None,
    ) -> None:
        self.shared_page = shared_page
        self.navigation = navigation
        self.broadcaster = broadcaster
        self.config = config
        self.page_source = page_source
        self.adopt = adopt
        self.metrics = StreamMetrics()

        self._streaming = False
        self._task: Optional[asyncio.Task] = None
        self._restart_task: Optional[asyncio.Task] = None
        self._close_subscription: Optional[Subscription] = None

    @property
    def is_streaming(self) -> bool:
        return self._streaming and self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the loop. No-op while it is already running."""
        if self.is_streaming:
            return
        self._streaming = True
        self._task = asyncio.create_task(self._loop(), name="sharebrowser-streamer")
        if self._close_subscription is None:
            self._close_subscription = self.shared_page.subscribe("close", self._on_page_closed)
        logger.info(f"[STREAM] Capture loop started ({self.config.frame_interval * 1000:.0f}ms cadence)")

    async def stop(self) -> None:
        """Stop the loop and any pending restart."""
        self._streaming = False
        for task in (self._restart_task, self._task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._restart_task = None
        self._task = None
        if self._close_subscription is not None:
            self._close_subscription.unsubscribe()
            self._close_subscription = None
        logger.info("[STREAM] Capture loop stopped")

    async def _loop(self) -> None:
        while self._streaming:
            started = time.monotonic()
            try:
                delay = await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"[STREAM] Unexpected loop error: {e}")
                delay = None

            if delay is None:
                delay = max(0.0, self.config.frame_interval - (time.monotonic() - started))
            await asyncio.sleep(delay)

    async def tick(self) -> Optional[float]:
        """
        Run one capture cycle.

        Returns:
            A delay overriding the normal cadence (after a failed recovery),
            or None
        """
        if not self.shared_page.is_valid():
            if await self._recover():
                self.metrics.recoveries += 1
            else:
                logger.debug("[STREAM] No open page, waiting")
                return self.config.recover_delay

        if self.navigation.is_navigating or is_blank(self.shared_page.url):
            self.metrics.skipped_cycles += 1
            return None

        try:
            frame = await self.shared_page.screenshot(
                quality=self.config.jpeg_quality,
                timeout=self.config.screenshot_timeout_ms,
            )
        except Exception as e:
            self.metrics.capture_failures += 1
            logger.warning(f"[STREAM] Screenshot failed: {e}")
            await self.broadcaster.loading(True, CAPTURE_FAILED_MSG)
            return None

        await self.broadcaster.frame(frame)
        await self.broadcaster.loading(False)
        self.metrics.frames_sent += 1
        self.metrics.bytes_sent += len(frame)
        self.metrics.last_frame_at = time.time()
        return None

    async def _recover(self) -> bool:
        """Adopt another open page the same way a new tab is adopted."""
        if self.page_source is None:
            return False
        try:
            candidates = self.page_source()
        except Exception as e:
            logger.debug(f"[STREAM] Could not list pages: {e}")
            return False
        page = SharedPage.first_open(candidates)
        if page is None:
            return False

        logger.info(f"[STREAM] Recovering onto open page: {page.url}")
        if self.adopt is None:
            await self.navigation.adopt_page(page)
        else:
            # Shielded so stopping the loop does not cancel the queued command
            await asyncio.shield(self.adopt(page))
        return self.shared_page.is_valid()

    def _on_page_closed(self, page: Any = None) -> None:
        if not self._streaming:
            return
        logger.warning("[STREAM] Page closed, restarting capture loop...")
        self._streaming = False
        if self._task and not self._task.done():
            self._task.cancel()
        self._restart_task = asyncio.get_running_loop().create_task(self._restart_after_cooldown())

    async def _restart_after_cooldown(self) -> None:
        await asyncio.sleep(self.config.restart_delay)
        if not self._streaming:
            self.metrics.restarts += 1
            self.start()
