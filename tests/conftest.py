# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for ShareBrowser tests."""

from typing import Any, List, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest

from sharebrowser.config import SessionConfig


class RecordingTransport:
    """Transport that records every outbound event."""

    def __init__(self) -> None:
        self.broadcasts: List[Tuple[str, Any]] = []
        self.sent: List[Tuple[str, str, Any]] = []

    async def send(self, participant_id: str, event: str, data: Any) -> None:
        self.sent.append((participant_id, event, data))

    async def broadcast(self, event: str, data: Any) -> None:
        self.broadcasts.append((event, data))

    def events(self) -> List[str]:
        return [event for event, _ in self.broadcasts]

    def payloads(self, event: str) -> List[Any]:
        return [data for name, data in self.broadcasts if name == event]

    def sent_to(self, participant_id: str) -> List[Tuple[str, Any]]:
        return [(event, data) for pid, event, data in self.sent if pid == participant_id]

    def clear(self) -> None:
        self.broadcasts.clear()
        self.sent.clear()


def make_page(url: str = "https://example.com/", closed: bool = False) -> MagicMock:
    """Build a Playwright page double with the APIs the session uses."""
    page = MagicMock()
    page.url = url
    page.is_closed = MagicMock(return_value=closed)
    page.on = MagicMock()
    page.remove_listener = MagicMock()

    page.main_frame = MagicMock(name="main_frame")
    page.main_frame.url = url

    page.goto = AsyncMock()
    page.reload = AsyncMock()
    page.screenshot = AsyncMock(return_value=b"\xff\xd8jpeg")
    page.evaluate = AsyncMock(return_value="")
    page.focus = AsyncMock()
    page.bring_to_front = AsyncMock()
    page.set_viewport_size = AsyncMock()
    page.close = AsyncMock()

    page.mouse = MagicMock()
    page.mouse.move = AsyncMock()
    page.mouse.down = AsyncMock()
    page.mouse.up = AsyncMock()
    page.mouse.wheel = AsyncMock()

    page.keyboard = MagicMock()
    page.keyboard.type = AsyncMock()
    page.keyboard.down = AsyncMock()
    page.keyboard.up = AsyncMock()
    return page


@pytest.fixture
def transport():
    """Transport recording outbound events."""
    return RecordingTransport()


@pytest.fixture
def mock_page():
    """Open page at https://example.com/."""
    return make_page()


@pytest.fixture
def config():
    """Session configuration with fast timings for tests."""
    return SessionConfig(
        port=3000,
        start_url=None,
        frame_interval=0.01,
        restart_delay=0.01,
        recover_delay=0.01,
        type_delay_ms=0,
    )


@pytest.fixture
def mock_playwright():
    """Playwright driver double with all three launchers."""
    playwright = MagicMock()
    for name in ("chromium", "firefox", "webkit"):
        browser = AsyncMock()
        context = AsyncMock()
        context.on = MagicMock()
        context.remove_listener = MagicMock()
        context.new_page = AsyncMock(return_value=make_page("about:blank"))
        browser.new_context = AsyncMock(return_value=context)
        getattr(playwright, name).launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()
    return playwright


@pytest.fixture
def page_factory():
    """Factory for additional page doubles."""
    return make_page
