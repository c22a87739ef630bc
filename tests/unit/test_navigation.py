# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for NavigationModel."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from sharebrowser.core.page import SharedPage
from sharebrowser.exceptions import InvalidURLError
from sharebrowser.session.broadcaster import SessionStateBroadcaster
from sharebrowser.session.navigation import NavigationModel, NavigationState


@pytest.fixture
def shared(mock_page):
    return SharedPage(mock_page)


@pytest.fixture
def navigation(shared, transport, config):
    """Navigation model whose page reports every goto as a main-frame navigation."""
    model = NavigationModel(
        shared,
        SessionStateBroadcaster(transport),
        config,
        reset_input=AsyncMock(),
    )
    page = shared.page
    model.observed_flags = []

    async def fake_goto(url, **kwargs):
        model.observed_flags.append(model.is_navigating)
        page.url = url
        page.main_frame.url = url
        await model.on_frame_navigated(page.main_frame)

    page.goto = AsyncMock(side_effect=fake_goto)
    return model


class TestNavigationState:
    """Tests for history recording."""

    def test_record_skips_blank_and_repeats(self):
        """Test blank pages and repeated tops are not recorded."""
        state = NavigationState()

        assert state.record("about:blank") is False
        assert state.record("https://a.example/") is True
        assert state.record("https://a.example/") is False
        assert state.record("https://b.example/") is True
        assert state.history == ["https://a.example/", "https://b.example/"]

    def test_back_needs_two_entries(self):
        """Test back is only possible with a previous entry."""
        state = NavigationState(history=["https://a.example/"])

        assert state.can_go_back is False
        assert state.can_go_forward is False


class TestNavigate:
    """Tests for NavigationModel.navigate()."""

    @pytest.mark.asyncio
    async def test_navigate_normalizes_and_loads(self, navigation, shared, transport):
        """Test address bar text is normalized and loaded."""
        await navigation.navigate("example.com")

        shared.page.goto.assert_awaited_once_with(
            "https://example.com",
            wait_until="domcontentloaded",
            timeout=30000,
        )
        assert navigation.state.history == ["https://example.com"]
        assert navigation.state.current_url == "https://example.com"
        assert navigation.observed_flags == [True]
        assert navigation.is_navigating is False

    @pytest.mark.asyncio
    async def test_navigate_signals(self, navigation, transport):
        """Test loading start/end and the final url are broadcast."""
        await navigation.navigate("openai")

        events = transport.events()
        assert events[0] == "loading-start"
        assert transport.broadcasts[0][1] == {"msg": "Navigating…"}
        assert "loading-end" in events
        assert transport.payloads("update-url")[-1] == {"url": "https://www.google.com/search?q=openai"}

    @pytest.mark.asyncio
    async def test_navigate_releases_input_first(self, navigation):
        """Test held input is released before loading."""
        await navigation.navigate("example.com")

        navigation.reset_input.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_self_navigation_blocked(self, navigation, shared, transport):
        """Test the service's own address never reaches the browser."""
        await navigation.navigate("http://localhost:3000/")

        shared.page.goto.assert_not_awaited()
        assert transport.broadcasts == [("loading-end", {"msg": "Navigation blocked"})]

    @pytest.mark.asyncio
    async def test_malformed_url_blocked(self, navigation, shared):
        """Test malformed targets are rejected."""
        await navigation.navigate("https://example.com:99999/")

        shared.page.goto.assert_not_awaited()

    def test_resolve(self, navigation):
        """Test resolve normalizes and validates."""
        assert navigation.resolve("example.com") == "https://example.com"
        with pytest.raises(InvalidURLError):
            navigation.resolve("http://127.0.0.1:3000/admin")

    @pytest.mark.asyncio
    async def test_navigation_failure_is_contained(self, navigation, shared, transport):
        """Test an engine failure clears the in-flight flag and ends loading."""
        shared.page.goto = AsyncMock(side_effect=Exception("net::ERR_CONNECTION_REFUSED"))

        await navigation.navigate("example.com")

        assert navigation.is_navigating is False
        assert transport.events()[-2:] == ["loading-end", "update-url"]


class TestHistory:
    """Tests for back/forward traversal."""

    @pytest.mark.asyncio
    async def test_back_at_first_entry_is_noop(self, navigation, shared):
        """Test back does nothing with a single entry."""
        await navigation.navigate("a.example")
        shared.page.goto.reset_mock()

        await navigation.back()

        shared.page.goto.assert_not_awaited()
        assert navigation.state.history == ["https://a.example"]

    @pytest.mark.asyncio
    async def test_forward_with_empty_stack_is_noop(self, navigation, shared):
        """Test forward does nothing without forward entries."""
        await navigation.forward()

        shared.page.goto.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_back_then_forward(self, navigation, shared):
        """Test back and forward move entries between the stacks."""
        await navigation.navigate("a.example")
        await navigation.navigate("b.example")

        await navigation.back()
        assert navigation.state.history == ["https://a.example"]
        assert navigation.state.forward_stack == ["https://b.example"]
        assert shared.page.url == "https://a.example"

        await navigation.forward()
        assert navigation.state.history == ["https://a.example", "https://b.example"]
        assert navigation.state.forward_stack == []
        assert shared.page.url == "https://b.example"

    @pytest.mark.asyncio
    async def test_navigate_clears_forward_stack(self, navigation):
        """Test a new navigation discards forward entries."""
        await navigation.navigate("a.example")
        await navigation.navigate("b.example")
        await navigation.back()

        await navigation.navigate("c.example")

        assert navigation.state.forward_stack == []
        assert navigation.state.history == ["https://a.example", "https://c.example"]

    @pytest.mark.asyncio
    async def test_refresh_reloads(self, navigation, shared, transport):
        """Test refresh reloads without touching history."""
        await navigation.refresh()

        shared.page.reload.assert_awaited_once_with(wait_until="domcontentloaded", timeout=30000)
        assert transport.broadcasts[0] == ("loading-start", {"msg": "Refreshing…"})


class TestFrameNavigated:
    """Tests for engine-reported navigations."""

    @pytest.mark.asyncio
    async def test_page_initiated_navigation_recorded(self, navigation, shared, transport):
        """Test link clicks and redirects are recorded and broadcast."""
        frame = shared.page.main_frame
        frame.url = "https://example.com/next"

        await navigation.on_frame_navigated(frame)

        assert navigation.state.history == ["https://example.com/next"]
        assert transport.events() == ["loading-start", "update-url"]

    @pytest.mark.asyncio
    async def test_subframe_ignored(self, navigation, transport):
        """Test iframe navigations are not recorded."""
        iframe = MagicMock()
        iframe.url = "https://ads.example/"

        await navigation.on_frame_navigated(iframe)

        assert navigation.state.history == []
        assert transport.broadcasts == []

    @pytest.mark.asyncio
    async def test_blank_not_recorded(self, navigation, shared):
        """Test about:blank is not added to history."""
        frame = shared.page.main_frame
        frame.url = "about:blank"

        await navigation.on_frame_navigated(frame)

        assert navigation.state.history == []
        assert navigation.state.current_url == ""


class TestAdoptPage:
    """Tests for switching to a newly opened page."""

    @pytest.mark.asyncio
    async def test_adopt_page(self, navigation, shared, page_factory, transport, config):
        """Test the new page is fronted, sized, and the old one closed."""
        old = shared.page
        new = page_factory("https://popup.example/")

        await navigation.adopt_page(new)

        new.bring_to_front.assert_awaited_once()
        new.set_viewport_size.assert_awaited_once_with(config.viewport)
        old.close.assert_awaited_once()
        assert shared.page is new
        assert transport.payloads("update-url") == [{"url": "https://popup.example/"}]

    @pytest.mark.asyncio
    async def test_adopt_page_error_is_logged(self, navigation, shared, page_factory):
        """Test a failing switch does not raise."""
        new = page_factory("https://popup.example/")
        new.bring_to_front = AsyncMock(side_effect=Exception("Target closed"))

        await navigation.adopt_page(new)

        assert shared.page is not new
