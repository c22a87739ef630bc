# Copyright 2026 Firefly Software Solutions Inc
# SPDX-License-Identifier: Apache-2.0

"""Unit tests for InputController."""

from unittest.mock import AsyncMock, call

import pytest

from sharebrowser.core.page import SharedPage
from sharebrowser.exceptions import PageError
from sharebrowser.session.broadcaster import SessionStateBroadcaster
from sharebrowser.session.commands import (
    KeyAction,
    KeyEvent,
    PointerAction,
    PointerButton,
    PointerEvent,
    WheelEvent,
)
from sharebrowser.session.input import (
    FOCUS_SCRIPT,
    SELECTION_SCRIPT,
    InputController,
    InputState,
    is_printable,
)


@pytest.fixture
def controller(mock_page, transport):
    """Input controller over a 1280x720 capture."""
    return InputController(
        SharedPage(mock_page),
        SessionStateBroadcaster(transport),
        width=1280,
        height=720,
        type_delay_ms=50,
    )


class TestInputState:
    """Tests for held key and button tracking."""

    def test_keys_keep_press_order(self):
        """Test held keys are reported in press order."""
        state = InputState()
        state.press_key("Shift")
        state.press_key("Control")
        state.press_key("Shift")

        assert state.held_keys() == ["Shift", "Control"]
        assert state.release_key("Shift") is True
        assert state.release_key("Shift") is False

    def test_buttons(self):
        """Test button transitions report whether anything changed."""
        state = InputState()

        assert state.set_button(PointerButton.LEFT, True) is True
        assert state.set_button(PointerButton.LEFT, True) is False
        assert state.held_buttons() == [PointerButton.LEFT]
        assert state.is_idle is False

        state.reset()
        assert state.is_idle is True

    def test_is_printable(self):
        """Test single characters are text and named keys are not."""
        assert is_printable("a") is True
        assert is_printable(" ") is True
        assert is_printable("Enter") is False
        assert is_printable("ArrowLeft") is False
        assert is_printable("F5") is False
        assert is_printable("hello world") is True
        assert is_printable("https://example.com") is True


class TestPointer:
    """Tests for pointer injection."""

    def test_scale_to_capture_resolution(self, controller):
        """Test client coordinates are rescaled to the capture size."""
        assert controller.scale(100, 50, 640, 360) == (200.0, 100.0)

    def test_scale_without_client_size(self, controller):
        """Test missing client dimensions leave coordinates unchanged."""
        assert controller.scale(100, 50, None, 0) == (100.0, 50.0)

    @pytest.mark.asyncio
    async def test_click(self, controller, mock_page):
        """Test a down/up pair moves, presses and releases."""
        await controller.pointer(PointerEvent(x=10, y=20, action=PointerAction.DOWN,
                                              client_width=640, client_height=360))
        await controller.pointer(PointerEvent(x=10, y=20, action=PointerAction.UP,
                                              client_width=640, client_height=360))

        assert mock_page.mouse.move.await_args_list == [call(20.0, 40.0), call(20.0, 40.0)]
        mock_page.mouse.down.assert_awaited_once_with(button="left")
        mock_page.mouse.up.assert_awaited_once_with(button="left")
        assert controller.state.is_idle

    @pytest.mark.asyncio
    async def test_repeated_down_is_deduplicated(self, controller, mock_page):
        """Test a second down without an up reaches the engine once."""
        down = PointerEvent(x=1, y=1, action=PointerAction.DOWN)

        await controller.pointer(down)
        await controller.pointer(down)

        mock_page.mouse.down.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_up_without_down_ignored(self, controller, mock_page):
        """Test a stray up is not forwarded."""
        await controller.pointer(PointerEvent(x=1, y=1, action=PointerAction.UP))

        mock_page.mouse.up.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_buttons_tracked_separately(self, controller, mock_page):
        """Test left and right buttons do not shadow each other."""
        await controller.pointer(PointerEvent(action=PointerAction.DOWN))
        await controller.pointer(PointerEvent(action=PointerAction.DOWN, button=PointerButton.RIGHT))

        assert mock_page.mouse.down.await_args_list == [call(button="left"), call(button="right")]

    @pytest.mark.asyncio
    async def test_closed_page(self, page_factory, transport):
        """Test pointer input against a closed page raises PageError."""
        controller = InputController(
            SharedPage(page_factory(closed=True)),
            SessionStateBroadcaster(transport),
            width=1280,
            height=720,
        )

        with pytest.raises(PageError):
            await controller.pointer(PointerEvent())

    @pytest.mark.asyncio
    async def test_wheel(self, controller, mock_page):
        """Test wheel deltas are forwarded."""
        await controller.wheel(WheelEvent(delta_x=0, delta_y=120))

        mock_page.mouse.wheel.assert_awaited_once_with(0, 120)


class TestKeyboard:
    """Tests for keyboard injection."""

    @pytest.mark.asyncio
    async def test_type_action(self, controller, mock_page):
        """Test the type action inserts text with the configured delay."""
        await controller.key(KeyEvent(key="hello", action=KeyAction.TYPE))

        mock_page.keyboard.type.assert_awaited_once_with("hello", delay=50)

    @pytest.mark.asyncio
    async def test_focus_selector_or_body(self, controller, mock_page):
        """Test focus goes to the selector, or to the body without one."""
        await controller.key(KeyEvent(key="a", selector="#q"))
        await controller.key(KeyEvent(key="b"))

        mock_page.focus.assert_awaited_once_with("#q")
        mock_page.evaluate.assert_awaited_once_with(FOCUS_SCRIPT)

    @pytest.mark.asyncio
    async def test_printable_down_types(self, controller, mock_page):
        """Test printable keys are inserted as text and their up is skipped."""
        await controller.key(KeyEvent(key="x", action=KeyAction.DOWN))
        await controller.key(KeyEvent(key="x", action=KeyAction.UP))

        mock_page.keyboard.type.assert_awaited_once_with("x", delay=50)
        mock_page.keyboard.down.assert_not_awaited()
        mock_page.keyboard.up.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pasted_text_is_typed(self, controller, mock_page):
        """Test multi-character text on down is inserted, not pressed."""
        await controller.key(KeyEvent(key="hello world", action=KeyAction.DOWN))

        mock_page.keyboard.type.assert_awaited_once_with("hello world", delay=50)
        mock_page.keyboard.down.assert_not_awaited()
        assert controller.state.is_idle

    @pytest.mark.asyncio
    async def test_paste_after_control_release(self, controller, mock_page):
        """Test the client's paste sequence (Control up, then text flagged isChar) types the text."""
        await controller.key(KeyEvent(key="Control", action=KeyAction.DOWN))
        await controller.key(KeyEvent(key="Control", action=KeyAction.UP))
        await controller.key(KeyEvent(key="Pasted", action=KeyAction.DOWN, is_char=True))

        mock_page.keyboard.type.assert_awaited_once_with("Pasted", delay=50)
        mock_page.keyboard.down.assert_awaited_once_with("Control")

    @pytest.mark.asyncio
    async def test_named_key_down_up(self, controller, mock_page):
        """Test named keys are pressed and released."""
        await controller.key(KeyEvent(key="Enter", action=KeyAction.DOWN))
        assert controller.state.held_keys() == ["Enter"]

        await controller.key(KeyEvent(key="Enter", action=KeyAction.UP))

        mock_page.keyboard.down.assert_awaited_once_with("Enter")
        mock_page.keyboard.up.assert_awaited_once_with("Enter")
        assert controller.state.is_idle

    @pytest.mark.asyncio
    async def test_copy_shortcut_broadcasts_selection(self, controller, mock_page, transport):
        """Test Ctrl+C sends the page selection to every participant."""
        mock_page.evaluate = AsyncMock(return_value="copied text")

        await controller.key(KeyEvent(key="Control", action=KeyAction.DOWN))
        await controller.key(KeyEvent(key="c", action=KeyAction.DOWN))

        mock_page.keyboard.down.assert_has_awaits([call("Control"), call("c")])
        mock_page.keyboard.type.assert_not_awaited()
        mock_page.evaluate.assert_any_await(SELECTION_SCRIPT)
        assert transport.payloads("clipboard-copy") == [{"text": "copied text"}]

    @pytest.mark.asyncio
    async def test_empty_selection_not_broadcast(self, controller, mock_page, transport):
        """Test nothing is sent when the selection is empty."""
        await controller.key(KeyEvent(key="Meta", action=KeyAction.DOWN))
        await controller.key(KeyEvent(key="c", action=KeyAction.DOWN))

        assert transport.payloads("clipboard-copy") == []


class TestReleaseAll:
    """Tests for InputController.release_all()."""

    @pytest.mark.asyncio
    async def test_releases_keys_then_buttons(self, controller, mock_page):
        """Test held keys are released in reverse order, then buttons."""
        await controller.key(KeyEvent(key="Shift", action=KeyAction.DOWN))
        await controller.key(KeyEvent(key="Control", action=KeyAction.DOWN))
        await controller.pointer(PointerEvent(action=PointerAction.DOWN))

        await controller.release_all()

        assert mock_page.keyboard.up.await_args_list == [call("Control"), call("Shift")]
        mock_page.mouse.up.assert_awaited_once_with(button="left")
        assert controller.state.is_idle

    @pytest.mark.asyncio
    async def test_idle_state_is_noop(self, controller, mock_page):
        """Test nothing is sent when nothing is held."""
        await controller.release_all()

        mock_page.keyboard.up.assert_not_awaited()
        mock_page.mouse.up.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_engine_errors_still_reset(self, controller, mock_page):
        """Test the state is cleared even when the page rejects a release."""
        await controller.key(KeyEvent(key="Alt", action=KeyAction.DOWN))
        mock_page.keyboard.up = AsyncMock(side_effect=Exception("Target closed"))

        await controller.release_all()

        assert controller.state.is_idle
