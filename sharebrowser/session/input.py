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
Pointer, keyboard and wheel injection into the shared page.

Participants watch the stream at different sizes, so pointer coordinates
are rescaled from each client's viewport to the fixed capture resolution.
Buttons and non-printable keys that are held down are tracked in
InputState, which lets the session release them whenever control changes
hands or the page navigates, so no modifier stays stuck for the next holder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sharebrowser.core.page import SharedPage
from sharebrowser.session.broadcaster import SessionStateBroadcaster
from sharebrowser.session.commands import (
    KeyAction,
    KeyEvent,
    PointerAction,
    PointerButton,
    PointerEvent,
    WheelEvent,
)
from sharebrowser.utils.logger import logger

COPY_MODIFIERS = ("Control", "Meta")
NAMED_KEY_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
TEXT_BLOCKING_MODIFIERS = ("Control", "Meta", "Alt")

FOCUS_SCRIPT = """() => {
    const active = document.activeElement;
    if (!active || active === document.body) document.body.focus();
}"""

SELECTION_SCRIPT = """() => {
    const selection = window.getSelection();
    return selection ? selection.toString() : "";
}"""


@dataclass
class InputState:
    """Keys and pointer buttons currently held down on the shared page."""
    pressed_keys: Dict[str, None] = field(default_factory=dict)
    buttons: Dict[PointerButton, bool] = field(
        default_factory=lambda: {button: False for button in PointerButton}
    )

    def press_key(self, key: str) -> None:
        self.pressed_keys[key] = None

    def release_key(self, key: str) -> bool:
        """Forget a key. Returns True if it was held."""
        return self.pressed_keys.pop(key, False) is None

    def has_modifier(self, *modifiers: str) -> bool:
        return any(m in self.pressed_keys for m in modifiers)

    def is_down(self, button: PointerButton) -> bool:
        return self.buttons.get(button, False)

    def set_button(self, button: PointerButton, down: bool) -> bool:
        """Record a button transition. Returns False if nothing changed."""
        if self.buttons.get(button, False) == down:
            return False
        self.buttons[button] = down
        return True

    def held_buttons(self) -> List[PointerButton]:
        return [b for b, down in self.buttons.items() if down]

    def held_keys(self) -> List[str]:
        return list(self.pressed_keys)

    def reset(self) -> None:
        self.pressed_keys.clear()
        for button in self.buttons:
            self.buttons[button] = False

    @property
    def is_idle(self) -> bool:
        return not self.pressed_keys and not self.held_buttons()


def is_printable(key: str) -> bool:
    """
    Whether a key value is text to insert rather than a named key.

    Single characters are always text. Named keys are PascalCase identifiers
    ("Enter", "ArrowLeft", "F5"), so anything longer that does not look like
    one (a pasted "hello world") is text as well.
    """
    return len(key) == 1 or not NAMED_KEY_RE.match(key)


class InputController:
    """
    Executes input commands against the shared page.

    Only the command serializer calls into this class, so the engine never
    sees two input calls at once.
    """

    def __init__(
        self,
        shared_page: SharedPage,
        broadcaster: SessionStateBroadcaster,
        width: int,
        height: int,
        type_delay_ms: int = 50,
    ) -> None:
        self.shared_page = shared_page
        self.broadcaster = broadcaster
        self.width = width
        self.height = height
        self.type_delay_ms = type_delay_ms
        self.state = InputState()

    def scale(
        self,
        x: float,
        y: float,
        client_width: Optional[float],
        client_height: Optional[float],
    ) -> Tuple[float, float]:
        """Map client viewport coordinates onto the capture resolution."""
        client_width = client_width if client_width and client_width > 0 else self.width
        client_height = client_height if client_height and client_height > 0 else self.height
        return x * self.width / client_width, y * self.height / client_height

    async def pointer(self, event: PointerEvent) -> None:
        page = self.shared_page.require()
        x, y = self.scale(event.x, event.y, event.client_width, event.client_height)
        await page.mouse.move(x, y)

        button = PointerButton(event.button)
        if event.action == PointerAction.DOWN:
            if self.state.is_down(button):
                logger.debug(f"[INPUT] Ignoring repeated {button.value} down")
                return
            await page.mouse.down(button=button.value)
            self.state.set_button(button, True)
        elif event.action == PointerAction.UP:
            if not self.state.is_down(button):
                return
            await page.mouse.up(button=button.value)
            self.state.set_button(button, False)

    async def key(self, event: KeyEvent) -> None:
        page = self.shared_page.require()
        await self._focus(event.selector)

        if event.action == KeyAction.TYPE:
            await page.keyboard.type(event.key, delay=self.type_delay_ms)
            return

        text_input = (
            (event.is_char or is_printable(event.key))
            and not self.state.has_modifier(*TEXT_BLOCKING_MODIFIERS)
        )

        if event.action == KeyAction.DOWN:
            if text_input:
                await page.keyboard.type(event.key, delay=self.type_delay_ms)
                return
            await page.keyboard.down(event.key)
            self.state.press_key(event.key)
            if event.key.lower() == "c" and self.state.has_modifier(*COPY_MODIFIERS):
                await self._copy_selection()
        elif event.action == KeyAction.UP:
            if not self.state.release_key(event.key) and text_input:
                # Text was inserted on "down", nothing is held
                return
            await page.keyboard.up(event.key)

    async def wheel(self, event: WheelEvent) -> None:
        page = self.shared_page.require()
        await page.mouse.wheel(event.delta_x, event.delta_y)

    async def release_all(self) -> None:
        """Release every held key and button, then clear the state."""
        if self.state.is_idle:
            return
        page = self.shared_page.page if self.shared_page.is_valid() else None
        if page is not None:
            for key in reversed(self.state.held_keys()):
                try:
                    await page.keyboard.up(key)
                except Exception as e:
                    logger.debug(f"[INPUT] Could not release key {key}: {e}")
            for button in self.state.held_buttons():
                try:
                    await page.mouse.up(button=button.value)
                except Exception as e:
                    logger.debug(f"[INPUT] Could not release {button.value} button: {e}")
        logger.info(
            f"[INPUT] Released keys={self.state.held_keys()} "
            f"buttons={[b.value for b in self.state.held_buttons()]}"
        )
        self.state.reset()

    async def _focus(self, selector: Optional[str]) -> None:
        page = self.shared_page.require()
        try:
            if selector:
                await page.focus(selector)
            else:
                await page.evaluate(FOCUS_SCRIPT)
        except Exception as e:
            logger.debug(f"[INPUT] Focus failed ({selector or 'body'}): {e}")

    async def _copy_selection(self) -> None:
        text = await self.shared_page.evaluate(SELECTION_SCRIPT)
        if text:
            logger.info(f"[INPUT] Copied {len(text)} characters from selection")
            await self.broadcaster.clipboard(text)
