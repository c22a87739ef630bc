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
Pydantic models for the ShareBrowser wire protocol and REST API.

Every WebSocket frame is a JSON object ``{"event": <name>, "data": <payload>}``.
Inbound payloads are validated here before anything is turned into a
command, so malformed input never reaches the browser.

Example:
    >>> from sharebrowser.service.models import parse_control_event
    >>> event = parse_control_event({"type": "mouse", "x": 10, "y": 20, "action": "down"})
    >>> event.to_command().action
    <PointerAction.DOWN: 'down'>
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from sharebrowser.session.commands import (
    KeyAction,
    KeyEvent,
    PointerAction,
    PointerButton,
    PointerEvent,
    WheelEvent,
)


DOM_KEY_ACTIONS = {
    "keydown": KeyAction.DOWN,
    "keyup": KeyAction.UP,
}


class InboundMessage(BaseModel):
    """Envelope of every frame a participant sends."""

    event: str = Field(..., min_length=1, description="Event name, e.g. 'navigate'")
    data: Any = Field(None, description="Event payload")


class NavigatePayload(BaseModel):
    """Payload of ``navigate``: free text from the address bar."""

    url: str = Field("", max_length=8192, description="URL, hostname or search text")


class ScreenSizePayload(BaseModel):
    """Payload of ``screen-size``: the size the client renders the stream at."""

    w: float = Field(..., gt=0, description="Rendered width in CSS pixels")
    h: float = Field(..., gt=0, description="Rendered height in CSS pixels")


class MouseEventPayload(BaseModel):
    """``control-event`` with ``type: mouse``."""

    type: Literal["mouse"]
    x: float
    y: float
    button: Optional[PointerButton] = None
    action: PointerAction = PointerAction.MOVE

    def to_command(self) -> PointerEvent:
        return PointerEvent(
            x=self.x,
            y=self.y,
            button=self.button or PointerButton.LEFT,
            action=self.action,
        )


class KeyboardEventPayload(BaseModel):
    """``control-event`` with ``type: keyboard``.

    Browsers report the DOM event type as the action (``keydown``,
    ``keyup``); those are accepted next to ``down``, ``up`` and ``type``.
    ``isChar`` marks ``key`` as text to insert, as a paste sends it.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["keyboard"]
    key: str = Field(..., min_length=1, max_length=4096)
    action: KeyAction = KeyAction.DOWN
    selector: Optional[str] = None
    is_char: Optional[bool] = Field(None, alias="isChar")

    @field_validator("action", mode="before")
    @classmethod
    def _dom_event_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return DOM_KEY_ACTIONS.get(value.lower(), value)
        return value

    def to_command(self) -> KeyEvent:
        return KeyEvent(
            key=self.key,
            action=self.action,
            selector=self.selector,
            is_char=self.is_char,
        )


class WheelEventPayload(BaseModel):
    """``control-event`` with ``type: wheel``."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["wheel"]
    delta_x: float = Field(0.0, alias="deltaX")
    delta_y: float = Field(0.0, alias="deltaY")

    def to_command(self) -> WheelEvent:
        return WheelEvent(delta_x=self.delta_x, delta_y=self.delta_y)


ControlEventPayload = Annotated[
    Union[MouseEventPayload, KeyboardEventPayload, WheelEventPayload],
    Field(discriminator="type"),
]

_control_event_adapter: TypeAdapter = TypeAdapter(ControlEventPayload)


def parse_control_event(data: Any) -> Union[MouseEventPayload, KeyboardEventPayload, WheelEventPayload]:
    """
    Validate a ``control-event`` payload.

    Raises:
        pydantic.ValidationError: If the payload is malformed or the type unknown
    """
    return _control_event_adapter.validate_python(data)


class HealthResponse(BaseModel):
    """Response of ``GET /health``."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="ShareBrowser version")
    uptime_seconds: float = Field(..., description="Seconds since startup")
    participants: int = Field(..., description="Connected participants")
    streaming: bool = Field(..., description="Whether the capture loop is running")


class SessionStateResponse(BaseModel):
    """Response of ``GET /api/session``."""

    url: str = Field("", description="Current page URL")
    loading: bool = Field(False, description="Whether participants see a loading state")
    navigating: bool = Field(False, description="Whether a navigation command is in flight")
    holder: Optional[str] = Field(None, description="Participant holding control")
    queue: List[str] = Field(default_factory=list, description="Participants in control order")
    stats: Dict[str, Any] = Field(default_factory=dict, description="Serializer and stream counters")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
