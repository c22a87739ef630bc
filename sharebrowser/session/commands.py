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
Commands accepted by the command serializer.

Every operation that touches the shared page is one of these dataclasses.
``participant_id`` is the submitter, or None for commands the session
issues itself (input release on control handoff, tab adoption).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PointerAction(str, Enum):
    """Pointer actions."""
    MOVE = "move"
    DOWN = "down"
    UP = "up"


class KeyAction(str, Enum):
    """Keyboard actions."""
    TYPE = "type"
    DOWN = "down"
    UP = "up"


class PointerButton(str, Enum):
    """Pointer buttons tracked in the input state."""
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"


@dataclass
class Command:
    """Base class for serialized commands."""
    participant_id: Optional[str] = field(default=None, kw_only=True)
    submitted_at: float = field(default_factory=time.time, kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def is_internal(self) -> bool:
        """Issued by the session rather than a participant."""
        return self.participant_id is None


@dataclass
class Navigate(Command):
    """Load free-text address bar input."""
    url: str = ""


@dataclass
class Back(Command):
    """Go back one history entry."""


@dataclass
class Forward(Command):
    """Go forward one history entry."""


@dataclass
class Refresh(Command):
    """Reload the current document."""


@dataclass
class PointerEvent(Command):
    """Pointer input in the reporting client's coordinate space."""
    x: float = 0.0
    y: float = 0.0
    button: PointerButton = PointerButton.LEFT
    action: PointerAction = PointerAction.MOVE
    client_width: Optional[float] = None
    client_height: Optional[float] = None


@dataclass
class KeyEvent(Command):
    """Keyboard input. ``is_char`` is the client's own text/named-key verdict, if sent."""
    key: str = ""
    action: KeyAction = KeyAction.DOWN
    selector: Optional[str] = None
    is_char: Optional[bool] = None


@dataclass
class WheelEvent(Command):
    """Scroll input."""
    delta_x: float = 0.0
    delta_y: float = 0.0


@dataclass
class ReleaseInput(Command):
    """Release every key and button still held (control handoff)."""


@dataclass
class AdoptPage(Command):
    """Switch the shared page to a newly opened page."""
    page: Any = None
