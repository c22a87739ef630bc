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
Session coordination for a shared browsing surface.

- ControlScheduler: who holds control
- CommandSerializer: one engine command at a time, in order
- NavigationModel: navigation commands and history
- InputController: pointer/keyboard/wheel injection
- FrameStreamer: capture loop
- SessionStateBroadcaster: outbound state
- SharedSession: all of the above around one browser
"""

from sharebrowser.session.broadcaster import (
    OutboundEvent,
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
    KeyAction,
    KeyEvent,
    Navigate,
    PointerAction,
    PointerButton,
    PointerEvent,
    Refresh,
    ReleaseInput,
    WheelEvent,
)
from sharebrowser.session.input import InputController, InputState
from sharebrowser.session.navigation import NavigationModel, NavigationState
from sharebrowser.session.scheduler import ControlScheduler
from sharebrowser.session.serializer import CommandSerializer
from sharebrowser.session.session import SharedSession
from sharebrowser.session.streamer import FrameStreamer, StreamMetrics

__all__ = [
    "AdoptPage",
    "Back",
    "Command",
    "CommandSerializer",
    "ControlScheduler",
    "Forward",
    "FrameStreamer",
    "InputController",
    "InputState",
    "KeyAction",
    "KeyEvent",
    "Navigate",
    "NavigationModel",
    "NavigationState",
    "OutboundEvent",
    "PointerAction",
    "PointerButton",
    "PointerEvent",
    "Refresh",
    "ReleaseInput",
    "SessionState",
    "SessionStateBroadcaster",
    "SharedSession",
    "StreamMetrics",
    "Transport",
    "WheelEvent",
    "derive_state",
]
