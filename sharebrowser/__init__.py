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
ShareBrowser - one live browser page shared by many participants.

Participants watch a continuous screenshot stream of a single headless
page. Exactly one of them holds control at a time; control rotates
through a FIFO queue as participants release it or disconnect.
"""

__version__ = "0.3.0"
__author__ = "Firefly Software Solutions Inc"
__license__ = "Apache-2.0"

from sharebrowser.config import SessionConfig
from sharebrowser.core.browser import BrowserManager
from sharebrowser.core.page import SharedPage
from sharebrowser.session import (
    CommandSerializer,
    ControlScheduler,
    FrameStreamer,
    NavigationModel,
    SessionStateBroadcaster,
    SharedSession,
)

__all__ = [
    # Core
    "BrowserManager",
    "SharedPage",
    # Session
    "CommandSerializer",
    "ControlScheduler",
    "FrameStreamer",
    "NavigationModel",
    "SessionConfig",
    "SessionStateBroadcaster",
    "SharedSession",
]
