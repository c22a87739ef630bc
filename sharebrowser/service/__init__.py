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
ShareBrowser service layer.

This module provides:
- The FastAPI application with the ``/ws`` participant channel
- The WebSocket connection hub the session broadcasts through
- Pydantic models for the wire protocol

Example:
    >>> uvicorn sharebrowser.service.app:app --host 0.0.0.0 --port 3000
"""

from sharebrowser.service.events import InboundEvent, handle_inbound
from sharebrowser.service.transport import ConnectionHub

__all__ = [
    "ConnectionHub",
    "InboundEvent",
    "handle_inbound",
]
