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
Routing of inbound participant events into the shared session.

Inbound events:
    control-event   {type: mouse|keyboard|wheel, ...}   holder only
    navigate        {url}                               holder only
    nav-back                                            holder only
    nav-forward                                         holder only
    nav-refresh                                         holder only
    screen-size     {w, h}                              anyone
    release-control                                     holder only

Events from participants without control are dropped by the session
without a reply. Malformed payloads are logged and dropped here.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict

from pydantic import ValidationError

from sharebrowser.service.models import (
    InboundMessage,
    NavigatePayload,
    ScreenSizePayload,
    parse_control_event,
)
from sharebrowser.session.commands import Back, Forward, Navigate, Refresh
from sharebrowser.session.session import SharedSession
from sharebrowser.utils.logger import logger


class InboundEvent(str, Enum):
    """Events sent from participants to the session."""
    CONTROL_EVENT = "control-event"
    NAVIGATE = "navigate"
    NAV_BACK = "nav-back"
    NAV_FORWARD = "nav-forward"
    NAV_REFRESH = "nav-refresh"
    SCREEN_SIZE = "screen-size"
    RELEASE_CONTROL = "release-control"


_HISTORY_COMMANDS = {
    InboundEvent.NAV_BACK: Back,
    InboundEvent.NAV_FORWARD: Forward,
    InboundEvent.NAV_REFRESH: Refresh,
}


def _as_object(data: Any, key: str) -> Any:
    # Older clients send the bare value instead of an object
    if data is None:
        return {}
    if isinstance(data, str):
        return {key: data}
    return data


async def handle_inbound(session: SharedSession, participant_id: str, message: Dict[str, Any]) -> bool:
    """
    Apply one inbound frame to the session.

    Args:
        session: The shared session
        participant_id: Sender
        message: Decoded JSON frame

    Returns:
        True if the frame was well formed and routed, False if it was dropped
        as malformed or unknown. Authorization drops still return True.
    """
    try:
        envelope = InboundMessage.model_validate(message)
        event = InboundEvent(envelope.event)
    except (ValidationError, ValueError) as e:
        logger.warning(f"[WS] Dropped malformed frame from {participant_id}: {e}")
        return False

    try:
        if event == InboundEvent.CONTROL_EVENT:
            payload = parse_control_event(envelope.data)
            session.submit(participant_id, payload.to_command())

        elif event == InboundEvent.NAVIGATE:
            payload = NavigatePayload.model_validate(_as_object(envelope.data, "url"))
            session.submit(participant_id, Navigate(payload.url))

        elif event in _HISTORY_COMMANDS:
            session.submit(participant_id, _HISTORY_COMMANDS[event]())

        elif event == InboundEvent.SCREEN_SIZE:
            payload = ScreenSizePayload.model_validate(envelope.data)
            session.set_client_viewport(participant_id, payload.w, payload.h)

        elif event == InboundEvent.RELEASE_CONTROL:
            await session.release_control(participant_id)

    except ValidationError as e:
        logger.warning(f"[WS] Dropped invalid {event.value} from {participant_id}: {e.error_count()} error(s)")
        return False

    return True
