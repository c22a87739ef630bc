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
Fan-out of observable session state to every participant.

The broadcaster turns scheduler and navigation changes into outbound
events on the transport. It keeps no participant-specific view: each
client derives its own queue position from the shared ``queue-update``
snapshot.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Sequence

from sharebrowser.utils.logger import logger


class OutboundEvent(str, Enum):
    """Events sent from the session to participants."""
    CONNECTED = "connected"
    SCREEN = "screen"
    UPDATE_URL = "update-url"
    LOADING_START = "loading-start"
    LOADING_END = "loading-end"
    QUEUE_UPDATE = "queue-update"
    CLIPBOARD_COPY = "clipboard-copy"


class Transport(Protocol):
    """Delivery of named events to one participant or to all of them."""

    async def send(self, participant_id: str, event: str, data: Any) -> None:
        ...

    async def broadcast(self, event: str, data: Any) -> None:
        ...


@dataclass
class SessionState:
    """Observable state of the session at one point in time."""
    url: str = ""
    loading: bool = False
    navigating: bool = False
    holder: Optional[str] = None
    queue: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "loading": self.loading,
            "navigating": self.navigating,
            "holder": self.holder,
            "queue": list(self.queue),
        }


def derive_state(
    queue_ids: Sequence[str],
    url: str,
    navigating: bool,
    loading: bool,
) -> SessionState:
    """
    Build the observable state from the control queue and navigation state.

    Args:
        queue_ids: Participants in control order, holder first
        url: Current page URL
        navigating: Whether a navigation command is in flight
        loading: Last loading signal sent to participants

    Returns:
        SessionState snapshot
    """
    queue = list(queue_ids)
    return SessionState(
        url=url,
        loading=loading or navigating,
        navigating=navigating,
        holder=queue[0] if queue else None,
        queue=queue,
    )


class SessionStateBroadcaster:
    """
    Pushes session state to participants over a transport.

    Loading signals are sent on transitions only (plus a changed message
    while already loading), so the frame streamer can report "loading
    ended" after every frame without flooding clients.

    Example:
        >>> broadcaster = SessionStateBroadcaster(hub)
        >>> await broadcaster.queue_changed(["a", "b"])
        >>> await broadcaster.loading(True, "Navigating…")
        >>> await broadcaster.url_changed("https://example.com/")
        >>> await broadcaster.loading(False)
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self._loading = False
        self._loading_msg = ""

    @property
    def is_loading(self) -> bool:
        return self._loading

    async def queue_changed(self, ordered_ids: Sequence[str]) -> None:
        await self._broadcast(OutboundEvent.QUEUE_UPDATE, {"orderedIds": list(ordered_ids)})

    async def url_changed(self, url: str) -> None:
        await self._broadcast(OutboundEvent.UPDATE_URL, {"url": url})

    async def loading(self, is_loading: bool, msg: str = "") -> None:
        """Send a loading-start/loading-end transition."""
        if is_loading:
            if self._loading and (not msg or msg == self._loading_msg):
                return
            self._loading = True
            self._loading_msg = msg
            logger.debug(f"[BROADCAST] Loading: {msg or '...'}")
            await self._broadcast(OutboundEvent.LOADING_START, {"msg": msg})
        else:
            if not self._loading and not msg:
                return
            self._loading = False
            self._loading_msg = ""
            await self._broadcast(OutboundEvent.LOADING_END, {"msg": msg})

    async def frame(self, jpeg: bytes) -> None:
        """Broadcast a captured frame as a data URL."""
        data_url = "data:image/jpeg;base64," + base64.b64encode(jpeg).decode("ascii")
        await self._broadcast(OutboundEvent.SCREEN, {"dataUrl": data_url})

    async def clipboard(self, text: str) -> None:
        await self._broadcast(OutboundEvent.CLIPBOARD_COPY, {"text": text})

    async def send_snapshot(self, participant_id: str, state: SessionState) -> None:
        """Bring a newly connected participant up to date."""
        await self._send(participant_id, OutboundEvent.CONNECTED, {"id": participant_id})
        await self._send(participant_id, OutboundEvent.QUEUE_UPDATE, {"orderedIds": list(state.queue)})
        if state.url:
            await self._send(participant_id, OutboundEvent.UPDATE_URL, {"url": state.url})
        if state.loading:
            await self._send(participant_id, OutboundEvent.LOADING_START, {"msg": self._loading_msg})

    async def _broadcast(self, event: OutboundEvent, data: Dict[str, Any]) -> None:
        try:
            await self.transport.broadcast(event.value, data)
        except Exception as e:
            logger.error(f"[BROADCAST] Failed to broadcast {event.value}: {e}")

    async def _send(self, participant_id: str, event: OutboundEvent, data: Dict[str, Any]) -> None:
        try:
            await self.transport.send(participant_id, event.value, data)
        except Exception as e:
            logger.error(f"[BROADCAST] Failed to send {event.value} to {participant_id}: {e}")
