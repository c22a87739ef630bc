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

"""WebSocket connection registry used as the session's transport."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from sharebrowser.utils.logger import logger


class _Connection:
    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        # Frames, commands and handlers all send; keep whole messages apart
        self.lock = asyncio.Lock()

    async def send_text(self, text: str) -> None:
        async with self.lock:
            await self.websocket.send_text(text)


class ConnectionHub:
    """
    Delivers named events to one participant or to all of them.

    Messages are JSON text frames ``{"event": name, "data": payload}``.
    A connection that fails to receive is dropped from the hub; the
    WebSocket endpoint notices the disconnect and removes the participant
    from the session.
    """

    def __init__(self) -> None:
        self._connections: Dict[str, _Connection] = {}

    def register(self, participant_id: str, websocket: WebSocket) -> None:
        self._connections[participant_id] = _Connection(websocket)
        logger.info(f"[WS] Participant connected: {participant_id} ({len(self._connections)} total)")

    def unregister(self, participant_id: str) -> None:
        if self._connections.pop(participant_id, None) is not None:
            logger.info(f"[WS] Participant disconnected: {participant_id}")

    @property
    def participant_ids(self) -> List[str]:
        return list(self._connections)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._connections

    @staticmethod
    def encode(event: str, data: Any) -> str:
        return json.dumps({"event": event, "data": data})

    async def send(self, participant_id: str, event: str, data: Any) -> None:
        """Send an event to one participant."""
        connection: Optional[_Connection] = self._connections.get(participant_id)
        if connection is None:
            return
        try:
            await connection.send_text(self.encode(event, data))
        except Exception as e:
            logger.warning(f"[WS] Failed to send {event} to {participant_id}: {e}")
            self._connections.pop(participant_id, None)

    async def broadcast(self, event: str, data: Any) -> None:
        """Send an event to every connected participant."""
        text = self.encode(event, data)
        dead: List[str] = []

        for participant_id, connection in list(self._connections.items()):
            try:
                await connection.send_text(text)
            except Exception:
                dead.append(participant_id)

        for participant_id in dead:
            if self._connections.pop(participant_id, None) is not None:
                logger.warning(f"[WS] Dropped dead connection: {participant_id}")

    async def close_all(self) -> None:
        for participant_id, connection in list(self._connections.items()):
            try:
                await connection.websocket.close()
            except Exception as e:
                logger.debug(f"[WS] Error closing {participant_id}: {e}")
        self._connections.clear()
