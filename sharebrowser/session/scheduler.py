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
Turn-based control scheduling.

Connected participants wait in one ordered queue. The head of the queue
holds control; there is no separate cursor, so removing any participant can
never leave control pointing at a stale slot.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from sharebrowser.utils.logger import logger


class ControlScheduler:
    """
    Ordered, duplicate-free queue of participants.

    All methods are synchronous so every mutation is atomic with respect to
    the event loop: when the holder leaves, the next participant is the
    holder before any other coroutine can submit a command.

    Example:
        >>> scheduler = ControlScheduler()
        >>> _ = scheduler.join("a"), scheduler.join("b")
        >>> scheduler.current_holder()
        'a'
        >>> _ = scheduler.leave("a")
        >>> scheduler.current_holder()
        'b'
    """

    def __init__(self) -> None:
        self._queue: List[str] = []

    def join(self, participant_id: str) -> bool:
        """
        Append a participant to the back of the queue.

        Returns:
            True if added, False if already queued
        """
        if participant_id in self._queue:
            return False
        self._queue.append(participant_id)
        logger.info(f"[QUEUE] {participant_id} joined at position {len(self._queue) - 1}")
        return True

    def leave(self, participant_id: str) -> bool:
        """
        Remove a participant. If it held control the next one takes over.

        Returns:
            True if removed, False if it was not queued
        """
        if participant_id not in self._queue:
            return False
        was_holder = self.is_holder(participant_id)
        self._queue.remove(participant_id)
        if was_holder:
            logger.info(f"[QUEUE] Holder {participant_id} left, control -> {self.current_holder()}")
        else:
            logger.info(f"[QUEUE] {participant_id} left")
        return True

    def advance(self) -> Optional[str]:
        """
        Voluntary release: the holder moves to the back of the queue.

        Returns:
            The new holder, or None if the queue is empty
        """
        if not self._queue:
            return None
        released = self._queue.pop(0)
        self._queue.append(released)
        logger.info(f"[QUEUE] {released} released control, control -> {self.current_holder()}")
        return self.current_holder()

    def current_holder(self) -> Optional[str]:
        """Participant holding control, or None."""
        return self._queue[0] if self._queue else None

    def is_holder(self, participant_id: Optional[str]) -> bool:
        """Authorization check for control-affecting requests."""
        return participant_id is not None and self.current_holder() == participant_id

    def position(self, participant_id: str) -> Optional[int]:
        """Zero-based queue position, None if not queued."""
        try:
            return self._queue.index(participant_id)
        except ValueError:
            return None

    def ordered_ids(self) -> List[str]:
        """Snapshot of the queue, holder first."""
        return list(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._queue

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._queue))
