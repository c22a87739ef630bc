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
Strictly ordered command execution against the shared page.

The CommandSerializer is the mutual-exclusion core of a session. Every
command that touches the page goes into one FIFO queue that a single worker
task drains, so at most one command is in flight and commands run in the
order they were submitted no matter how long each one takes.

A failing command is logged and counted; the worker moves on to the next
one. Submitters get a future that resolves to True/False and never raises.

Example:
    >>> serializer = CommandSerializer(executor=session.execute)
    >>> serializer.start()
    >>> done = serializer.submit(Navigate("example.com", participant_id="a"))
    >>> await done
    True
    >>> await serializer.stop()
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Tuple

from sharebrowser.session.commands import Command
from sharebrowser.utils.logger import logger

Executor = Callable[[Command], Awaitable[None]]
Authorizer = Callable[[Optional[str]], bool]


class CommandSerializer:
    """
    Single-worker FIFO executor.

    Args:
        executor: Coroutine function that performs one command
        authorizer: Holder check used when ``recheck_on_execute`` is on
        recheck_on_execute: Drop participant commands whose submitter no
            longer holds control by the time they reach the head of the queue
    """

    def __init__(
        self,
        executor: Executor,
        authorizer: Optional[Authorizer] = None,
        recheck_on_execute: bool = False,
    ) -> None:
        self._executor = executor
        self._authorizer = authorizer
        self.recheck_on_execute = recheck_on_execute
        self._queue: "asyncio.Queue[Tuple[Command, asyncio.Future]]" = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._in_flight: Optional[Command] = None

        self.executed = 0
        self.failed = 0
        self.dropped = 0

    def start(self) -> None:
        """Start the worker. No-op if it is already running."""
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="sharebrowser-serializer")
        logger.debug("[SERIALIZER] Worker started")

    async def stop(self) -> None:
        """Stop the worker. Commands still queued resolve to False."""
        if self._worker:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None

        while not self._queue.empty():
            command, future = self._queue.get_nowait()
            if not future.done():
                future.set_result(False)
            self._queue.task_done()
        logger.debug("[SERIALIZER] Worker stopped")

    def submit(self, command: Command) -> "asyncio.Future[bool]":
        """
        Append a command to the execution order.

        Args:
            command: Command to run after everything submitted before it

        Returns:
            Future resolving to True on success, False on failure or drop
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((command, future))
        logger.debug(
            f"[SERIALIZER] Queued {command.name} from {command.participant_id or 'session'} "
            f"(pending: {self._queue.qsize()})"
        )
        return future

    async def join(self) -> None:
        """Wait until every queued command has finished."""
        await self._queue.join()

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    @property
    def pending(self) -> int:
        """Commands waiting behind the one in flight."""
        return self._queue.qsize()

    @property
    def in_flight(self) -> Optional[Command]:
        return self._in_flight

    async def _run(self) -> None:
        while True:
            command, future = await self._queue.get()
            try:
                if self._should_drop(command):
                    self.dropped += 1
                    logger.debug(
                        f"[SERIALIZER] Dropped {command.name}: "
                        f"{command.participant_id} no longer holds control"
                    )
                    if not future.done():
                        future.set_result(False)
                    continue

                self._in_flight = command
                ok = await self._execute(command)
                if not future.done():
                    future.set_result(ok)
            except asyncio.CancelledError:
                if not future.done():
                    future.set_result(False)
                raise
            finally:
                self._in_flight = None
                self._queue.task_done()

    def _should_drop(self, command: Command) -> bool:
        if not self.recheck_on_execute or command.is_internal or self._authorizer is None:
            return False
        return not self._authorizer(command.participant_id)

    async def _execute(self, command: Command) -> bool:
        try:
            await self._executor(command)
            self.executed += 1
            return True
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failed += 1
            logger.error(f"[SERIALIZER] {command.name} failed: {e}")
            return False
