"""Ordered, non-blocking delivery of fire-and-forget robot commands."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

from .state import STOP_COMMAND
from .transport import Transport

LOGGER = logging.getLogger(__name__)

KIND_COMMAND = "cmd"
KIND_MODE = "mode"


@dataclass(frozen=True)
class Command:
    """A single request for the /command endpoint."""

    kind: str
    value: str

    @property
    def droppable(self) -> bool:
        # Repeated directives are superseded by the next one; stop and mode are not.
        return self.kind == KIND_COMMAND and self.value != STOP_COMMAND


class CommandDispatcher:
    """Single worker draining a bounded FIFO of commands in issue order."""

    def __init__(
        self,
        transport: Transport,
        queue_size: int = 32,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._transport = transport
        self._loop = loop
        self._queue_size = max(1, queue_size)
        self._queue: Deque[Command] = deque()
        self._wakeup = asyncio.Event()
        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False
        self._task: Optional[asyncio.Task[None]] = None

    def start(self) -> None:
        """Spawn the delivery worker on the event loop."""
        if self._task is not None:
            return
        loop = self._loop or asyncio.get_running_loop()
        self._closed = False
        self._task = loop.create_task(self._run())

    def close(self) -> None:
        """Stop accepting commands; queued ones are still delivered."""
        if self._closed:
            return
        self._closed = True
        self._wakeup.set()

    async def wait_closed(self) -> None:
        if self._task is None:
            return
        await self._task
        self._task = None

    async def drain(self) -> None:
        """Wait until every queued command has been handed to the transport."""
        await self._idle.wait()

    @property
    def pending(self) -> int:
        return len(self._queue)

    def submit_command(self, action: str) -> bool:
        return self._enqueue(Command(KIND_COMMAND, action))

    def submit_mode(self, mode: str) -> bool:
        return self._enqueue(Command(KIND_MODE, mode))

    # Internal -----------------------------------------------------------------

    def _enqueue(self, command: Command) -> bool:
        if self._closed:
            LOGGER.debug("Dispatcher closed, dropping %s", command)
            return False
        if not command.droppable:
            purged = self._purge_directives()
            if purged:
                LOGGER.debug("Discarded %d queued directives superseded by %s", purged, command)
        elif len(self._queue) >= self._queue_size:
            if self._drop_oldest_directive():
                LOGGER.debug("Command queue full, dropped oldest directive")
            else:
                LOGGER.debug("Command queue full, rejecting %s", command)
                return False
        self._queue.append(command)
        self._idle.clear()
        self._wakeup.set()
        return True

    def _purge_directives(self) -> int:
        kept = [queued for queued in self._queue if not queued.droppable]
        purged = len(self._queue) - len(kept)
        self._queue = deque(kept)
        return purged

    def _drop_oldest_directive(self) -> bool:
        for idx, queued in enumerate(self._queue):
            if queued.droppable:
                del self._queue[idx]
                return True
        return False

    async def _run(self) -> None:
        while True:
            if not self._queue:
                self._idle.set()
                if self._closed:
                    return
                self._wakeup.clear()
                await self._wakeup.wait()
                continue
            command = self._queue.popleft()
            try:
                await self._deliver(command)
            except Exception as exc:  # pragma: no cover
                LOGGER.warning("Unexpected error delivering %s: %s", command, exc)

    async def _deliver(self, command: Command) -> None:
        if command.kind == KIND_MODE:
            await self._transport.send_mode(command.value)
        else:
            await self._transport.send_command(command.value)


__all__ = ["Command", "CommandDispatcher"]
