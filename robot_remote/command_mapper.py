"""Turns press/release input into a repeating directive command stream."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from .state import STOP_COMMAND, Direction

LOGGER = logging.getLogger(__name__)

SendFn = Callable[[str], object]

KEY_DIRECTIONS: Dict[str, Direction] = {
    "ArrowUp": Direction.FORWARD,
    "ArrowDown": Direction.BACKWARD,
    "ArrowLeft": Direction.LEFT,
    "ArrowRight": Direction.RIGHT,
}


class InputState(str, Enum):
    IDLE = "idle"
    HELD = "held"


@dataclass
class RepeatHandle:
    """The single live repeat stream for a held directive."""

    direction: Direction
    started_at: float
    issued: int = 1
    timer: Optional[asyncio.TimerHandle] = field(default=None, repr=False)

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class CommandMapper:
    """Idle/held state machine owning at most one RepeatHandle.

    ``send`` is called synchronously with the command string; it must not
    block (the engine hands commands to the dispatcher queue).
    """

    def __init__(
        self,
        send: SendFn,
        repeat_interval_s: float = 0.1,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if repeat_interval_s <= 0:
            raise ValueError("repeat_interval_s must be greater than zero")
        self._send = send
        self._interval_s = repeat_interval_s
        self._loop = loop or asyncio.get_running_loop()
        self._handle: Optional[RepeatHandle] = None
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def state(self) -> InputState:
        return InputState.HELD if self._handle is not None else InputState.IDLE

    @property
    def active_directive(self) -> Optional[Direction]:
        return self._handle.direction if self._handle is not None else None

    def on_directive_start(self, direction: Direction | str) -> bool:
        """Start streaming ``direction``; returns False when ignored."""
        direction = Direction(direction)
        if not self._enabled:
            LOGGER.debug("Ignoring %s: manual input disabled", direction.value)
            return False
        if self._handle is not None:
            LOGGER.debug(
                "Ignoring %s: %s already held",
                direction.value,
                self._handle.direction.value,
            )
            return False

        self._send(direction.value)
        handle = RepeatHandle(direction=direction, started_at=self._loop.time())
        self._handle = handle
        self._schedule(handle)
        LOGGER.debug("Directive %s held", direction.value)
        return True

    def on_directive_end(self) -> bool:
        """Release the held directive (if any) and always send one stop."""
        if not self._enabled:
            LOGGER.debug("Ignoring release: manual input disabled")
            return False
        self._cancel_handle()
        self._send(STOP_COMMAND)
        return True

    def on_key_down(self, key: str) -> bool:
        direction = KEY_DIRECTIONS.get(key)
        if direction is None:
            return False
        # OS key-repeat arrives as further key-downs; the held stream absorbs them.
        return self.on_directive_start(direction)

    def on_key_up(self, key: str) -> bool:
        if key not in KEY_DIRECTIONS:
            return False
        return self.on_directive_end()

    def set_enabled(self, enabled: bool) -> None:
        """Gate input; disabling tears down a live stream with a trailing stop."""
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if not enabled and self._cancel_handle():
            self._send(STOP_COMMAND)

    # Internal helpers -----------------------------------------------------

    def _cancel_handle(self) -> bool:
        handle = self._handle
        if handle is None:
            return False
        handle.cancel()
        self._handle = None
        LOGGER.debug("Directive %s released after %d commands", handle.direction.value, handle.issued)
        return True

    def _schedule(self, handle: RepeatHandle) -> None:
        when = handle.started_at + handle.issued * self._interval_s
        handle.timer = self._loop.call_at(when, self._repeat, handle)

    def _repeat(self, handle: RepeatHandle) -> None:
        if handle is not self._handle:
            return
        self._send(handle.direction.value)
        handle.issued += 1
        self._schedule(handle)


__all__ = ["CommandMapper", "InputState", "KEY_DIRECTIONS", "RepeatHandle"]
