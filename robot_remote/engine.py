"""Composition root wiring polling, input mapping, and mode control."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Callable, List, Optional

from .command_mapper import CommandMapper
from .configuration import EngineSettings
from .dispatcher import CommandDispatcher
from .mode_controller import ModeController
from .poller import TelemetryPoller
from .state import ControlMode, Direction, EngineState, TelemetrySnapshot
from .transport import Transport, TransportError

LOGGER = logging.getLogger(__name__)

StateListener = Callable[[EngineState], None]


class Engine:
    """Owns the shared state and exposes it read-only to the presentation.

    All mutation happens on the event loop thread in response to timer or
    input callbacks; each change replaces the frozen ``EngineState`` whole.
    """

    def __init__(
        self,
        transport: Transport,
        settings: Optional[EngineSettings] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        settings = settings or EngineSettings()
        self._loop = loop or asyncio.get_running_loop()
        self._transport = transport
        self._state = EngineState()
        self._listeners: List[StateListener] = []
        self._active = False
        self._closed = False

        self._dispatcher = CommandDispatcher(
            transport, queue_size=settings.command_queue_size, loop=self._loop
        )
        self._mapper = CommandMapper(
            self._dispatcher.submit_command,
            repeat_interval_s=settings.repeat_interval_s,
            loop=self._loop,
        )
        self._modes = ModeController(self._mapper, self._dispatcher.submit_mode)
        self._poller = TelemetryPoller(
            transport,
            on_success=self._on_telemetry,
            on_failure=self._on_poll_failure,
            interval_s=settings.poll_interval_s,
            loop=self._loop,
        )

    async def __aenter__(self) -> "Engine":
        self.activate()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def active(self) -> bool:
        return self._active

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with each new state; returns unsubscribe."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Lifecycle ----------------------------------------------------------------

    def activate(self) -> None:
        if self._active:
            return
        if self._closed:
            raise RuntimeError("Engine has been deactivated and cannot be restarted")
        self._active = True
        self._dispatcher.start()
        self._poller.start()
        LOGGER.info("Engine activated")

    def deactivate(self) -> None:
        """Cancel both timers; safe to call repeatedly."""
        if not self._active:
            return
        self._active = False
        self._closed = True
        self._poller.stop()
        self._mapper.set_enabled(False)
        self._dispatcher.close()
        self._publish()
        LOGGER.info("Engine deactivated")

    async def aclose(self) -> None:
        """Deactivate, flush queued commands, and release the transport."""
        self.deactivate()
        self._closed = True
        await self._dispatcher.wait_closed()
        await self._poller.cancel_in_flight()
        await self._transport.close()

    # Presentation entry points -------------------------------------------------

    def on_directive_start(self, direction: Direction | str) -> bool:
        if not self._active:
            return False
        started = self._mapper.on_directive_start(direction)
        self._publish()
        return started

    def on_directive_end(self) -> bool:
        if not self._active:
            return False
        ended = self._mapper.on_directive_end()
        self._publish()
        return ended

    def on_key_down(self, key: str) -> bool:
        if not self._active:
            return False
        handled = self._mapper.on_key_down(key)
        self._publish()
        return handled

    def on_key_up(self, key: str) -> bool:
        if not self._active:
            return False
        handled = self._mapper.on_key_up(key)
        self._publish()
        return handled

    def switch_mode(self, target: ControlMode | str) -> bool:
        if not self._active:
            return False
        switched = self._modes.switch_mode(target)
        self._publish()
        return switched

    # Poller callbacks -----------------------------------------------------------

    def _on_telemetry(self, snapshot: TelemetrySnapshot) -> None:
        if not self._state.connected:
            LOGGER.info("Robot connected")
        self._publish(telemetry=snapshot, connected=True)

    def _on_poll_failure(self, exc: TransportError) -> None:
        if self._state.connected:
            LOGGER.warning("Robot connection lost: %s", exc)
        self._publish(connected=False)

    # Internal helpers -----------------------------------------------------

    def _publish(self, **changes: object) -> None:
        new_state = replace(
            self._state,
            mode=self._modes.mode,
            active_directive=self._mapper.active_directive,
            **changes,
        )
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                LOGGER.exception("State listener %r failed", listener)


__all__ = ["Engine", "StateListener"]
