"""Fixed-cadence telemetry polling with connection-health tracking."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from .state import TelemetrySnapshot
from .transport import Transport, TransportError

LOGGER = logging.getLogger(__name__)

SuccessCallback = Callable[[TelemetrySnapshot], None]
FailureCallback = Callable[[TransportError], None]


class TelemetryPoller:
    """Issues fetch_telemetry() every interval without waiting for replies.

    Ticks are scheduled from the start time of the first tick, so a slow
    response never delays the next request. Results are applied in arrival
    order; results belonging to an earlier activation are discarded.
    """

    def __init__(
        self,
        transport: Transport,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
        interval_s: float = 0.1,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be greater than zero")
        self._transport = transport
        self._on_success = on_success
        self._on_failure = on_failure
        self._interval_s = interval_s
        self._loop = loop or asyncio.get_running_loop()
        self._active = False
        self._generation = 0
        self._next_tick = 0.0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: Set[asyncio.Task[None]] = set()

    @property
    def active(self) -> bool:
        return self._active

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def start(self) -> None:
        """Begin polling immediately and then every interval."""
        if self._active:
            return
        self._active = True
        self._generation += 1
        self._next_tick = self._loop.time()
        LOGGER.info("Telemetry polling started every %.3fs", self._interval_s)
        self._tick()

    def stop(self) -> None:
        """Cancel the periodic trigger; late responses become no-ops."""
        if not self._active:
            return
        self._active = False
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        LOGGER.info("Telemetry polling stopped")

    async def cancel_in_flight(self) -> None:
        """Cancel outstanding requests and wait for them to unwind."""
        tasks = list(self._in_flight)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def poll_once(self) -> "asyncio.Task[None]":
        """Fire a single request for the current activation."""
        task = self._loop.create_task(self._poll(self._generation))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    # Internal -----------------------------------------------------------------

    def _tick(self) -> None:
        if not self._active:
            return
        self.poll_once()
        self._next_tick += self._interval_s
        self._timer = self._loop.call_at(self._next_tick, self._tick)

    async def _poll(self, generation: int) -> None:
        try:
            snapshot = await self._transport.fetch_telemetry()
        except TransportError as exc:
            self._fail(generation, exc)
            return
        except Exception as exc:
            LOGGER.warning("Unexpected error fetching telemetry: %r", exc)
            failure = TransportError(f"Unexpected telemetry error: {exc!r}")
            failure.__cause__ = exc
            self._fail(generation, failure)
            return
        if generation != self._generation or not self._active:
            LOGGER.debug("Discarding telemetry from a stopped poller")
            return
        self._on_success(snapshot)

    def _fail(self, generation: int, exc: TransportError) -> None:
        if generation != self._generation or not self._active:
            return
        LOGGER.debug("Telemetry poll failed: %s", exc)
        self._on_failure(exc)


__all__ = ["TelemetryPoller"]
