"""Shared fixtures: a real event loop and a manual-clock fake loop."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

import pytest


class FakeTimer:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTask:
    def __init__(self, coro: Any) -> None:
        self.name = getattr(coro, "__qualname__", repr(coro))
        coro.close()

    def add_done_callback(self, callback: Callable[..., Any]) -> None:
        pass

    def cancel(self) -> None:
        pass


class FakeLoop:
    """Deterministic stand-in for the scheduling subset of an event loop."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: List[FakeTimer] = []
        self.tasks: List[FakeTask] = []

    def time(self) -> float:
        return self.now

    def call_at(self, when: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        timer = FakeTimer(when, callback, args)
        self.timers.append(timer)
        return timer

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeTimer:
        return self.call_at(self.now + delay, callback, *args)

    def create_task(self, coro: Any) -> FakeTask:
        task = FakeTask(coro)
        self.tasks.append(task)
        return task

    @property
    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due: Optional[FakeTimer] = min(
                (t for t in self.pending if t.when <= target),
                key=lambda t: t.when,
                default=None,
            )
            if due is None:
                break
            self.now = max(self.now, due.when)
            due.fired = True
            due.callback(*due.args)
        self.now = target


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def aio_loop() -> asyncio.AbstractEventLoop:
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()
