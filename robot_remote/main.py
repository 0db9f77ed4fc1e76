"""Entrypoint for the console remote-control client."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from .configuration import AppConfig, RobotConfig, load_config, load_default_config
from .display import render_dashboard
from .engine import Engine
from .state import ControlMode, Direction
from .transport import HttpTransport

LOGGER = logging.getLogger(__name__)

DIRECTION_ALIASES: Dict[str, Direction] = {
    "forward": Direction.FORWARD,
    "w": Direction.FORWARD,
    "backward": Direction.BACKWARD,
    "s": Direction.BACKWARD,
    "left": Direction.LEFT,
    "a": Direction.LEFT,
    "right": Direction.RIGHT,
    "d": Direction.RIGHT,
}
STOP_WORDS = {"", "stop", "x"}
MODE_ALIASES: Dict[str, ControlMode] = {
    "auto": ControlMode.AUTONOMOUS,
    "autonomous": ControlMode.AUTONOMOUS,
    "manual": ControlMode.MANUAL,
}
QUIT_WORDS = {"q", "quit", "exit"}


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remote control and telemetry for the robot.")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML. Defaults to bundled config.yaml if omitted.",
    )
    parser.add_argument(
        "--base-url",
        help="Robot base address, e.g. http://192.168.1.50 (overrides robot.base_url).",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def handle_line(engine: Engine, line: str) -> bool:
    """Apply one line of operator input; returns False when the user quits."""
    word = line.strip().lower()
    if word in QUIT_WORDS:
        return False
    if word in STOP_WORDS:
        engine.on_directive_end()
    elif word in DIRECTION_ALIASES:
        engine.on_directive_start(DIRECTION_ALIASES[word])
    elif word in MODE_ALIASES:
        engine.switch_mode(MODE_ALIASES[word])
    else:
        LOGGER.warning("Unknown input %r", word)
    return True


async def display_loop(engine: Engine, refresh_hz: float, write: Callable[[str], object] = print) -> None:
    """Render the dashboard at a fixed rate until cancelled."""
    interval = 1.0 / refresh_hz
    try:
        while True:
            write(render_dashboard(engine.state) + "\n")
            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        LOGGER.debug("Display loop cancelled")
        raise


async def input_loop(engine: Engine) -> None:
    """Read operator commands from stdin until EOF or quit."""
    loop = asyncio.get_running_loop()
    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            LOGGER.info("stdin closed")
            return
        if not handle_line(engine, line):
            return


def _with_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    if not args.base_url:
        return config
    robot = RobotConfig(base_url=args.base_url, request_timeout_s=config.robot.request_timeout_s)
    return AppConfig(robot=robot, engine=config.engine, display=config.display, logging=config.logging)


async def async_main(args: argparse.Namespace) -> None:
    config = load_config(args.config) if args.config else load_default_config()
    config = _with_overrides(config, args)
    logging.basicConfig(level=getattr(logging, config.logging.level.upper(), logging.INFO))

    transport = HttpTransport(config.robot.base_url, timeout_s=config.robot.request_timeout_s)
    async with Engine(transport, config.engine) as engine:
        LOGGER.info("Controlling robot at %s", config.robot.base_url)
        display_task = asyncio.create_task(display_loop(engine, config.display.refresh_hz))
        try:
            await input_loop(engine)
        finally:
            display_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await display_task


def main() -> None:
    args = parse_args()
    try:
        asyncio.run(async_main(args))
    except KeyboardInterrupt:
        LOGGER.info("Interrupted by user")


if __name__ == "__main__":
    main()
