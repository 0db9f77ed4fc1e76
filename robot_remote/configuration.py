"""Configuration loading and dataclasses for the remote-control client."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class RobotConfig:
    base_url: str = "http://192.168.1.50"
    request_timeout_s: float = 1.0

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("robot.base_url must not be empty")
        if self.request_timeout_s <= 0:
            raise ValueError("robot.request_timeout_s must be greater than zero")


@dataclass(frozen=True)
class EngineSettings:
    poll_interval_s: float = 0.1
    repeat_interval_s: float = 0.1
    command_queue_size: int = 32

    def __post_init__(self) -> None:
        if self.poll_interval_s <= 0:
            raise ValueError("engine.poll_interval_s must be greater than zero")
        if self.repeat_interval_s <= 0:
            raise ValueError("engine.repeat_interval_s must be greater than zero")
        if self.command_queue_size <= 0:
            raise ValueError("engine.command_queue_size must be greater than zero")


@dataclass(frozen=True)
class DisplayConfig:
    refresh_hz: float = 2.0

    def __post_init__(self) -> None:
        if self.refresh_hz <= 0:
            raise ValueError("display.refresh_hz must be greater than zero")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    robot: RobotConfig
    engine: EngineSettings
    display: DisplayConfig
    logging: LoggingConfig


def load_config(path: Path) -> AppConfig:
    """Load configuration from a YAML file."""
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    return parse_config(raw)


def parse_config(raw: Any) -> AppConfig:
    """Build an AppConfig from already-decoded YAML, filling in defaults."""
    if not isinstance(raw, dict):
        raise ValueError("Configuration root must be a mapping")
    return AppConfig(
        robot=_parse_robot(_section(raw, "robot")),
        engine=_parse_engine(_section(raw, "engine")),
        display=DisplayConfig(
            refresh_hz=float(_section(raw, "display").get("refresh_hz", 2.0)),
        ),
        logging=LoggingConfig(level=str(_section(raw, "logging").get("level", "INFO"))),
    )


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Configuration section '{name}' must be a mapping")
    return value


def _parse_robot(raw: dict) -> RobotConfig:
    return RobotConfig(
        base_url=str(raw.get("base_url", "http://192.168.1.50")),
        request_timeout_s=float(raw.get("request_timeout_s", 1.0)),
    )


def _parse_engine(raw: dict) -> EngineSettings:
    return EngineSettings(
        poll_interval_s=float(raw.get("poll_interval_s", 0.1)),
        repeat_interval_s=float(raw.get("repeat_interval_s", 0.1)),
        command_queue_size=int(raw.get("command_queue_size", 32)),
    )


def load_default_config() -> AppConfig:
    """Load the default config.yaml shipped with the package."""
    path = Path(__file__).resolve().parent / "config.yaml"
    return load_config(path)


__all__ = [
    "AppConfig",
    "DisplayConfig",
    "EngineSettings",
    "LoggingConfig",
    "RobotConfig",
    "load_config",
    "load_default_config",
    "parse_config",
]
