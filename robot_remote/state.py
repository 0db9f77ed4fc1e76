"""Dataclasses and enums modelling robot telemetry and engine state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

STOP_COMMAND = "stop"


class Direction(str, Enum):
    """Discrete movement directives understood by the robot."""

    FORWARD = "forward"
    BACKWARD = "backward"
    LEFT = "left"
    RIGHT = "right"


class ControlMode(str, Enum):
    """Who is driving: the operator or the robot itself."""

    MANUAL = "manual"
    AUTONOMOUS = "autonomous"


@dataclass(frozen=True)
class TelemetrySnapshot:
    """Latest sensor/status payload reported by the robot."""

    distance: float
    ir_left: bool
    ir_right: bool
    movement: str
    speed: int
    wifi_strength: int


INITIAL_TELEMETRY = TelemetrySnapshot(
    distance=0.0,
    ir_left=True,
    ir_right=True,
    movement="🛑 Stopped",
    speed=0,
    wifi_strength=-65,
)


@dataclass(frozen=True)
class EngineState:
    """Read-only view of everything the presentation layer renders."""

    telemetry: TelemetrySnapshot = INITIAL_TELEMETRY
    connected: bool = False
    mode: ControlMode = ControlMode.MANUAL
    active_directive: Optional[Direction] = None


__all__ = [
    "ControlMode",
    "Direction",
    "EngineState",
    "INITIAL_TELEMETRY",
    "STOP_COMMAND",
    "TelemetrySnapshot",
]
