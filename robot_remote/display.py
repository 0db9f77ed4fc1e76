"""Presentation helpers deriving labels and text from engine state."""

from __future__ import annotations

from typing import List

from .state import ControlMode, EngineState

DBM_FLOOR = -90.0
DBM_SPAN = 60.0


def clamp(value: float, lo: float, hi: float) -> float:
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def signal_quality(wifi_dbm: float) -> float:
    """Map raw WiFi strength in dBm linearly onto 0..100 (-90 dBm -> 0, -30 dBm -> 100)."""
    return clamp((wifi_dbm - DBM_FLOOR) * (100.0 / DBM_SPAN), 0.0, 100.0)


def quality_label(quality: float) -> str:
    if quality > 80:
        return "Excellent"
    if quality >= 60:
        return "Good"
    if quality >= 40:
        return "Fair"
    if quality >= 20:
        return "Poor"
    return "Very Poor"


def signal_bars(quality: float) -> int:
    """Number of lit bars (0-4) on the WiFi meter."""
    return sum(1 for threshold in (20, 40, 60, 80) if quality > threshold)


def ir_label(clear: bool) -> str:
    return "Clear" if clear else "Blocked"


def connection_label(connected: bool) -> str:
    return "Connected" if connected else "Disconnected"


def distance_bar_percent(distance_cm: float) -> float:
    return min(100.0, distance_cm)


def _bar(percent: float, width: int = 20) -> str:
    filled = int(round(clamp(percent, 0.0, 100.0) / 100.0 * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _meter(bars: int) -> str:
    return "|" * bars + "." * (4 - bars)


def render_dashboard(state: EngineState) -> str:
    """Render the whole dashboard as plain text."""
    telemetry = state.telemetry
    quality = signal_quality(telemetry.wifi_strength)
    lines: List[str] = [
        f"Robot Control Dashboard  ({connection_label(state.connected)})",
        f"Mode: {state.mode.value}",
        f"Distance: {telemetry.distance:.1f} cm {_bar(distance_bar_percent(telemetry.distance))}",
        f"Left IR: {ir_label(telemetry.ir_left)}  Right IR: {ir_label(telemetry.ir_right)}",
        f"Status: {telemetry.movement}  Speed: {telemetry.speed}%",
        f"WiFi: {telemetry.wifi_strength} dBm  {_meter(signal_bars(quality))} {quality_label(quality)} ({quality:.0f}%)",
    ]
    if state.mode is ControlMode.MANUAL:
        held = state.active_directive.value if state.active_directive else "none"
        lines.append(f"Manual control - held: {held} (forward/backward/left/right, stop)")
    return "\n".join(lines)


__all__ = [
    "clamp",
    "connection_label",
    "distance_bar_percent",
    "ir_label",
    "quality_label",
    "render_dashboard",
    "signal_bars",
    "signal_quality",
]
