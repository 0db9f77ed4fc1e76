"""Unit tests for dashboard derivations."""

from __future__ import annotations

import pytest

from robot_remote.display import (
    connection_label,
    distance_bar_percent,
    ir_label,
    quality_label,
    render_dashboard,
    signal_bars,
    signal_quality,
)
from robot_remote.state import ControlMode, Direction, EngineState, TelemetrySnapshot


def test_signal_quality_linear_scaling() -> None:
    assert signal_quality(-55) == pytest.approx(58.333, abs=1e-3)
    assert signal_quality(-90) == pytest.approx(0.0)
    assert signal_quality(-30) == pytest.approx(100.0)


def test_signal_quality_clamped() -> None:
    assert signal_quality(-120) == 0.0
    assert signal_quality(-10) == 100.0


@pytest.mark.parametrize(
    "quality, label",
    [
        (100.0, "Excellent"),
        (80.5, "Excellent"),
        (80.0, "Good"),
        (60.0, "Good"),
        (58.33, "Fair"),
        (40.0, "Fair"),
        (39.9, "Poor"),
        (20.0, "Poor"),
        (19.9, "Very Poor"),
        (0.0, "Very Poor"),
    ],
)
def test_quality_label_boundaries(quality: float, label: str) -> None:
    assert quality_label(quality) == label


@pytest.mark.parametrize(
    "quality, bars",
    [(0.0, 0), (20.0, 0), (20.1, 1), (40.0, 1), (58.33, 2), (60.5, 3), (80.0, 3), (81.0, 4), (100.0, 4)],
)
def test_signal_bars_thresholds(quality: float, bars: int) -> None:
    assert signal_bars(quality) == bars


def test_scenario_payload_is_fair() -> None:
    assert quality_label(signal_quality(-55)) == "Fair"


def test_simple_labels() -> None:
    assert ir_label(True) == "Clear"
    assert ir_label(False) == "Blocked"
    assert connection_label(True) == "Connected"
    assert connection_label(False) == "Disconnected"
    assert distance_bar_percent(12.5) == pytest.approx(12.5)
    assert distance_bar_percent(250.0) == 100.0


def test_render_dashboard_manual() -> None:
    state = EngineState(
        telemetry=TelemetrySnapshot(
            distance=12.5, ir_left=True, ir_right=False, movement="➡️ Turning", speed=40, wifi_strength=-55
        ),
        connected=True,
        active_directive=Direction.LEFT,
    )
    text = render_dashboard(state)
    assert "(Connected)" in text
    assert "Distance: 12.5 cm" in text
    assert "Left IR: Clear  Right IR: Blocked" in text
    assert "Speed: 40%" in text
    assert "-55 dBm  ||.. Fair (58%)" in text
    assert "held: left" in text


def test_render_dashboard_autonomous_hides_manual_hint() -> None:
    text = render_dashboard(EngineState(mode=ControlMode.AUTONOMOUS))
    assert "(Disconnected)" in text
    assert "Mode: autonomous" in text
    assert "Manual control" not in text
