"""HTTP transport for talking to the robot's /data and /command endpoints."""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Mapping, Optional, Protocol

import aiohttp

from .state import TelemetrySnapshot

LOGGER = logging.getLogger(__name__)

TELEMETRY_KEYS = ("distance", "irLeft", "irRight", "movement", "speed", "wifiStrength")


class TransportError(Exception):
    """Raised when a telemetry request fails or returns an unusable payload."""


class Transport(Protocol):
    """Subset of robot I/O consumed by the engine."""

    async def fetch_telemetry(self) -> TelemetrySnapshot:
        ...

    async def send_command(self, action: str) -> bool:
        ...

    async def send_mode(self, mode: str) -> bool:
        ...

    async def close(self) -> None:
        ...


def _decode_flag(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in (0, 1):
        return bool(value)
    raise ValueError(f"{name} must be 0 or 1, got {value!r}")


def _decode_int(name: str, value: Any) -> int:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return int(number)


def decode_telemetry(payload: Any) -> TelemetrySnapshot:
    """Validate a decoded /data JSON body and build a snapshot from it."""
    if not isinstance(payload, Mapping):
        raise ValueError(f"Telemetry payload must be an object, got {type(payload).__name__}")
    missing = [key for key in TELEMETRY_KEYS if key not in payload]
    if missing:
        raise ValueError(f"Telemetry payload missing keys: {', '.join(missing)}")

    distance = float(payload["distance"])
    if not math.isfinite(distance) or distance < 0:
        raise ValueError(f"distance must be a non-negative number, got {payload['distance']!r}")
    speed = max(0, min(_decode_int("speed", payload["speed"]), 100))

    return TelemetrySnapshot(
        distance=distance,
        ir_left=_decode_flag("irLeft", payload["irLeft"]),
        ir_right=_decode_flag("irRight", payload["irRight"]),
        movement=str(payload["movement"]),
        speed=speed,
        wifi_strength=_decode_int("wifiStrength", payload["wifiStrength"]),
    )


class HttpTransport:
    """aiohttp client for the robot's minimal HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 1.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._session = session
        self._owns_session = session is None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_telemetry(self) -> TelemetrySnapshot:
        """GET /data and decode it, raising TransportError on any failure."""
        url = f"{self._base_url}/data"
        try:
            async with self._get_session().get(url) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(f"GET {url} returned HTTP {response.status}")
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        try:
            return decode_telemetry(payload)
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise TransportError(f"Malformed telemetry from {url}: {exc}") from exc

    async def send_command(self, action: str) -> bool:
        """Send a movement directive or ``stop``."""
        return await self._send_command_query({"cmd": action})

    async def send_mode(self, mode: str) -> bool:
        """Notify the robot of a control mode change."""
        return await self._send_command_query({"mode": mode})

    async def close(self) -> None:
        if self._session is None or not self._owns_session:
            return
        await self._session.close()
        self._session = None

    # Internal helpers -----------------------------------------------------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def _send_command_query(self, params: Dict[str, str]) -> bool:
        url = f"{self._base_url}/command"
        try:
            async with self._get_session().get(url, params=params) as response:
                if 200 <= response.status < 300:
                    return True
                LOGGER.warning("Command %s rejected with HTTP %s", params, response.status)
                return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            LOGGER.warning("Error sending command %s: %s", params, exc)
            return False


__all__ = ["HttpTransport", "Transport", "TransportError", "decode_telemetry"]
