"""Manual/autonomous arbitration."""

from __future__ import annotations

import logging
from typing import Callable

from .command_mapper import CommandMapper
from .state import ControlMode

LOGGER = logging.getLogger(__name__)


class ModeController:
    """Two-state machine that gates manual input and notifies the robot."""

    def __init__(
        self,
        mapper: CommandMapper,
        send_mode: Callable[[str], object],
        initial: ControlMode = ControlMode.MANUAL,
    ) -> None:
        self._mapper = mapper
        self._send_mode = send_mode
        self._mode = ControlMode(initial)
        self._mapper.set_enabled(self._mode is ControlMode.MANUAL)

    @property
    def mode(self) -> ControlMode:
        return self._mode

    def switch_mode(self, target: ControlMode | str) -> bool:
        """Switch to ``target``; returns False if already there.

        The local mode changes optimistically; a failed notification is not
        rolled back since the robot offers no read-back.
        """
        target = ControlMode(target)
        if target is self._mode:
            LOGGER.debug("Already in %s mode", target.value)
            return False
        previous = self._mode
        self._mode = target
        self._mapper.set_enabled(target is ControlMode.MANUAL)
        self._send_mode(target.value)
        LOGGER.info("Control mode changed %s -> %s", previous.value, target.value)
        return True


__all__ = ["ModeController"]
