"""
Pointer zone monitor.

Polls the pointer, resolves the region under it, and fires a hotkey command
when the pointer enters the left or right trigger zone of the designated
region. Each zone has a hysteresis latch so lingering inside a zone fires
once; entering one zone re-arms the other.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, NoReturn, Optional

from ptr2obs.common.layout import RegionLayout
from ptr2obs.common.types import Position, Region

__all__ = ["ZoneMonitor", "ZoneState"]

logger = logging.getLogger(__name__)

PointerSource = Callable[[], Optional[Position]]
CommandSender = Callable[[str], bool]


@dataclass
class ZoneState:
    """Hysteresis latches and last significant pointer position"""

    left_zone_active: bool = False
    right_zone_active: bool = False
    last_position: Optional[Position] = None


class ZoneMonitor:
    """Turns pointer samples into zone-crossing commands"""

    def __init__(
        self,
        layout: RegionLayout,
        pointer_source: PointerSource,
        command_sender: CommandSender,
        trigger_region: str = "DP3-1",
        left_threshold: int = 250,
        right_threshold: int = 1650,
        left_command: str = "Move Camera Right",
        right_command: str = "Move Camera Left",
        dead_zone: int = 5,
        poll_interval_ms: int = 100,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Initialize zone monitor

        Args:
            layout: Region table used to resolve pointer samples
            pointer_source: Returns the current pointer position or None on failure
            command_sender: Best-effort command send, returns whether it was written
            trigger_region: Name of the only region that performs zone logic
            left_threshold: Region-relative X below which the left zone is entered
            right_threshold: Region-relative X at or above which the right zone is entered
            left_command: Command fired on entering the left zone
            right_command: Command fired on entering the right zone
            dead_zone: Per-axis movement radius treated as no movement
            poll_interval_ms: Sample interval in milliseconds
            sleep: Blocking sleep function
        """
        self._layout: RegionLayout = layout
        self._pointer_source: PointerSource = pointer_source
        self._command_sender: CommandSender = command_sender
        self._trigger_region: str = trigger_region
        self._left_threshold: int = left_threshold
        self._right_threshold: int = right_threshold
        self._left_command: str = left_command
        self._right_command: str = right_command
        self._dead_zone: int = dead_zone
        self._poll_interval: float = poll_interval_ms / 1000.0
        self._sleep: Callable[[float], None] = sleep
        self.state: ZoneState = ZoneState()

        if layout.region_get(trigger_region) is None:
            logger.warning("Trigger region %r is not in the region table", trigger_region)

    def sample_process(self, position: Optional[Position]) -> Optional[str]:
        """
        Process one pointer sample

        Args:
            position: Absolute pointer position, or None when the query failed

        Returns:
            Command fired for this sample, if any
        """
        if position is None:
            return None

        last = self.state.last_position
        if last is not None and position.isWithinDeadZone(last, self._dead_zone):
            return None
        self.state.last_position = position

        region: Optional[Region] = self._layout.region_resolve(position)
        if region is None:
            logger.debug("Pointer at (%s, %s) is outside every region", position.x, position.y)
            return None
        if region.name != self._trigger_region:
            return None

        relative: Position = region.relative_get(position)
        return self.zoneCrossing_apply(relative.x)

    def zoneCrossing_apply(self, relative_x: int) -> Optional[str]:
        """
        Apply zone hysteresis to a region-relative X coordinate

        Args:
            relative_x: X offset inside the trigger region

        Returns:
            Command fired, if the sample entered a zone whose latch was clear
        """
        if relative_x < self._left_threshold and not self.state.left_zone_active:
            self.state.left_zone_active = True
            self.state.right_zone_active = False
            command = self._left_command
        elif relative_x >= self._right_threshold and not self.state.right_zone_active:
            self.state.right_zone_active = True
            self.state.left_zone_active = False
            command = self._right_command
        else:
            return None

        logger.info("Zone crossing at x=%s: %s", relative_x, command)
        if not self._command_sender(command):
            logger.debug("Command %r not delivered", command)
        return command

    def poll_once(self) -> Optional[str]:
        """Query the pointer and process the sample"""
        return self.sample_process(self._pointer_source())

    def run_forever(self) -> NoReturn:
        """Poll the pointer for the lifetime of the process"""
        while True:
            self.poll_once()
            self._sleep(self._poll_interval)
