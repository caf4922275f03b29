"""Periodic joystick drive.

Samples the axis source on a timer, shapes the sample against a fresh
snapshot of the vehicle limits and sends exactly one command per tick.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtCore import QTimer

from holo_drive.input.axis_source import AxisSource
from holo_drive.shaping import VelocityShaper
from holo_drive.telemetry import ShapedCommand
from holo_drive.vehicle import Vehicle, VehicleLimits

logger = logging.getLogger(__name__)

DEBUG_LOG_EVERY_TICKS: int = 50


class JoystickDrive:
    """Field-relative drive using two joysticks and a throttle trigger."""

    def __init__(
        self,
        *,
        axis_source: AxisSource,
        vehicle: Vehicle,
        shaper: VelocityShaper,
        update_hz: int = 50,
        on_command: Callable[[ShapedCommand], None] | None = None,
    ) -> None:
        """Initialize the drive.

        Args:
            axis_source: Source sampled once per tick.
            vehicle: Receives one velocity command per tick.
            shaper: Maps axis samples to velocity commands.
            update_hz: Control loop rate.
            on_command: Optional observer of each issued command.
        """
        if update_hz <= 0:
            raise ValueError("update_hz must be positive")
        self._axis_source = axis_source
        self._vehicle = vehicle
        self._shaper = shaper
        self._update_hz = update_hz
        self._on_command = on_command or (lambda _: None)
        self._tick_count = 0

        self._timer = QTimer()
        self._timer.setInterval(max(1, int(1000 / update_hz)))
        self._timer.timeout.connect(self.tick)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def update_hz(self) -> int:
        return self._update_hz

    def start(self) -> None:
        if self._timer.isActive():
            return
        logger.info("Joystick drive started at %d Hz", self._update_hz)
        self._timer.start()

    def stop(self) -> None:
        if not self._timer.isActive():
            return
        self._timer.stop()
        logger.info("Joystick drive stopped after %d ticks", self._tick_count)

    def tick(self) -> ShapedCommand:
        """Run one control cycle and return the issued command."""
        self._tick_count += 1

        sample = self._axis_source.read()
        limits = VehicleLimits.snapshot(self._vehicle)
        command = self._shaper.shape_sample(sample, limits)

        self._vehicle.apply_velocity_command(command.vx, command.vy, command.omega)
        self._on_command(command)

        if self._tick_count % DEBUG_LOG_EVERY_TICKS == 0:
            logger.debug(
                "tick=%d axes=(%.2f,%.2f,%.2f,%.2f) out=(%.2f,%.2f,%.2f)",
                self._tick_count,
                sample.x,
                sample.y,
                sample.omega,
                sample.throttle,
                command.vx,
                command.vy,
                command.omega,
            )
        return command
