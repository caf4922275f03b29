"""Vehicle collaborator seen by the joystick drive.

The drive only needs the current heading and speed limits from the vehicle,
and hands it one velocity command per tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from holo_drive.config import VehicleConfig
from holo_drive.telemetry import ShapedCommand, ZERO_COMMAND

logger = logging.getLogger(__name__)


class Vehicle(Protocol):
    def current_heading(self) -> float: ...

    def max_linear_speed(self) -> float: ...

    def max_angular_speed(self) -> float: ...

    def apply_velocity_command(self, vx: float, vy: float, omega: float) -> None: ...


@dataclass(frozen=True, slots=True)
class VehicleLimits:
    """Speed limits and heading read from the vehicle for a single tick."""

    max_linear_speed: float
    max_angular_speed: float
    heading: float = 0.0

    @classmethod
    def snapshot(cls, vehicle: Vehicle) -> "VehicleLimits":
        return cls(
            max_linear_speed=vehicle.max_linear_speed(),
            max_angular_speed=vehicle.max_angular_speed(),
            heading=vehicle.current_heading(),
        )


class SimulatedVehicle:
    """In-process vehicle that accepts commands without any hardware.

    Heading only changes through `set_heading`; no odometry is integrated.
    """

    def __init__(self, config: VehicleConfig, *, heading: float = 0.0) -> None:
        self._config = config
        self._heading = heading
        self._last_command = ZERO_COMMAND
        self._command_count = 0

    @property
    def last_command(self) -> ShapedCommand:
        return self._last_command

    @property
    def command_count(self) -> int:
        return self._command_count

    def set_heading(self, heading: float) -> None:
        self._heading = heading

    def current_heading(self) -> float:
        return self._heading

    def max_linear_speed(self) -> float:
        return self._config.max_linear_speed

    def max_angular_speed(self) -> float:
        return self._config.max_angular_speed

    def apply_velocity_command(self, vx: float, vy: float, omega: float) -> None:
        self._last_command = ShapedCommand(vx, vy, omega)
        self._command_count += 1
        logger.debug("command vx=%.3f vy=%.3f omega=%.3f", vx, vy, omega)
