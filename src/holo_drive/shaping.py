"""Joystick shaping for field-relative holonomic drive.

This module turns four normalized axes (left stick X/Y, right stick X and a
throttle trigger) into a velocity command scaled to the vehicle limits:

1. Deadband the stick magnitude, rotation and throttle.
2. Square the response and weight it by the joystick governor.
3. Add a linear throttle trim weighted by the throttle governor.
4. Rebuild the linear vector along the stick direction.
5. Scale by the vehicle limits and convert with the vehicle heading.
"""

from __future__ import annotations

import logging
import math

from holo_drive.config import ShaperConfig
from holo_drive.geometry import direction_of, from_field_relative_speeds, polar_to_cartesian
from holo_drive.telemetry import AxisSample, ShapedCommand
from holo_drive.vehicle import VehicleLimits

logger = logging.getLogger(__name__)


def apply_deadband(value: float, deadband: float, max_magnitude: float = 1.0) -> float:
    """Zero out `value` inside the deadband and rescale the rest.

    The output spans linearly from 0 at `|value| == deadband` to
    `max_magnitude` at `|value| == max_magnitude`, keeping the sign.

    Args:
        value: The raw axis value.
        deadband: Threshold at or below which the value is treated as zero.
        max_magnitude: Magnitude that maps to itself (default 1.0).

    Returns:
        The deadbanded value.
    """
    if abs(value) <= deadband:
        return 0.0
    if value > 0.0:
        return max_magnitude * (value - deadband) / (max_magnitude - deadband)
    return max_magnitude * (value + deadband) / (max_magnitude - deadband)


class VelocityShaper:
    """Stateless mapping from joystick axes to a vehicle velocity command."""

    def __init__(self, config: ShaperConfig | None = None) -> None:
        self._config = config if config is not None else ShaperConfig()
        self._config.validate()
        logger.info(
            "Velocity shaper ready (deadband=%.2f, joystick governor=%.2f, throttle governor=%.2f)",
            self._config.deadband,
            self._config.joystick_governor,
            self._config.throttle_governor,
        )

    @property
    def config(self) -> ShaperConfig:
        """The validated tuning in use."""
        return self._config

    def shape(
        self,
        x: float,
        y: float,
        omega: float,
        throttle: float,
        heading: float,
        max_linear_speed: float,
        max_angular_speed: float,
    ) -> ShapedCommand:
        """Shape one set of axis values into a velocity command.

        Args:
            x: Linear stick X, field forward positive.
            y: Linear stick Y, field left positive.
            omega: Rotation stick, counter-clockwise positive.
            throttle: Trigger value.
            heading: Vehicle heading on the field in radians.
            max_linear_speed: Vehicle linear speed limit.
            max_angular_speed: Vehicle angular speed limit.

        Returns:
            The command to hand to the vehicle.
        """
        cfg = self._config

        linear_magnitude = apply_deadband(math.hypot(x, y), cfg.deadband)
        linear_direction = direction_of(x, y)
        shaped_omega = apply_deadband(omega, cfg.deadband)
        gate = apply_deadband(throttle, cfg.deadband)

        # The deadbanded throttle gates the trim; the raw throttle sizes it.
        linear_magnitude = linear_magnitude * linear_magnitude * cfg.joystick_governor
        if linear_magnitude > 0.0 and gate > 0.0:
            linear_magnitude += math.copysign(throttle * cfg.throttle_governor, linear_magnitude)

        shaped_omega = math.copysign(shaped_omega * shaped_omega * cfg.joystick_governor, shaped_omega)
        if shaped_omega != 0.0 and gate > 0.0:
            shaped_omega += math.copysign(throttle * cfg.throttle_governor, shaped_omega)

        linear_x, linear_y = polar_to_cartesian(linear_magnitude, linear_direction)

        vx, vy, vomega = from_field_relative_speeds(
            linear_x * max_linear_speed,
            linear_y * max_linear_speed,
            shaped_omega * max_angular_speed,
            heading,
        )
        return ShapedCommand(vx, vy, vomega)

    def shape_sample(self, sample: AxisSample, limits: VehicleLimits) -> ShapedCommand:
        return self.shape(
            sample.x,
            sample.y,
            sample.omega,
            sample.throttle,
            limits.heading,
            limits.max_linear_speed,
            limits.max_angular_speed,
        )


def shape_velocity(
    x: float,
    y: float,
    omega: float,
    throttle: float,
    heading: float,
    max_linear_speed: float,
    max_angular_speed: float,
    config: ShaperConfig | None = None,
) -> ShapedCommand:
    """One-shot form of `VelocityShaper.shape`."""
    return VelocityShaper(config).shape(
        x, y, omega, throttle, heading, max_linear_speed, max_angular_speed
    )
