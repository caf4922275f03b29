"""Planar vector helpers for composing drive commands.

All angles are in radians, counter-clockwise positive.
"""

from __future__ import annotations

import math


def rotate(x: float, y: float, angle: float) -> tuple[float, float]:
    """Rotate the vector (x, y) counter-clockwise by `angle`."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return (x * cos_a - y * sin_a, x * sin_a + y * cos_a)


def direction_of(x: float, y: float) -> float:
    """Return the angle of (x, y); the zero vector has angle 0."""
    if x == 0.0 and y == 0.0:
        return 0.0
    return math.atan2(y, x)


def polar_to_cartesian(magnitude: float, angle: float) -> tuple[float, float]:
    """Return the vector of length `magnitude` pointing along `angle`."""
    return rotate(magnitude, 0.0, angle)


def from_field_relative_speeds(
    vx: float, vy: float, omega: float, heading: float
) -> tuple[float, float, float]:
    """Convert field-relative speeds into the vehicle frame.

    Args:
        vx: Field X velocity.
        vy: Field Y velocity.
        omega: Angular velocity (frame independent).
        heading: Current vehicle heading on the field.

    Returns:
        A tuple of (vx, vy, omega) as seen by a vehicle facing `heading`.
    """
    robot_vx, robot_vy = rotate(vx, vy, -heading)
    return (robot_vx, robot_vy, omega)
