from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True, slots=True)
class AxisSample:
    """Normalized joystick axes read in one control tick.

    - `x`, `y` are the linear stick axes in range -1..1.
    - `omega` is the rotation stick axis in range -1..1.
    - `throttle` is the trigger, conventionally 0..1.
    """

    x: float = 0.0
    y: float = 0.0
    omega: float = 0.0
    throttle: float = 0.0


NEUTRAL_SAMPLE = AxisSample()


class ShapedCommand(NamedTuple):
    """Velocity command handed to the vehicle (m/s, m/s, rad/s)."""

    vx: float
    vy: float
    omega: float


ZERO_COMMAND = ShapedCommand(0.0, 0.0, 0.0)
