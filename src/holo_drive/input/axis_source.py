"""Axis sources feeding the joystick drive.

A source is sampled once per control tick and returns an `AxisSample` with
every axis already normalized and clamped, so the shaper never re-validates
its inputs.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from holo_drive.config import ControllerConfig
from holo_drive.input.hid_backend import HidSession
from holo_drive.telemetry import AxisSample, NEUTRAL_SAMPLE

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

AXIS_8BIT_MAX: int = 255
AXIS_16BIT_MAX: int = 65535

MAX_READS_PER_TICK: int = 50
"""Maximum HID reads per tick to drain the buffer."""


class AxisSource(Protocol):
    def read(self) -> AxisSample: ...


def clamp(value: float, min_val: float, max_val: float) -> float:
    return max(min_val, min(max_val, value))


def scale_bipolar(value: int, hi: int = AXIS_8BIT_MAX) -> float:
    """Normalize a centered raw axis value in 0..hi to [-1, 1]."""
    half = hi / 2.0
    return clamp((value - half) / half, -1.0, 1.0)


def scale_unipolar(value: int, hi: int = AXIS_8BIT_MAX) -> float:
    """Normalize a raw trigger value in 0..hi to [0, 1]."""
    if hi <= 0:
        return 0.0
    return clamp(value / float(hi), 0.0, 1.0)


def read_raw_axis(report: list[int], offset: int, *, wide: bool = False) -> int | None:
    """Read an 8-bit or 16-bit little-endian axis from a report.

    Returns:
        The raw value, or None if the report is too short.
    """
    width = 2 if wide else 1
    if offset < 0 or offset + width > len(report):
        return None
    if wide:
        return int(report[offset]) | (int(report[offset + 1]) << 8)
    return int(report[offset])


class SupplierAxisSource:
    """Sample four zero-argument callables, one per axis."""

    def __init__(
        self,
        x: Callable[[], float],
        y: Callable[[], float],
        omega: Callable[[], float],
        throttle: Callable[[], float],
    ) -> None:
        self._x = x
        self._y = y
        self._omega = omega
        self._throttle = throttle

    def read(self) -> AxisSample:
        return AxisSample(
            x=clamp(float(self._x()), -1.0, 1.0),
            y=clamp(float(self._y()), -1.0, 1.0),
            omega=clamp(float(self._omega()), -1.0, 1.0),
            throttle=clamp(float(self._throttle()), -1.0, 1.0),
        )


class HidAxisSource:
    """Decode joystick axes from the latest report of an open HID gamepad.

    Gamepads report "stick up" and "stick right" as the high end of the
    range, so by default the linear pair and the rotation are inverted to
    make stick up mean field forward and stick left mean counter-clockwise.
    """

    def __init__(self, session: HidSession, config: ControllerConfig) -> None:
        self._session = session
        self._config = config
        self._last = NEUTRAL_SAMPLE

    @property
    def last_sample(self) -> AxisSample:
        return self._last

    def read(self) -> AxisSample:
        """Return the newest sample; neutral once the controller is gone."""
        if not self._session.is_open:
            self._last = NEUTRAL_SAMPLE
            return self._last

        try:
            report = self._session.read_latest_report(
                report_len=self._config.report_len, max_reads=MAX_READS_PER_TICK
            )
        except OSError:
            self._session.close()
            report = None
        if not self._session.is_open:
            self._last = NEUTRAL_SAMPLE
            return self._last
        if report:
            sample = self.decode(report)
            if sample is not None:
                self._last = sample
        return self._last

    def decode(self, report: list[int]) -> AxisSample | None:
        """Decode a single report; None if any axis is out of bounds."""
        cfg = self._config
        wide = cfg.axis_16bit
        hi = AXIS_16BIT_MAX if wide else AXIS_8BIT_MAX

        raw_x = read_raw_axis(report, cfg.x_offset, wide=wide)
        raw_y = read_raw_axis(report, cfg.y_offset, wide=wide)
        raw_omega = read_raw_axis(report, cfg.omega_offset, wide=wide)
        raw_throttle = read_raw_axis(report, cfg.throttle_offset, wide=wide)
        if raw_x is None or raw_y is None or raw_omega is None or raw_throttle is None:
            return None

        linear_sign = -1.0 if cfg.invert_linear else 1.0
        omega_sign = -1.0 if cfg.invert_omega else 1.0
        return AxisSample(
            x=linear_sign * scale_bipolar(raw_x, hi),
            y=linear_sign * scale_bipolar(raw_y, hi),
            omega=omega_sign * scale_bipolar(raw_omega, hi),
            throttle=scale_unipolar(raw_throttle, hi),
        )
