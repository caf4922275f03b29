"""Tests for the axis source module.

This module tests raw axis decoding and the HID and supplier sources.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Optional

import pytest

import holo_drive.input.hid_backend as hid_backend
from holo_drive.config import ControllerConfig
from holo_drive.input.axis_source import (
    HidAxisSource,
    SupplierAxisSource,
    read_raw_axis,
    scale_bipolar,
    scale_unipolar,
)
from holo_drive.input.hid_backend import HidDeviceId, HidDeviceInfo, HidSession
from holo_drive.telemetry import NEUTRAL_SAMPLE, AxisSample


class FakeSession:
    """Stands in for HidSession with a queue of canned reports."""

    def __init__(self, reports: list[Optional[list[int]]], *, is_open: bool = True) -> None:
        self._reports = list(reports)
        self.is_open = is_open
        self.requested_len: int | None = None

    def close(self) -> None:
        self.is_open = False

    def read_latest_report(self, *, report_len: int, max_reads: int = 50) -> Optional[list[int]]:
        self.requested_len = report_len
        if not self._reports:
            return None
        return self._reports.pop(0)


class UnpluggingHandle:
    """hidapi handle that serves some reports, then fails like a pulled cable."""

    def __init__(self, reports: list[list[int]]) -> None:
        self._reports = list(reports)
        self._served_tick = False
        self.closed = False

    def open_path(self, path) -> None:
        pass

    def set_nonblocking(self, flag: bool) -> None:
        pass

    def read(self, length: int, timeout_ms: int = 0) -> list[int]:
        if self._reports:
            return self._reports.pop(0)
        if not self._served_tick:
            self._served_tick = True
            return []
        raise OSError("read error")

    def close(self) -> None:
        self.closed = True


def _unplugging_session(monkeypatch, reports: list[list[int]]) -> HidSession:
    handle = UnpluggingHandle(reports)
    monkeypatch.setattr(hid_backend, "hid", SimpleNamespace(device=lambda: handle))
    session = HidSession()
    session.open(HidDeviceInfo(HidDeviceId(0x045E, 0x028E), "Gamepad", b"path"))
    return session


def _config(**overrides) -> ControllerConfig:
    values = dict(
        vendor_id=0x1234,
        product_id=0x5678,
        product_string="Pad",
        report_len=8,
        x_offset=2,
        y_offset=1,
        omega_offset=3,
        throttle_offset=6,
    )
    values.update(overrides)
    return ControllerConfig(**values)


# ============================================================================
# Scaling Tests
# ============================================================================


class TestScaling:
    """Tests for raw value normalization."""

    def test_bipolar_extremes(self) -> None:
        assert scale_bipolar(0) == pytest.approx(-1.0)
        assert scale_bipolar(255) == pytest.approx(1.0)
        assert scale_bipolar(0, 65535) == pytest.approx(-1.0)
        assert scale_bipolar(65535, 65535) == pytest.approx(1.0)

    def test_bipolar_center_is_near_zero(self) -> None:
        assert abs(scale_bipolar(128)) < 0.01
        assert abs(scale_bipolar(32768, 65535)) < 0.0001

    def test_bipolar_is_clamped(self) -> None:
        assert scale_bipolar(300) == 1.0
        assert scale_bipolar(-20) == -1.0

    def test_unipolar_range(self) -> None:
        assert scale_unipolar(0) == 0.0
        assert scale_unipolar(255) == pytest.approx(1.0)
        assert scale_unipolar(51) == pytest.approx(0.2)

    def test_unipolar_is_clamped(self) -> None:
        assert scale_unipolar(400) == 1.0
        assert scale_unipolar(-1) == 0.0


class TestReadRawAxis:
    """Tests for reading axis values out of a report."""

    def test_read_8bit(self) -> None:
        assert read_raw_axis([10, 20, 30], 1) == 20

    def test_read_16bit_little_endian(self) -> None:
        assert read_raw_axis([0x00, 0x34, 0x12], 1, wide=True) == 0x1234

    def test_out_of_range_offset(self) -> None:
        assert read_raw_axis([1, 2], 2) is None
        assert read_raw_axis([1, 2], 1, wide=True) is None
        assert read_raw_axis([1, 2], -1) is None


# ============================================================================
# HID Source Tests
# ============================================================================


class TestHidAxisSource:
    """Tests for decoding gamepad reports into axis samples."""

    def test_closed_session_gives_neutral(self) -> None:
        source = HidAxisSource(FakeSession([[0] * 8], is_open=False), _config())
        assert source.read() == NEUTRAL_SAMPLE

    def test_full_deflection_with_default_inversion(self) -> None:
        """Stick up-left and rotate right with full trigger."""
        report = [0, 0, 0, 255, 0, 0, 255, 0]
        source = HidAxisSource(FakeSession([report]), _config())

        sample = source.read()

        assert sample.x == pytest.approx(1.0)
        assert sample.y == pytest.approx(1.0)
        assert sample.omega == pytest.approx(-1.0)
        assert sample.throttle == pytest.approx(1.0)

    def test_without_inversion(self) -> None:
        report = [0, 0, 0, 255, 0, 0, 0, 0]
        source = HidAxisSource(FakeSession([report]), _config(invert_linear=False, invert_omega=False))

        sample = source.read()

        assert sample.x == pytest.approx(-1.0)
        assert sample.y == pytest.approx(-1.0)
        assert sample.omega == pytest.approx(1.0)
        assert sample.throttle == 0.0

    def test_16bit_axes(self) -> None:
        config = _config(x_offset=0, y_offset=2, omega_offset=4, throttle_offset=6, axis_16bit=True)
        report = [0xFF, 0xFF, 0x00, 0x00, 0x00, 0x80, 0xFF, 0xFF]
        source = HidAxisSource(FakeSession([report]), config)

        sample = source.read()

        assert sample.x == pytest.approx(-1.0)
        assert sample.y == pytest.approx(1.0)
        assert abs(sample.omega) < 0.0001
        assert sample.throttle == pytest.approx(1.0)

    def test_holds_last_sample_without_new_report(self) -> None:
        report = [0, 0, 0, 128, 0, 0, 255, 0]
        source = HidAxisSource(FakeSession([report, None]), _config())

        first = source.read()
        second = source.read()

        assert second == first
        assert source.last_sample == first

    def test_short_report_is_ignored(self) -> None:
        source = HidAxisSource(FakeSession([[0, 0, 0]]), _config())
        assert source.read() == NEUTRAL_SAMPLE

    def test_reads_configured_report_length(self) -> None:
        session = FakeSession([None])
        HidAxisSource(session, _config(report_len=12)).read()
        assert session.requested_len == 12

    def test_unplugged_controller_falls_back_to_neutral(self, monkeypatch) -> None:
        """A read error mid-drive drops the held sample and closes the session."""
        session = _unplugging_session(monkeypatch, [[0, 0, 0, 255, 0, 0, 255, 0]])
        source = HidAxisSource(session, _config())

        assert source.read().x == pytest.approx(1.0)
        assert source.read() == NEUTRAL_SAMPLE
        assert not session.is_open
        assert source.read() == NEUTRAL_SAMPLE

    def test_session_raising_is_treated_as_unplug(self) -> None:
        session = FakeSession([[0, 0, 0, 255, 0, 0, 255, 0]])
        source = HidAxisSource(session, _config())
        source.read()

        def fail(**_kwargs):
            raise OSError("read error")

        session.read_latest_report = fail
        assert source.read() == NEUTRAL_SAMPLE
        assert not session.is_open

    def test_decoded_axes_stay_in_range(self) -> None:
        source = HidAxisSource(FakeSession([]), _config())
        for value in (0, 1, 64, 127, 128, 200, 255):
            sample = source.decode([value] * 8)
            assert sample is not None
            for axis in (sample.x, sample.y, sample.omega):
                assert -1.0 <= axis <= 1.0
            assert 0.0 <= sample.throttle <= 1.0


# ============================================================================
# Supplier Source Tests
# ============================================================================


class TestSupplierAxisSource:
    """Tests for sampling plain callables."""

    def test_samples_at_call_time(self) -> None:
        values = {"x": 0.1}
        source = SupplierAxisSource(lambda: values["x"], lambda: 0.2, lambda: -0.3, lambda: 0.4)

        assert source.read() == AxisSample(x=0.1, y=0.2, omega=-0.3, throttle=0.4)
        values["x"] = 0.9
        assert source.read().x == 0.9

    def test_out_of_range_values_are_clamped(self) -> None:
        source = SupplierAxisSource(lambda: 3.0, lambda: -2.0, lambda: 1.5, lambda: -7.0)
        assert source.read() == AxisSample(x=1.0, y=-1.0, omega=1.0, throttle=-1.0)
