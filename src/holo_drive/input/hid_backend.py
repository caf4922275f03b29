"""hidapi access for the driver's gamepad.

A gamepad can vanish mid-drive; the session treats a failed read as an
unplug, closes itself and lets callers fall back to neutral input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

try:
    import hid
except ImportError:
    hid = None

logger = logging.getLogger(__name__)

# USB dongles that enumerate as HID but never carry gamepad axes.
_FILTERED_DEVICE_NAMES: frozenset[str] = frozenset(
    {
        "usb receiver",
        "wireless receiver",
        "nano receiver",
        "unifying receiver",
    }
)


@dataclass(frozen=True, slots=True)
class HidDeviceId:
    vendor_id: int
    product_id: int


@dataclass(frozen=True, slots=True)
class HidDeviceInfo:
    """Enumerated gamepad candidate."""

    device_id: HidDeviceId
    product_string: str
    path: Any  # opaque to us; handed back to hidapi as-is


def hid_available() -> bool:
    return hid is not None


def _is_gamepad_candidate(product: str) -> bool:
    return bool(product) and product.lower() not in _FILTERED_DEVICE_NAMES


def enumerate_devices() -> list[HidDeviceInfo]:
    """List named HID devices that could be a gamepad, skipping receivers."""
    if hid is None:
        return []
    found: list[HidDeviceInfo] = []
    for entry in hid.enumerate():
        product = (entry.get("product_string") or "").strip()
        if not _is_gamepad_candidate(product):
            continue
        device_id = HidDeviceId(
            vendor_id=int(entry.get("vendor_id") or 0),
            product_id=int(entry.get("product_id") or 0),
        )
        found.append(HidDeviceInfo(device_id=device_id, product_string=product, path=entry.get("path")))
    return found


class HidSession:
    """Non-blocking session on one gamepad.

    `is_open` turns False as soon as a read fails, so an unplugged
    controller is visible to the next tick.
    """

    def __init__(self) -> None:
        self._handle = None
        self._disconnects = 0

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def disconnects(self) -> int:
        """Number of times the device dropped out during a read."""
        return self._disconnects

    def open(self, device: HidDeviceInfo) -> None:
        if hid is None:
            raise RuntimeError("hidapi is not installed")
        self.close()
        handle = hid.device()
        if device.path:
            handle.open_path(device.path)
        else:
            handle.open(device.device_id.vendor_id, device.device_id.product_id)
        handle.set_nonblocking(True)
        self._handle = handle

    def close(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def read_latest_report(self, *, report_len: int, max_reads: int = 50) -> Optional[list[int]]:
        """Drain pending reports and return the newest one.

        Returns:
            The newest report, or None when nothing arrived or the device
            was lost during the read.
        """
        if self._handle is None:
            return None
        latest: Optional[list[int]] = None
        try:
            for _ in range(max_reads):
                data = self._handle.read(int(report_len), timeout_ms=0)
                if not data:
                    break
                latest = data
        except OSError as exc:
            self._disconnects += 1
            logger.warning("Controller read failed, closing session: %s", exc)
            self._drop_handle()
            return None
        return latest

    def _drop_handle(self) -> None:
        try:
            self.close()
        except OSError as exc:
            logger.debug("Ignoring close error on lost controller: %s", exc)
