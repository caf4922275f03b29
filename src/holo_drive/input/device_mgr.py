"""Controller device management.

Enumerates HID devices, selects the configured gamepad and owns its session.
"""

from __future__ import annotations

import logging

from holo_drive.input.hid_backend import HidSession, HidDeviceInfo, enumerate_devices, hid_available

logger = logging.getLogger(__name__)


class ControllerManager:
    """Manages the HID session of the driver's gamepad."""

    def __init__(self) -> None:
        self._devices: list[HidDeviceInfo] = []
        self._device: HidDeviceInfo | None = None
        self._session = HidSession()

    @property
    def session(self) -> HidSession:
        """Return the controller HID session."""
        return self._session

    @property
    def device(self) -> HidDeviceInfo | None:
        """Return the selected controller."""
        return self._device

    @property
    def devices(self) -> list[HidDeviceInfo]:
        """Return the list of enumerated devices."""
        return self._devices

    def refresh_devices(self) -> list[HidDeviceInfo]:
        """Refresh and return the list of available HID devices."""
        if not hid_available():
            self._devices = []
            return []

        self._devices = enumerate_devices()
        return self._devices

    def select(self, device: HidDeviceInfo | None) -> None:
        self._device = device

    def find_device_by_vid_pid(self, vendor_id: int, product_id: int) -> HidDeviceInfo | None:
        for device in self._devices:
            if (device.device_id.vendor_id == vendor_id and
                    device.device_id.product_id == product_id):
                return device
        return None

    def connect(self) -> bool:
        """Open connection to the selected controller.

        Returns:
            True if connection successful, False otherwise.
        """
        if self._device is None:
            return False

        try:
            self._session.open(self._device)
        except (OSError, RuntimeError, ValueError) as exc:
            logger.warning("Could not open %s: %s", format_device_label(self._device), exc)
            return False
        logger.info("Connected to %s", format_device_label(self._device))
        return True

    def connect_by_vid_pid(self, vendor_id: int, product_id: int) -> bool:
        """Refresh, select and connect the device with the given IDs."""
        self.refresh_devices()
        device = self.find_device_by_vid_pid(vendor_id, product_id)
        if device is None:
            logger.warning("Controller %04X:%04X not found", vendor_id, product_id)
            return False
        self.select(device)
        return self.connect()

    def disconnect(self) -> None:
        self._session.close()


def format_device_label(device: HidDeviceInfo) -> str:
    """Format a device for display in logs."""
    vid = device.device_id.vendor_id
    pid = device.device_id.product_id
    return f"{device.product_string} ({vid:04X}:{pid:04X})"
