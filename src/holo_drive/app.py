import logging
import sys

from PySide6.QtCore import QCoreApplication

from holo_drive.config import DriveProfile
from holo_drive.drive_loop import JoystickDrive
from holo_drive.input.axis_source import HidAxisSource, SupplierAxisSource
from holo_drive.input.device_mgr import ControllerManager
from holo_drive.shaping import VelocityShaper
from holo_drive.vehicle import SimulatedVehicle

APP_NAME = "Holo Drive"
APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_application() -> QCoreApplication:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s - %(message)s")
    app = QCoreApplication.instance() or QCoreApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    return app


def connect_controller(profile: DriveProfile, manager: ControllerManager) -> bool:
    """Open the configured gamepad; False when none is configured or found."""
    controller = profile.controller
    if controller is None or (controller.vendor_id == 0 and controller.product_id == 0):
        logger.warning("No controller configured; driving with neutral input")
        return False
    return manager.connect_by_vid_pid(controller.vendor_id, controller.product_id)


def create_drive(
    profile: DriveProfile, manager: ControllerManager
) -> tuple[JoystickDrive, SimulatedVehicle]:
    """Assemble the joystick drive for a profile.

    Raises:
        ConfigurationError: If the profile's tuning is invalid.
    """
    shaper = VelocityShaper(profile.shaper)
    vehicle = SimulatedVehicle(profile.vehicle)
    if profile.controller is not None:
        source = HidAxisSource(manager.session, profile.controller)
    else:
        source = SupplierAxisSource(lambda: 0.0, lambda: 0.0, lambda: 0.0, lambda: 0.0)
    drive = JoystickDrive(
        axis_source=source,
        vehicle=vehicle,
        shaper=shaper,
        update_hz=profile.loop.update_hz,
    )
    return drive, vehicle
