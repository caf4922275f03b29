import logging

# Use absolute import so it works when frozen as a script entrypoint.
from holo_drive.app import connect_controller, create_application, create_drive
from holo_drive.config import ConfigurationError, load_drive_profile
from holo_drive.input.device_mgr import ControllerManager


def main() -> int:
    app = create_application()
    try:
        profile = load_drive_profile()
    except ConfigurationError as exc:
        logging.getLogger(__name__).error("Invalid configuration: %s", exc)
        return 2

    manager = ControllerManager()
    connect_controller(profile, manager)
    drive, _vehicle = create_drive(profile, manager)
    app.aboutToQuit.connect(drive.stop)
    app.aboutToQuit.connect(manager.disconnect)
    drive.start()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
