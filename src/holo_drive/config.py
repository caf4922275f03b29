from __future__ import annotations

import configparser
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QStandardPaths


class ConfigurationError(ValueError):
    """Raised when tuning or vehicle constants are outside their valid range."""


@dataclass(frozen=True, slots=True)
class ShaperConfig:
    """Tuning constants for the joystick velocity shaper.

    `joystick_governor` weights the squared joystick response; the remainder
    (`throttle_governor`) weights the linear throttle trim. The split must
    not exceed unity.
    """

    deadband: float = 0.2
    joystick_governor: float = 0.3

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if not 0.0 <= self.deadband < 1.0:
            raise ConfigurationError(f"deadband must be within [0, 1), got {self.deadband}")
        if not 0.0 <= self.joystick_governor <= 1.0:
            raise ConfigurationError(
                f"joystick_governor must be within [0, 1], got {self.joystick_governor}"
            )

    @property
    def throttle_governor(self) -> float:
        return 1.0 - self.joystick_governor


@dataclass(frozen=True, slots=True)
class VehicleConfig:
    """Physical speed limits of the driven vehicle."""

    max_linear_speed: float  # m/s
    max_angular_speed: float  # rad/s

    def __post_init__(self) -> None:
        if not (math.isfinite(self.max_linear_speed) and self.max_linear_speed > 0.0):
            raise ConfigurationError(
                f"max_linear_speed must be finite and positive, got {self.max_linear_speed}"
            )
        if not (math.isfinite(self.max_angular_speed) and self.max_angular_speed > 0.0):
            raise ConfigurationError(
                f"max_angular_speed must be finite and positive, got {self.max_angular_speed}"
            )


@dataclass(frozen=True, slots=True)
class ControllerConfig:
    """HID gamepad selection and report layout."""

    vendor_id: int
    product_id: int
    product_string: str
    report_len: int
    x_offset: int  # left stick vertical
    y_offset: int  # left stick horizontal
    omega_offset: int  # right stick horizontal
    throttle_offset: int  # trigger
    axis_16bit: bool = False
    invert_linear: bool = True
    invert_omega: bool = True


@dataclass(frozen=True, slots=True)
class LoopConfig:
    update_hz: int = 50

    def __post_init__(self) -> None:
        if not MIN_UPDATE_HZ <= self.update_hz <= MAX_UPDATE_HZ:
            raise ConfigurationError(
                f"update_hz must be within {MIN_UPDATE_HZ}..{MAX_UPDATE_HZ}, got {self.update_hz}"
            )


@dataclass(frozen=True)
class DriveProfile:
    """Everything needed to assemble a running joystick drive."""

    shaper: ShaperConfig
    vehicle: VehicleConfig
    controller: Optional[ControllerConfig]
    loop: LoopConfig


# -------------------------------------------------------------------------
# Default values for all settings
# -------------------------------------------------------------------------

DEFAULT_DEADBAND: float = 0.2
DEFAULT_JOYSTICK_GOVERNOR: float = 0.3

# 14.5 ft/s drivetrain, 0.449 m drive base radius
DEFAULT_MAX_LINEAR_SPEED: float = 4.4196
DEFAULT_MAX_ANGULAR_SPEED: float = 9.8432

DEFAULT_REPORT_LEN: int = 8
DEFAULT_X_OFFSET: int = 2
DEFAULT_Y_OFFSET: int = 1
DEFAULT_OMEGA_OFFSET: int = 3
DEFAULT_THROTTLE_OFFSET: int = 6

DEFAULT_UPDATE_HZ: int = 50

MIN_UPDATE_HZ: int = 1
MAX_UPDATE_HZ: int = 250


def config_path() -> Path:
    config_dir = Path(QStandardPaths.writableLocation(QStandardPaths.AppConfigLocation))
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / "config.ini"


def _read_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    parser.read(config_path(), encoding="utf-8")
    return parser


def _write_parser(parser: configparser.ConfigParser) -> None:
    path = config_path()
    with path.open("w", encoding="utf-8") as f:
        parser.write(f)


def ensure_config_exists() -> None:
    """Create config.ini with all default values if it doesn't exist."""
    path = config_path()
    if path.exists():
        return

    parser = configparser.ConfigParser()

    parser["shaper"] = {
        "deadband": str(DEFAULT_DEADBAND),
        "joystick_governor": str(DEFAULT_JOYSTICK_GOVERNOR),
    }

    parser["vehicle"] = {
        "max_linear_speed": str(DEFAULT_MAX_LINEAR_SPEED),
        "max_angular_speed": str(DEFAULT_MAX_ANGULAR_SPEED),
    }

    # No controller selected by default, but include layout defaults
    parser["controller"] = {
        "vendor_id": "0x0",
        "product_id": "0x0",
        "product_string": "",
        "report_len": str(DEFAULT_REPORT_LEN),
        "x_offset": str(DEFAULT_X_OFFSET),
        "y_offset": str(DEFAULT_Y_OFFSET),
        "omega_offset": str(DEFAULT_OMEGA_OFFSET),
        "throttle_offset": str(DEFAULT_THROTTLE_OFFSET),
        "axis_16bit": "false",
        "invert_linear": "true",
        "invert_omega": "true",
    }

    parser["loop"] = {
        "update_hz": str(DEFAULT_UPDATE_HZ),
    }

    _write_parser(parser)


def load_shaper_config() -> ShaperConfig:
    """Load shaper tuning; a bad value is fatal rather than silently replaced."""
    parser = _read_parser()
    if "shaper" not in parser:
        return ShaperConfig()
    section = parser["shaper"]
    try:
        deadband = float(section.get("deadband", str(DEFAULT_DEADBAND)))
        governor = float(section.get("joystick_governor", str(DEFAULT_JOYSTICK_GOVERNOR)))
    except ValueError as exc:
        raise ConfigurationError(f"invalid [shaper] section: {exc}") from exc
    return ShaperConfig(deadband=deadband, joystick_governor=governor)


def load_vehicle_config() -> VehicleConfig:
    parser = _read_parser()
    section = parser["vehicle"] if "vehicle" in parser else {}
    try:
        max_linear = float(section.get("max_linear_speed", str(DEFAULT_MAX_LINEAR_SPEED)))
        max_angular = float(section.get("max_angular_speed", str(DEFAULT_MAX_ANGULAR_SPEED)))
    except ValueError as exc:
        raise ConfigurationError(f"invalid [vehicle] section: {exc}") from exc
    return VehicleConfig(max_linear_speed=max_linear, max_angular_speed=max_angular)


def load_controller_config() -> Optional[ControllerConfig]:
    path = config_path()
    if not path.exists():
        return None

    parser = _read_parser()
    if "controller" not in parser:
        return None
    section = parser["controller"]
    try:
        return ControllerConfig(
            vendor_id=int(section.get("vendor_id", "").strip(), 0),
            product_id=int(section.get("product_id", "").strip(), 0),
            product_string=section.get("product_string", "").strip(),
            report_len=int(section.get("report_len", str(DEFAULT_REPORT_LEN))),
            x_offset=int(section.get("x_offset", str(DEFAULT_X_OFFSET))),
            y_offset=int(section.get("y_offset", str(DEFAULT_Y_OFFSET))),
            omega_offset=int(section.get("omega_offset", str(DEFAULT_OMEGA_OFFSET))),
            throttle_offset=int(section.get("throttle_offset", str(DEFAULT_THROTTLE_OFFSET))),
            axis_16bit=section.getboolean("axis_16bit", fallback=False),
            invert_linear=section.getboolean("invert_linear", fallback=True),
            invert_omega=section.getboolean("invert_omega", fallback=True),
        )
    except ValueError:
        return None


def load_loop_config() -> LoopConfig:
    parser = _read_parser()
    section = parser["loop"] if "loop" in parser else {}
    try:
        update_hz = int(section.get("update_hz", str(DEFAULT_UPDATE_HZ)))
    except ValueError as exc:
        raise ConfigurationError(f"invalid [loop] section: {exc}") from exc
    return LoopConfig(update_hz=update_hz)


def load_drive_profile() -> DriveProfile:
    """Load the full drive profile, creating default config if needed."""
    ensure_config_exists()
    return DriveProfile(
        shaper=load_shaper_config(),
        vehicle=load_vehicle_config(),
        controller=load_controller_config(),
        loop=load_loop_config(),
    )


def save_shaper_config(cfg: ShaperConfig) -> None:
    parser = _read_parser()
    parser["shaper"] = {
        "deadband": str(cfg.deadband),
        "joystick_governor": str(cfg.joystick_governor),
    }
    _write_parser(parser)


def save_vehicle_config(cfg: VehicleConfig) -> None:
    parser = _read_parser()
    parser["vehicle"] = {
        "max_linear_speed": str(cfg.max_linear_speed),
        "max_angular_speed": str(cfg.max_angular_speed),
    }
    _write_parser(parser)


def save_controller_config(cfg: ControllerConfig) -> None:
    parser = _read_parser()
    parser["controller"] = {
        "vendor_id": hex(cfg.vendor_id),
        "product_id": hex(cfg.product_id),
        "product_string": cfg.product_string,
        "report_len": str(cfg.report_len),
        "x_offset": str(cfg.x_offset),
        "y_offset": str(cfg.y_offset),
        "omega_offset": str(cfg.omega_offset),
        "throttle_offset": str(cfg.throttle_offset),
        "axis_16bit": "true" if cfg.axis_16bit else "false",
        "invert_linear": "true" if cfg.invert_linear else "false",
        "invert_omega": "true" if cfg.invert_omega else "false",
    }
    _write_parser(parser)


def save_loop_config(cfg: LoopConfig) -> None:
    parser = _read_parser()
    parser["loop"] = {"update_hz": str(int(cfg.update_hz))}
    _write_parser(parser)


def save_drive_profile(profile: DriveProfile) -> None:
    save_shaper_config(profile.shaper)
    save_vehicle_config(profile.vehicle)
    if profile.controller is not None:
        save_controller_config(profile.controller)
    save_loop_config(profile.loop)
