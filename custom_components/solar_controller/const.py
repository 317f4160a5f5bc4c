"""Constants for Solar Thermal Controller."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from logging import Logger, getLogger
from pathlib import Path
from typing import TypedDict

LOGGER: Logger = getLogger(__package__)

DOMAIN = "solar_controller"

# Load version from manifest.json once at module load
MANIFEST_PATH = Path(__file__).parent / "manifest.json"
VERSION = json.loads(MANIFEST_PATH.read_text())["version"]

# Event fired on the bus whenever the reported mode changes
EVENT_STATUS = f"{DOMAIN}_status"


class SolarMode(StrEnum):
    """Human-readable controller modes reported on the status surface."""

    STARTUP = "startup"
    WORKING = "working"
    REDUCED = "reduced mode"
    STOPPED = "stopped"
    FAILSAFE = "failsafe shutdown"
    TANK_FULL = "tank filled"
    HEAT_ESCAPE = "heat escape prevention mode"


class ControllerStatus(StrEnum):
    """Controller operational status for error tracking."""

    INITIALIZING = "initializing"  # Waiting for all sensors to report
    NORMAL = "normal"  # Control loop running
    FAIL_SAFE = "fail_safe"  # Sensors never reported, circuit reset to safe state


# Config entry data keys (entities)
CONF_NAME = "name"
CONF_CONTROLLER_ID = "controller_id"
CONF_PANEL_SENSOR = "panel_sensor"
CONF_INLET_SENSOR = "inlet_sensor"
CONF_OUTLET_SENSOR = "outlet_sensor"
CONF_TANK_SENSOR = "tank_sensor"
CONF_PUMP_ENTITY = "pump_entity"
CONF_SWITCH_ENTITY = "switch_entity"
CONF_FLOW_ENTITY = "flow_entity"
CONF_INVERT_FLOW = "invert_flow"
CONF_PANEL_VOLTAGE_INPUT = "panel_voltage_input"

# Config entry option groups
CONF_SETTINGS = "settings"
CONF_SETTING_ENTITIES = "setting_entities"
CONF_TIMING = "timing"

# Threshold keys, shared by CONF_SETTINGS and CONF_SETTING_ENTITIES
SETTING_SOLAR_CRITICAL = "solar_critical"
SETTING_SOLAR_ON = "solar_on"
SETTING_SOLAR_OFF = "solar_off"
SETTING_TANK_MAX = "tank_max"
SETTING_TEMP_MIN = "temp_min"
SETTING_TEMP_MAX = "temp_max"
SETTING_DUTY_MIN = "duty_min"
SETTING_DUTY_MAX = "duty_max"

SETTING_KEYS: tuple[str, ...] = (
    SETTING_SOLAR_CRITICAL,
    SETTING_SOLAR_ON,
    SETTING_SOLAR_OFF,
    SETTING_TANK_MAX,
    SETTING_TEMP_MIN,
    SETTING_TEMP_MAX,
    SETTING_DUTY_MIN,
    SETTING_DUTY_MAX,
)


class SettingDefaults(TypedDict):
    """Type for DEFAULT_SETTINGS dictionary."""

    solar_critical: float
    solar_on: float
    solar_off: float
    tank_max: float
    temp_min: float
    temp_max: float
    duty_min: float
    duty_max: float


class TimingDefaults(TypedDict):
    """Type for DEFAULT_TIMING dictionary."""

    poll_interval: int
    settle_delay: float
    reduction_window: int
    health_timeout: int
    startup_timeout: int
    flow_scale_max: float


# Default thresholds (°C for temperatures, actuator units for duty)
DEFAULT_SETTINGS: SettingDefaults = {
    "solar_critical": 90.0,
    "solar_on": 6.0,
    "solar_off": 5.0,
    "tank_max": 80.0,
    "temp_min": 5.0,
    "temp_max": 9.0,
    "duty_min": 1.8,
    "duty_max": 3.0,
}

# Default timing parameters (in seconds unless otherwise noted)
DEFAULT_TIMING: TimingDefaults = {
    "poll_interval": 5,
    "settle_delay": 1.0,
    "reduction_window": 1800,  # 30 minutes
    "health_timeout": 60,
    "startup_timeout": 600,  # 10 minutes, 0 waits forever
    "flow_scale_max": 10.0,  # 0-10 V analog output
}


@dataclass
class TimingParams:
    """
    Timing parameters for the control loop.

    All durations are in seconds.
    """

    poll_interval: int = DEFAULT_TIMING["poll_interval"]
    settle_delay: float = DEFAULT_TIMING["settle_delay"]
    reduction_window: int = DEFAULT_TIMING["reduction_window"]
    health_timeout: int = DEFAULT_TIMING["health_timeout"]
    startup_timeout: int = DEFAULT_TIMING["startup_timeout"]
    flow_scale_max: float = DEFAULT_TIMING["flow_scale_max"]


# Analog panel probe: 0-12 V maps linearly onto 0-200 °C
PANEL_PROBE_VOLTAGE_REF = 12.0
PANEL_PROBE_TEMP_MIN = 0.0
PANEL_PROBE_TEMP_MAX = 200.0

# Decimal places the gateway accepts for analog outputs
FLOW_PRECISION_DIGITS = 2

# Minimum seconds between "waiting for sensors" log lines
SENSOR_WAIT_LOG_INTERVAL = 60

# Health sensor re-evaluation interval (seconds)
HEALTH_CHECK_INTERVAL = 10

# UI validation constraints for timing parameters
UI_TIMING_POLL_INTERVAL = {"min": 1, "max": 60, "step": 1}
UI_TIMING_SETTLE_DELAY = {"min": 0, "max": 10, "step": 0.1}
UI_TIMING_REDUCTION_WINDOW = {"min": 0, "max": 7200, "step": 60}
UI_TIMING_HEALTH_TIMEOUT = {"min": 10, "max": 600, "step": 10}
UI_TIMING_STARTUP_TIMEOUT = {"min": 0, "max": 3600, "step": 60}
UI_TIMING_FLOW_SCALE_MAX = {"min": 1, "max": 100, "step": 0.5}

# UI validation constraints for thresholds
UI_SETTING_TEMPERATURE = {"min": -20.0, "max": 200.0, "step": 0.5}
UI_SETTING_DUTY = {"min": 0.0, "max": 100.0, "step": 0.1}
