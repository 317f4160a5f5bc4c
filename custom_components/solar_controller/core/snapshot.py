"""
Sensor and setting snapshots for Solar Thermal Controller.

This module holds the value objects the control tick reads: the latest
temperature readings and the validated threshold settings.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import StrEnum
from typing import TYPE_CHECKING

from custom_components.solar_controller.const import (
    DEFAULT_SETTINGS,
    PANEL_PROBE_TEMP_MAX,
    PANEL_PROBE_TEMP_MIN,
    PANEL_PROBE_VOLTAGE_REF,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


class ConfigurationError(ValueError):
    """
    Raised when thresholds describe an undefined control behavior.

    The reason names the violated rule: value, flow_curve, duty_range or
    hysteresis.
    """

    def __init__(self, message: str, *, reason: str = "value") -> None:
        """Initialize the error."""
        super().__init__(message)
        self.reason = reason


class SensorId(StrEnum):
    """Temperature readings the controller depends on."""

    PANEL = "panel"  # Top of the solar panel
    INLET = "inlet"  # Loop inlet (cold side)
    OUTLET = "outlet"  # Loop outlet (hot side)
    TANK = "tank"  # Top of the storage tank


@dataclass(frozen=True)
class SensorReadings:
    """Complete set of temperatures for a single tick."""

    panel: float
    inlet: float
    outlet: float
    tank: float


class SensorSnapshot:
    """
    Latest known temperature per sensor.

    Each slot starts as None ("not yet reported") and keeps the last real
    reading for the lifetime of the snapshot. Only the ingestion side writes;
    the control tick reads through readings().
    """

    def __init__(self) -> None:
        """Initialize the snapshot with every sensor unreported."""
        self._values: dict[SensorId, float | None] = dict.fromkeys(SensorId)

    def update(self, sensor_id: SensorId | str, value: float) -> None:
        """
        Store a new reading.

        Raises:
            KeyError: If sensor_id is not a known sensor.

        """
        try:
            key = SensorId(sensor_id)
        except ValueError:
            msg = f"Unknown sensor: {sensor_id}"
            raise KeyError(msg) from None
        self._values[key] = value

    def get(self, sensor_id: SensorId) -> float | None:
        """Return the last reading for a sensor, or None if never reported."""
        return self._values[sensor_id]

    @property
    def missing(self) -> list[SensorId]:
        """Sensors that have not reported a real value yet."""
        return [key for key, value in self._values.items() if value is None]

    @property
    def ready(self) -> bool:
        """Return True once every sensor has reported."""
        return not self.missing

    def readings(self) -> SensorReadings | None:
        """Return the complete reading set, or None while still initializing."""
        if not self.ready:
            return None
        return SensorReadings(
            panel=self._values[SensorId.PANEL],  # type: ignore[arg-type]
            inlet=self._values[SensorId.INLET],  # type: ignore[arg-type]
            outlet=self._values[SensorId.OUTLET],  # type: ignore[arg-type]
            tank=self._values[SensorId.TANK],  # type: ignore[arg-type]
        )

    def as_dict(self) -> dict[str, float | None]:
        """Return readings keyed by sensor name."""
        return {key.value: value for key, value in self._values.items()}


@dataclass(frozen=True)
class FlowCurve:
    """Piecewise-linear map from temperature delta to actuator duty."""

    temp_min: float = DEFAULT_SETTINGS["temp_min"]
    temp_max: float = DEFAULT_SETTINGS["temp_max"]
    duty_min: float = DEFAULT_SETTINGS["duty_min"]
    duty_max: float = DEFAULT_SETTINGS["duty_max"]


@dataclass(frozen=True)
class Settings:
    """Threshold settings for a single tick."""

    solar_critical: float = DEFAULT_SETTINGS["solar_critical"]
    solar_on: float = DEFAULT_SETTINGS["solar_on"]
    solar_off: float = DEFAULT_SETTINGS["solar_off"]
    tank_max: float = DEFAULT_SETTINGS["tank_max"]
    flow: FlowCurve = FlowCurve()

    @classmethod
    def from_mapping(cls, values: Mapping[str, float]) -> Settings:
        """
        Build settings from a flat mapping of threshold keys.

        Missing keys fall back to DEFAULT_SETTINGS. The result is not
        validated; call validate() before using it.
        """

        def value(key: str) -> float:
            return float(values.get(key, DEFAULT_SETTINGS[key]))  # type: ignore[literal-required]

        return cls(
            solar_critical=value("solar_critical"),
            solar_on=value("solar_on"),
            solar_off=value("solar_off"),
            tank_max=value("tank_max"),
            flow=FlowCurve(
                temp_min=value("temp_min"),
                temp_max=value("temp_max"),
                duty_min=value("duty_min"),
                duty_max=value("duty_max"),
            ),
        )

    def as_dict(self) -> dict[str, float]:
        """Return settings as a flat mapping of threshold keys."""
        return {
            "solar_critical": self.solar_critical,
            "solar_on": self.solar_on,
            "solar_off": self.solar_off,
            "tank_max": self.tank_max,
            **{f.name: getattr(self.flow, f.name) for f in fields(self.flow)},
        }

    def validate(self) -> Settings:
        """
        Check the invariants the control tick relies on.

        Returns:
            The settings themselves, so calls can be chained.

        Raises:
            ConfigurationError: If any invariant is violated.

        """
        for key, val in self.as_dict().items():
            if not math.isfinite(val):
                msg = f"Setting {key} must be a finite number, got {val}"
                raise ConfigurationError(msg)

        if self.flow.temp_max <= self.flow.temp_min:
            msg = (
                f"Flow curve temp_max ({self.flow.temp_max}) must be greater "
                f"than temp_min ({self.flow.temp_min})"
            )
            raise ConfigurationError(msg, reason="flow_curve")

        if self.flow.duty_max < self.flow.duty_min:
            msg = (
                f"Flow curve duty_max ({self.flow.duty_max}) must not be below "
                f"duty_min ({self.flow.duty_min})"
            )
            raise ConfigurationError(msg, reason="duty_range")

        if self.solar_on <= self.solar_off:
            msg = (
                f"solar_on ({self.solar_on}) must be greater than "
                f"solar_off ({self.solar_off})"
            )
            raise ConfigurationError(msg, reason="hysteresis")

        return self


def calculate_delta(panel: float, outlet: float, inlet: float) -> float:
    """
    Estimate net thermal gain of the collector loop.

    Averages panel-top and loop-outlet temperature against loop-inlet
    temperature. Negative values mean the loop is heating the panel.
    """
    return (panel + outlet) / 2 - inlet


def voltage_to_temperature(voltage: float) -> float:
    """Convert an analog panel probe voltage to °C."""
    span = PANEL_PROBE_TEMP_MAX - PANEL_PROBE_TEMP_MIN
    return voltage * span / PANEL_PROBE_VOLTAGE_REF + PANEL_PROBE_TEMP_MIN
