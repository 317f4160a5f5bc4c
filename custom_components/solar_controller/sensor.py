"""Sensor platform for Solar Thermal Controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import UnitOfTemperature

from .const import SolarMode
from .core import GuardCounter
from .entity import SolarControllerEntity

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

    from .coordinator import SolarCoordinator
    from .data import SolarConfigEntry


@dataclass(frozen=True, kw_only=True)
class SolarSensorEntityDescription(SensorEntityDescription):
    """Describes Solar Thermal Controller sensor entity."""

    value_fn: Callable[[dict[str, Any]], float | int | str | None]


def _counter(counter: GuardCounter) -> SolarSensorEntityDescription:
    return SolarSensorEntityDescription(
        key=counter.value,
        translation_key=counter.value,
        state_class=SensorStateClass.TOTAL_INCREASING,
        value_fn=lambda data: data.get("counters", {}).get(counter.value, 0),
    )


SENSORS: tuple[SolarSensorEntityDescription, ...] = (
    SolarSensorEntityDescription(
        key="mode",
        translation_key="mode",
        device_class=SensorDeviceClass.ENUM,
        options=[mode.value for mode in SolarMode],
        value_fn=lambda data: data.get("mode"),
    ),
    SolarSensorEntityDescription(
        key="delta",
        translation_key="delta",
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        device_class=SensorDeviceClass.TEMPERATURE,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        value_fn=lambda data: data.get("delta"),
    ),
    SolarSensorEntityDescription(
        key="flow",
        translation_key="flow",
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        value_fn=lambda data: data.get("flow"),
    ),
    SolarSensorEntityDescription(
        key="panel_temperature",
        translation_key="panel_temperature",
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        device_class=SensorDeviceClass.TEMPERATURE,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=1,
        value_fn=lambda data: data.get("panel_temperature"),
    ),
    *(_counter(counter) for counter in GuardCounter),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: SolarConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up the sensor platform."""
    coordinator = entry.runtime_data.coordinator
    async_add_entities(
        SolarSensor(coordinator, description) for description in SENSORS
    )


class SolarSensor(SolarControllerEntity, SensorEntity):
    """Sensor entity for controller status and metrics."""

    entity_description: SolarSensorEntityDescription

    def __init__(
        self,
        coordinator: SolarCoordinator,
        description: SolarSensorEntityDescription,
    ) -> None:
        """Initialize the sensor entity."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> float | int | str | None:
        """Return the sensor value."""
        return self.entity_description.value_fn(self.coordinator.data)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return mode details on the mode sensor."""
        if self.entity_description.key != "mode":
            return None
        data = self.coordinator.data
        return {
            "mode_since": data.get("mode_since"),
            "reason": data.get("reason"),
            "guard": data.get("guard"),
            "controller_status": data.get("controller_status"),
            "reduced_till": data.get("reduced_till"),
        }
