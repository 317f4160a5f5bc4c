"""Binary sensor platform for Solar Thermal Controller."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
    BinarySensorEntityDescription,
)
from homeassistant.core import callback
from homeassistant.helpers.event import async_track_time_interval

from .const import HEALTH_CHECK_INTERVAL
from .entity import SolarControllerEntity

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddConfigEntryEntitiesCallback

    from .coordinator import SolarCoordinator
    from .data import SolarConfigEntry


@dataclass(frozen=True, kw_only=True)
class SolarBinarySensorEntityDescription(BinarySensorEntityDescription):
    """Describes Solar Thermal Controller binary sensor entity."""

    value_fn: Callable[[dict[str, Any]], bool]


BINARY_SENSORS: tuple[SolarBinarySensorEntityDescription, ...] = (
    SolarBinarySensorEntityDescription(
        key="circuit_running",
        translation_key="circuit_running",
        device_class=BinarySensorDeviceClass.RUNNING,
        value_fn=lambda data: data.get("circuit_running", False),
    ),
    SolarBinarySensorEntityDescription(
        key="reduced_mode",
        translation_key="reduced_mode",
        value_fn=lambda data: data.get("reduced_mode", False),
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: SolarConfigEntry,
    async_add_entities: AddConfigEntryEntitiesCallback,
) -> None:
    """Set up the binary sensor platform."""
    coordinator = entry.runtime_data.coordinator
    entities: list[BinarySensorEntity] = [
        SolarBinarySensor(coordinator, description) for description in BINARY_SENSORS
    ]
    entities.append(SolarHealthSensor(coordinator))
    async_add_entities(entities)


class SolarBinarySensor(SolarControllerEntity, BinarySensorEntity):
    """Binary sensor entity for circuit state."""

    entity_description: SolarBinarySensorEntityDescription

    def __init__(
        self,
        coordinator: SolarCoordinator,
        description: SolarBinarySensorEntityDescription,
    ) -> None:
        """Initialize the binary sensor entity."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def is_on(self) -> bool:
        """Return the sensor state."""
        return self.entity_description.value_fn(self.coordinator.data)


class SolarHealthSensor(SolarControllerEntity, BinarySensorEntity):
    """
    Binary sensor indicating the control loop is not ticking.

    This sensor is ON (problem) when no tick completed successfully within
    the health timeout. It re-evaluates on its own timer, so it turns on
    even when the coordinator has stopped notifying listeners, and it stays
    available while refreshes fail.
    """

    _attr_translation_key = "health"
    _attr_device_class = BinarySensorDeviceClass.PROBLEM

    def __init__(self, coordinator: SolarCoordinator) -> None:
        """Initialize the health sensor."""
        super().__init__(coordinator, "health")

    async def async_added_to_hass(self) -> None:
        """Start the periodic health check."""
        await super().async_added_to_hass()
        self.async_on_remove(
            async_track_time_interval(
                self.hass,
                self._async_check_health,
                timedelta(seconds=HEALTH_CHECK_INTERVAL),
            )
        )

    @callback
    def _async_check_health(self, _now: datetime) -> None:
        """Re-evaluate health between coordinator updates."""
        self.async_write_ha_state()

    @property
    def available(self) -> bool:
        """Return True, health is reported even while refreshes fail."""
        return True

    @property
    def is_on(self) -> bool:
        """Return True if the control loop is unhealthy."""
        return not self.coordinator.is_healthy()

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return health details."""
        last_success = self.coordinator.last_update_success_time
        return {
            "last_success": last_success.isoformat() if last_success else None,
            "health_timeout": self.coordinator.timing.health_timeout,
            "controller_status": self.coordinator.status.value,
        }
