"""Base entity class for Solar Thermal Controller."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import CONF_CONTROLLER_ID
from .coordinator import SolarCoordinator
from .device import get_controller_device_info


class SolarControllerEntity(CoordinatorEntity[SolarCoordinator]):
    """Base class for Solar Thermal Controller entities."""

    _attr_has_entity_name = True

    def __init__(self, coordinator: SolarCoordinator, key: str) -> None:
        """Initialize the entity."""
        super().__init__(coordinator)
        controller_id = coordinator.config_entry.data[CONF_CONTROLLER_ID]
        self._attr_unique_id = f"{controller_id}_{key}"
        self._attr_device_info = get_controller_device_info(coordinator)
