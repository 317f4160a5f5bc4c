"""Device helpers for Solar Thermal Controller."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.helpers.device_registry import DeviceInfo

from .const import CONF_NAME, DOMAIN, VERSION

if TYPE_CHECKING:
    from .coordinator import SolarCoordinator


def get_controller_device_info(coordinator: SolarCoordinator) -> DeviceInfo:
    """Get device info for the solar circuit controller."""
    return DeviceInfo(
        identifiers={(DOMAIN, coordinator.config_entry.entry_id)},
        name=coordinator.config_entry.data.get(CONF_NAME, "Solar Controller"),
        manufacturer="Solar Thermal Controller",
        model="Collector Loop Controller",
        sw_version=VERSION,
    )
