"""Custom integration to run a solar-thermal collector loop with Home Assistant."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.const import Platform
from homeassistant.exceptions import ConfigEntryError

from .const import DOMAIN, LOGGER
from .coordinator import SolarCoordinator
from .core import ConfigurationError
from .data import SolarData

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .data import SolarConfigEntry

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.BINARY_SENSOR,
]


async def async_setup_entry(
    hass: HomeAssistant,
    entry: SolarConfigEntry,
) -> bool:
    """Set up Solar Thermal Controller from a config entry."""
    LOGGER.debug("Setting up Solar Thermal Controller entry: %s", entry.entry_id)

    try:
        coordinator = SolarCoordinator(hass=hass, entry=entry)
    except ConfigurationError as err:
        msg = f"Invalid controller settings: {err}"
        raise ConfigEntryError(msg) from err

    await coordinator.async_config_entry_first_refresh()

    entry.runtime_data = SolarData(coordinator=coordinator)

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    return True


async def async_unload_entry(
    hass: HomeAssistant,
    entry: SolarConfigEntry,
) -> bool:
    """Handle removal of an entry."""
    LOGGER.debug("Unloading Solar Thermal Controller entry: %s", entry.entry_id)
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)


async def async_reload_entry(
    hass: HomeAssistant,
    entry: SolarConfigEntry,
) -> None:
    """Reload config entry."""
    await hass.config_entries.async_reload(entry.entry_id)


__all__ = [
    "DOMAIN",
    "async_setup_entry",
    "async_unload_entry",
]
