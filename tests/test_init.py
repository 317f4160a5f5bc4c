"""Test Solar Thermal Controller setup and unload."""

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.solar_controller.const import DOMAIN
from custom_components.solar_controller.coordinator import SolarCoordinator

from tests.conftest import (
    MOCK_DATA,
    ActuatorCall,
    mock_options,
    set_temperatures,
)


async def test_setup_entry(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
) -> None:
    """Test successful setup of config entry."""
    mock_config_entry.add_to_hass(hass)

    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.LOADED
    assert isinstance(mock_config_entry.runtime_data.coordinator, SolarCoordinator)


async def test_unload_entry(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
) -> None:
    """Test successful unload of config entry."""
    mock_config_entry.add_to_hass(hass)

    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert await hass.config_entries.async_unload(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.NOT_LOADED


async def test_invalid_settings_fail_setup(hass: HomeAssistant) -> None:
    """Test a degenerate flow curve refuses to set up."""
    options = mock_options()
    options["settings"] = {**options["settings"], "temp_min": 9.0, "temp_max": 9.0}
    entry = MockConfigEntry(
        domain=DOMAIN,
        title="Test Controller",
        data=MOCK_DATA,
        options=options,
        entry_id="test_entry_invalid",
        unique_id="test_controller_invalid",
    )
    entry.add_to_hass(hass)

    assert not await hass.config_entries.async_setup(entry.entry_id)
    await hass.async_block_till_done()

    assert entry.state is ConfigEntryState.SETUP_ERROR


async def test_actuator_failure_retries_setup(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    failing_actuators: None,
) -> None:
    """Test an unreachable gateway during the first tick schedules a retry."""
    set_temperatures(hass, panel=50.0, inlet=33.0, outlet=30.0, tank=50.0)
    mock_config_entry.add_to_hass(hass)

    assert not await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    assert mock_config_entry.state is ConfigEntryState.SETUP_RETRY


async def test_options_update_reloads_entry(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    actuator_calls: list[ActuatorCall],
) -> None:
    """Test changing options rebuilds the coordinator with new thresholds."""
    mock_config_entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    old_coordinator = mock_config_entry.runtime_data.coordinator

    options = mock_options()
    options["settings"] = {**options["settings"], "tank_max": 65.0}
    hass.config_entries.async_update_entry(mock_config_entry, options=options)
    await hass.async_block_till_done()

    coordinator = mock_config_entry.runtime_data.coordinator
    assert coordinator is not old_coordinator
    assert coordinator.controller.settings.tank_max == 65.0
