"""Tests for Solar Thermal Controller binary sensor platform."""

from datetime import timedelta
from unittest.mock import AsyncMock

from freezegun.api import FrozenDateTimeFactory
from homeassistant.const import STATE_OFF, STATE_ON
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_fire_time_changed,
)

from custom_components.solar_controller.core import ActuatorError
from tests.conftest import ActuatorCall, get_entity_id, set_temperatures


async def test_circuit_binary_sensors(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    actuator_calls: list[ActuatorCall],
) -> None:
    """Test circuit running and reduced mode follow the controller state."""
    set_temperatures(hass, panel=50.0, inlet=33.0, outlet=30.0, tank=50.0)
    mock_config_entry.add_to_hass(hass)
    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    running_id = get_entity_id(hass, "binary_sensor", "circuit_running")
    reduced_id = get_entity_id(hass, "binary_sensor", "reduced_mode")
    assert hass.states.get(running_id).state == STATE_ON
    assert hass.states.get(reduced_id).state == STATE_OFF

    # Delta drops to 3 inside the hold window
    set_temperatures(hass, panel=40.0, inlet=32.0, outlet=30.0, tank=50.0)
    await hass.async_block_till_done()
    await mock_config_entry.runtime_data.coordinator.async_refresh()
    await hass.async_block_till_done()

    assert hass.states.get(running_id).state == STATE_ON
    assert hass.states.get(reduced_id).state == STATE_ON


async def test_health_sensor_healthy_after_setup(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
) -> None:
    """Test the health problem sensor is off while ticks succeed."""
    mock_config_entry.add_to_hass(hass)
    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    state = hass.states.get(get_entity_id(hass, "binary_sensor", "health"))
    assert state is not None
    assert state.state == STATE_OFF
    assert state.attributes["device_class"] == "problem"
    assert state.attributes["health_timeout"] == 60


async def test_health_sensor_turns_on_when_ticks_fail(
    hass: HomeAssistant,
    mock_config_entry: MockConfigEntry,
    freezer: FrozenDateTimeFactory,
) -> None:
    """Test the health sensor reports a problem and stays available."""
    freezer.move_to("2026-06-01 12:00:00+00:00")
    mock_config_entry.add_to_hass(hass)
    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()
    entity_id = get_entity_id(hass, "binary_sensor", "health")

    coordinator = mock_config_entry.runtime_data.coordinator
    coordinator.controller.tick = AsyncMock(side_effect=ActuatorError("offline"))

    for _ in range(7):
        freezer.tick(timedelta(seconds=10))
        async_fire_time_changed(hass)
        await hass.async_block_till_done()

    assert coordinator.last_update_success is False
    assert hass.states.get(entity_id).state == STATE_ON
