"""Common fixtures for Solar Thermal Controller tests."""

from collections.abc import Generator
from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.solar_controller.const import (
    CONF_SETTING_ENTITIES,
    CONF_SETTINGS,
    CONF_TIMING,
    DEFAULT_SETTINGS,
    DEFAULT_TIMING,
    DOMAIN,
)

MOCK_CONTROLLER_ID = "test_controller"

PANEL_SENSOR = "sensor.panel_temp"
INLET_SENSOR = "sensor.loop_inlet_temp"
OUTLET_SENSOR = "sensor.loop_outlet_temp"
TANK_SENSOR = "sensor.tank_temp"
PUMP_ENTITY = "switch.solar_pump"
SWITCH_ENTITY = "switch.solar_valve"
FLOW_ENTITY = "number.solar_flow"

MOCK_DATA: dict[str, Any] = {
    "name": "Test Controller",
    "controller_id": MOCK_CONTROLLER_ID,
    "panel_sensor": PANEL_SENSOR,
    "inlet_sensor": INLET_SENSOR,
    "outlet_sensor": OUTLET_SENSOR,
    "tank_sensor": TANK_SENSOR,
    "pump_entity": PUMP_ENTITY,
    "switch_entity": SWITCH_ENTITY,
    "flow_entity": FLOW_ENTITY,
    "invert_flow": False,
    "panel_voltage_input": False,
}

# No settle delay between actuator commands so refreshes complete instantly
MOCK_TIMING: dict[str, Any] = {**DEFAULT_TIMING, "settle_delay": 0}


def mock_options(**overrides: Any) -> dict[str, Any]:
    """Build config entry options with default thresholds."""
    options: dict[str, Any] = {
        CONF_SETTINGS: dict(DEFAULT_SETTINGS),
        CONF_SETTING_ENTITIES: {},
        CONF_TIMING: dict(MOCK_TIMING),
    }
    options.update(overrides)
    return options


def set_temperatures(
    hass: HomeAssistant,
    *,
    panel: float,
    inlet: float,
    outlet: float,
    tank: float,
) -> None:
    """Report all four temperatures through the state machine."""
    hass.states.async_set(PANEL_SENSOR, str(panel))
    hass.states.async_set(INLET_SENSOR, str(inlet))
    hass.states.async_set(OUTLET_SENSOR, str(outlet))
    hass.states.async_set(TANK_SENSOR, str(tank))


def get_entity_id(hass: HomeAssistant, platform: str, key: str) -> str:
    """Look up an entity ID by its unique ID suffix."""
    entity_id = er.async_get(hass).async_get_entity_id(
        platform, DOMAIN, f"{MOCK_CONTROLLER_ID}_{key}"
    )
    assert entity_id is not None
    return entity_id


@dataclass
class ActuatorCall:
    """A recorded actuator service call."""

    domain: str
    service: str
    entity_id: str
    value: float | None = None


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Return a mock config entry with all sensors and actuators configured."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Test Controller",
        data=MOCK_DATA,
        options=mock_options(),
        entry_id="test_entry_id",
        unique_id=MOCK_CONTROLLER_ID,
    )


@pytest.fixture
def actuator_calls(hass: HomeAssistant) -> list[ActuatorCall]:
    """Register switch and number services that record every call."""
    calls: list[ActuatorCall] = []

    async def track_call(call: ServiceCall) -> None:
        calls.append(
            ActuatorCall(
                domain=call.domain,
                service=call.service,
                entity_id=call.data["entity_id"],
                value=call.data.get("value"),
            )
        )

    hass.services.async_register("switch", "turn_on", track_call)
    hass.services.async_register("switch", "turn_off", track_call)
    hass.services.async_register("number", "set_value", track_call)
    return calls


@pytest.fixture
def failing_actuators(hass: HomeAssistant) -> None:
    """Register actuator services that always fail."""

    async def fail_call(call: ServiceCall) -> None:
        msg = f"Gateway unreachable for {call.data['entity_id']}"
        raise HomeAssistantError(msg)

    hass.services.async_register("switch", "turn_on", fail_call)
    hass.services.async_register("switch", "turn_off", fail_call)
    hass.services.async_register("number", "set_value", fail_call)


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(
    enable_custom_integrations: None,
) -> None:
    """Enable custom integrations for all tests."""


@pytest.fixture(autouse=True)
def expected_lingering_timers() -> bool:
    """Allow lingering timers for coordinator updates."""
    return True


@pytest.fixture
def mock_setup_entry() -> Generator[None]:
    """Mock setting up a config entry."""
    with patch(
        "custom_components.solar_controller.async_setup_entry",
        return_value=True,
    ):
        yield
