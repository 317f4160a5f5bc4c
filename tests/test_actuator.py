"""Tests for the Home Assistant actuator sink."""

import pytest
from homeassistant.core import HomeAssistant, ServiceCall

from custom_components.solar_controller.actuator import HassActuatorSink
from custom_components.solar_controller.core import ActuatorError
from tests.conftest import ActuatorCall


@pytest.fixture
def input_helper_calls(hass: HomeAssistant) -> list[ActuatorCall]:
    """Register input helper services that record every call."""
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

    hass.services.async_register("input_boolean", "turn_on", track_call)
    hass.services.async_register("input_boolean", "turn_off", track_call)
    hass.services.async_register("input_number", "set_value", track_call)
    return calls


class TestDispatch:
    """Test commands map onto the right service for each domain."""

    async def test_switch(
        self, hass: HomeAssistant, actuator_calls: list[ActuatorCall]
    ) -> None:
        """Test non-zero turns a switch on and zero turns it off."""
        sink = HassActuatorSink(hass)

        await sink.async_set_value("switch.pump", 1)
        await sink.async_set_value("switch.pump", 0)

        assert actuator_calls == [
            ActuatorCall("switch", "turn_on", "switch.pump"),
            ActuatorCall("switch", "turn_off", "switch.pump"),
        ]

    async def test_number(
        self, hass: HomeAssistant, actuator_calls: list[ActuatorCall]
    ) -> None:
        """Test a number entity receives the value."""
        sink = HassActuatorSink(hass)

        await sink.async_set_value("number.flow", 2.4)

        assert actuator_calls == [
            ActuatorCall("number", "set_value", "number.flow", 2.4)
        ]

    async def test_input_helpers(
        self, hass: HomeAssistant, input_helper_calls: list[ActuatorCall]
    ) -> None:
        """Test input_boolean and input_number helpers work as actuators."""
        sink = HassActuatorSink(hass)

        await sink.async_set_value("input_boolean.pump", 1)
        await sink.async_set_value("input_number.flow", 7.6)

        assert input_helper_calls == [
            ActuatorCall("input_boolean", "turn_on", "input_boolean.pump"),
            ActuatorCall("input_number", "set_value", "input_number.flow", 7.6),
        ]


class TestFailures:
    """Test failures surface as actuator errors."""

    async def test_unsupported_domain(self, hass: HomeAssistant) -> None:
        """Test an entity outside the supported domains is rejected."""
        sink = HassActuatorSink(hass)

        with pytest.raises(ActuatorError, match="Unsupported actuator entity"):
            await sink.async_set_value("light.pump", 1)

    async def test_missing_service(self, hass: HomeAssistant) -> None:
        """Test a call to an unregistered service is reported."""
        sink = HassActuatorSink(hass)

        with pytest.raises(ActuatorError, match="switch.turn_on"):
            await sink.async_set_value("switch.pump", 1)

    @pytest.mark.usefixtures("failing_actuators")
    async def test_service_error(self, hass: HomeAssistant) -> None:
        """Test a failing service call is wrapped."""
        sink = HassActuatorSink(hass)

        with pytest.raises(ActuatorError, match="Gateway unreachable"):
            await sink.async_set_value("number.flow", 3.0)
