"""Home Assistant actuator sink for Solar Thermal Controller."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.const import (
    ATTR_ENTITY_ID,
    SERVICE_TURN_OFF,
    SERVICE_TURN_ON,
    Platform,
)
from homeassistant.exceptions import HomeAssistantError

from .const import LOGGER
from .core.circuit import ActuatorError

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

INPUT_BOOLEAN_DOMAIN = "input_boolean"
INPUT_NUMBER_DOMAIN = "input_number"
SERVICE_SET_VALUE = "set_value"

BINARY_DOMAINS = (Platform.SWITCH, INPUT_BOOLEAN_DOMAIN)
NUMERIC_DOMAINS = (Platform.NUMBER, INPUT_NUMBER_DOMAIN)


class HassActuatorSink:
    """Deliver actuator commands as Home Assistant service calls."""

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize the sink."""
        self.hass = hass

    async def async_set_value(self, entity_id: str, value: float) -> None:
        """
        Command an actuator entity.

        Binary entities (switch, input_boolean) are turned on for any
        non-zero value. Numeric entities (number, input_number) receive
        the value through set_value.

        Raises:
            ActuatorError: If the entity domain is unsupported or the
                service call failed.

        """
        domain = entity_id.split(".", 1)[0]

        if domain in BINARY_DOMAINS:
            service = SERVICE_TURN_ON if value else SERVICE_TURN_OFF
            data: dict[str, object] = {ATTR_ENTITY_ID: entity_id}
        elif domain in NUMERIC_DOMAINS:
            service = SERVICE_SET_VALUE
            data = {ATTR_ENTITY_ID: entity_id, "value": value}
        else:
            msg = f"Unsupported actuator entity: {entity_id}"
            raise ActuatorError(msg)

        try:
            await self.hass.services.async_call(domain, service, data, blocking=True)
        except HomeAssistantError as err:
            msg = f"Failed to call {domain}.{service} for {entity_id}: {err}"
            raise ActuatorError(msg) from err

        LOGGER.debug(
            "Service '%s.%s' called for %s with value %s",
            domain,
            service,
            entity_id,
            value,
        )
