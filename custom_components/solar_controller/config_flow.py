"""Config flow for Solar Thermal Controller."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import Platform
from homeassistant.core import callback
from homeassistant.helpers import selector
from slugify import slugify

from .const import (
    CONF_CONTROLLER_ID,
    CONF_FLOW_ENTITY,
    CONF_INLET_SENSOR,
    CONF_INVERT_FLOW,
    CONF_NAME,
    CONF_OUTLET_SENSOR,
    CONF_PANEL_SENSOR,
    CONF_PANEL_VOLTAGE_INPUT,
    CONF_PUMP_ENTITY,
    CONF_SETTING_ENTITIES,
    CONF_SETTINGS,
    CONF_SWITCH_ENTITY,
    CONF_TANK_SENSOR,
    CONF_TIMING,
    DEFAULT_SETTINGS,
    DEFAULT_TIMING,
    DOMAIN,
    LOGGER,
    SETTING_DUTY_MAX,
    SETTING_DUTY_MIN,
    SETTING_KEYS,
    UI_SETTING_DUTY,
    UI_SETTING_TEMPERATURE,
    UI_TIMING_FLOW_SCALE_MAX,
    UI_TIMING_HEALTH_TIMEOUT,
    UI_TIMING_POLL_INTERVAL,
    UI_TIMING_REDUCTION_WINDOW,
    UI_TIMING_SETTLE_DELAY,
    UI_TIMING_STARTUP_TIMEOUT,
)
from .core import ConfigurationError, Settings

ACTUATOR_SWITCH_DOMAINS = [Platform.SWITCH, "input_boolean"]
ACTUATOR_NUMBER_DOMAINS = [Platform.NUMBER, "input_number"]
SETTING_ENTITY_DOMAINS = [
    Platform.NUMBER,
    Platform.SENSOR,
    "input_number",
    "input_boolean",
]

DUTY_KEYS = (SETTING_DUTY_MIN, SETTING_DUTY_MAX)

# Integer timing fields, the rest are stored as float
INT_TIMING_KEYS = (
    "poll_interval",
    "reduction_window",
    "health_timeout",
    "startup_timeout",
)

TIMING_UI: dict[str, dict[str, float]] = {
    "poll_interval": UI_TIMING_POLL_INTERVAL,
    "settle_delay": UI_TIMING_SETTLE_DELAY,
    "reduction_window": UI_TIMING_REDUCTION_WINDOW,
    "health_timeout": UI_TIMING_HEALTH_TIMEOUT,
    "startup_timeout": UI_TIMING_STARTUP_TIMEOUT,
    "flow_scale_max": UI_TIMING_FLOW_SCALE_MAX,
}


def _settings_schema(current: dict[str, Any]) -> vol.Schema:
    """Build the threshold form, prefilled with current values."""
    fields: dict[Any, Any] = {}
    for key in SETTING_KEYS:
        ui = UI_SETTING_DUTY if key in DUTY_KEYS else UI_SETTING_TEMPERATURE
        fields[
            vol.Required(key, default=current.get(key, DEFAULT_SETTINGS[key]))  # type: ignore[literal-required]
        ] = selector.NumberSelector(
            selector.NumberSelectorConfig(
                min=ui["min"],
                max=ui["max"],
                step=ui["step"],
                mode=selector.NumberSelectorMode.BOX,
            )
        )
    return vol.Schema(fields)


def _validate_settings(user_input: dict[str, Any]) -> dict[str, str]:
    """
    Check a threshold set the same way the controller does at setup.

    Returns:
        Form errors, empty if the thresholds are valid.

    """
    try:
        Settings.from_mapping(user_input).validate()
    except ConfigurationError as err:
        LOGGER.debug("Rejected thresholds: %s", err)
        return {"base": f"invalid_{err.reason}"}
    return {}


def _settings_from_input(user_input: dict[str, Any]) -> dict[str, float]:
    return {key: float(user_input[key]) for key in SETTING_KEYS}


class SolarControllerFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Config flow for Solar Thermal Controller."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the config flow."""
        self._data: dict[str, Any] = {}

    async def async_step_user(
        self,
        user_input: dict[str, Any] | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Handle a flow initialized by the user."""
        if user_input is not None:
            controller_id = slugify(user_input[CONF_NAME])

            # Check for duplicate controller_id
            await self.async_set_unique_id(controller_id)
            self._abort_if_unique_id_configured()

            self._data = {
                CONF_NAME: user_input[CONF_NAME],
                CONF_CONTROLLER_ID: controller_id,
                CONF_PANEL_SENSOR: user_input[CONF_PANEL_SENSOR],
                CONF_INLET_SENSOR: user_input[CONF_INLET_SENSOR],
                CONF_OUTLET_SENSOR: user_input[CONF_OUTLET_SENSOR],
                CONF_TANK_SENSOR: user_input[CONF_TANK_SENSOR],
                CONF_PUMP_ENTITY: user_input[CONF_PUMP_ENTITY],
                CONF_SWITCH_ENTITY: user_input[CONF_SWITCH_ENTITY],
                CONF_FLOW_ENTITY: user_input[CONF_FLOW_ENTITY],
                CONF_INVERT_FLOW: user_input.get(CONF_INVERT_FLOW, False),
                CONF_PANEL_VOLTAGE_INPUT: user_input.get(
                    CONF_PANEL_VOLTAGE_INPUT, False
                ),
            }
            return await self.async_step_settings()

        sensor_selector = selector.EntitySelector(
            selector.EntitySelectorConfig(domain=Platform.SENSOR)
        )
        switch_selector = selector.EntitySelector(
            selector.EntitySelectorConfig(domain=ACTUATOR_SWITCH_DOMAINS)
        )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_NAME): selector.TextSelector(
                        selector.TextSelectorConfig(type=selector.TextSelectorType.TEXT)
                    ),
                    vol.Required(CONF_PANEL_SENSOR): sensor_selector,
                    vol.Required(CONF_INLET_SENSOR): sensor_selector,
                    vol.Required(CONF_OUTLET_SENSOR): sensor_selector,
                    vol.Required(CONF_TANK_SENSOR): sensor_selector,
                    vol.Required(CONF_PUMP_ENTITY): switch_selector,
                    vol.Required(CONF_SWITCH_ENTITY): switch_selector,
                    vol.Required(CONF_FLOW_ENTITY): selector.EntitySelector(
                        selector.EntitySelectorConfig(domain=ACTUATOR_NUMBER_DOMAINS)
                    ),
                    vol.Optional(
                        CONF_INVERT_FLOW, default=False
                    ): selector.BooleanSelector(),
                    vol.Optional(
                        CONF_PANEL_VOLTAGE_INPUT, default=False
                    ): selector.BooleanSelector(),
                }
            ),
        )

    async def async_step_settings(
        self,
        user_input: dict[str, Any] | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Collect the control thresholds."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = _validate_settings(user_input)
            if not errors:
                LOGGER.debug(
                    "Creating Solar Controller entry: %s",
                    self._data[CONF_CONTROLLER_ID],
                )
                return self.async_create_entry(
                    title=self._data[CONF_NAME],
                    data=self._data,
                    options={
                        CONF_SETTINGS: _settings_from_input(user_input),
                        CONF_SETTING_ENTITIES: {},
                        CONF_TIMING: DEFAULT_TIMING.copy(),
                    },
                )

        return self.async_show_form(
            step_id="settings",
            data_schema=_settings_schema(user_input or {}),
            errors=errors,
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,  # noqa: ARG004
    ) -> SolarControllerOptionsFlowHandler:
        """Get the options flow for this handler."""
        return SolarControllerOptionsFlowHandler()


class SolarControllerOptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options flow for Solar Thermal Controller."""

    async def async_step_init(
        self,
        _user_input: dict[str, Any] | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Manage options."""
        return self.async_show_menu(
            step_id="init",
            menu_options=[CONF_SETTINGS, CONF_SETTING_ENTITIES, CONF_TIMING],
        )

    async def async_step_settings(
        self,
        user_input: dict[str, Any] | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Configure the control thresholds."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = _validate_settings(user_input)
            if not errors:
                return self.async_create_entry(
                    title="",
                    data={
                        **self.config_entry.options,
                        CONF_SETTINGS: _settings_from_input(user_input),
                    },
                )

        current = user_input or self.config_entry.options.get(CONF_SETTINGS, {})
        return self.async_show_form(
            step_id="settings",
            data_schema=_settings_schema(current),
            errors=errors,
        )

    async def async_step_setting_entities(
        self,
        user_input: dict[str, Any] | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Configure entities that override thresholds at runtime."""
        if user_input is not None:
            setting_entities = {
                key: user_input[key] for key in SETTING_KEYS if user_input.get(key)
            }
            return self.async_create_entry(
                title="",
                data={
                    **self.config_entry.options,
                    CONF_SETTING_ENTITIES: setting_entities,
                },
            )

        current = self.config_entry.options.get(CONF_SETTING_ENTITIES, {})
        entity_selector = selector.EntitySelector(
            selector.EntitySelectorConfig(domain=SETTING_ENTITY_DOMAINS)
        )
        return self.async_show_form(
            step_id="setting_entities",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        key, description={"suggested_value": current.get(key)}
                    ): entity_selector
                    for key in SETTING_KEYS
                }
            ),
        )

    async def async_step_timing(
        self,
        user_input: dict[str, Any] | None = None,
    ) -> config_entries.ConfigFlowResult:
        """Configure timing parameters."""
        timing = self.config_entry.options.get(CONF_TIMING, DEFAULT_TIMING)

        if user_input is not None:
            new_timing = {
                key: int(user_input[key])
                if key in INT_TIMING_KEYS
                else float(user_input[key])
                for key in TIMING_UI
            }
            return self.async_create_entry(
                title="",
                data={
                    **self.config_entry.options,
                    CONF_TIMING: new_timing,
                },
            )

        return self.async_show_form(
            step_id="timing",
            data_schema=vol.Schema(
                {
                    vol.Required(
                        key,
                        default=timing.get(key, DEFAULT_TIMING[key]),  # type: ignore[literal-required]
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=ui["min"],
                            max=ui["max"],
                            step=ui["step"],
                            unit_of_measurement=None
                            if key == "flow_scale_max"
                            else "s",
                            mode=selector.NumberSelectorMode.BOX,
                        )
                    )
                    for key, ui in TIMING_UI.items()
                }
            ),
        )
