"""DataUpdateCoordinator for Solar Thermal Controller."""

from __future__ import annotations

import math
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.const import STATE_OFF, STATE_ON, STATE_UNAVAILABLE, STATE_UNKNOWN
from homeassistant.core import Event, State, callback
from homeassistant.helpers.event import (
    EventStateChangedData,
    async_track_state_change_event,
)
from homeassistant.helpers.update_coordinator import (
    TimestampDataUpdateCoordinator,
    UpdateFailed,
)

from .actuator import HassActuatorSink
from .const import (
    CONF_FLOW_ENTITY,
    CONF_INLET_SENSOR,
    CONF_INVERT_FLOW,
    CONF_OUTLET_SENSOR,
    CONF_PANEL_SENSOR,
    CONF_PANEL_VOLTAGE_INPUT,
    CONF_PUMP_ENTITY,
    CONF_SETTING_ENTITIES,
    CONF_SETTINGS,
    CONF_SWITCH_ENTITY,
    CONF_TANK_SENSOR,
    CONF_TIMING,
    DEFAULT_TIMING,
    DOMAIN,
    EVENT_STATUS,
    LOGGER,
    SENSOR_WAIT_LOG_INTERVAL,
    ControllerStatus,
    SolarMode,
    TimingParams,
)
from .core import (
    ActuatorError,
    Circuit,
    CircuitConfig,
    CircuitTransition,
    ConfigurationError,
    SensorId,
    Settings,
    SolarController,
    TickOutcome,
    voltage_to_temperature,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from homeassistant.core import HomeAssistant

    from .data import SolarConfigEntry

SENSOR_CONF_KEYS: dict[SensorId, str] = {
    SensorId.PANEL: CONF_PANEL_SENSOR,
    SensorId.INLET: CONF_INLET_SENSOR,
    SensorId.OUTLET: CONF_OUTLET_SENSOR,
    SensorId.TANK: CONF_TANK_SENSOR,
}

IGNORED_STATES = (STATE_UNKNOWN, STATE_UNAVAILABLE)


def build_timing(options: Mapping[str, Any]) -> TimingParams:
    """Build timing parameters from config entry options."""
    timing_opts: Mapping[str, Any] = options.get(CONF_TIMING, {})
    return TimingParams(
        poll_interval=timing_opts.get("poll_interval", DEFAULT_TIMING["poll_interval"]),
        settle_delay=timing_opts.get("settle_delay", DEFAULT_TIMING["settle_delay"]),
        reduction_window=timing_opts.get(
            "reduction_window", DEFAULT_TIMING["reduction_window"]
        ),
        health_timeout=timing_opts.get(
            "health_timeout", DEFAULT_TIMING["health_timeout"]
        ),
        startup_timeout=timing_opts.get(
            "startup_timeout", DEFAULT_TIMING["startup_timeout"]
        ),
        flow_scale_max=timing_opts.get(
            "flow_scale_max", DEFAULT_TIMING["flow_scale_max"]
        ),
    )


def parse_setting_state(state: str) -> float:
    """
    Convert a setting entity state to a number.

    Boolean entities report "on"/"off", which map to 1 and 0.

    Raises:
        ValueError: If the state is not numeric.

    """
    if state == STATE_ON:
        return 1.0
    if state == STATE_OFF:
        return 0.0
    return float(state)


class SolarCoordinator(TimestampDataUpdateCoordinator[dict[str, Any]]):
    """
    Run the solar controller once per poll interval.

    Sensor states are pushed into the controller snapshot by state change
    listeners. Each refresh re-reads the settings, runs one control tick and
    publishes the resulting status for the entities.
    """

    config_entry: SolarConfigEntry

    def __init__(
        self,
        hass: HomeAssistant,
        entry: SolarConfigEntry,
    ) -> None:
        """
        Initialize the coordinator.

        Raises:
            ConfigurationError: If the configured thresholds are invalid.

        """
        self.timing = build_timing(entry.options)
        self._controller = self._build_controller(hass, entry)
        self._status: ControllerStatus = ControllerStatus.INITIALIZING

        super().__init__(
            hass,
            LOGGER,
            name=DOMAIN,
            update_interval=timedelta(seconds=self.timing.poll_interval),
        )
        self.config_entry = entry

        self._sensor_entities: dict[str, SensorId] = {
            entry.data[conf_key]: sensor_id
            for sensor_id, conf_key in SENSOR_CONF_KEYS.items()
        }
        self._panel_voltage_input: bool = entry.data.get(
            CONF_PANEL_VOLTAGE_INPUT, False
        )

        # Startup wait tracking
        self._waiting_since: datetime | None = None
        self._last_wait_log: datetime | None = None

        # Deduplicate repeated settings problems across ticks
        self._settings_error: str | None = None
        self._bad_setting_entities: set[str] = set()

        self._last_outcome: TickOutcome | None = None
        self._listener_unsub: Callable[[], None] | None = None

    def _build_controller(
        self, hass: HomeAssistant, entry: SolarConfigEntry
    ) -> SolarController:
        """Build SolarController from config entry."""
        data = entry.data
        circuit = Circuit(
            CircuitConfig(
                pump=data[CONF_PUMP_ENTITY],
                switch=data[CONF_SWITCH_ENTITY],
                flow=data[CONF_FLOW_ENTITY],
                settle_delay=self.timing.settle_delay,
                invert=data.get(CONF_INVERT_FLOW, False),
                flow_scale_max=self.timing.flow_scale_max,
            ),
            HassActuatorSink(hass),
        )
        settings = Settings.from_mapping(entry.options.get(CONF_SETTINGS, {}))
        return SolarController(
            circuit,
            settings,
            reduction_window=self.timing.reduction_window,
        )

    @property
    def controller(self) -> SolarController:
        """Return the solar controller."""
        return self._controller

    @property
    def status(self) -> ControllerStatus:
        """Return the current controller operational status."""
        return self._status

    async def async_config_entry_first_refresh(self) -> None:
        """Perform first refresh and set up state change listeners."""
        await super().async_config_entry_first_refresh()
        self._async_setup_listeners()

    def _async_setup_listeners(self) -> None:
        """Subscribe to temperature sensor state changes."""
        if self._listener_unsub is not None:
            self._listener_unsub()
            self._listener_unsub = None

        entity_ids = list(self._sensor_entities)
        self._listener_unsub = async_track_state_change_event(
            self.hass, entity_ids, self._on_sensor_change
        )
        self.config_entry.async_on_unload(self._listener_unsub)
        LOGGER.debug("Subscribed to state changes for sensors: %s", entity_ids)

    @callback
    def _on_sensor_change(self, event: Event[EventStateChangedData]) -> None:
        """Store a new temperature reading in the snapshot."""
        sensor_id = self._sensor_entities.get(event.data["entity_id"])
        if sensor_id is None:
            return
        self._ingest_state(sensor_id, event.data["new_state"])

    def _ingest_state(self, sensor_id: SensorId, state: State | None) -> None:
        """
        Write a sensor state into the snapshot.

        Unknown, unavailable, non-numeric and non-finite states are ignored, so the last
        real reading is kept.
        """
        if state is None or state.state in IGNORED_STATES:
            return

        try:
            value = float(state.state)
            if not math.isfinite(value):
                raise ValueError(state.state)
        except ValueError:
            LOGGER.warning(
                "Sensor %s reported a non-numeric state '%s', keeping last value",
                state.entity_id,
                state.state,
            )
            return

        if sensor_id == SensorId.PANEL and self._panel_voltage_input:
            value = voltage_to_temperature(value)

        self._controller.snapshot.update(sensor_id, value)

    def _pull_sensor_states(self) -> None:
        """Read sensors that have not reported yet directly from the state machine."""
        missing = set(self._controller.snapshot.missing)
        for entity_id, sensor_id in self._sensor_entities.items():
            if sensor_id in missing:
                self._ingest_state(sensor_id, self.hass.states.get(entity_id))

    def _read_settings(self) -> Settings:
        """
        Assemble settings from configured values and override entities.

        An override entity that is missing or not numeric falls back to the
        configured value.
        """
        options = self.config_entry.options
        values: dict[str, float] = dict(options.get(CONF_SETTINGS, {}))

        for key, entity_id in options.get(CONF_SETTING_ENTITIES, {}).items():
            if not entity_id:
                continue
            state = self.hass.states.get(entity_id)
            if state is None or state.state in IGNORED_STATES:
                continue
            try:
                values[key] = parse_setting_state(state.state)
            except ValueError:
                if entity_id not in self._bad_setting_entities:
                    LOGGER.warning(
                        "Setting entity %s has non-numeric state '%s', "
                        "using configured %s",
                        entity_id,
                        state.state,
                        key,
                    )
                    self._bad_setting_entities.add(entity_id)
                continue
            self._bad_setting_entities.discard(entity_id)

        return Settings.from_mapping(values)

    def _refresh_settings(self) -> None:
        """Apply the current settings, keeping the previous ones if invalid."""
        settings = self._read_settings()
        try:
            changed = self._controller.update_settings(settings)
        except ConfigurationError as err:
            if str(err) != self._settings_error:
                LOGGER.error("Rejected settings update, keeping previous: %s", err)
                self._settings_error = str(err)
            return

        self._settings_error = None
        if changed:
            LOGGER.info("Settings updated: %s", settings.as_dict())

    async def _wait_for_sensors(self, now: datetime) -> None:
        """
        Track the startup wait while sensors are missing.

        After startup_timeout the circuit is reset once and the status turns
        to fail-safe. Waiting continues, so the controller recovers as soon
        as every sensor reports.
        """
        if self._waiting_since is None:
            self._waiting_since = now

        if (
            self._last_wait_log is None
            or (now - self._last_wait_log).total_seconds() >= SENSOR_WAIT_LOG_INTERVAL
        ):
            LOGGER.warning(
                "Waiting for sensors to report: %s",
                ", ".join(self._controller.snapshot.missing),
            )
            self._last_wait_log = now

        timeout = self.timing.startup_timeout
        if (
            self._status == ControllerStatus.INITIALIZING
            and timeout > 0
            and (now - self._waiting_since).total_seconds() >= timeout
        ):
            try:
                await self._controller.fail_safe()
            except ActuatorError as err:
                msg = f"Fail-safe circuit reset failed: {err}"
                raise UpdateFailed(msg) from err
            self._status = ControllerStatus.FAIL_SAFE
            LOGGER.error(
                "Sensors did not report within %d seconds, "
                "circuit reset to safe state",
                timeout,
            )

    async def _async_update_data(self) -> dict[str, Any]:
        """Run one control tick."""
        now = datetime.now(UTC)
        previous_mode = self._controller.state.mode

        self._refresh_settings()

        if not self._controller.snapshot.ready:
            self._pull_sensor_states()

        if not self._controller.snapshot.ready:
            await self._wait_for_sensors(now)
        elif self._status != ControllerStatus.NORMAL:
            if self._status == ControllerStatus.FAIL_SAFE:
                LOGGER.info("All sensors reporting, leaving fail-safe")
            self._status = ControllerStatus.NORMAL

        try:
            outcome = await self._controller.tick(now)
        except ActuatorError as err:
            msg = f"Actuator command failed: {err}"
            raise UpdateFailed(msg) from err

        self._last_outcome = outcome
        self._log_outcome(outcome, previous_mode)

        if outcome.mode != previous_mode:
            self._fire_status_event(outcome, previous_mode)

        return self._build_state_dict()

    def _log_outcome(self, outcome: TickOutcome, previous_mode: SolarMode) -> None:
        """Log controller transitions (integration layer's responsibility)."""
        if outcome.circuit_reset:
            LOGGER.info("All sensors reporting, circuit reset to safe state")

        if outcome.transition == CircuitTransition.STARTED:
            LOGGER.info("Detected optimal conditions. Harvesting.")
        elif outcome.transition == CircuitTransition.STOPPED:
            LOGGER.info("Stopping: %s", outcome.reason)
        elif outcome.guard is not None and outcome.mode != previous_mode:
            LOGGER.info("%s", outcome.reason)

        if outcome.mode == SolarMode.REDUCED and previous_mode != SolarMode.REDUCED:
            LOGGER.info("Entering reduced heat exchange mode")

    def _fire_status_event(self, outcome: TickOutcome, previous_mode: SolarMode) -> None:
        """Announce a mode change on the event bus."""
        mode_since = self._controller.state.mode_since
        self.hass.bus.async_fire(
            EVENT_STATUS,
            {
                "entry_id": self.config_entry.entry_id,
                "mode": outcome.mode.value,
                "previous_mode": previous_mode.value,
                "reason": outcome.reason,
                "delta": outcome.delta,
                "flow": self._controller.circuit.last_flow,
                "mode_since": mode_since.isoformat() if mode_since else None,
            },
        )

    def is_healthy(self, now: datetime | None = None) -> bool:
        """Return True if a tick succeeded within health_timeout."""
        if self.last_update_success_time is None:
            return False
        now = now or datetime.now(UTC)
        elapsed = (now - self.last_update_success_time).total_seconds()
        return elapsed <= self.timing.health_timeout

    def _build_state_dict(self) -> dict[str, Any]:
        """Build state dictionary for entities to consume."""
        state = self._controller.state
        circuit = self._controller.circuit
        outcome = self._last_outcome

        return {
            "mode": state.mode.value,
            "mode_since": state.mode_since,
            "controller_status": self._status.value,
            "delta": state.delta,
            "flow": circuit.last_flow,
            "panel_temperature": self._controller.snapshot.get(SensorId.PANEL),
            "circuit_running": circuit.running,
            "reduced_mode": state.reduced.active,
            "reduced_till": state.reduced.reduced_till,
            "guard": outcome.guard if outcome else None,
            "reason": outcome.reason if outcome else None,
            "counters": {
                counter.value: count for counter, count in state.counters.items()
            },
            "sensors": self._controller.snapshot.as_dict(),
            "settings": self._controller.settings.as_dict(),
        }
