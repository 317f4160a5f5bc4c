"""
Controller logic for Solar Thermal Controller.

This module provides the SolarController class that runs one control tick:
guards first, then mode selection between modulating, reduced hold and
shutdown, driving the circuit state machine and the flow mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from custom_components.solar_controller.const import DEFAULT_TIMING, SolarMode

from .circuit import Circuit, CircuitTransition
from .flow import calculate_flow
from .guards import GUARDS, Guard, GuardCounter, evaluate_guards
from .snapshot import SensorSnapshot, Settings, calculate_delta


@dataclass
class ReducedModeWindow:
    """
    Hold window bridging brief dips below the modulation threshold.

    The deadline is pushed forward on every modulating tick. Until it
    passes, a low delta keeps the pump running at minimum flow instead of
    stopping the circuit.
    """

    reduced_till: datetime | None = None
    active: bool = False

    def extend(self, now: datetime, window: float) -> None:
        """Push the deadline to now + window seconds."""
        self.reduced_till = now + timedelta(seconds=window)

    def is_open(self, now: datetime) -> bool:
        """Return True while the hold window has not expired."""
        return self.reduced_till is not None and now < self.reduced_till


@dataclass
class TickOutcome:
    """Result of a single control tick, for status reporting."""

    delta: float | None
    mode: SolarMode
    flow: float | None = None
    guard: str | None = None
    reason: str | None = None
    transition: CircuitTransition = CircuitTransition.NONE
    circuit_reset: bool = False


@dataclass
class ControllerState:
    """Runtime state of the controller carried between ticks."""

    mode: SolarMode = SolarMode.STARTUP
    mode_since: datetime | None = None
    delta: float | None = None
    reduced: ReducedModeWindow = field(default_factory=ReducedModeWindow)
    counters: dict[GuardCounter, int] = field(
        default_factory=lambda: dict.fromkeys(GuardCounter, 0)
    )
    circuit_reset: bool = False


class SolarController:
    """
    Decision engine for a single solar-thermal circuit.

    Owns the sensor snapshot, the validated settings and the circuit. The
    integration layer feeds readings into snapshot, refreshes settings, and
    calls tick() once per poll interval. Ticks must not overlap.
    """

    def __init__(
        self,
        circuit: Circuit,
        settings: Settings,
        *,
        reduction_window: float = DEFAULT_TIMING["reduction_window"],
        guards: tuple[Guard, ...] = GUARDS,
    ) -> None:
        """
        Initialize the controller.

        Args:
            circuit: Circuit state machine driving the actuators.
            settings: Initial thresholds.
            reduction_window: Seconds to hold minimum flow after modulation.
            guards: Ordered guards evaluated before every decision.

        Raises:
            ConfigurationError: If settings are invalid.

        """
        self.circuit = circuit
        self.snapshot = SensorSnapshot()
        self.reduction_window = reduction_window
        self._guards = guards
        self._settings = settings.validate()
        self._state = ControllerState()

    @property
    def state(self) -> ControllerState:
        """Get the current controller state."""
        return self._state

    @property
    def settings(self) -> Settings:
        """Get the settings in effect."""
        return self._settings

    def update_settings(self, settings: Settings) -> bool:
        """
        Replace the settings in effect.

        Returns:
            True if the settings changed.

        Raises:
            ConfigurationError: If settings are invalid; the previous
                settings stay in effect.

        """
        settings.validate()
        if settings == self._settings:
            return False
        self._settings = settings
        return True

    def _set_mode(self, mode: SolarMode, now: datetime) -> None:
        if mode != self._state.mode or self._state.mode_since is None:
            self._state.mode_since = now
        self._state.mode = mode

    async def tick(self, now: datetime) -> TickOutcome:
        """
        Run one control tick.

        Args:
            now: Current timestamp.

        Returns:
            What the tick decided.

        Raises:
            ActuatorError: If an actuator command failed. State is left
                consistent and the next tick retries.

        """
        readings = self.snapshot.readings()
        if readings is None:
            self._set_mode(SolarMode.STARTUP, now)
            return TickOutcome(delta=None, mode=SolarMode.STARTUP)

        settings = self._settings
        safe_flow = settings.flow.duty_min

        # Bring actuators to a known state once before taking control
        circuit_reset = False
        if not self._state.circuit_reset:
            await self.circuit.reset(safe_flow)
            self._state.circuit_reset = circuit_reset = True

        delta = calculate_delta(readings.panel, readings.outlet, readings.inlet)
        self._state.delta = delta

        guard = evaluate_guards(readings, settings, delta, self._guards)
        if guard is not None:
            self._state.counters[guard.counter] += 1
            self._set_mode(guard.mode, now)
            self._state.reduced.active = False
            transition = await self.circuit.stop(safe_flow)
            return TickOutcome(
                delta=delta,
                mode=guard.mode,
                guard=guard.key,
                reason=guard.reason(readings, settings, delta),
                transition=transition,
                circuit_reset=circuit_reset,
            )

        if delta > settings.solar_off:
            # Modulating: keep the reduced-mode window open while heat flows
            self._state.reduced.extend(now, self.reduction_window)
            self._state.reduced.active = False

            transition = CircuitTransition.NONE
            if delta >= settings.solar_on and readings.panel > readings.outlet:
                self._set_mode(SolarMode.WORKING, now)
                transition = await self.circuit.start()

            flow = calculate_flow(delta, settings.flow)
            sent = await self.circuit.set_flow(flow)
            return TickOutcome(
                delta=delta,
                mode=self._state.mode,
                flow=flow if sent else None,
                transition=transition,
                circuit_reset=circuit_reset,
            )

        if self._state.reduced.is_open(now):
            # Reduced hold: pump keeps running at minimum flow
            sent = False
            if not self._state.reduced.active:
                self._set_mode(SolarMode.REDUCED, now)
                sent = await self.circuit.set_flow(safe_flow)
                self._state.reduced.active = True
            return TickOutcome(
                delta=delta,
                mode=self._state.mode,
                flow=safe_flow if sent else None,
                circuit_reset=circuit_reset,
            )

        self._state.reduced.active = False
        self._set_mode(SolarMode.STOPPED, now)
        transition = await self.circuit.stop(safe_flow)
        return TickOutcome(
            delta=delta,
            mode=SolarMode.STOPPED,
            reason=f"Temperature delta too low: {delta:.2f}",
            transition=transition,
            circuit_reset=circuit_reset,
        )

    async def fail_safe(self) -> None:
        """Reset the circuit to its safe state without evaluating sensors."""
        await self.circuit.reset(self._settings.flow.duty_min)
        self._state.circuit_reset = True
