"""
Circuit state machine for Solar Thermal Controller.

Starting and stopping the circuit is a sequence of actuator commands with a
settle delay between each one, so relays behind the gateway never switch
simultaneously. Commands are only sent on a state transition.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from custom_components.solar_controller.const import DEFAULT_TIMING

from .flow import invert_flow, round_flow

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class ActuatorError(Exception):
    """Raised when an actuator command could not be delivered."""


class ActuatorSink(Protocol):
    """Delivers actuator commands."""

    async def async_set_value(self, entity_id: str, value: float) -> None:
        """
        Command an actuator.

        Raises:
            ActuatorError: If the command failed.

        """


class CircuitState(StrEnum):
    """Pump and valve state."""

    STOPPED = "stopped"
    RUNNING = "running"


class CircuitTransition(StrEnum):
    """
    What a start/stop call did.

    The core does not log; the integration layer logs based on this value.
    """

    NONE = "none"
    STARTED = "started"
    STOPPED = "stopped"


@dataclass(frozen=True)
class CircuitConfig:
    """Actuator entities and sequencing parameters."""

    pump: str
    switch: str
    flow: str
    settle_delay: float = DEFAULT_TIMING["settle_delay"]
    invert: bool = False
    flow_scale_max: float = DEFAULT_TIMING["flow_scale_max"]


class Circuit:
    """
    Pump, valve and flow actuator of the collector loop.

    State only changes after every command of a transition succeeded. If a
    command fails the ActuatorError propagates and the state is left as it
    was; the caller retries on the next tick, which is safe because
    repeating "on" to a device that is already on has no effect.
    """

    def __init__(
        self,
        config: CircuitConfig,
        sink: ActuatorSink,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the circuit.

        Args:
            config: Actuator entities and timing.
            sink: Where commands are delivered.
            sleep: Awaitable delay, replaceable in tests.

        """
        self.config = config
        self._sink = sink
        self._sleep = sleep
        self._state = CircuitState.STOPPED
        self._last_flow: float | None = None

    @property
    def state(self) -> CircuitState:
        """Return the current circuit state."""
        return self._state

    @property
    def running(self) -> bool:
        """Return True if pump and valve are commanded on."""
        return self._state == CircuitState.RUNNING

    @property
    def last_flow(self) -> float | None:
        """Last successfully commanded flow (before inversion)."""
        return self._last_flow

    async def start(self) -> CircuitTransition:
        """Turn on the pump, then the valve."""
        if self.running:
            return CircuitTransition.NONE

        await self._sink.async_set_value(self.config.pump, 1)
        await self._sleep(self.config.settle_delay)
        await self._sink.async_set_value(self.config.switch, 1)
        await self._sleep(self.config.settle_delay)

        self._state = CircuitState.RUNNING
        return CircuitTransition.STARTED

    async def stop(self, safe_flow: float) -> CircuitTransition:
        """
        Turn off the pump and the valve, then drop flow to its safe minimum.

        Args:
            safe_flow: Flow value to leave the actuator at (duty_min).

        """
        if not self.running:
            return CircuitTransition.NONE
        await self._stop_sequence(safe_flow)
        return CircuitTransition.STOPPED

    async def reset(self, safe_flow: float) -> CircuitTransition:
        """Run the stop sequence regardless of the believed state."""
        await self._stop_sequence(safe_flow)
        return CircuitTransition.STOPPED

    async def _stop_sequence(self, safe_flow: float) -> None:
        await self._sink.async_set_value(self.config.pump, 0)
        await self._sleep(self.config.settle_delay)
        await self._sink.async_set_value(self.config.switch, 0)
        await self._sleep(self.config.settle_delay)
        await self.set_flow(safe_flow, force=True)
        await self._sleep(self.config.settle_delay)

        self._state = CircuitState.STOPPED

    async def set_flow(self, value: float, *, force: bool = False) -> bool:
        """
        Command the flow actuator.

        Writes are skipped when the rounded value matches the last
        successfully commanded one, unless force is set.

        Args:
            value: Duty value (before inversion).
            force: Send even if unchanged.

        Returns:
            True if a command was sent.

        """
        rounded = round_flow(value)
        if not force and rounded == self._last_flow:
            return False

        output = rounded
        if self.config.invert:
            output = round_flow(invert_flow(rounded, self.config.flow_scale_max))

        await self._sink.async_set_value(self.config.flow, output)
        self._last_flow = rounded
        return True
