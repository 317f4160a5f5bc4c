"""Test doubles for core logic tests."""

from collections.abc import Callable

from custom_components.solar_controller.core import (
    ActuatorError,
    SensorId,
    SolarController,
)

PUMP = "switch.pump"
SWITCH = "switch.valve"
FLOW = "number.flow"


class RecordingSink:
    """Actuator sink that records commands and can be told to fail."""

    def __init__(self) -> None:
        """Initialize the sink."""
        self.calls: list[tuple[str, float]] = []
        self.fail_on: Callable[[str, float], bool] | None = None

    async def async_set_value(self, entity_id: str, value: float) -> None:
        """Record a command, or raise if fail_on matches it."""
        if self.fail_on is not None and self.fail_on(entity_id, value):
            msg = f"Command to {entity_id} failed"
            raise ActuatorError(msg)
        self.calls.append((entity_id, value))


class RecordingSleep:
    """Sleep replacement that returns immediately and records delays."""

    def __init__(self) -> None:
        """Initialize the recorder."""
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        """Record the delay."""
        self.delays.append(delay)


def feed(
    controller: SolarController,
    *,
    panel: float,
    inlet: float,
    outlet: float,
    tank: float = 50.0,
) -> None:
    """Write a complete set of readings into the controller snapshot."""
    controller.snapshot.update(SensorId.PANEL, panel)
    controller.snapshot.update(SensorId.INLET, inlet)
    controller.snapshot.update(SensorId.OUTLET, outlet)
    controller.snapshot.update(SensorId.TANK, tank)
