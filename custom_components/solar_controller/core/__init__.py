"""Core control logic for Solar Thermal Controller."""

from .circuit import (
    ActuatorError,
    ActuatorSink,
    Circuit,
    CircuitConfig,
    CircuitState,
    CircuitTransition,
)
from .controller import (
    ControllerState,
    ReducedModeWindow,
    SolarController,
    TickOutcome,
)
from .flow import calculate_flow, invert_flow, round_flow
from .guards import GUARDS, Guard, GuardCounter, evaluate_guards
from .snapshot import (
    ConfigurationError,
    FlowCurve,
    SensorId,
    SensorReadings,
    SensorSnapshot,
    Settings,
    calculate_delta,
    voltage_to_temperature,
)

__all__ = [
    "GUARDS",
    "ActuatorError",
    "ActuatorSink",
    "Circuit",
    "CircuitConfig",
    "CircuitState",
    "CircuitTransition",
    "ConfigurationError",
    "ControllerState",
    "FlowCurve",
    "Guard",
    "GuardCounter",
    "ReducedModeWindow",
    "SensorId",
    "SensorReadings",
    "SensorSnapshot",
    "Settings",
    "SolarController",
    "TickOutcome",
    "calculate_delta",
    "calculate_flow",
    "evaluate_guards",
    "invert_flow",
    "round_flow",
    "voltage_to_temperature",
]
