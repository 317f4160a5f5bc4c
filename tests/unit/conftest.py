"""Fixtures for core logic tests."""

import pytest

from custom_components.solar_controller.core import (
    Circuit,
    CircuitConfig,
    Settings,
    SolarController,
)
from tests.unit.helpers import FLOW, PUMP, SWITCH, RecordingSink, RecordingSleep


@pytest.fixture
def sink() -> RecordingSink:
    """Return a recording actuator sink."""
    return RecordingSink()


@pytest.fixture
def sleep() -> RecordingSleep:
    """Return a recording sleep function."""
    return RecordingSleep()


@pytest.fixture
def circuit(sink: RecordingSink, sleep: RecordingSleep) -> Circuit:
    """Return a circuit wired to the recording sink."""
    return Circuit(CircuitConfig(pump=PUMP, switch=SWITCH, flow=FLOW), sink, sleep)


@pytest.fixture
def controller(circuit: Circuit) -> SolarController:
    """Return a controller with default settings and a 30 minute window."""
    return SolarController(circuit, Settings(), reduction_window=1800)
