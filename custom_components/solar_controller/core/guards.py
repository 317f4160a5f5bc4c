"""
Safety and efficiency guards for Solar Thermal Controller.

Guards are evaluated in a fixed priority order before any flow decision.
The first guard that fires forces the circuit to stop for the current tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from custom_components.solar_controller.const import SolarMode

if TYPE_CHECKING:
    from collections.abc import Callable

    from .snapshot import SensorReadings, Settings


class GuardCounter(StrEnum):
    """Counters incremented each tick a guard fires."""

    FAILSAFE = "failsafe_total"
    TANK_FULL = "tank_full_total"
    HEAT_ESCAPE = "heat_escape_total"


@dataclass(frozen=True)
class Guard:
    """A predicate that forces an immediate stop when true."""

    key: str
    mode: SolarMode
    counter: GuardCounter
    predicate: Callable[[SensorReadings, Settings, float], bool]
    describe: Callable[[SensorReadings, Settings, float], str]

    def check(self, readings: SensorReadings, settings: Settings, delta: float) -> bool:
        """Return True if this guard fires."""
        return self.predicate(readings, settings, delta)

    def reason(self, readings: SensorReadings, settings: Settings, delta: float) -> str:
        """Return the log message for a firing guard."""
        return self.describe(readings, settings, delta)


# Priority is list order, first match wins
GUARDS: tuple[Guard, ...] = (
    Guard(
        key="critical",
        mode=SolarMode.FAILSAFE,
        counter=GuardCounter.FAILSAFE,
        predicate=lambda r, s, _d: r.panel >= s.solar_critical,
        describe=lambda r, _s, _d: (
            f"Critical solar temperature reached: {r.panel:.2f} degrees"
        ),
    ),
    Guard(
        key="tank_full",
        mode=SolarMode.TANK_FULL,
        counter=GuardCounter.TANK_FULL,
        predicate=lambda r, s, _d: r.tank > s.tank_max,
        describe=lambda r, _s, _d: f"Tank filled with hot water: {r.tank:.2f} degrees",
    ),
    Guard(
        key="heat_escape",
        mode=SolarMode.HEAT_ESCAPE,
        counter=GuardCounter.HEAT_ESCAPE,
        predicate=lambda _r, _s, d: d < 0,
        describe=lambda _r, _s, d: f"Heat escape prevention, delta: {d:.2f} < 0",
    ),
)


def evaluate_guards(
    readings: SensorReadings,
    settings: Settings,
    delta: float,
    guards: tuple[Guard, ...] = GUARDS,
) -> Guard | None:
    """
    Find the highest-priority guard that fires.

    Args:
        readings: Current sensor readings.
        settings: Current threshold settings.
        delta: Temperature delta for this tick.
        guards: Ordered guards to evaluate.

    Returns:
        The first firing guard, or None if all guards pass.

    """
    for guard in guards:
        if guard.check(readings, settings, delta):
            return guard
    return None
