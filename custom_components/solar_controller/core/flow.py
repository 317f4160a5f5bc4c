"""Flow mapping from temperature delta to actuator duty."""

from __future__ import annotations

from typing import TYPE_CHECKING

from custom_components.solar_controller.const import FLOW_PRECISION_DIGITS

if TYPE_CHECKING:
    from .snapshot import FlowCurve


def calculate_flow(delta: float, curve: FlowCurve) -> float:
    """
    Map a temperature delta onto the flow actuator range.

    ^ flow
    |              +---------  duty_max
    |             /
    |            /
    |  ---------+              duty_min
    +-----------+--+--------> delta
             temp_min  temp_max

    Between temp_min and temp_max the duty follows a * delta + b with
    a = (duty_max - duty_min) / (temp_max - temp_min) and
    b = duty_min - temp_min * a.

    The curve must be valid (temp_max > temp_min); see Settings.validate().

    Args:
        delta: Temperature delta in °C.
        curve: Flow curve thresholds.

    Returns:
        Duty value within [duty_min, duty_max].

    """
    if delta <= curve.temp_min:
        return curve.duty_min
    if delta >= curve.temp_max:
        return curve.duty_max

    a = (curve.duty_max - curve.duty_min) / (curve.temp_max - curve.temp_min)
    b = curve.duty_min - curve.temp_min * a
    flow = a * delta + b

    # Guard float rounding at the boundaries
    return max(curve.duty_min, min(curve.duty_max, flow))


def invert_flow(value: float, scale_max: float) -> float:
    """Flip a duty value for actuators that close as voltage rises."""
    return scale_max - value


def round_flow(value: float) -> float:
    """Round a duty value to the precision the actuator accepts."""
    return round(value, FLOW_PRECISION_DIGITS)
