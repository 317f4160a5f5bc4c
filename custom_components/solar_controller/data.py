"""Custom types for solar_controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry

    from .coordinator import SolarCoordinator


type SolarConfigEntry = ConfigEntry[SolarData]


@dataclass
class SolarData:
    """Data for the Solar Thermal Controller integration."""

    coordinator: SolarCoordinator
