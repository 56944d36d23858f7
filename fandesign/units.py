"""
Unit conversion for the front ends. The engine itself only works in CFM, Pa,
HP, degF and ft.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .core import ConfigurationError


# Amount of each unit per one base unit (base listed first)
CONVERTERS: Mapping[str, Mapping[str, float]] = MappingProxyType(
    {
        "flow": MappingProxyType({"CFM": 1.0, "m3/hr": 1.69901, "L/s": 0.471947}),
        "pressure": MappingProxyType(
            {"Pa": 1.0, "kPa": 0.001, "psi": 0.000145038, "in. wg": 0.00401463}
        ),
        "power": MappingProxyType({"kW": 1.0, "HP": 1.341, "W": 1000.0}),
        "length": MappingProxyType(
            {"mm": 1.0, "cm": 0.1, "inch": 0.0393701, "ft": 0.00328084}
        ),
    }
)

TEMPERATURE_UNITS = ("C", "F", "K")


def _factor(unit: str, quantity: str) -> float:
    table = CONVERTERS.get(quantity)
    if table is None:
        raise ConfigurationError(f"Unknown quantity '{quantity}'")
    try:
        return table[unit]
    except KeyError:
        raise ConfigurationError(
            f"Unknown {quantity} unit '{unit}'; expected one of: {', '.join(table)}"
        ) from None


def to_base(value: float, unit: str, quantity: str) -> float:
    return value / _factor(unit, quantity)


def from_base(value: float, unit: str, quantity: str) -> float:
    return value * _factor(unit, quantity)


def temperature_to_f(value: float, unit: str) -> float:
    unit = unit.upper().lstrip("°")
    if unit == "F":
        return value
    if unit == "C":
        return value * 9.0 / 5.0 + 32.0
    if unit == "K":
        return (value - 273.15) * 9.0 / 5.0 + 32.0
    raise ConfigurationError(
        f"Unknown temperature unit '{unit}'; expected one of: {', '.join(TEMPERATURE_UNITS)}"
    )


__all__ = ["CONVERTERS", "TEMPERATURE_UNITS", "from_base", "temperature_to_f", "to_base"]
