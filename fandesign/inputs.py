"""
Input normalisation and application profiles.

Front ends hand us loosely typed values (strings from a form, a config file
or the command line). `normalize_inputs` turns them into a `DesignInput`
the engine can trust to hold plain floats.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from math import isfinite
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

from .core import BladeType, ConfigurationError, DesignInput


LOGGER = logging.getLogger("fandesign.inputs")

NUMERIC_FIELDS = (
    "flow_rate",
    "static_pressure",
    "rpm",
    "motor_rating",
    "temp",
    "altitude",
    "outlet_angle",
    "inlet_angle",
)

DEFAULT_INPUTS: Mapping[str, object] = MappingProxyType(
    {
        "flow_rate": 5000.0,
        "static_pressure": 1000.0,
        "rpm": 1750.0,
        "motor_rating": 10.0,
        "temp": 70.0,
        "altitude": 0.0,
        "outlet_angle": 35.0,
        "inlet_angle": 25.0,
        "material": "Steel",
        "blade_type": "Backward",
        "application": "General",
    }
)


@dataclass(frozen=True)
class ApplicationProfile:
    label: str
    desc: str
    blade_type: BladeType
    rec_outlet: float  # deg
    rec_inlet: float  # deg


APPLICATION_PROFILES: Mapping[str, ApplicationProfile] = MappingProxyType(
    {
        "General": ApplicationProfile(
            "General Ventilation", "Balanced flow and pressure.", BladeType.BACKWARD, 35.0, 25.0
        ),
        "High Pressure": ApplicationProfile(
            "High Pressure Blower", "Narrow impeller.", BladeType.RADIAL, 90.0, 35.0
        ),
        "High Flow": ApplicationProfile(
            "High Suction / Flow", "Wide impeller.", BladeType.FORWARD, 145.0, 20.0
        ),
        "Transport": ApplicationProfile(
            "High Velocity / Transport", "Rugged design.", BladeType.RADIAL, 90.0, 45.0
        ),
    }
)

SUGGESTED_INLET = 25.0


def to_number(value: object) -> float:
    """Coerce a raw field value to a finite float; anything else becomes 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    return number if isfinite(number) else 0.0


def parse_blade_type(value: object) -> BladeType:
    if isinstance(value, BladeType):
        return value
    text = str(value).strip()
    for member in BladeType:
        if text.lower() in (member.value.lower(), member.name.lower()):
            return member
    raise ConfigurationError(
        f"Unknown blade type '{value}'; expected one of: {', '.join(m.value for m in BladeType)}"
    )


def normalize_inputs(values: Mapping[str, object]) -> DesignInput:
    """
    Coerce exactly the fields given: a missing or unparsable numeric field is 0.
    No defaults are filled in; callers wanting the reference point merge
    `DEFAULT_INPUTS` themselves. `material` is required; `blade_type` is advisory
    and keeps the `DesignInput` default when absent.
    """
    if values.get("material") is None:
        raise ConfigurationError("Missing material; expected one of the catalog keys")
    numbers: Dict[str, float] = {}
    for key in NUMERIC_FIELDS:
        raw = values.get(key)
        numbers[key] = to_number(raw)
        if numbers[key] == 0.0 and raw not in (0, 0.0, "0"):
            LOGGER.debug("Coerced %s=%r to 0", key, raw)
    blade = values.get("blade_type")
    if blade is None:
        return DesignInput(material=str(values["material"]), **numbers)
    return DesignInput(material=str(values["material"]), blade_type=parse_blade_type(blade), **numbers)


def suggest_angles(application: str, blade_type: BladeType | str) -> Tuple[float, float]:
    """Suggested (outlet, inlet) blade angles in degrees."""
    profile = APPLICATION_PROFILES.get(application, APPLICATION_PROFILES["General"])
    rec_outlet = profile.rec_outlet
    blade = parse_blade_type(blade_type)
    if blade is BladeType.RADIAL:
        rec_outlet = 90.0
    elif blade is BladeType.FORWARD:
        rec_outlet = 145.0
    return rec_outlet, SUGGESTED_INLET


def apply_profile(values: Mapping[str, object], application: str) -> Dict[str, object]:
    profile = APPLICATION_PROFILES.get(application)
    if profile is None:
        raise ConfigurationError(
            f"Unknown application '{application}'; expected one of: {', '.join(APPLICATION_PROFILES)}"
        )
    out = dict(values)
    out["application"] = application
    out["blade_type"] = profile.blade_type.value
    out["outlet_angle"] = profile.rec_outlet
    out["inlet_angle"] = SUGGESTED_INLET
    return out


__all__ = [
    "APPLICATION_PROFILES",
    "ApplicationProfile",
    "DEFAULT_INPUTS",
    "NUMERIC_FIELDS",
    "apply_profile",
    "normalize_inputs",
    "parse_blade_type",
    "suggest_angles",
    "to_number",
]
