"""
Core computational routines for the centrifugal fan impeller sizer.

This module is the pure calculation layer shared by the CLI and the report
helpers. Every stage is a plain function of its inputs; `evaluate` runs them
in order and flattens the stage outputs into a single `DesignResult`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from math import copysign, floor, inf, isfinite, isnan, log10, nan, pi, radians, sin, sqrt
from types import MappingProxyType
from typing import List, Mapping


LOGGER = logging.getLogger("fandesign.core")


class ConfigurationError(ValueError):
    """Raised when an input refers to a catalog entry that does not exist."""


class BladeType(str, Enum):
    RADIAL = "Radial"
    BACKWARD = "Backward"
    FORWARD = "Forward"


@dataclass(frozen=True)
class Material:
    name: str
    density: float  # kg/m^3
    yield_strength: float  # MPa
    poisson: float
    youngs: float  # GPa
    price: float  # per kg


MATERIALS: Mapping[str, Material] = MappingProxyType(
    {
        "Steel": Material("Carbon Steel", 7850.0, 250.0, 0.30, 200.0, 1.5),
        "Aluminum_Alloy": Material("Aluminum Alloy", 2700.0, 150.0, 0.33, 70.0, 3.2),
        "Cast_Iron": Material("Cast Iron", 7200.0, 200.0, 0.27, 100.0, 1.2),
        "FRP": Material("Fiberglass (FRP)", 1800.0, 60.0, 0.35, 20.0, 4.5),
        "Plastic": Material("ABS Plastic", 1400.0, 40.0, 0.40, 2.0, 0.8),
    }
)


@dataclass(frozen=True)
class DesignInput:
    flow_rate: float  # CFM
    static_pressure: float  # Pa
    rpm: float  # rev/min
    motor_rating: float  # HP
    temp: float  # degF
    altitude: float  # ft
    outlet_angle: float  # deg
    inlet_angle: float  # deg
    material: str = "Steel"
    blade_type: BladeType = BladeType.BACKWARD


@dataclass(frozen=True)
class AirState:
    density_us: float  # lb/ft^3
    density_si: float  # kg/m^3
    altitude_warning: str


@dataclass(frozen=True)
class Aerodynamics:
    flow_si: float  # m^3/s
    pressure_inwg: float
    specific_speed: float
    blade_recommendation: str
    pressure_coefficient: float
    eff_static: float
    tip_speed: float  # m/s
    tip_speed_check: str
    d2_mm: float
    d1_mm: float
    hub_mm: float
    b2_mm: float
    b1_mm: float
    blade_count: int


@dataclass(frozen=True)
class Structure:
    sigma_mpa: float
    safety_factor: float
    stress_status: str


@dataclass(frozen=True)
class PowerTrain:
    air_power_hp: float
    brake_power_hp: float
    motor_load_pct: float
    motor_check: str
    torque_nm: float


@dataclass(frozen=True)
class DesignResult:
    air_density_us: float
    air_density_si: float
    altitude_warning: str
    flow_si: float
    pressure_inwg: float
    specific_speed: float
    blade_recommendation: str
    pressure_coefficient: float
    eff_static: float
    tip_speed: float
    tip_speed_check: str
    d2_mm: float
    d1_mm: float
    hub_mm: float
    b2_mm: float
    b1_mm: float
    blade_count: int
    sigma_mpa: float
    safety_factor: float
    stress_status: str
    air_power_hp: float
    brake_power_hp: float
    motor_load_pct: float
    motor_check: str
    torque_nm: float
    shaft_dia_mm: float
    cad_script: str


# IEEE-style arithmetic: Python raises where float hardware would return inf/nan.


def _div(num: float, den: float) -> float:
    if den == 0.0:
        if num == 0.0 or isnan(num):
            return nan
        return copysign(inf, num) * copysign(1.0, den)
    return num / den


def _pow(base: float, exp: float) -> float:
    if base < 0.0 and exp != int(exp):
        return nan
    try:
        return base ** exp
    except OverflowError:
        return inf
    except ZeroDivisionError:
        return inf


def _safe_sqrt(x: float) -> float:
    return sqrt(x) if x >= 0.0 else nan


def _floor_at(x: float, lo: float) -> float:
    # NaN falls back to the floor, matching a falsy-or-default guard
    return x if x > lo else lo


def _round_half_up(x: float) -> int:
    return int(floor(x + 0.5))


def _sind(deg: float) -> float:
    return sin(radians(deg)) if isfinite(deg) else nan


def air_properties(temp: float, altitude: float) -> AirState:
    density_us = 0.075 * _div(530.0, 460.0 + temp) * _pow(1.0 - 6.8756e-6 * altitude, 5.2559)
    density_si = density_us * 16.0185
    warning = "High altitude warning" if altitude > 5000 else "OK"
    return AirState(density_us=density_us, density_si=density_si, altitude_warning=warning)


def recommend_blade(specific_speed: float) -> str:
    if specific_speed < 5000:
        return "Radial"
    if specific_speed > 30000:
        return "Forward"
    return "Backward Curved"


def blade_count(outlet_angle: float, d2: float, d1: float) -> int:
    if d2 != d1:
        raw = 8.5 * _sind(outlet_angle) * _div(d2, d2 - d1)
    else:
        raw = 10.0
    if isnan(raw):
        raw = 10.0
    return _round_half_up(min(12.0, max(6.0, raw)))


def size_aerodynamics(inputs: DesignInput, air: AirState) -> Aerodynamics:
    flow_si = inputs.flow_rate * 4.71947e-4
    pressure_inwg = inputs.static_pressure / 249.088

    ns = _div(
        inputs.rpm * _safe_sqrt(inputs.flow_rate),
        _floor_at(_pow(pressure_inwg, 0.75), 0.001),
    )

    psi = 0.0133 * inputs.outlet_angle + 0.4
    eff = _floor_at(
        0.52
        + 0.12 * log10(_floor_at(inputs.flow_rate, 1.0))
        - 0.002 * abs(inputs.outlet_angle - 40.0),
        0.3,
    )

    tip = _safe_sqrt(_div(2.0 * inputs.static_pressure, air.density_si * psi * eff)) * 1.1
    tip_check = "Tip speed too high!" if tip > 200 else "OK"

    d2_m = _div(tip * 60.0, pi * inputs.rpm)
    d1_m = 0.5 * d2_m
    b2_mm = _div(flow_si, pi * d2_m * 0.25 * tip) * 1000.0
    b1_mm = b2_mm * _div(d2_m, d1_m)

    return Aerodynamics(
        flow_si=flow_si,
        pressure_inwg=pressure_inwg,
        specific_speed=ns,
        blade_recommendation=recommend_blade(ns),
        pressure_coefficient=psi,
        eff_static=eff,
        tip_speed=tip,
        tip_speed_check=tip_check,
        d2_mm=d2_m * 1000.0,
        d1_mm=d1_m * 1000.0,
        hub_mm=0.4 * d1_m * 1000.0,
        b2_mm=b2_mm,
        b1_mm=b1_mm,
        blade_count=blade_count(inputs.outlet_angle, d2_m, d1_m),
    )


def stress_status(safety_factor: float) -> str:
    if safety_factor > 2:
        return "SAFE"
    if safety_factor > 1.5:
        return "ACCEPTABLE"
    return "UNSAFE"


def analyze_structure(tip_speed: float, material: Material) -> Structure:
    """Hoop stress and safety margin. safety_factor is 0.0 (undefined) when stress is zero or non-finite."""
    sigma_pa = material.density * tip_speed * tip_speed * (1.0 + material.poisson) / 3.0
    sigma_mpa = sigma_pa / 1e6
    if isfinite(sigma_mpa) and sigma_mpa > 0.0:
        factor = material.yield_strength / sigma_mpa
    else:
        factor = 0.0
    return Structure(sigma_mpa=sigma_mpa, safety_factor=factor, stress_status=stress_status(factor))


def motor_status(load_pct: float) -> str:
    if load_pct > 100:
        return "OVERLOADED"
    if load_pct > 85:
        return "High Load"
    return "OK"


def analyze_power(inputs: DesignInput, eff_static: float, pressure_inwg: float) -> PowerTrain:
    air_hp = inputs.flow_rate * pressure_inwg / 6356.0
    brake_hp = _div(air_hp, eff_static)
    if inputs.motor_rating > 0:
        load_pct = brake_hp / inputs.motor_rating * 100.0
    else:
        load_pct = 0.0
    torque = brake_hp * 0.7457 * 9550.0 / _floor_at(inputs.rpm, 1.0)
    return PowerTrain(
        air_power_hp=air_hp,
        brake_power_hp=brake_hp,
        motor_load_pct=load_pct,
        motor_check=motor_status(load_pct),
        torque_nm=torque,
    )


def size_shaft(torque_nm: float) -> float:
    """Minimum solid shaft diameter [mm]: 1.5 service factor, 40 MPa shear, 20 mm floor."""
    d_mm = _pow((16.0 * torque_nm * 1.5) / (pi * 40e6), 1.0 / 3.0) * 1000.0
    if not isfinite(d_mm):
        return d_mm
    return float(max(20, _round_half_up(d_mm)))


def _fmt_mm(x: float) -> str:
    if not isfinite(x):
        return str(x)
    return str(_round_half_up(x))


def export_script(d2_mm: float, d1_mm: float, blades: int) -> str:
    return (
        "; Fan Design\n"
        f"CIRCLE 0,0 {_fmt_mm(d2_mm)}\n"
        f"CIRCLE 0,0 {_fmt_mm(d1_mm)}\n"
        f"; Blades: {blades}"
    )


def get_material(key: str, materials: Mapping[str, Material] = MATERIALS) -> Material:
    try:
        return materials[key]
    except KeyError:
        raise ConfigurationError(
            f"Unknown material '{key}'; expected one of: {', '.join(materials)}"
        ) from None


def evaluate(inputs: DesignInput, materials: Mapping[str, Material] = MATERIALS) -> DesignResult:
    mat = get_material(inputs.material, materials)

    air = air_properties(inputs.temp, inputs.altitude)
    aero = size_aerodynamics(inputs, air)
    structure = analyze_structure(aero.tip_speed, mat)
    power = analyze_power(inputs, aero.eff_static, aero.pressure_inwg)
    shaft = size_shaft(power.torque_nm)

    LOGGER.debug(
        "Evaluated %s: D2=%.1f mm, tip=%.2f m/s, brake=%.3f HP",
        inputs.material,
        aero.d2_mm,
        aero.tip_speed,
        power.brake_power_hp,
    )

    return DesignResult(
        air_density_us=air.density_us,
        air_density_si=air.density_si,
        altitude_warning=air.altitude_warning,
        flow_si=aero.flow_si,
        pressure_inwg=aero.pressure_inwg,
        specific_speed=aero.specific_speed,
        blade_recommendation=aero.blade_recommendation,
        pressure_coefficient=aero.pressure_coefficient,
        eff_static=aero.eff_static,
        tip_speed=aero.tip_speed,
        tip_speed_check=aero.tip_speed_check,
        d2_mm=aero.d2_mm,
        d1_mm=aero.d1_mm,
        hub_mm=aero.hub_mm,
        b2_mm=aero.b2_mm,
        b1_mm=aero.b1_mm,
        blade_count=aero.blade_count,
        sigma_mpa=structure.sigma_mpa,
        safety_factor=structure.safety_factor,
        stress_status=structure.stress_status,
        air_power_hp=power.air_power_hp,
        brake_power_hp=power.brake_power_hp,
        motor_load_pct=power.motor_load_pct,
        motor_check=power.motor_check,
        torque_nm=power.torque_nm,
        shaft_dia_mm=shaft,
        cad_script=export_script(aero.d2_mm, aero.d1_mm, aero.blade_count),
    )


def degenerate_fields(result: DesignResult) -> List[str]:
    """Names of numeric result fields that came out infinite or NaN."""
    out: List[str] = []
    for f in fields(result):
        value = getattr(result, f.name)
        if isinstance(value, float) and not isfinite(value):
            out.append(f.name)
    return out


SWEEP_FIELDS = (
    "flow_rate",
    "static_pressure",
    "rpm",
    "motor_rating",
    "temp",
    "altitude",
    "outlet_angle",
    "inlet_angle",
)


def sweep_inputs(base: DesignInput, field: str, step: float, nsteps: int) -> List[DesignInput]:
    if field not in SWEEP_FIELDS:
        raise ConfigurationError(f"Cannot sweep '{field}'; expected one of: {', '.join(SWEEP_FIELDS)}")
    start = getattr(base, field)
    return [replace(base, **{field: start + i * step}) for i in range(nsteps)]


def design_sweep(
    base: DesignInput,
    field: str,
    step: float,
    nsteps: int,
    materials: Mapping[str, Material] = MATERIALS,
) -> List[DesignResult]:
    return [evaluate(design, materials) for design in sweep_inputs(base, field, step, nsteps)]


__all__ = [
    "AirState",
    "Aerodynamics",
    "BladeType",
    "ConfigurationError",
    "DesignInput",
    "DesignResult",
    "MATERIALS",
    "Material",
    "PowerTrain",
    "Structure",
    "air_properties",
    "analyze_power",
    "analyze_structure",
    "blade_count",
    "degenerate_fields",
    "design_sweep",
    "evaluate",
    "export_script",
    "get_material",
    "motor_status",
    "recommend_blade",
    "size_aerodynamics",
    "size_shaft",
    "stress_status",
    "sweep_inputs",
]
