"""
Command-line interface for the centrifugal fan impeller sizer.
"""

from __future__ import annotations

import argparse
import logging
import sys
from math import isfinite
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import ensure_logger, read_design_values
from .core import (
    MATERIALS,
    SWEEP_FIELDS,
    ConfigurationError,
    DesignInput,
    DesignResult,
    degenerate_fields,
    evaluate,
    sweep_inputs,
)
from .inputs import APPLICATION_PROFILES, DEFAULT_INPUTS, apply_profile, normalize_inputs, suggest_angles
from .report import build_dataframe, export_csv, export_json, write_script
from .units import CONVERTERS, TEMPERATURE_UNITS, temperature_to_f, to_base


LOGGER = logging.getLogger("fandesign.cli")


def _fmt(x: Optional[float], wid: int = 9, prec: int = 2) -> str:
    if x is None:
        return " " * wid
    if isinstance(x, float) and not isfinite(x):
        text = str(x)
        return " " * (wid - len(text)) + text
    return f"{x:>{wid}.{prec}f}"


def print_table(inputs: Iterable[DesignInput], rows: Iterable[DesignResult]) -> None:
    head = (
        "    flow    Ps[Pa]      rpm   beta2    U2[m/s]  D2[mm]   D1[mm]   b2[mm]    Z   eff"
        "       SF  Brake[HP]  Load[%]  Shaft[mm]"
    )
    print(head)
    print("-" * len(head))
    for d, r in zip(inputs, rows):
        print(
            f"{_fmt(d.flow_rate, 8, 0)}{_fmt(d.static_pressure, 10, 0)}{_fmt(d.rpm, 9, 0)}"
            f"{_fmt(d.outlet_angle, 8, 1)}{_fmt(r.tip_speed, 11)}{_fmt(r.d2_mm, 8, 1)}"
            f"{_fmt(r.d1_mm, 9, 1)}{_fmt(r.b2_mm, 9, 1)}{r.blade_count:>5d}{_fmt(r.eff_static, 6, 3)}"
            f"{_fmt(r.safety_factor, 9)}{_fmt(r.brake_power_hp, 11, 3)}{_fmt(r.motor_load_pct, 9, 1)}"
            f"{_fmt(r.shaft_dia_mm, 11, 0)}"
        )


def print_summary(result: DesignResult) -> None:
    print(f"Air density:      {result.air_density_si:.4f} kg/m3  [{result.altitude_warning}]")
    print(f"Specific speed:   {result.specific_speed:.0f}  -> {result.blade_recommendation}")
    print(f"Tip speed:        {result.tip_speed:.2f} m/s  [{result.tip_speed_check}]")
    print(
        f"Impeller:         D2={result.d2_mm:.1f} mm, D1={result.d1_mm:.1f} mm, "
        f"hub={result.hub_mm:.1f} mm, b2={result.b2_mm:.1f} mm, b1={result.b1_mm:.1f} mm, "
        f"blades={result.blade_count}"
    )
    print(
        f"Stress:           {result.sigma_mpa:.3f} MPa, SF={result.safety_factor:.2f}  "
        f"[{result.stress_status}]"
    )
    print(
        f"Power:            air={result.air_power_hp:.3f} HP, brake={result.brake_power_hp:.3f} HP, "
        f"load={result.motor_load_pct:.1f} %  [{result.motor_check}]"
    )
    print(f"Shaft:            T={result.torque_nm:.2f} Nm, d={result.shaft_dia_mm:.0f} mm")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Centrifugal fan impeller sizing calculator")
    ap.add_argument("--config", type=Path, help="Design file (key: value per line)")
    ap.add_argument(
        "--application",
        choices=sorted(APPLICATION_PROFILES),
        help="Apply an application profile's blade type and suggested angles",
    )
    ap.add_argument("--flow", type=float, help=f"Flow rate (default {DEFAULT_INPUTS['flow_rate']} CFM)")
    ap.add_argument("--flow-unit", default="CFM", choices=list(CONVERTERS["flow"]), help="Unit of --flow")
    ap.add_argument(
        "--pressure",
        type=float,
        help=f"Static pressure rise (default {DEFAULT_INPUTS['static_pressure']} Pa)",
    )
    ap.add_argument(
        "--pressure-unit",
        default="Pa",
        choices=list(CONVERTERS["pressure"]),
        help="Unit of --pressure",
    )
    ap.add_argument("--rpm", type=float, help="Impeller speed, rev/min")
    ap.add_argument("--motor-hp", type=float, help="Motor nameplate rating, HP")
    ap.add_argument("--temp", type=float, help="Ambient temperature")
    ap.add_argument("--temp-unit", default="F", choices=TEMPERATURE_UNITS, help="Unit of --temp")
    ap.add_argument("--altitude", type=float, help="Site elevation, ft")
    ap.add_argument("--outlet-angle", type=float, help="Blade outlet angle, deg")
    ap.add_argument("--inlet-angle", type=float, help="Blade inlet angle, deg")
    ap.add_argument("--material", help=f"Impeller material ({', '.join(MATERIALS)})")
    ap.add_argument("--blade-type", help="Blade type (Radial, Backward, Forward)")
    ap.add_argument("--sweep", choices=SWEEP_FIELDS, help="Input field to step")
    ap.add_argument("--step", type=float, default=0.0, help="Step length for --sweep")
    ap.add_argument("--nsteps", type=int, default=1, help="Number of sweep steps")
    ap.add_argument("--csv", type=Path, help="Write the results table to CSV")
    ap.add_argument("--json", type=Path, help="Write inputs and results to JSON")
    ap.add_argument("--script", type=Path, help="Write the geometry script to a file")
    ap.add_argument(
        "--log-file",
        nargs="?",
        const="",
        help="Append log records to this file (no value: fandesign.log in the user config folder)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    return ap


def _collect_inputs(args: argparse.Namespace) -> Tuple[DesignInput, str]:
    if args.config is not None:
        values = read_design_values(args.config)
    else:
        values = dict(DEFAULT_INPUTS)
    if args.application:
        values = apply_profile(values, args.application)
    overrides = {
        "rpm": args.rpm,
        "motor_rating": args.motor_hp,
        "altitude": args.altitude,
        "outlet_angle": args.outlet_angle,
        "inlet_angle": args.inlet_angle,
        "material": args.material,
        "blade_type": args.blade_type,
    }
    if args.flow is not None:
        overrides["flow_rate"] = to_base(args.flow, args.flow_unit, "flow")
    if args.pressure is not None:
        overrides["static_pressure"] = to_base(args.pressure, args.pressure_unit, "pressure")
    if args.temp is not None:
        overrides["temp"] = temperature_to_f(args.temp, args.temp_unit)
    values.update({k: v for k, v in overrides.items() if v is not None})
    return normalize_inputs(values), str(values.get("application") or "General")


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.log_file is not None:
        log_path = ensure_logger(
            Path(args.log_file) if args.log_file else None,
            logging.DEBUG if args.verbose else logging.INFO,
        )
        LOGGER.info("Logging to %s", log_path)

    if args.nsteps < 1:
        parser.error("--nsteps must be at least 1")

    try:
        design, application = _collect_inputs(args)
        if args.sweep:
            designs = sweep_inputs(design, args.sweep, args.step, args.nsteps)
        else:
            designs = [design]
        results = [evaluate(d) for d in designs]
    except ConfigurationError as exc:
        LOGGER.error("Configuration error: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    for d, r in zip(designs, results):
        bad = degenerate_fields(r)
        if bad:
            LOGGER.warning("Degenerate input %s: non-finite %s", d, ", ".join(bad))

    outlet, inlet = suggest_angles(application, design.blade_type)
    print("\nFAN DESIGN")
    print(
        "Inputs:",
        ", ".join(f"{k}={getattr(design, k)}" for k in (
            "flow_rate", "static_pressure", "rpm", "motor_rating", "temp", "altitude",
            "outlet_angle", "inlet_angle", "material",
        )),
        f"blade_type={design.blade_type.value}",
    )
    print(f"Suggested angles: outlet={outlet:.0f} deg, inlet={inlet:.0f} deg")
    print()
    print_table(designs, results)
    print()
    print_summary(results[0])
    print()
    print(results[0].cad_script)

    outputs: List[str] = []
    if args.csv is not None:
        export_csv(build_dataframe(results, designs), args.csv)
        outputs.append(str(args.csv))
    if args.json is not None:
        export_json(args.json, designs, results)
        outputs.append(str(args.json))
    if args.script is not None:
        write_script(args.script, results[0])
        outputs.append(str(args.script))
    if outputs:
        print("\nWrote:", ", ".join(outputs))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
