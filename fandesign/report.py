"""
Tabular results, file exports and the design-history record format.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from .core import DesignInput, DesignResult


LOGGER = logging.getLogger("fandesign.report")

HISTORY_LIMIT = 20

COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("air_density_si", "rho [kg/m3]"),
    ("specific_speed", "Ns"),
    ("blade_recommendation", "Blade rec."),
    ("eff_static", "eff"),
    ("tip_speed", "U2 [m/s]"),
    ("d2_mm", "D2 [mm]"),
    ("d1_mm", "D1 [mm]"),
    ("hub_mm", "Dhub [mm]"),
    ("b2_mm", "b2 [mm]"),
    ("b1_mm", "b1 [mm]"),
    ("blade_count", "Z"),
    ("sigma_mpa", "sigma [MPa]"),
    ("safety_factor", "SF"),
    ("air_power_hp", "Air [HP]"),
    ("brake_power_hp", "Brake [HP]"),
    ("motor_load_pct", "Load [%]"),
    ("torque_nm", "T [Nm]"),
    ("shaft_dia_mm", "Shaft [mm]"),
)

STATUS_COLUMNS: Tuple[Tuple[str, str], ...] = (
    ("altitude_warning", "Altitude"),
    ("tip_speed_check", "Tip speed"),
    ("stress_status", "Stress"),
    ("motor_check", "Motor"),
)


def compute_warnings(df: pd.DataFrame) -> pd.Series:
    numeric = df.select_dtypes(include=[np.number])
    nonfinite = ~np.isfinite(numeric.to_numpy(dtype=float))
    msgs: List[str] = []
    for pos, (_, row) in enumerate(df.iterrows()):
        warnings: List[str] = []
        if row.get("Altitude", "OK") != "OK":
            warnings.append("high altitude")
        if row.get("Tip speed", "OK") != "OK":
            warnings.append("tip speed>200")
        if row.get("Stress") == "UNSAFE":
            warnings.append("stress UNSAFE")
        elif row.get("Stress") == "ACCEPTABLE":
            warnings.append("stress margin<2")
        if row.get("Motor") == "OVERLOADED":
            warnings.append("motor overloaded")
        elif row.get("Motor") == "High Load":
            warnings.append("motor load>85%")
        if nonfinite.size and nonfinite[pos].any():
            warnings.append("non-finite fields")
        msgs.append("; ".join(warnings))
    return pd.Series(msgs, index=df.index, name="Warnings")


def build_dataframe(results: Sequence[DesignResult], inputs: Sequence[DesignInput] | None = None) -> pd.DataFrame:
    records: List[Dict[str, object]] = []
    for idx, result in enumerate(results):
        rec: Dict[str, object] = {}
        if inputs is not None:
            design = inputs[idx]
            rec["Flow [CFM]"] = design.flow_rate
            rec["Ps [Pa]"] = design.static_pressure
            rec["rpm"] = design.rpm
            rec["beta2 [deg]"] = design.outlet_angle
        for attr, label in COLUMNS + STATUS_COLUMNS:
            rec[label] = getattr(result, attr)
        records.append(rec)
    df = pd.DataFrame.from_records(records)
    if not df.empty:
        df.insert(len(df.columns), "Warnings", compute_warnings(df))
    else:
        df["Warnings"] = pd.Series(dtype=str)
    return df


def export_csv(df: pd.DataFrame, path: Path) -> None:
    df.to_csv(path, index=False)
    LOGGER.info("Exported CSV to %s", path)


def _jsonable(value: object) -> object:
    # json would emit bare Infinity/NaN tokens
    if isinstance(value, float) and not np.isfinite(value):
        return str(value)
    if hasattr(value, "value"):
        return getattr(value, "value")
    return value


def _record(obj: DesignInput | DesignResult) -> Dict[str, object]:
    return {k: _jsonable(v) for k, v in asdict(obj).items()}


def export_json(path: Path, inputs: Iterable[DesignInput], results: Iterable[DesignResult]) -> None:
    header = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "inputs": [_record(design) for design in inputs],
    }
    payload = {
        "header": header,
        "rows": [_record(result) for result in results],
    }
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    LOGGER.info("Exported JSON to %s", path)


def write_script(path: Path, result: DesignResult) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(result.cad_script + "\n")
    LOGGER.info("Wrote geometry script to %s", path)


def history_entry(inputs: DesignInput, result: DesignResult, when: datetime | None = None) -> Dict[str, object]:
    when = when or datetime.now(timezone.utc)
    return {
        "timestamp": when.isoformat(),
        "inputs": _record(inputs),
        "flow": inputs.flow_rate,
        "pressure": inputs.static_pressure,
        "brake_power_hp": _jsonable(result.brake_power_hp),
        "d2_mm": _jsonable(result.d2_mm),
    }


def append_history(
    history: Sequence[Dict[str, object]], entry: Dict[str, object], limit: int = HISTORY_LIMIT
) -> List[Dict[str, object]]:
    """Newest first, keeping at most `limit` entries. The input list is left untouched."""
    return [entry, *history][:limit]


__all__ = [
    "COLUMNS",
    "HISTORY_LIMIT",
    "STATUS_COLUMNS",
    "append_history",
    "build_dataframe",
    "compute_warnings",
    "export_csv",
    "export_json",
    "history_entry",
    "write_script",
]
