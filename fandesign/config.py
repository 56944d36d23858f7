"""
Design files, user config location and log setup.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Dict

from .core import DesignInput
from .inputs import DEFAULT_INPUTS, apply_profile, normalize_inputs


LOGGER = logging.getLogger("fandesign")


def config_root() -> Path:
    home = Path.home()
    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = home / "Library" / "Application Support"
    else:
        base = home / ".config"
    return base / "fandesign"


def ensure_logger(path: Path | None = None, level: int = logging.INFO) -> Path:
    """Attach one file handler; a different path replaces the previous one. Returns the log path."""
    if path is None:
        path = config_root() / "fandesign.log"
    target = os.path.abspath(path)
    for existing in list(LOGGER.handlers):
        if not isinstance(existing, logging.FileHandler):
            continue
        if existing.baseFilename == target:
            LOGGER.setLevel(level)
            return Path(target)
        LOGGER.removeHandler(existing)
        existing.close()
    Path(target).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
    handler.setFormatter(formatter)
    LOGGER.addHandler(handler)
    LOGGER.setLevel(level)
    return Path(target)


def read_simple_yaml(path: Path) -> Dict[str, float | str]:
    data: Dict[str, float | str] = {}
    with path.open("r", encoding="utf-8") as fh:
        for line in fh:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, _, value = stripped.partition(":")
            key = key.strip()
            value_str = value.strip()
            # remove inline comments
            if " #" in value_str:
                value_str = value_str.split(" #", 1)[0].strip()
            if len(value_str) >= 2 and value_str[0] == value_str[-1] and value_str[0] in "'\"":
                data[key] = value_str[1:-1]
                continue
            try:
                data[key] = float(value_str)
            except ValueError:
                if value_str.replace(" ", "").replace("_", "").isalpha():
                    data[key] = value_str
                else:
                    LOGGER.warning("Skipping unparsable value '%s' for key '%s'", value_str, key)
    return data


def write_simple_yaml(path: Path, data: Dict[str, float | str]) -> None:
    with path.open("w", encoding="utf-8") as fh:
        for key, value in sorted(data.items()):
            if isinstance(value, str):
                fh.write(f"{key}: '{value}'\n")
            else:
                fh.write(f"{key}: {value}\n")


def read_design_values(path: Path) -> Dict[str, object]:
    """
    Raw design values from a file, merged over `DEFAULT_INPUTS`.
    An `application` key applies that profile; explicit keys still win.
    """
    values: Dict[str, object] = dict(read_simple_yaml(path))
    application = values.get("application")
    if isinstance(application, str):
        values = {**apply_profile(values, application), **values}
    LOGGER.info("Loaded design file %s", path)
    return {**DEFAULT_INPUTS, **values}


def load_design_file(path: Path) -> DesignInput:
    return normalize_inputs(read_design_values(path))


__all__ = [
    "config_root",
    "ensure_logger",
    "load_design_file",
    "read_design_values",
    "read_simple_yaml",
    "write_simple_yaml",
]
