"""
Public API for the centrifugal fan impeller sizing package.
"""

from .core import (
    MATERIALS,
    BladeType,
    ConfigurationError,
    DesignInput,
    DesignResult,
    Material,
    degenerate_fields,
    design_sweep,
    evaluate,
)
from .inputs import APPLICATION_PROFILES, apply_profile, normalize_inputs, suggest_angles

__all__ = [
    "APPLICATION_PROFILES",
    "BladeType",
    "ConfigurationError",
    "DesignInput",
    "DesignResult",
    "MATERIALS",
    "Material",
    "apply_profile",
    "degenerate_fields",
    "design_sweep",
    "evaluate",
    "normalize_inputs",
    "suggest_angles",
]
