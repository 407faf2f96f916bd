# config.py
"""Loading of YAML/JSON configuration files and numeric input checks."""

import json
import math
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .exceptions import ConfigurationError


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load a configuration mapping from a YAML or JSON file

    The format is picked from the file suffix (.yaml, .yml or .json).
    """
    suffix = Path(filepath).suffix.lower()
    with open(filepath, 'r') as f:
        if suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(f)
        elif suffix == '.json':
            data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported config format: {suffix or filepath}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config root must be a mapping, got {type(data).__name__}")
    return data


def pick(config: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Returns the first key present in config (snake_case or camelCase alias)"""
    for key in keys:
        if key in config:
            return config[key]
    return default


def check_number(value: Any, field: str, minimum: float = None,
                 maximum: float = None) -> float:
    """Rejects non-numeric, non-finite and out-of-range input values"""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigurationError(f"{field} must be a number, got {value!r}")

    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f"{field} must be finite, got {value!r}")
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{field} must be >= {minimum}, got {value!r}")
    if maximum is not None and value > maximum:
        raise ConfigurationError(f"{field} must be <= {maximum}, got {value!r}")
    return value
