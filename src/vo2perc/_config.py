import json
import numbers
from dataclasses import fields

from vo2perc.errors import ConfigurationError


def normalize_keys(cls, values: dict) -> dict:
    """maps JSON keys such as "Delta" or "T_beta_dimer" to field names of the dataclass cls, dropping unknown keys"""
    names = {f.name.replace("_", "").lower(): f.name for f in fields(cls)}
    normalized = {}
    for key, value in values.items():
        name = names.get(key.replace("_", "").lower())
        if name is not None:
            normalized[name] = value
    return normalized


def is_integer(value):
    # bool is an Integral, but True is no step count
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def is_real(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def load_object(data, what):
    """Parses the JSON string `data`, which must hold an object."""
    try:
        values = json.loads(data)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{what} is not valid JSON: {e}") from e
    if not isinstance(values, dict):
        raise ConfigurationError(f"{what} JSON must be an object")
    return values
