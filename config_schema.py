"""
config_schema.py - Self-Validating LifeConfig Loader

Loads, validates and saves LifeConfig run configurations (JSON or YAML).

Design Principles:
- Self-validating: JSON Schema (Draft 2020-12) checked on every load
- Self-healing: unknown keys dropped, out-of-range values clamped,
  bad enums reset to defaults, each with a warning
- Strict mode: any schema finding raises ValueError instead
- Immutable: the result is a frozen LifeConfig

Rule ranges with min > max are NOT findings; the engine treats them as
rules that never fire.
"""

from __future__ import annotations

import json
import warnings
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from jsonschema import Draft202012Validator

from receipts import dual_hash
from lifesim.types_config import LifeConfig


__all__ = [
    'load',
    'save',
    'from_dict',
    'to_dict',
    'config_hash',
    'schema',
]


# =============================================================================
# JSON Schema Definition (Draft 2020-12)
# =============================================================================

_PROBABILITY = {"type": "number", "minimum": 0.0, "maximum": 1.0}
_NEIGHBOR_COUNT = {"type": "integer", "minimum": 0}

_JSON_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "$id": "https://life-projection.dev/schemas/config/v1.0",
    "title": "LifeConfig",
    "description": "Life Projection simulation run configuration",
    "type": "object",
    "properties": {
        "radius": {"type": "number", "exclusiveMinimum": 0.0},
        "subdivisions": {"type": "integer", "minimum": 1},
        "seed_pattern": {"type": "string", "enum": ["random", "cluster", "ring"]},
        "density": _PROBABILITY,
        "tick_speed": {"type": "number", "minimum": 0.0},
        "n_ticks": {"type": "integer", "minimum": 0},
        "survival_min": _NEIGHBOR_COUNT,
        "survival_max": _NEIGHBOR_COUNT,
        "survival_probability_enabled": {"type": "boolean"},
        "survival_probability": _PROBABILITY,
        "birth_min": _NEIGHBOR_COUNT,
        "birth_max": _NEIGHBOR_COUNT,
        "birth_probability_enabled": {"type": "boolean"},
        "birth_probability": _PROBABILITY,
        "age_death_enabled": {"type": "boolean"},
        "age_death_threshold": {"type": "integer", "minimum": 0},
        "age_death_rate": {"type": "number", "minimum": 0.0},
        "sudden_death_enabled": {"type": "boolean"},
        "sudden_death_probability": _PROBABILITY,
        "min_age": {"type": "integer", "minimum": 0},
        "min_size": {"type": "integer", "minimum": 1},
        "update_frequency": {"type": "integer", "minimum": 1},
        "angular_tolerance": {"type": "number", "minimum": 0.0, "maximum": 180.0},
        "random_seed": {"type": "integer", "minimum": 0},
        "scenario_name": {"type": "string", "minLength": 1},
    },
    "additionalProperties": False
}

_DEFAULTS: Dict[str, Any] = asdict(LifeConfig())

# Findings the loader can repair on its own
_HEALABLE = frozenset({"minimum", "maximum", "exclusiveMinimum", "enum", "additionalProperties"})


# =============================================================================
# Compiled Validator
# =============================================================================

Draft202012Validator.check_schema(_JSON_SCHEMA)
_COMPILED_VALIDATOR = Draft202012Validator(_JSON_SCHEMA)


# =============================================================================
# Module-Level Functions
# =============================================================================

def schema() -> Dict[str, Any]:
    """Return a copy of the LifeConfig JSON Schema."""
    return json.loads(json.dumps(_JSON_SCHEMA))


def load(
    path: str,
    validate: bool = True,
    strict: bool = False
) -> LifeConfig:
    """
    Load config from JSON/YAML file.

    Args:
        path: Path to config file
        validate: Whether to validate (default True)
        strict: If True, raise on any finding; if False, self-heal with warnings

    Returns:
        Validated, frozen LifeConfig instance

    Raises:
        FileNotFoundError: If path doesn't exist
        ValueError: If validation fails and cannot be healed
    """
    path_obj = Path(path)

    if not path_obj.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    content = path_obj.read_text()

    if path_obj.suffix in ('.yaml', '.yml'):
        data = yaml.safe_load(content)
    else:
        data = json.loads(content)

    return from_dict(data or {}, validate=validate, strict=strict)


def save(config: LifeConfig, path: str) -> None:
    """Write config as JSON or YAML, chosen by file suffix."""
    path_obj = Path(path)
    data = to_dict(config)
    if path_obj.suffix in ('.yaml', '.yml'):
        path_obj.write_text(yaml.safe_dump(data, sort_keys=True))
    else:
        path_obj.write_text(json.dumps(data, indent=2, sort_keys=True))


def from_dict(
    data: Dict[str, Any],
    validate: bool = True,
    strict: bool = False
) -> LifeConfig:
    """
    Create from dictionary. Missing keys take LifeConfig defaults.

    Same validation as load().
    """
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a mapping, got {type(data).__name__}")

    all_warnings: List[str] = []

    if validate:
        is_valid, errors, warns = _validate(data)
        all_warnings.extend(warns)

        if strict and (errors or warns):
            raise ValueError("Config validation failed:\n" +
                             "\n".join(f"  - {e}" for e in errors + warns))
        if not is_valid or warns:
            data = _self_heal(data, all_warnings)
            is_valid, errors, _ = _validate(data)
            if not is_valid:
                raise ValueError("Config validation failed after self-healing:\n" +
                                 "\n".join(f"  - {e}" for e in errors))

    for w in all_warnings:
        warnings.warn(f"LifeConfig: {w}", UserWarning, stacklevel=2)

    known = {f.name for f in fields(LifeConfig)}
    return LifeConfig(**{k: v for k, v in data.items() if k in known})


def to_dict(config: LifeConfig) -> Dict[str, Any]:
    return asdict(config)


def config_hash(config: LifeConfig) -> str:
    """Dual hash of the canonical JSON form; identical configs hash identically."""
    canonical = json.dumps(to_dict(config), sort_keys=True, separators=(',', ':'))
    return dual_hash(canonical)


# =============================================================================
# Internal Validation Functions
# =============================================================================

def _validate(data: Dict[str, Any]) -> Tuple[bool, List[str], List[str]]:
    """
    Validate config data against the schema.

    Returns: (is_valid, errors, warnings)

    Type errors are errors. Range, enum and unknown-key findings are
    warnings the self-healer can repair.
    """
    errors: List[str] = []
    warns: List[str] = []

    for err in _COMPILED_VALIDATOR.iter_errors(data):
        location = ".".join(str(p) for p in err.path) or "<root>"
        if err.validator in _HEALABLE:
            warns.append(f"Schema: {location}: {err.message}")
        else:
            errors.append(f"Schema: {location}: {err.message}")

    return len(errors) == 0, errors, warns


def _self_heal(data: Dict[str, Any], warns: List[str]) -> Dict[str, Any]:
    """
    Apply self-healing to config data.

    Self-healing behavior:
    - Unknown field -> dropped, add warning
    - Below minimum / above maximum -> clamped to the bound, add warning
    - Any other invalid value -> field default, add warning
    """
    properties = _JSON_SCHEMA["properties"]
    healed: Dict[str, Any] = {}

    for key, value in data.items():
        if key not in properties:
            warns.append(f"Unknown field '{key}' ignored")
            continue
        healed[key] = value

    for err in list(_COMPILED_VALIDATOR.iter_errors(healed)):
        if not err.path:
            continue
        key = err.path[0]
        bounds = properties[key]
        if err.validator == "minimum":
            healed[key] = bounds["minimum"]
        elif err.validator == "maximum":
            healed[key] = bounds["maximum"]
        else:
            healed[key] = _DEFAULTS[key]
        warns.append(f"Field '{key}' reset to {healed[key]!r}")

    return healed
