"""
Statutory Parameter Loader (``estate_config.loader``).

Responsibility
--------------
Loads a YAML parameter file and parses it into a ``StatutoryParameters``
instance.  Runtime callers go through
``estate_config.get_statutory_parameters()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling above the engines and modules.
Nothing below this package imports it.

Invariants enforced
-------------------
* Every section is optional; a missing key keeps the rule object's
  default.  An unknown key is an error, never silently ignored.
* Numeric parameters are parsed to ``Decimal`` from strings, ints or
  ``"a/b"`` fractions; YAML floats are rejected.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the
  parsed source.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys, floats, bad fractions or unsupported currency
  -> ``ValueError``.
* Out-of-range values -> ``ValueError`` from the rule object's
  ``__post_init__``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from estate_config.schema import StatutoryParameters
from estate_engines.dependency import DependantRelationship, DependencyLevel, DependencyRules
from estate_engines.hotchpot import HotchpotRules
from estate_engines.section35 import Section35Rules
from estate_engines.section40 import Section40Rules
from estate_kernel.domain.currency import CurrencyRegistry
from estate_modules.debt.config import DebtConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(value: Any, name: str) -> Decimal:
    """Parse ``"0.05"``, ``5`` or ``"1/3"`` into a Decimal.

    Floats are refused so that no binary rounding reaches the engines.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"{name}: write decimals as strings, got {value!r}")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if "/" in text:
                numerator, denominator = text.split("/", 1)
                return Decimal(numerator.strip()) / Decimal(denominator.strip())
            return Decimal(text)
        except (InvalidOperation, ZeroDivisionError) as exc:
            raise ValueError(f"{name}: cannot parse {value!r} as a decimal") from exc
    raise ValueError(f"{name}: cannot parse {value!r} as a decimal")


def _check_keys(section: str, data: dict[str, Any], allowed: set[str]) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise ValueError(f"{section}: unknown keys {sorted(unknown)}")


def _parse_rules(section: str, cls: type, data: dict[str, Any] | None) -> Any:
    """Build a flat rule dataclass, converting fields by their default's type."""
    data = data or {}
    defaults = cls()
    allowed = {f.name for f in fields(cls)}
    _check_keys(section, data, allowed)
    kwargs: dict[str, Any] = {}
    for key, raw in data.items():
        current = getattr(defaults, key)
        name = f"{section}.{key}"
        if isinstance(current, Decimal):
            kwargs[key] = parse_decimal(raw, name)
        elif isinstance(current, bool) or not isinstance(current, int):
            kwargs[key] = raw
        elif isinstance(raw, int) and not isinstance(raw, bool):
            kwargs[key] = raw
        else:
            raise ValueError(f"{name}: expected an integer, got {raw!r}")
    return cls(**kwargs)


def parse_section35_rules(data: dict[str, Any] | None) -> Section35Rules:
    return _parse_rules("section35", Section35Rules, data)


def parse_section40_rules(data: dict[str, Any] | None) -> Section40Rules:
    return _parse_rules("section40", Section40Rules, data)


def parse_hotchpot_rules(data: dict[str, Any] | None) -> tuple[HotchpotRules, Decimal]:
    """Parse hotchpot rules plus the ``minimum_adjustment`` waiver amount."""
    data = dict(data or {})
    minimum = parse_decimal(data.pop("minimum_adjustment", 0), "hotchpot.minimum_adjustment")
    if minimum < 0:
        raise ValueError("hotchpot.minimum_adjustment cannot be negative")
    return _parse_rules("hotchpot", HotchpotRules, data), minimum


def parse_dependency_rules(data: dict[str, Any] | None) -> DependencyRules:
    """
    Parse S.29 rules.

    ``relationship_weights`` and ``level_weights`` are keyed by enum
    value; a partial mapping overrides only the keys it names.
    """
    data = dict(data or {})
    defaults = DependencyRules()
    relationship_weights = dict(defaults.relationship_weights)
    for key, raw in (data.pop("relationship_weights", None) or {}).items():
        relationship_weights[DependantRelationship(key)] = parse_decimal(
            raw, f"dependency.relationship_weights.{key}",
        )
    level_weights = dict(defaults.level_weights)
    for key, raw in (data.pop("level_weights", None) or {}).items():
        level_weights[DependencyLevel(key)] = parse_decimal(raw, f"dependency.level_weights.{key}")

    scalars = _parse_rules("dependency", DependencyRules, data)
    return DependencyRules(**{
        **{f.name: getattr(scalars, f.name) for f in fields(DependencyRules)},
        "relationship_weights": relationship_weights,
        "level_weights": level_weights,
    })


def parse_debt_config(data: dict[str, Any] | None) -> DebtConfig:
    return _parse_rules("debt", DebtConfig, data)


_TOP_LEVEL_KEYS = {
    "version", "jurisdiction", "currency",
    "section35", "section40", "hotchpot", "dependency", "debt",
}


def parse_statutory_parameters(data: dict[str, Any]) -> StatutoryParameters:
    """
    Parse a whole parameter document.

    Raises:
        KeyError: if ``version`` is missing.
        ValueError: for unknown keys or invalid values.
    """
    _check_keys("root", data, _TOP_LEVEL_KEYS)
    currency = str(data.get("currency", "KES"))
    if not CurrencyRegistry.is_valid(currency):
        raise ValueError(f"currency: unsupported currency code {currency!r}")
    hotchpot, minimum_adjustment = parse_hotchpot_rules(data.get("hotchpot"))
    return StatutoryParameters(
        version=str(data["version"]),
        jurisdiction=str(data.get("jurisdiction", "KE")),
        currency=currency,
        section35=parse_section35_rules(data.get("section35")),
        section40=parse_section40_rules(data.get("section40")),
        hotchpot=hotchpot,
        minimum_hotchpot_adjustment=minimum_adjustment,
        dependency=parse_dependency_rules(data.get("dependency")),
        debt=parse_debt_config(data.get("debt")),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization; deterministic."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
