"""
estate_config -- single public entrypoint for statutory parameters.

Responsibility:
    Provides the ONLY way to obtain statutory parameters at runtime through
    ``get_statutory_parameters()``.  Returns a ``StatutoryParameters``
    whose rule objects are handed to the calculators and the debt module.

Architecture position:
    Configuration -- YAML-driven, validated at load time.  Sits above
    ``estate_kernel``, ``estate_engines`` and ``estate_modules`` and below
    ``estate_services``.  Nothing below this package imports it; every
    rule object also has working defaults, so the engines run without it.

Invariants enforced:
    - Single entrypoint: all runtime parameters flow through
      ``get_statutory_parameters()``.
    - Deterministic: the same file always yields the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- the requested parameter file is missing.
    - ``ValueError`` -- unknown keys, floats, or out-of-range values.
    - ``yaml.YAMLError`` -- malformed YAML.

Audit relevance:
    Every successful call emits an ``ESTATE_CONFIG_TRACE`` log entry with
    the parameter version, jurisdiction, currency and checksum.  This ties
    each calculation back to the exact parameters that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from estate_config.loader import load_yaml_file, parse_statutory_parameters
from estate_config.schema import StatutoryParameters

_logger = logging.getLogger("estate_kernel.config")

DEFAULT_PARAMETERS_FILE = Path(__file__).parent / "defaults.yaml"


def get_statutory_parameters(path: Path | str | None = None) -> StatutoryParameters:
    """The ONLY public parameter entrypoint.

    Args:
        path: Override parameter file.  Defaults to the packaged
            ``defaults.yaml``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If parsing or validation fails.
    """
    source = Path(path) if path is not None else DEFAULT_PARAMETERS_FILE
    parameters = parse_statutory_parameters(load_yaml_file(source))

    _logger.info(
        "ESTATE_CONFIG_TRACE",
        extra={
            "trace_type": "ESTATE_CONFIG_TRACE",
            "parameters_version": parameters.version,
            "jurisdiction": parameters.jurisdiction,
            "currency": parameters.currency,
            "checksum": parameters.checksum,
            "source": source.name,
        },
    )
    return parameters


__all__ = [
    "DEFAULT_PARAMETERS_FILE",
    "StatutoryParameters",
    "get_statutory_parameters",
]
