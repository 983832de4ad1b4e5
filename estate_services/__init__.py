"""
estate_services -- Package init and public API.

Responsibility:
    Orchestration that composes the pure engines with the debt and gift
    modules and the statutory parameters.  This is the only layer that
    reads the clock on behalf of a whole calculation.

Architecture position:
    Services -- orchestration over engines, modules, config and kernel.

    Dependency direction:
        estate_services/ -> estate_engines/, estate_modules/, estate_config/  (allowed)
        estate_engines/  -> estate_services/ (FORBIDDEN)
        estate_kernel/   -> estate_services/ (FORBIDDEN)

Audit relevance:
    This package is the canonical import surface for external consumers.
"""

from estate_kernel.logging_config import get_logger

logger = get_logger("services")

from estate_services.distribution import (
    DistributionSnapshot,
    EstateDistributionReport,
    EstateDistributionService,
)

__all__ = [
    "DistributionSnapshot",
    "EstateDistributionReport",
    "EstateDistributionService",
]
