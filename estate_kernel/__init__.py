"""
Estate Kernel - shared foundation for the succession engine.

Provides the pieces every calculator and aggregate depends on:
- Exact currency arithmetic (Money, Percentage, DateRange)
- Injectable clocks (no direct wall-clock access)
- Identity/versioning for aggregates by composition
- Explicit success/failure results for validation outcomes
- Typed exception hierarchy and structured JSON logging
"""

__version__ = "0.1.0"
