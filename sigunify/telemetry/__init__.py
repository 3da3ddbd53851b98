"""Convenience exports for sigunify telemetry utilities."""

from . import logger, metrics

__all__ = [
    "logger",
    "metrics",
]
