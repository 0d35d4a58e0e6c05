"""
Observability module.

Provides logging configuration, structured log helpers and correlation ID
tracking.
"""

from academy_scheduler.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from academy_scheduler.observability.logger import CorrelationIdFilter, configure_logging

__all__ = [
    "configure_logging",
    "CorrelationIdFilter",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
