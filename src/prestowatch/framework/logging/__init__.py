"""
Structured logging for prestowatch.

Usage:
    from prestowatch.framework.logging import configure_logging, get_logger, log_step

    configure_logging(level="INFO")
    log = get_logger(__name__)

    with log_step("collector.cycle"):
        collect()
"""

from prestowatch.framework.logging.config import configure_logging
from prestowatch.framework.logging.context import (
    LogContext,
    clear_context,
    get_context,
    get_logger,
    new_cycle_id,
    push_context,
)
from prestowatch.framework.logging.timing import TimingResult, log_step

__all__ = [
    "configure_logging",
    "LogContext",
    "clear_context",
    "get_context",
    "get_logger",
    "new_cycle_id",
    "push_context",
    "TimingResult",
    "log_step",
]
