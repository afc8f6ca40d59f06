# backend/wealthtrack/utils/__init__.py
"""
Cross-cutting utilities.

- logging: Logging configuration with correlation ID support
- context: Request context (correlation IDs, deadlines) and thread hand-off

Usage:
    from wealthtrack.utils import setup_logging, get_logger
    from wealthtrack.utils import get_correlation_id, set_correlation_id
"""

from wealthtrack.utils.context import (
    Deadline,
    bind_context,
    clear_correlation_id,
    deadline_scope,
    get_correlation_id,
    get_deadline,
    set_correlation_id,
)
from wealthtrack.utils.logging import get_logger, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "bind_context",
    "Deadline",
    "deadline_scope",
    "get_deadline",
]
