"""
Services Module - Infrastructure services for the Fara'id Estate Engine.

- Structured logging and per-computation log correlation
"""

from .logging_config import (
    ENGINE_LOGGERS,
    ContextLogger,
    DistributionLogger,
    JsonFormatter,
    ReadableFormatter,
    computation_id_var,
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    render_value,
)

__all__ = [
    "ENGINE_LOGGERS",
    "ContextLogger",
    "DistributionLogger",
    "JsonFormatter",
    "ReadableFormatter",
    "computation_id_var",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "render_value",
]
