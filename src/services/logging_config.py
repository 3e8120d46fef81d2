"""
Logging Configuration for the Fara'id Estate Engine.

Provides structured logging with:
- JSON formatting for production
- Human-readable formatting for development
- Distribution-specific logging of each pipeline stage

Log records carry an ``extra_data`` mapping. Shares inside it may be
``Fraction`` or ``Decimal`` values; both formatters render fractions as
``"a/b"`` and every line of one computation carries its ``computation_id``.
"""

import logging
import json
import sys
import time
from datetime import datetime
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Optional, Dict, Any
from pathlib import Path
from contextvars import ContextVar

from calculator.fraction_math import format_fraction

# Context variable for correlating all log lines of one computation
computation_id_var: ContextVar[Optional[str]] = ContextVar('computation_id', default=None)

# Top-level loggers owned by the engine; configure_logging leaves the rest alone
ENGINE_LOGGERS = ("calculator", "config", "rules", "services", "distribution")


def render_value(value: Any) -> Any:
    """Make a log value JSON-friendly, keeping shares exact."""
    if isinstance(value, Fraction):
        return format_fraction(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: render_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [render_value(v) for v in value]
    return value


def _computation_id(record: logging.LogRecord) -> Optional[str]:
    extra_data = getattr(record, 'extra_data', None) or {}
    return extra_data.get('computation_id') or computation_id_var.get()


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with the distribution fields at top level."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        computation_id = _computation_id(record)
        if computation_id:
            log_data["computation_id"] = computation_id

        if hasattr(record, 'extra_data'):
            log_data.update(render_value(record.extra_data))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for development.

    ``12:00:01.250 INFO     [distribution] (3f9a0c1b2d4e) Distribution complete | total_fraction=1``
    """

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.now().strftime('%H:%M:%S.%f')[:-3]
        message = f"{timestamp} {color}{record.levelname:8s}{reset} [{record.name}]"

        computation_id = _computation_id(record)
        if computation_id:
            message += f" ({computation_id})"
        message += f" {record.getMessage()}"

        extra_data = {
            k: v for k, v in (getattr(record, 'extra_data', None) or {}).items()
            if k != 'computation_id'
        }
        if extra_data:
            extras = ' | '.join(f"{k}={v}" for k, v in render_value(extra_data).items())
            message += f" | {extras}"

        return message


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that merges its bound context into ``extra_data``."""

    def process(self, msg: str, kwargs: Dict) -> tuple:
        extra = kwargs.get('extra', {})
        extra_data = dict(extra.get('extra_data', {}))
        extra_data.update(self.extra)
        extra['extra_data'] = extra_data
        kwargs['extra'] = extra
        return msg, kwargs


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None
) -> None:
    """
    Attach handlers to the engine's loggers.

    Only the loggers in ENGINE_LOGGERS are touched, so an embedding
    application keeps its own root configuration. Calling this again
    replaces the handlers installed by the previous call.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON formatted logs
        log_file: Optional file path for log output (always JSON)
    """
    formatter = JsonFormatter() if json_output else ReadableFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler.faraid_engine = True

    for name in ENGINE_LOGGERS:
        engine_logger = logging.getLogger(name)
        for old in [h for h in engine_logger.handlers if getattr(h, 'faraid_engine', False)]:
            engine_logger.removeHandler(old)
            old.close()
        engine_logger.setLevel(level)
        for handler in handlers:
            engine_logger.addHandler(handler)
        engine_logger.propagate = False


def configure_logging_from_settings(settings=None) -> None:
    """Configure logging from FARAID_LOG_LEVEL / FARAID_JSON_LOGS."""
    if settings is None:
        from config.settings import get_settings
        settings = get_settings()
    configure_logging(level=settings.log_level, json_output=settings.json_logs)


def get_logger(name: str, **extra) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (typically __name__)
        **extra: Context added to the ``extra_data`` of every record
    """
    return ContextLogger(logging.getLogger(name), extra)


class DistributionLogger:
    """
    Specialized logger for estate distributions.

    Provides detailed logging of:
    - Distribution inputs
    - Each pipeline stage
    - Reconciliation outcome and timing
    """

    def __init__(self, computation_id: Optional[str] = None):
        """
        Initialize distribution logger.

        Args:
            computation_id: Identifier used to correlate the log lines
        """
        self.logger = get_logger("distribution", computation_id=computation_id)
        self.computation_id = computation_id
        self._start_time: Optional[float] = None
        self._step_times: Dict[str, int] = {}

    def start_distribution(self, net_estate_value: Any, heir_count: int) -> None:
        """Log distribution start."""
        self._start_time = time.time()
        self.logger.info(
            "Starting estate distribution",
            extra={'extra_data': {
                'net_estate_value': str(net_estate_value),
                'heir_categories': heir_count,
            }}
        )

    def log_step(self, step_name: str, **data) -> float:
        """
        Log a pipeline stage.

        Args:
            step_name: Name of the stage
            **data: Stage-specific data to log

        Returns:
            Start time to pass to complete_step
        """
        step_start = time.time()
        self.logger.debug(
            f"Distribution step: {step_name}",
            extra={'extra_data': {
                'step': step_name,
                **data
            }}
        )
        return step_start

    def complete_step(self, step_name: str, step_start: float, **result) -> None:
        """Log stage completion with timing."""
        duration_ms = int((time.time() - step_start) * 1000)
        self._step_times[step_name] = duration_ms
        self.logger.debug(
            f"Completed step: {step_name}",
            extra={'extra_data': {
                'step': step_name,
                'duration_ms': duration_ms,
                **result
            }}
        )

    def log_exclusions(self, excluded: Dict[str, str]) -> None:
        """Log heirs excluded by Hajb, with the excluding heir."""
        if not excluded:
            return
        self.logger.info(
            "Heirs excluded",
            extra={'extra_data': {'excluded': excluded}}
        )

    def log_result(self, reconciliation_status: Any, total_fraction: Any, shares: Dict[str, Any]) -> None:
        """Log final distribution result; fractions are rendered by the formatter."""
        duration_ms = int((time.time() - self._start_time) * 1000) if self._start_time else 0

        self.logger.info(
            "Distribution complete",
            extra={'extra_data': {
                'reconciliation_status': reconciliation_status,
                'total_fraction': total_fraction,
                'shares': shares,
                'duration_ms': duration_ms,
                'step_times': self._step_times,
            }}
        )

    def log_warning(self, message: str, **data) -> None:
        """Log distribution warning."""
        self.logger.warning(
            message,
            extra={'extra_data': data}
        )
