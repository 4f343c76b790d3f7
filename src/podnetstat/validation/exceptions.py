"""
Error reporting helpers shared by configuration loading and the CLI.

Configuration problems surface as ValidationError naming the offending key.
handle_error logs an exception at a chosen severity and optionally re-raises
it; handle_cli_error is the terminal variant used by the entry point.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Severity levels for error handling."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# severity -> (logging level, attach traceback)
_SEVERITY_LOGGING = {
    ErrorSeverity.DEBUG: (logging.DEBUG, True),
    ErrorSeverity.INFO: (logging.INFO, False),
    ErrorSeverity.WARNING: (logging.WARNING, False),
    ErrorSeverity.ERROR: (logging.ERROR, False),
    ErrorSeverity.CRITICAL: (logging.CRITICAL, True),
}


class ValidationError(Exception):
    """
    A configuration value is missing, malformed or out of range.

    Attributes:
        field_name: Dotted configuration key, e.g. "exporter.rate_limit".
        value: The rejected value as it was supplied.
        severity: How the caller should report the failure.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log an error with its context and optionally re-raise it.

    Args:
        error: The exception that occurred
        context: What was being done, e.g. "config parsing exporter file"
        severity: Severity level for logging
        reraise: Whether to re-raise the exception after logging
        logger: Logger instance to use (defaults to module logger)
    """
    effective_logger = logger or globals()['logger']
    if isinstance(severity, str):
        severity = ErrorSeverity(severity.lower())

    level, with_traceback = _SEVERITY_LOGGING[severity]
    effective_logger.log(level, f"Error in {context}: {error}", exc_info=with_traceback)

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Handle configuration-related errors."""
    handle_error(error, f"config {context}", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """
    Log a fatal startup error and exit the process.

    Accepts `exit_code` (default 1) in addition to the `handle_error` keywords.
    """
    exit_code = kwargs.pop('exit_code', 1)
    severity = kwargs.pop('severity', ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", severity=severity, reraise=False, **kwargs)
    sys.exit(exit_code)
