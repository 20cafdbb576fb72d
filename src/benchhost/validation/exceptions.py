"""
Exception types and error handling for the benchhost package.

This module defines the errors raised by the process runner, the PID
resolver and the configuration layer, together with the shared helpers
used to log errors consistently before they are re-raised.
"""

import logging
import sys
from enum import Enum
from typing import Any, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Log level an error is reported at."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Severities whose log line carries the traceback.
_WITH_TRACEBACK = {ErrorSeverity.DEBUG, ErrorSeverity.CRITICAL}


class ValidationError(Exception):
    """
    A configuration value or a command was rejected.

    ``field_name`` and ``value`` identify what was rejected so the CLI can
    point at the offending setting.
    """

    def __init__(self, message: str, field_name: Optional[str] = None,
                 value: Any = None, severity: ErrorSeverity = ErrorSeverity.ERROR):
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        self.severity = severity


class LaunchError(RuntimeError):
    """
    Raised when a child process could not be started at all.

    Typical causes are a missing executable or a permission problem. A
    process that starts and then exits with a non-zero code is not a
    launch error.
    """

    def __init__(self, message: str, command: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.command = tuple(command) if command is not None else None


class WaitInterruptedError(InterruptedError):
    """
    Raised when waiting for a child process was cancelled.

    The child is not stopped. ``process`` is its still-running
    subprocess.Popen, so the caller can kill and reap it.
    """

    def __init__(self, message: str, command: Optional[Sequence[str]] = None,
                 process: Any = None):
        super().__init__(message)
        self.command = tuple(command) if command is not None else None
        self.process = process


class PidFormatError(ValueError):
    """Raised when a runtime identity string does not look like '<pid>@<host>'."""

    def __init__(self, message: str, identity: Optional[str] = None):
        super().__init__(message)
        self.identity = identity


def handle_error(
    error: Exception,
    context: str,
    severity: Union[ErrorSeverity, str] = ErrorSeverity.ERROR,
    reraise: bool = True,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log an error in the common format, then optionally raise it again.

    Args:
        error: The exception being reported
        context: What was being done when it happened
        severity: Level to log at, as an ErrorSeverity or its name
        reraise: Raise ``error`` again after logging
        logger: Where to log; this module's logger when omitted
    """
    target = logger or globals()["logger"]
    level = ErrorSeverity(severity.lower()) if isinstance(severity, str) else severity

    log = getattr(target, level.value)
    if level in _WITH_TRACEBACK:
        log(f"Error in {context}: {error}", exc_info=True)
    else:
        log(f"Error in {context}: {error}")

    if reraise:
        raise error


def handle_config_error(error: Exception, context: str, **kwargs) -> None:
    """Report a problem with the settings file."""
    handle_error(error, f"config {context}", **kwargs)


def handle_subprocess_error(error: Exception, command: Sequence[str], **kwargs) -> None:
    """Report a problem launching or talking to a child process."""
    handle_error(error, f"subprocess command '{' '.join(command)}'", **kwargs)


def handle_cli_error(error: Exception, context: str, **kwargs) -> None:
    """Report an error to the CLI user and leave with ``exit_code`` (default 1)."""
    exit_code = kwargs.pop("exit_code", 1)
    kwargs.setdefault("severity", ErrorSeverity.ERROR)
    handle_error(error, f"CLI {context}", reraise=False, **kwargs)
    sys.exit(exit_code)
