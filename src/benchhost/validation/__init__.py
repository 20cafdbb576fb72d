"""
Validation and error handling for the benchhost package.

This module provides input validation, the package exception types and
error handling with consistent error reporting across the application.
"""

# Core exception classes and error handling
from .exceptions import (
    ErrorSeverity,
    LaunchError,
    PidFormatError,
    ValidationError,
    WaitInterruptedError,
    handle_error,
    handle_config_error,
    handle_subprocess_error,
    handle_cli_error,
)

# Validation functions
from .validators import (
    validate_command,
    validate_encoding_name,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

__all__ = [
    # Core functionality
    "ErrorSeverity",
    "LaunchError",
    "PidFormatError",
    "ValidationError",
    "WaitInterruptedError",
    "handle_error",
    "handle_config_error",
    "handle_subprocess_error",
    "handle_cli_error",
    # Validators
    "validate_command",
    "validate_encoding_name",
    "validate_enum_choice",
    "validate_positive_float",
    "validate_positive_integer",
]
