"""
benchhost: host-side process and CPU utilities for benchmark orchestration.

The package is organized into specialized modules:
- config: Configuration loading and validation
- models: Data structures and type definitions
- validation: Exceptions, input validation and error handling
- executor: External process execution with output capture
- system: CPU warm-up probing, PID resolution and platform queries
- cli: Command-line interface

Usage:
    From command line:
        benchhost run -- make --version
        benchhost cpus

    Programmatically:
        from benchhost import ProcessRunner, figure_out_hot_cpus
        result = ProcessRunner().run_captured(["make", "--version"])
        workers = figure_out_hot_cpus()
"""

# Main interfaces
from .config import get_config, clear_config_cache, set_config_path
from .cli import main_cli

# Model classes for external use
from .models import (
    AppConfig,
    PidConfig,
    ProbeConfig,
    ProcessResult,
    RunnerConfig,
    UNRESOLVED_PID,
)

# Errors
from .validation import (
    LaunchError,
    PidFormatError,
    ValidationError,
    WaitInterruptedError,
)

# Process execution
from .executor import (
    ProcessRunner,
    run_captured,
    run_detached,
    run_with,
    try_with,
)

# System utilities
from .system import (
    CpuProbe,
    PidResolver,
    available_parallelism,
    figure_out_hot_cpus,
    resolve_of,
    resolve_self,
)

__version__ = "1.0.0"

__all__ = [
    # Main interfaces
    "get_config",
    "clear_config_cache",
    "set_config_path",
    "main_cli",
    # Models
    "AppConfig",
    "PidConfig",
    "ProbeConfig",
    "ProcessResult",
    "RunnerConfig",
    "UNRESOLVED_PID",
    # Errors
    "LaunchError",
    "PidFormatError",
    "ValidationError",
    "WaitInterruptedError",
    # Process execution
    "ProcessRunner",
    "run_captured",
    "run_detached",
    "run_with",
    "try_with",
    # System utilities
    "CpuProbe",
    "PidResolver",
    "available_parallelism",
    "figure_out_hot_cpus",
    "resolve_of",
    "resolve_self",
]
