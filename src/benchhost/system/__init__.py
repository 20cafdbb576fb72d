"""
System interaction utilities for benchmark hosts.

This module provides:

- CPU parallelism detection, including a warm-up probe that wakes cores
  parked by power management
- PID resolution for the current process and for spawned children
- Small platform and interpreter queries
"""

# CPU probing
from .cpu import (
    CpuProbe,
    ProcessBurner,
    ThreadBurner,
    available_parallelism,
    figure_out_hot_cpus,
)

# PID resolution
from .pid import (
    PidResolver,
    PidStrategy,
    StrategyKind,
    parse_pid_from_identity,
    resolve_of,
    resolve_self,
    runtime_identity,
)

# Platform queries
from .platform_info import (
    get_current_interpreter,
    get_current_interpreter_version,
    get_current_os_version,
    host_summary,
    is_linux,
    is_macos,
    is_windows,
)

__all__ = [
    # CPU
    "CpuProbe",
    "ProcessBurner",
    "ThreadBurner",
    "available_parallelism",
    "figure_out_hot_cpus",
    # PID
    "PidResolver",
    "PidStrategy",
    "StrategyKind",
    "parse_pid_from_identity",
    "resolve_of",
    "resolve_self",
    "runtime_identity",
    # Platform
    "get_current_interpreter",
    "get_current_interpreter_version",
    "get_current_os_version",
    "host_summary",
    "is_linux",
    "is_macos",
    "is_windows",
]
