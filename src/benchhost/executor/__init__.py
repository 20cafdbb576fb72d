"""
External process execution for the benchhost package.

This module provides captured and detached process launching, with the
stream drainers that keep captured children from blocking on full pipes.
"""

from .drainer import CapturedOutput, StreamDrainer, drain
from .process_runner import (
    ProcessRunner,
    run_captured,
    run_detached,
    run_with,
    try_with,
)

__all__ = [
    "CapturedOutput",
    "StreamDrainer",
    "drain",
    "ProcessRunner",
    "run_captured",
    "run_detached",
    "run_with",
    "try_with",
]
