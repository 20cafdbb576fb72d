"""
Data models for the benchhost package.

Configuration Models:
- Runner, probe and PID resolver settings
- The aggregated application configuration

Result Models:
- Captured process results
- The unresolved PID sentinel

Runtime Models:
- CPU probe stages and transient probe state
"""

# Configuration models
from .config import AppConfig, PidConfig, ProbeConfig, RunnerConfig

# Result models
from .results import UNRESOLVED_PID, ProcessResult

# Runtime models
from .runtime import CancellableWorker, ProbeStage, ProbeState

__all__ = [
    # Configuration
    "AppConfig",
    "PidConfig",
    "ProbeConfig",
    "RunnerConfig",
    # Results
    "UNRESOLVED_PID",
    "ProcessResult",
    # Runtime
    "CancellableWorker",
    "ProbeStage",
    "ProbeState",
]
