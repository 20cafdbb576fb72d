"""
Configuration data models.

This module contains the configuration structures for the process runner,
the CPU probe and the PID resolver, and the application configuration
that aggregates them.
"""

from dataclasses import dataclass, field


@dataclass
class RunnerConfig:
    """
    Settings for running child processes, loaded from `[runner]`.
    """

    # Codec used to decode captured output. Empty means the platform default.
    encoding: str = ""
    # Error handler passed to bytes.decode().
    decode_errors: str = "replace"
    # Maximum number of bytes a drainer reads per call.
    chunk_size: int = 8192
    # How often the waiting thread checks a caller supplied cancel event (seconds).
    wait_poll_interval: float = 0.05


@dataclass
class ProbeConfig:
    """
    Settings for the CPU warm-up probe, loaded from `[probe]`.
    """

    # Window without an increase after which the count is considered stable.
    warmup_window_ms: int = 1000
    # Sleep between two reads of the available parallelism (seconds).
    poll_interval: float = 0.001
    # How long each worker is given to observe cancellation (seconds).
    grace_period: float = 0.1
    # "process" burns real cores regardless of the GIL, "thread" is lightweight.
    worker_backend: str = "process"

    @property
    def warmup_window(self) -> float:
        """Warm-up window in seconds."""
        return self.warmup_window_ms / 1000.0


@dataclass
class PidConfig:
    """
    Settings for PID resolution, loaded from `[pid]`.
    """

    # Read private fields even when static inspection does not expose them.
    force_private_access: bool = False


@dataclass
class AppConfig:
    """
    The root configuration object that aggregates all loaded settings.
    """

    runner: RunnerConfig = field(default_factory=RunnerConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    pid: PidConfig = field(default_factory=PidConfig)
