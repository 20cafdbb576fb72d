"""
Runtime data models.

This module contains transient state used while a CPU probe is running.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Protocol


class ProbeStage(Enum):
    """Stages of a CPU warm-up probe."""
    WARMING = "warming"
    STABILIZED = "stabilized"
    DONE = "done"


class CancellableWorker(Protocol):
    """A busy-spinning worker that stops when asked to."""

    def start(self) -> None: ...

    def cancel(self) -> None: ...

    def join(self, timeout: float) -> None: ...

    def is_alive(self) -> bool: ...


@dataclass
class ProbeState:
    """
    State of one probe call. Discarded when the probe returns.
    """

    # Highest available parallelism seen so far.
    max_observed: int
    # Clock reading of the last increase of max_observed.
    last_increase: float
    # Every worker launched during this probe, in launch order.
    workers: List[CancellableWorker] = field(default_factory=list)
    stage: ProbeStage = ProbeStage.WARMING
