"""
Hot-plug aware CPU parallelism probing.

Some systems, notably embedded Linux boards and laptops with aggressive
power management, park idle cores. The count reported while the machine
is idle can then be lower than what is available once work arrives. The
probe in this module puts load on the machine one busy worker at a time,
watches the reported parallelism grow, and stops once the count has been
stable for a warm-up window.
"""

import logging
import multiprocessing
import os
import threading
import time
from typing import Any, Callable, Optional

import psutil

from ..config import get_config
from ..models.config import ProbeConfig
from ..models.runtime import CancellableWorker, ProbeStage, ProbeState

logger = logging.getLogger(__name__)


def _count_from_psutil_affinity() -> Optional[int]:
    return len(psutil.Process().cpu_affinity())


def _count_from_sched_affinity() -> Optional[int]:
    return len(os.sched_getaffinity(0))


def _count_from_psutil() -> Optional[int]:
    return psutil.cpu_count(logical=True)


_PARALLELISM_SOURCES = (
    _count_from_psutil_affinity,
    _count_from_sched_affinity,
    _count_from_psutil,
    os.cpu_count,
)


def available_parallelism() -> int:
    """
    Number of logical CPUs this process may currently be scheduled on.

    Prefers the affinity mask (which excludes offline cores) and falls back
    to the system-wide logical CPU count. Never returns less than 1.
    """
    for source in _PARALLELISM_SOURCES:
        try:
            count = source()
        except (AttributeError, NotImplementedError, OSError, psutil.Error) as e:
            logger.debug(f"Parallelism source {source.__name__} unavailable: {e}")
            continue
        if count:
            return max(int(count), 1)
    return 1


def _burn_until_cancelled(stop: Any) -> None:
    while not stop.is_set():
        pass


class ThreadBurner:
    """Busy-spinning thread, stopped through a threading.Event."""

    def __init__(self):
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=_burn_until_cancelled, args=(self._stop,), name="cpu-burner", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._stop.set()

    def join(self, timeout: float) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()


class ProcessBurner:
    """
    Busy-spinning child process, stopped through a multiprocessing.Event.

    A separate process loads a core even when the interpreter holds a GIL.
    """

    def __init__(self, context: Optional[Any] = None):
        ctx = context or multiprocessing.get_context()
        self._stop = ctx.Event()
        self._process = ctx.Process(
            target=_burn_until_cancelled, args=(self._stop,), name="cpu-burner", daemon=True
        )

    def start(self) -> None:
        self._process.start()

    def cancel(self) -> None:
        self._stop.set()

    def join(self, timeout: float) -> None:
        self._process.join(timeout)

    def is_alive(self) -> bool:
        return self._process.is_alive()

    def terminate(self) -> None:
        self._process.terminate()
        self._process.join(1.0)


WORKER_FACTORIES = {
    "process": ProcessBurner,
    "thread": ThreadBurner,
}


class CpuProbe:
    """
    Measures the usable CPU count after waking parked cores.

    The probe starts in WARMING with one worker running. Every time the
    observed parallelism grows another worker is launched and the window
    restarts. When a full warm-up window passes without growth the probe
    is STABILIZED, cancels all workers and is DONE.
    """

    def __init__(
        self,
        config: Optional[ProbeConfig] = None,
        parallelism_source: Optional[Callable[[], int]] = None,
        worker_factory: Optional[Callable[[], CancellableWorker]] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the probe.

        Args:
            config: Probe settings; defaults to the `[probe]` section of the
                global configuration.
            parallelism_source: Reads the current available parallelism.
            worker_factory: Creates one unstarted burning worker; defaults
                to the backend named by ``config.worker_backend``.
            clock: Monotonic clock in seconds.
            sleep: Called between two reads of the parallelism source.
        """
        self.config = config or get_config().probe
        self.parallelism_source = parallelism_source or available_parallelism
        self.worker_factory = worker_factory or WORKER_FACTORIES[self.config.worker_backend]
        self._clock = clock
        self._sleep = sleep

    def probe(self) -> int:
        """
        Run one warm-up probe. Blocks for at least the warm-up window.

        Returns:
            The highest parallelism observed, never lower than the value
            read when the call started.
        """
        baseline = self.parallelism_source()
        state = ProbeState(max_observed=0, last_increase=self._clock())
        logger.debug(
            f"Probing CPUs: baseline {baseline}, window {self.config.warmup_window_ms}ms, "
            f"{self.config.worker_backend} workers"
        )

        try:
            self._launch_worker(state)
            while state.stage is ProbeStage.WARMING:
                current = self.parallelism_source()
                if current > state.max_observed:
                    state.max_observed = current
                    state.last_increase = self._clock()
                    self._launch_worker(state)
                elif self._clock() - state.last_increase >= self.config.warmup_window:
                    state.stage = ProbeStage.STABILIZED
                elif self.config.poll_interval > 0:
                    self._sleep(self.config.poll_interval)
        finally:
            self._cancel_workers(state)
            state.stage = ProbeStage.DONE

        result = max(state.max_observed, baseline)
        if result > baseline:
            logger.info(f"CPU warm-up raised parallelism from {baseline} to {result}")
        else:
            logger.info(f"CPU warm-up found {result} CPUs")
        return result

    def _launch_worker(self, state: ProbeState) -> None:
        worker = self.worker_factory()
        try:
            worker.start()
        except (OSError, RuntimeError) as e:
            logger.warning(f"Could not start CPU burner: {type(e).__name__}: {e}")
            return
        state.workers.append(worker)

    def _cancel_workers(self, state: ProbeState) -> None:
        for worker in state.workers:
            worker.cancel()

        # The grace period is shared by all workers, not granted per worker.
        deadline = time.monotonic() + self.config.grace_period
        stragglers = []
        for worker in state.workers:
            worker.join(max(0.0, deadline - time.monotonic()))
            if worker.is_alive():
                stragglers.append(worker)

        for worker in stragglers:
            terminate = getattr(worker, "terminate", None)
            if terminate is not None:
                logger.warning("CPU burner ignored cancellation, terminating it")
                terminate()
            else:
                logger.debug("CPU burner still winding down after grace period")

        logger.debug(f"Cancelled {len(state.workers)} CPU burners")


def figure_out_hot_cpus() -> int:
    """Run one probe with the configured settings and return the CPU count."""
    return CpuProbe().probe()
