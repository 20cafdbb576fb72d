"""
Integration tests: the CPU probe with real burning workers.
"""

import time

import pytest

from benchhost.models.config import ProbeConfig
from benchhost.system.cpu import CpuProbe, ProcessBurner, available_parallelism


@pytest.mark.integration
class TestRealProbe:
    """Probe runs against the real host."""

    def test_thread_backend_probe(self):
        config = ProbeConfig(warmup_window_ms=50, poll_interval=0.001, grace_period=1.0, worker_backend="thread")
        baseline = available_parallelism()

        start = time.monotonic()
        result = CpuProbe(config).probe()
        elapsed = time.monotonic() - start

        assert result >= baseline
        assert result >= 1
        assert elapsed >= config.warmup_window

    @pytest.mark.slow
    def test_process_backend_probe(self):
        config = ProbeConfig(warmup_window_ms=100, poll_interval=0.001, grace_period=2.0, worker_backend="process")
        workers = []

        def factory():
            worker = ProcessBurner()
            workers.append(worker)
            return worker

        result = CpuProbe(config, worker_factory=factory).probe()

        assert result >= 1
        assert workers
        assert not any(w.is_alive() for w in workers)

    @pytest.mark.slow
    def test_process_burner_stops_on_cancel(self):
        burner = ProcessBurner()
        burner.start()
        try:
            assert burner.is_alive()
            burner.cancel()
            burner.join(5.0)
            assert not burner.is_alive()
        finally:
            if burner.is_alive():
                burner.terminate()
