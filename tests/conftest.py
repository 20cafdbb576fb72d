"""
Pytest configuration and shared fixtures for the benchhost test suite.

This module provides common fixtures, synthetic child-process helpers and
configuration for all test modules.
"""

import shutil
import sys
import tempfile
from pathlib import Path
from typing import List

import pytest

# Make the src/ layout importable without an install.
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Register the unit, integration and slow markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Scratch directory removed after the test."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_config_data():
    """Settings with a short probe window and the thread backend."""
    return {
        "runner": {
            "encoding": "utf-8",
            "decode_errors": "replace",
            "chunk_size": 4096,
            "wait_poll_interval": 0.01,
        },
        "probe": {
            "warmup_window_ms": 50,
            "poll_interval": 0.001,
            "grace_period": 0.5,
            "worker_backend": "thread",
        },
        "pid": {
            "force_private_access": False,
        },
    }


@pytest.fixture
def config_files(temp_dir, sample_config_data):
    """Create a temporary config.toml for testing."""
    import toml

    config_file = temp_dir / "config.toml"
    config_file.write_text(toml.dumps(sample_config_data))

    return {
        "config": config_file,
        "dir": temp_dir,
    }


# ============================================================================
# Synthetic child processes
# ============================================================================


class ChildScripts:
    """Builds commands that run small Python programs as child processes."""

    @staticmethod
    def python(code: str) -> List[str]:
        return [sys.executable, "-c", code]

    @staticmethod
    def write_both(stdout_bytes: int, stderr_bytes: int, exit_code: int = 0) -> List[str]:
        """Child writing the given amounts to stdout ('o') and stderr ('e')."""
        code = (
            "import sys\n"
            f"sys.stdout.buffer.write(b'o' * {stdout_bytes})\n"
            "sys.stdout.buffer.flush()\n"
            f"sys.stderr.buffer.write(b'e' * {stderr_bytes})\n"
            "sys.stderr.buffer.flush()\n"
            f"sys.exit({exit_code})\n"
        )
        return ChildScripts.python(code)


@pytest.fixture
def child_scripts():
    """Provide helpers for building synthetic child commands."""
    return ChildScripts


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset configuration state after each test."""
    from benchhost.config import clear_config_cache, set_config_path
    from benchhost.config import manager

    yield

    clear_config_cache()
    set_config_path(manager._DEFAULT_CONFIG_FILE_PATH)
