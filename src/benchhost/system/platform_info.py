"""
Host platform helpers.

Small queries about the operating system and the running interpreter,
used when launching helper tools and when describing the benchmark host.
"""

import platform
import sys
from typing import Dict

from .cpu import available_parallelism


def is_windows() -> bool:
    return platform.system() == "Windows"


def is_linux() -> bool:
    return platform.system() == "Linux"


def is_macos() -> bool:
    return platform.system() == "Darwin"


def get_current_interpreter() -> str:
    """Path of the interpreter running this process."""
    return sys.executable


def get_current_interpreter_version() -> str:
    """
    Human readable interpreter description.

    Example: ``"Python 3.12.1, CPython"``.
    """
    return f"Python {platform.python_version()}, {platform.python_implementation()}"


def get_current_os_version() -> str:
    """
    Operating system name, architecture and release.

    Example: ``"Linux, x86_64, 6.5.0"``.
    """
    return f"{platform.system()}, {platform.machine()}, {platform.release()}"


def host_summary() -> Dict[str, str]:
    """Description of the host, suitable for logging next to results."""
    return {
        "interpreter": get_current_interpreter(),
        "interpreter_version": get_current_interpreter_version(),
        "os": get_current_os_version(),
        "available_parallelism": str(available_parallelism()),
    }
