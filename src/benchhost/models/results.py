"""
Result data models.

This module contains the immutable values handed back to callers of the
process runner and the PID resolver.
"""

from dataclasses import dataclass
from typing import Tuple

# Returned when no PID resolution strategy produced a value.
UNRESOLVED_PID = -1


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of a captured process run.

    Built only after the child exited and both output drainers finished,
    so ``captured_text`` always holds everything the child wrote. The
    relative order of stdout and stderr content is not defined.
    """

    command: Tuple[str, ...]
    exit_code: int
    captured_text: str
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        """True when the child exited with code 0."""
        return self.exit_code == 0
