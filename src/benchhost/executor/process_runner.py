"""
Child process execution with deadlock-free output capture.

This module starts external tools from an argument vector (never through a
shell) and either captures their combined stdout/stderr or hands the live
process back to the caller.
"""

import locale
import logging
import subprocess
import threading
import time
from typing import List, Optional, Sequence, Tuple

from ..config import get_config
from ..models.config import RunnerConfig
from ..models.results import ProcessResult
from ..validation import (
    ErrorSeverity,
    LaunchError,
    WaitInterruptedError,
    handle_subprocess_error,
    validate_command,
)
from .drainer import CapturedOutput, StreamDrainer

logger = logging.getLogger(__name__)


class ProcessRunner:
    """
    Runs external commands and captures their output.

    Both output pipes of a captured child are drained by their own thread,
    concurrently with each other and with the wait for the child's exit.
    A child writing more than a pipe buffer's worth to both streams
    therefore never blocks.
    """

    def __init__(self, config: Optional[RunnerConfig] = None):
        """
        Initialize the runner.

        Args:
            config: Runner settings; defaults to the `[runner]` section of
                the global configuration.
        """
        self.config = config or get_config().runner

    @property
    def encoding(self) -> str:
        """Codec used to decode captured bytes."""
        return self.config.encoding or locale.getpreferredencoding(False)

    def run_captured(
        self,
        command: Sequence[str],
        cancel_event: Optional[threading.Event] = None,
    ) -> ProcessResult:
        """
        Run a command to completion and capture its combined output.

        Args:
            command: Program path followed by literal arguments
            cancel_event: Optional event; setting it abandons the wait

        Returns:
            ProcessResult with exit code and captured text. A non-zero exit
            code is reported in the result, not raised.

        Raises:
            ValidationError: If the command is malformed
            LaunchError: If the process could not be started
            WaitInterruptedError: If waiting was interrupted or cancelled
        """
        command = validate_command(command)
        logger.debug(f"Running captured: {' '.join(command)}")

        start_time = time.monotonic()
        process = self._spawn(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

        sink = CapturedOutput()
        drainers = [
            StreamDrainer(
                process.stderr,
                sink,
                name=f"drain-stderr-{process.pid}",
                chunk_size=self.config.chunk_size,
            ),
            StreamDrainer(
                process.stdout,
                sink,
                name=f"drain-stdout-{process.pid}",
                chunk_size=self.config.chunk_size,
            ),
        ]
        for drainer in drainers:
            drainer.start()

        try:
            exit_code = self._wait(process, command, cancel_event)
            for drainer in drainers:
                drainer.join()
        except KeyboardInterrupt as e:
            logger.warning(f"Interrupted while waiting for PID {process.pid}")
            raise WaitInterruptedError(
                f"Interrupted while waiting for '{command[0]}' (PID {process.pid})",
                command=command,
                process=process,
            ) from e

        duration = time.monotonic() - start_time
        result = ProcessResult(
            command=command,
            exit_code=exit_code,
            captured_text=sink.decode(self.encoding, self.config.decode_errors),
            duration_seconds=duration,
        )
        logger.debug(
            f"'{command[0]}' exited with code {exit_code} after {duration:.3f}s, "
            f"captured {len(sink)} bytes"
        )
        return result

    def run_detached(self, command: Sequence[str]) -> subprocess.Popen:
        """
        Start a command and return immediately.

        The returned process has stdin, stdout and stderr connected to
        pipes; reading them (and reaping the child) is up to the caller.

        Raises:
            ValidationError: If the command is malformed
            LaunchError: If the process could not be started
        """
        command = validate_command(command)
        process = self._spawn(
            command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        logger.info(f"Started '{command[0]}' detached with PID {process.pid}")
        return process

    def try_with(self, command: Sequence[str]) -> List[str]:
        """
        Run a command and collect messages describing a failure.

        Returns:
            An empty list on success, the captured output on a non-zero
            exit, or the launch error message if the command could not run.
        """
        try:
            result = self.run_captured(command)
        except LaunchError as e:
            return [str(e)]
        if result.succeeded:
            return []
        return [result.captured_text]

    def run_with(self, command: Sequence[str]) -> List[str]:
        """
        Run a command and collect its output regardless of the exit code.

        Returns:
            A one-element list with the captured output, or with the launch
            error message if the command could not run.
        """
        try:
            result = self.run_captured(command)
        except LaunchError as e:
            return [str(e)]
        return [result.captured_text]

    def _spawn(self, command: Tuple[str, ...], **popen_kwargs) -> subprocess.Popen:
        try:
            return subprocess.Popen(list(command), **popen_kwargs)
        except (OSError, ValueError) as e:
            handle_subprocess_error(
                error=e,
                command=command,
                severity=ErrorSeverity.DEBUG,
                reraise=False,
                logger=logger,
            )
            reason = getattr(e, "strerror", None) or str(e)
            raise LaunchError(
                f"Cannot launch '{command[0]}': {reason}", command=command
            ) from e

    def _wait(
        self,
        process: subprocess.Popen,
        command: Tuple[str, ...],
        cancel_event: Optional[threading.Event],
    ) -> int:
        if cancel_event is None:
            return process.wait()

        while True:
            if cancel_event.is_set():
                logger.warning(f"Wait for PID {process.pid} cancelled")
                raise WaitInterruptedError(
                    f"Cancelled while waiting for '{command[0]}' (PID {process.pid})",
                    command=command,
                    process=process,
                )
            try:
                return process.wait(timeout=self.config.wait_poll_interval)
            except subprocess.TimeoutExpired:
                continue


def run_captured(
    command: Sequence[str], cancel_event: Optional[threading.Event] = None
) -> ProcessResult:
    """Run a command with the configured runner and capture its output."""
    return ProcessRunner().run_captured(command, cancel_event=cancel_event)


def run_detached(command: Sequence[str]) -> subprocess.Popen:
    """Start a command with the configured runner without waiting."""
    return ProcessRunner().run_detached(command)


def try_with(command: Sequence[str]) -> List[str]:
    """Run a command; return failure messages, empty on success."""
    return ProcessRunner().try_with(command)


def run_with(command: Sequence[str]) -> List[str]:
    """Run a command; return its output, or the launch error message."""
    return ProcessRunner().run_with(command)
