"""
Unit tests for ProcessRunner and the module-level run helpers.
"""

import logging
import shutil
import subprocess
import sys
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from benchhost.executor import process_runner
from benchhost.executor.process_runner import ProcessRunner
from benchhost.models.config import RunnerConfig
from benchhost.validation import LaunchError, ValidationError, WaitInterruptedError

MISSING_BINARY = "/nonexistent/binary"


@pytest.fixture
def runner():
    """Runner with a fixed encoding and a short poll interval."""
    return ProcessRunner(RunnerConfig(encoding="utf-8", wait_poll_interval=0.01))


@pytest.mark.unit
class TestRunCaptured:
    """Test cases for ProcessRunner.run_captured."""

    @pytest.mark.skipif(shutil.which("printf") is None, reason="printf not available")
    def test_printf_output_is_captured(self, runner):
        result = runner.run_captured(["printf", "hello"])

        assert result.exit_code == 0
        assert result.captured_text == "hello"
        assert result.succeeded

    @pytest.mark.skipif(shutil.which("false") is None, reason="false not available")
    def test_failing_command_is_a_result_not_an_error(self, runner):
        result = runner.run_captured(["false"])

        assert result.exit_code == 1
        assert result.captured_text == ""
        assert not result.succeeded

    def test_exit_code_and_both_streams(self, runner, child_scripts):
        command = child_scripts.write_both(10, 5, exit_code=3)

        result = runner.run_captured(command)

        assert result.exit_code == 3
        assert result.captured_text.count("o") == 10
        assert result.captured_text.count("e") == 5
        assert len(result.captured_text) == 15

    def test_result_records_command(self, runner, child_scripts):
        command = child_scripts.python("pass")

        result = runner.run_captured(command)

        assert result.command == tuple(command)
        assert result.duration_seconds >= 0.0

    def test_arguments_are_passed_literally(self, runner, child_scripts):
        command = child_scripts.python("import sys; sys.stdout.write(sys.argv[1])") + ["a b; $HOME"]

        result = runner.run_captured(command)

        assert result.captured_text == "a b; $HOME"

    def test_stdin_is_not_inherited(self, runner, child_scripts):
        command = child_scripts.python("import sys; sys.stdout.write(repr(sys.stdin.read()))")

        result = runner.run_captured(command)

        assert result.captured_text == "''"

    def test_path_like_program(self, runner, child_scripts):
        command = [Path(sys.executable), "-c", "print('path ok')"]

        result = runner.run_captured(command)

        assert result.captured_text.strip() == "path ok"

    def test_invalid_bytes_are_replaced(self, runner, child_scripts):
        command = child_scripts.python("import sys; sys.stdout.buffer.write(b'ab\\xff')")

        result = runner.run_captured(command)

        assert result.captured_text == "ab�"

    def test_missing_binary_raises_launch_error(self, runner):
        with pytest.raises(LaunchError) as exc_info:
            runner.run_captured([MISSING_BINARY])

        assert MISSING_BINARY in str(exc_info.value)
        assert exc_info.value.command == (MISSING_BINARY,)

    def test_launch_error_is_a_runtime_error(self, runner):
        with pytest.raises(RuntimeError):
            runner.run_captured([MISSING_BINARY])

    @pytest.mark.parametrize("command", [[], "ls -l", [""], ["ls", 3]])
    def test_malformed_command_rejected(self, runner, command):
        with pytest.raises(ValidationError):
            runner.run_captured(command)

    def test_cancel_event_hands_running_child_to_caller(self, runner, child_scripts):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(WaitInterruptedError) as exc_info:
            runner.run_captured(child_scripts.python("import time; time.sleep(30)"), cancel_event=cancel)

        child = exc_info.value.process
        assert isinstance(exc_info.value, InterruptedError)
        assert isinstance(child, subprocess.Popen)
        # The child is not killed on the caller's behalf.
        assert child.poll() is None

        child.kill()
        assert child.wait(timeout=10) != 0

    def test_keyboard_interrupt_becomes_wait_interrupted(self, runner, child_scripts):
        with patch.object(ProcessRunner, "_wait", side_effect=KeyboardInterrupt):
            with pytest.raises(WaitInterruptedError) as exc_info:
                runner.run_captured(child_scripts.python("pass"))

        assert isinstance(exc_info.value.__cause__, KeyboardInterrupt)
        assert isinstance(exc_info.value.process, subprocess.Popen)
        exc_info.value.process.wait(timeout=10)

    @patch("benchhost.executor.process_runner.subprocess.Popen")
    def test_popen_called_without_shell(self, mock_popen, runner):
        mock_popen.side_effect = PermissionError(13, "Permission denied")

        with pytest.raises(LaunchError) as exc_info:
            runner.run_captured(["tool", "--flag"])

        args, kwargs = mock_popen.call_args
        assert args[0] == ["tool", "--flag"]
        assert "shell" not in kwargs
        assert kwargs["stdin"] is subprocess.DEVNULL
        assert "Permission denied" in str(exc_info.value)


@pytest.mark.unit
class TestRunDetached:
    """Test cases for ProcessRunner.run_detached."""

    def test_returns_running_process_with_pipes(self, runner, child_scripts):
        process = runner.run_detached(child_scripts.python("import sys; print(sys.stdin.readline().upper())"))
        try:
            assert process.stdin is not None
            assert process.stdout is not None
            assert process.stderr is not None

            out, _err = process.communicate(b"ping\n", timeout=10)
            assert out.strip() == b"PING"
            assert process.returncode == 0
        finally:
            if process.poll() is None:
                process.kill()
                process.wait()

    def test_missing_binary_raises_launch_error(self, runner):
        with pytest.raises(LaunchError):
            runner.run_detached([MISSING_BINARY])


@pytest.mark.unit
class TestTryWithAndRunWith:
    """Test cases for the message-collecting helpers."""

    def test_try_with_success_is_empty(self, runner, child_scripts):
        assert runner.try_with(child_scripts.python("print('fine')")) == []

    def test_try_with_failure_returns_output(self, runner, child_scripts):
        messages = runner.try_with(child_scripts.write_both(2, 1, exit_code=4))

        assert len(messages) == 1
        assert sorted(messages[0]) == ["e", "o", "o"]

    def test_try_with_launch_failure_returns_message(self, runner):
        messages = runner.try_with([MISSING_BINARY])

        assert len(messages) == 1
        assert MISSING_BINARY in messages[0]

    def test_launch_failure_is_not_logged_as_error(self, runner, caplog):
        caplog.set_level(logging.DEBUG, logger="benchhost")

        runner.try_with([MISSING_BINARY])
        with pytest.raises(LaunchError):
            runner.run_captured([MISSING_BINARY])

        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert any(MISSING_BINARY in r.getMessage() for r in caplog.records)

    def test_run_with_returns_output_regardless_of_exit(self, runner, child_scripts):
        command = child_scripts.python("import sys; sys.stdout.write('out'); sys.exit(9)")

        assert runner.run_with(command) == ["out"]

    def test_run_with_launch_failure_returns_message(self, runner):
        messages = runner.run_with([MISSING_BINARY])

        assert len(messages) == 1
        assert MISSING_BINARY in messages[0]


@pytest.mark.unit
class TestModuleHelpers:
    """Test cases for the module-level helpers using the global config."""

    def test_run_captured_uses_global_config(self, config_files, child_scripts):
        from benchhost.config import set_config_path

        set_config_path(config_files["config"])

        result = process_runner.run_captured(child_scripts.python("print('configured')"))

        assert result.captured_text.strip() == "configured"

    def test_missing_binary_raises_from_module_helper(self):
        with pytest.raises(LaunchError):
            process_runner.run_captured([MISSING_BINARY])

    def test_try_with_and_run_with(self, child_scripts):
        assert process_runner.try_with(child_scripts.python("pass")) == []
        assert process_runner.run_with(child_scripts.python("print('x', end='')")) == ["x"]

    def test_default_encoding_falls_back_to_locale(self):
        runner = ProcessRunner(RunnerConfig(encoding=""))

        with patch("benchhost.executor.process_runner.locale.getpreferredencoding", return_value="latin-1"):
            assert runner.encoding == "latin-1"
