"""
Configuration validation utilities.

This module turns the raw `[runner]`, `[probe]` and `[pid]` tables into
validated configuration objects.
"""

import logging
from typing import Any, Dict

from ..models.config import AppConfig, PidConfig, ProbeConfig, RunnerConfig
from ..validation import (
    ValidationError,
    validate_encoding_name,
    validate_enum_choice,
    validate_positive_float,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

WORKER_BACKENDS = ["process", "thread"]
DECODE_ERROR_HANDLERS = ["strict", "replace", "ignore", "backslashreplace", "surrogateescape"]


def validate_runner_config(runner_data: Dict[str, Any]) -> RunnerConfig:
    """
    Validate and create a RunnerConfig from raw configuration data.

    Args:
        runner_data: Raw `[runner]` table

    Returns:
        Validated RunnerConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = RunnerConfig()

    encoding = validate_encoding_name(
        runner_data.get("encoding", defaults.encoding),
        field_name="runner.encoding",
    )
    decode_errors = validate_enum_choice(
        runner_data.get("decode_errors", defaults.decode_errors),
        choices=DECODE_ERROR_HANDLERS,
        field_name="runner.decode_errors",
    )
    chunk_size = validate_positive_integer(
        runner_data.get("chunk_size", defaults.chunk_size),
        min_value=1,
        max_value=16 * 1024 * 1024,
        field_name="runner.chunk_size",
    )
    wait_poll_interval = validate_positive_float(
        runner_data.get("wait_poll_interval", defaults.wait_poll_interval),
        min_value=0.001,  # 1ms minimum
        max_value=10.0,
        field_name="runner.wait_poll_interval",
    )

    return RunnerConfig(
        encoding=encoding,
        decode_errors=decode_errors,
        chunk_size=chunk_size,
        wait_poll_interval=wait_poll_interval,
    )


def validate_probe_config(probe_data: Dict[str, Any]) -> ProbeConfig:
    """
    Validate and create a ProbeConfig from raw configuration data.

    Args:
        probe_data: Raw `[probe]` table

    Returns:
        Validated ProbeConfig instance

    Raises:
        ValidationError: If validation fails
    """
    defaults = ProbeConfig()

    warmup_window_ms = validate_positive_integer(
        probe_data.get("warmup_window_ms", defaults.warmup_window_ms),
        min_value=1,
        max_value=60_000,  # 1m maximum
        field_name="probe.warmup_window_ms",
    )
    poll_interval = validate_positive_float(
        probe_data.get("poll_interval", defaults.poll_interval),
        min_value=0.0,
        max_value=1.0,
        field_name="probe.poll_interval",
    )
    grace_period = validate_positive_float(
        probe_data.get("grace_period", defaults.grace_period),
        min_value=0.0,
        max_value=10.0,
        field_name="probe.grace_period",
    )
    worker_backend = validate_enum_choice(
        probe_data.get("worker_backend", defaults.worker_backend),
        choices=WORKER_BACKENDS,
        field_name="probe.worker_backend",
        case_sensitive=False,
    )

    if poll_interval * 1000.0 >= warmup_window_ms:
        raise ValidationError(
            "probe.poll_interval must be shorter than probe.warmup_window_ms",
            field_name="probe.poll_interval",
            value=poll_interval,
        )

    return ProbeConfig(
        warmup_window_ms=warmup_window_ms,
        poll_interval=poll_interval,
        grace_period=grace_period,
        worker_backend=worker_backend,
    )


def validate_pid_config(pid_data: Dict[str, Any]) -> PidConfig:
    """
    Validate and create a PidConfig from raw configuration data.

    Raises:
        ValidationError: If validation fails
    """
    force_private_access = pid_data.get("force_private_access", False)
    if not isinstance(force_private_access, bool):
        raise ValidationError(
            "pid.force_private_access must be a boolean",
            field_name="pid.force_private_access",
            value=force_private_access,
        )
    return PidConfig(force_private_access=force_private_access)


def validate_app_config(config_data: Dict[str, Any]) -> AppConfig:
    """
    Validate every section of a parsed config.toml.

    Unknown top-level sections are ignored with a warning; missing sections
    fall back to their defaults.
    """
    known_sections = {"runner", "probe", "pid"}
    for section in config_data:
        if section not in known_sections:
            logger.warning(f"Ignoring unknown configuration section [{section}]")

    return AppConfig(
        runner=validate_runner_config(config_data.get("runner", {})),
        probe=validate_probe_config(config_data.get("probe", {})),
        pid=validate_pid_config(config_data.get("pid", {})),
    )
