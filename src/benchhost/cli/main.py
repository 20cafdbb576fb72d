"""
Command-line interface for benchhost.

Subcommands:
    run     run a helper tool and print its captured output
    cpus    probe the usable CPU count after a warm-up
    pid     print the PID of this process
    info    print a host summary
"""

import argparse
import dataclasses
import logging
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..executor import ProcessRunner
from ..system import CpuProbe, PidResolver, available_parallelism, host_summary
from ..validation import (
    LaunchError,
    PidFormatError,
    ValidationError,
    WaitInterruptedError,
    handle_cli_error,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(
        prog="benchhost",
        description="Run helper tools, resolve PIDs and probe CPUs on a benchmark host.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a config.toml file (defaults to conf/config.toml).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run", help="Run a command and print its combined output."
    )
    run_parser.add_argument(
        "--check",
        action="store_true",
        help="Print output only if the command fails.",
    )
    run_parser.add_argument(
        "argv",
        nargs=argparse.REMAINDER,
        help="Command to run, e.g. 'benchhost run -- make -v'.",
    )

    cpus_parser = subparsers.add_parser(
        "cpus", help="Report the CPU count after waking parked cores."
    )
    cpus_parser.add_argument(
        "--window-ms",
        type=str,
        help="Warm-up window in milliseconds (overrides config).",
    )
    cpus_parser.add_argument(
        "--backend",
        choices=["process", "thread"],
        help="Worker backend (overrides config).",
    )

    subparsers.add_parser("pid", help="Print the PID of this process.")
    subparsers.add_parser("info", help="Print a host summary.")
    return parser


def _command_run(args: argparse.Namespace) -> int:
    argv = args.argv
    if argv and argv[0] == "--":
        argv = argv[1:]
    if not argv:
        logger.error("No command given to run")
        return 2

    runner = ProcessRunner(get_config().runner)
    try:
        result = runner.run_captured(argv)
    except LaunchError as e:
        print(f"benchhost: {e}", file=sys.stderr)
        return 127

    # --check stays quiet unless the command failed; the exit code is the child's either way.
    if not (args.check and result.succeeded):
        sys.stdout.write(result.captured_text)
    return result.exit_code


def _command_cpus(args: argparse.Namespace) -> int:
    probe_config = get_config().probe
    overrides = {}
    if args.window_ms is not None:
        overrides["warmup_window_ms"] = validate_positive_integer(
            args.window_ms, min_value=1, max_value=60_000, field_name="--window-ms"
        )
    if args.backend is not None:
        overrides["worker_backend"] = args.backend
    if overrides:
        probe_config = dataclasses.replace(probe_config, **overrides)

    baseline = available_parallelism()
    hot = CpuProbe(probe_config).probe()
    print(f"available: {baseline}")
    print(f"after warm-up: {hot}")
    return 0


def _command_pid(args: argparse.Namespace) -> int:
    print(PidResolver(get_config().pid).resolve_self())
    return 0


def _command_info(args: argparse.Namespace) -> int:
    for key, value in host_summary().items():
        print(f"{key}: {value}")
    return 0


_COMMANDS = {
    "run": _command_run,
    "cpus": _command_cpus,
    "pid": _command_pid,
    "info": _command_info,
}


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line entry point.

    Raises:
        SystemExit: Always; carries the exit code of the subcommand.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.config is not None:
        set_config_path(args.config)

    try:
        get_config()
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=2,
            logger=logger,
        )

    try:
        exit_code = _COMMANDS[args.command](args)
    except ValidationError as e:
        handle_cli_error(error=e, context=f"{args.command} arguments", exit_code=2, logger=logger)
    except (WaitInterruptedError, PidFormatError) as e:
        handle_cli_error(error=e, context=args.command, exit_code=1, logger=logger)

    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
