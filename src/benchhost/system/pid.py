"""
PID resolution through ordered strategy chains.

No single way of learning a PID works for every interpreter, platform and
process handle type, so each lookup is an ordered list of strategies. The
first strategy that produces a usable PID wins and later ones are never
tried.

Current process, in order:
    1. ``os.getpid``
    2. ``psutil.Process().pid``
    3. the ``/proc/self`` link (Linux procfs)
    4. the runtime identity string ``"<pid>@<hostname>"``

Process handle, in order:
    1. the public ``pid`` attribute
    2. ``_transport.get_pid()`` (asyncio subprocess internals)
    3. ``_Popen__subproc.pid`` (psutil.Popen internals)

Strategies that read private state first check that access is permitted.
An absent capability and a denied access both mean "try the next one";
only a malformed identity string (PidFormatError) ends the chain.
"""

import inspect
import logging
import os
import re
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

import psutil

from ..config import get_config
from ..models.config import PidConfig
from ..models.results import UNRESOLVED_PID
from ..validation import PidFormatError

logger = logging.getLogger(__name__)

# Errors that mean "this strategy does not apply here".
_CAPABILITY_ERRORS = (AttributeError, TypeError, OSError, psutil.Error)

_PID_TEXT = re.compile(r"[0-9]+")

PROCFS_SELF = "/proc/self"


class StrategyKind(Enum):
    """How a strategy obtains its PID."""
    PUBLIC_API = "public_api"
    PRIVATE_FIELD = "private_field"
    IDENTITY_STRING = "identity_string"


@dataclass(frozen=True)
class PidStrategy:
    """
    One link of a resolution chain.

    ``lookup`` receives the holder (None for the current process, the
    process handle otherwise) and returns a PID or None. ``access_check``
    is consulted before ``lookup`` for private strategies; it receives the
    holder and the force flag.
    """

    name: str
    kind: StrategyKind
    lookup: Callable[[Any], Optional[int]]
    access_check: Optional[Callable[[Any, bool], bool]] = None


def runtime_identity() -> str:
    """Identity of the running interpreter in the form '<pid>@<hostname>'."""
    return f"{os.getpid()}@{socket.gethostname()}"


def parse_pid_from_identity(identity: Optional[str]) -> int:
    """
    Extract the PID from a '<pid>@<hostname>' identity string.

    Raises:
        PidFormatError: If there is no '@' or the prefix is not a number
    """
    if identity is None:
        raise PidFormatError("Unsupported PID format: None", identity=identity)

    pid_text, delimiter, _hostname = identity.partition("@")
    if not delimiter:
        raise PidFormatError(f"Unsupported PID format: {identity}", identity=identity)
    if not _PID_TEXT.fullmatch(pid_text):
        raise PidFormatError(f"Process PID is not a number: {pid_text}", identity=identity)
    return int(pid_text)


def _is_usable_pid(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def static_field_check(*field_path: str) -> Callable[[Any, bool], bool]:
    """
    Build an access check for a chain of private attributes.

    Without force, each attribute must be visible to static inspection,
    which never runs properties or ``__getattr__`` hooks. The check never
    raises; any failure means access is not permitted.
    """

    def check(holder: Any, force: bool) -> bool:
        if force:
            return True
        current = holder
        try:
            for name in field_path:
                current = inspect.getattr_static(current, name)
        except Exception as e:
            logger.debug(f"Access to {'.'.join(field_path)} not permitted: {e}")
            return False
        return True

    return check


def _procfs_check(holder: Any, force: bool) -> bool:
    if force:
        return os.path.lexists(PROCFS_SELF)
    try:
        return os.access(PROCFS_SELF, os.R_OK)
    except (OSError, ValueError):
        return False


# --- Current-process lookups ---

def _pid_from_os(_holder: Any) -> Optional[int]:
    getpid = getattr(os, "getpid", None)
    return getpid() if getpid is not None else None


def _pid_from_psutil(_holder: Any) -> Optional[int]:
    return psutil.Process().pid


def _pid_from_procfs(_holder: Any) -> Optional[int]:
    target = os.readlink(PROCFS_SELF)
    return int(target) if _PID_TEXT.fullmatch(target) else None


# --- Process-handle lookups ---

def _pid_attribute(handle: Any) -> Optional[int]:
    return handle.pid


def _pid_from_transport(handle: Any) -> Optional[int]:
    return handle._transport.get_pid()


def _pid_from_psutil_popen(handle: Any) -> Optional[int]:
    return handle._Popen__subproc.pid


def identity_strategy(identity_source: Callable[[], Optional[str]]) -> PidStrategy:
    """Strategy parsing the PID out of an identity string."""
    return PidStrategy(
        name="runtime identity",
        kind=StrategyKind.IDENTITY_STRING,
        lookup=lambda _holder: parse_pid_from_identity(identity_source()),
    )


def default_self_strategies(
    identity_source: Callable[[], Optional[str]] = runtime_identity,
) -> List[PidStrategy]:
    """The documented chain for the current process."""
    return [
        PidStrategy("os.getpid", StrategyKind.PUBLIC_API, _pid_from_os),
        PidStrategy("psutil.Process", StrategyKind.PUBLIC_API, _pid_from_psutil),
        PidStrategy("procfs self link", StrategyKind.PRIVATE_FIELD, _pid_from_procfs, _procfs_check),
        identity_strategy(identity_source),
    ]


def default_handle_strategies() -> List[PidStrategy]:
    """The documented chain for a process handle."""
    return [
        PidStrategy("pid attribute", StrategyKind.PUBLIC_API, _pid_attribute),
        PidStrategy(
            "asyncio transport",
            StrategyKind.PRIVATE_FIELD,
            _pid_from_transport,
            static_field_check("_transport", "get_pid"),
        ),
        PidStrategy(
            "psutil.Popen wrapper",
            StrategyKind.PRIVATE_FIELD,
            _pid_from_psutil_popen,
            static_field_check("_Popen__subproc", "pid"),
        ),
    ]


class PidResolver:
    """
    Resolves PIDs of the current process or of a process handle.

    The ``force_private_access`` setting is read once from the supplied
    configuration; nothing is looked up from the environment at call time.
    """

    def __init__(
        self,
        config: Optional[PidConfig] = None,
        identity_source: Optional[Callable[[], Optional[str]]] = None,
        self_strategies: Optional[Sequence[PidStrategy]] = None,
        handle_strategies: Optional[Sequence[PidStrategy]] = None,
    ):
        self.config = config or get_config().pid
        self.identity_source = identity_source or runtime_identity
        if self_strategies is None:
            self_strategies = default_self_strategies(self.identity_source)
        if handle_strategies is None:
            handle_strategies = default_handle_strategies()
        self.self_strategies = list(self_strategies)
        self.handle_strategies = list(handle_strategies)

    def resolve_self(self) -> int:
        """
        PID of the current process.

        Returns:
            The PID, or UNRESOLVED_PID if no strategy applied

        Raises:
            PidFormatError: If the identity string fallback is malformed
        """
        return self._run_chain(self.self_strategies, None, "current process", strict=True)

    def resolve_of(self, handle: Any) -> int:
        """
        PID of the process behind a handle (e.g. subprocess.Popen).

        Best effort: never raises, returns UNRESOLVED_PID when nothing
        applies.
        """
        return self._run_chain(self.handle_strategies, handle, f"handle {handle!r}", strict=False)

    def _run_chain(
        self,
        strategies: Sequence[PidStrategy],
        holder: Any,
        target: str,
        strict: bool,
    ) -> int:
        for strategy in strategies:
            try:
                pid = self._attempt(strategy, holder)
            except PidFormatError as e:
                if strict:
                    raise
                logger.debug(f"Strategy '{strategy.name}' rejected {target}: {e}")
                continue
            if pid is not None:
                logger.debug(f"Resolved PID {pid} of {target} via '{strategy.name}'")
                return pid

        logger.debug(f"No strategy resolved the PID of {target}")
        return UNRESOLVED_PID

    def _attempt(self, strategy: PidStrategy, holder: Any) -> Optional[int]:
        if strategy.access_check is not None:
            if not strategy.access_check(holder, self.config.force_private_access):
                logger.debug(f"Strategy '{strategy.name}' not permitted, skipping")
                return None

        try:
            value = strategy.lookup(holder)
        except _CAPABILITY_ERRORS as e:
            logger.debug(f"Strategy '{strategy.name}' not applicable: {type(e).__name__}: {e}")
            return None

        return value if _is_usable_pid(value) else None


def resolve_self() -> int:
    """PID of the current process using the configured resolver."""
    return PidResolver().resolve_self()


def resolve_of(handle: Any) -> int:
    """PID behind a process handle using the configured resolver."""
    return PidResolver().resolve_of(handle)
