"""
Process-wide access to the benchhost settings.

The settings file is parsed and validated the first time someone asks for
it; later calls get the same AppConfig object until the cache is cleared or
another file is selected.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.config import AppConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_main_config
from .validators import validate_app_config

logger = logging.getLogger(__name__)

# Repository root / conf / config.toml
_DEFAULT_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"

_CONFIG_FILE_PATH: Path = _DEFAULT_CONFIG_FILE_PATH
_CONFIG: Optional[AppConfig] = None


def set_config_path(config_path: Path) -> None:
    """
    Select the settings file used by later get_config() calls.

    Args:
        config_path: Location of a config.toml

    Any settings already cached are dropped.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.debug(f"Settings file is now {_CONFIG_FILE_PATH}")


def clear_config_cache() -> None:
    """Forget the cached settings; the next get_config() reads the file again."""
    global _CONFIG
    _CONFIG = None


def _load_config(config_path: Path) -> AppConfig:
    """
    Read and validate one settings file.

    The repository default may be absent (an installed package ships no
    conf/ directory); built-in defaults apply then. A file chosen through
    set_config_path() has to exist.

    Raises:
        FileNotFoundError: If a selected file does not exist
        ValidationError: If a value is out of range or of the wrong type
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    if config_path == _DEFAULT_CONFIG_FILE_PATH and not config_path.exists():
        logger.debug(f"{config_path} not present, running with built-in settings")
        return AppConfig()

    try:
        app_config = validate_app_config(load_main_config(config_path))
    except Exception as e:
        handle_config_error(
            error=e,
            context=f"loading settings from {config_path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=False,
            logger=logger,
        )
        raise
    logger.info(f"Settings loaded from {config_path}")
    return app_config


def get_config() -> AppConfig:
    """
    Return the process-wide settings, reading them on first use.

    Raises:
        FileNotFoundError, ValidationError, tomllib.TOMLDecodeError:
            See _load_config()
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def get_config_info() -> Dict[str, Any]:
    """Describe which settings file is selected and whether it was read."""
    return {
        "config_loaded": _CONFIG is not None,
        "config_path": str(_CONFIG_FILE_PATH),
        "config_file_exists": _CONFIG_FILE_PATH.exists(),
        "worker_backend": _CONFIG.probe.worker_backend if _CONFIG is not None else None,
    }
