"""
Reading of TOML configuration files.

Only parsing happens here; turning the parsed tables into typed settings is
the job of the validators module.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Parse one TOML document into nested dictionaries.

    Args:
        file_path: Location of the document
        description: Names the file in log lines and error messages

    Returns:
        Top-level table of the document

    Raises:
        FileNotFoundError: If nothing exists at ``file_path``
        tomllib.TOMLDecodeError: If the document is not valid TOML
    """
    path = Path(file_path)
    if not path.is_file():
        logger.error(f"Missing {description}: {path}")
        raise FileNotFoundError(f"Missing {description}: {path}")

    logger.debug(f"Reading {description} {path}")
    try:
        with path.open("rb") as stream:
            data = tomllib.load(stream)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"decoding {description} {path}",
            severity=ErrorSeverity.CRITICAL,
            reraise=False,
            logger=logger,
        )
        raise
    return data


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Parse the benchhost settings file (normally conf/config.toml)."""
    return load_toml_file(config_path, "benchhost settings file")
