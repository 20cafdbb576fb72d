"""
Validation functions for configuration values and commands.

Every validator returns the cleaned value or raises ValidationError naming
the field that was rejected.
"""

import codecs
import os
from typing import Any, List, Optional, Sequence, Tuple, TypeVar, Union

from .exceptions import ValidationError

_Number = TypeVar("_Number", int, float)


def _reject(field_name: str, value: Any, problem: str) -> ValidationError:
    return ValidationError(f"{field_name} {problem}, got {value!r}", field_name=field_name, value=value)


def _check_range(
    number: _Number,
    original: Any,
    min_value: Union[int, float],
    max_value: Optional[Union[int, float]],
    field_name: str,
) -> _Number:
    if number < min_value:
        raise _reject(field_name, original, f"must be >= {min_value}")
    if max_value is not None and number > max_value:
        raise _reject(field_name, original, f"must be <= {max_value}")
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Coerce ``value`` to an int within ``[min_value, max_value]``.

    Booleans are refused even though Python treats them as integers.

    Raises:
        ValidationError: If the value is not an integer or out of range
    """
    if isinstance(value, bool):
        raise _reject(field_name, value, "must be an integer")
    try:
        number = int(value)
    except (ValueError, TypeError):
        raise _reject(field_name, value, "must be an integer")
    return _check_range(number, value, min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Coerce ``value`` to a float within ``[min_value, max_value]``.

    Raises:
        ValidationError: If the value is not a number or out of range
    """
    try:
        number = float(value)
    except (ValueError, TypeError):
        raise _reject(field_name, value, "must be a number")
    return _check_range(number, value, min_value, max_value, field_name)


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Check that ``value`` names one of ``choices``.

    Returns:
        The matching entry of ``choices``, so a case-insensitive match
        comes back in its canonical spelling

    Raises:
        ValidationError: If nothing in ``choices`` matches
    """
    text = str(value)
    for choice in choices:
        if text == choice or (not case_sensitive and text.lower() == choice.lower()):
            return choice
    raise _reject(field_name, value, f"must be one of {choices}")


def validate_encoding_name(name: Any, field_name: str = "encoding") -> str:
    """
    Validate a codec name. An empty string means "platform default".

    Raises:
        ValidationError: If the codec is unknown
    """
    if name is None:
        return ""
    if not isinstance(name, str):
        raise ValidationError(
            f"{field_name} must be a string, got {name!r}",
            field_name=field_name,
            value=name
        )
    if not name:
        return ""
    try:
        return codecs.lookup(name).name
    except LookupError:
        raise ValidationError(
            f"{field_name} is not a known encoding: {name}",
            field_name=field_name,
            value=name
        )


def validate_command(command: Any, field_name: str = "command") -> Tuple[str, ...]:
    """
    Validate and freeze a command argument vector.

    A command is a non-empty sequence whose elements are strings or
    path-like objects. A bare string is rejected because it would be
    ambiguous between "program name" and "shell line".

    Args:
        command: Program path followed by its arguments
        field_name: Name of the field being validated

    Returns:
        The command as an immutable tuple of strings

    Raises:
        ValidationError: If the command is empty or malformed
    """
    if isinstance(command, (str, bytes)) or not isinstance(command, Sequence):
        raise ValidationError(
            f"{field_name} must be a sequence of arguments, got {command!r}",
            field_name=field_name,
            value=command
        )
    if not command:
        raise ValidationError(
            f"{field_name} must not be empty",
            field_name=field_name,
            value=command
        )

    frozen = []
    for i, arg in enumerate(command):
        if isinstance(arg, os.PathLike):
            arg = os.fspath(arg)
        if not isinstance(arg, str):
            raise ValidationError(
                f"{field_name} item {i} must be a string, got {arg!r}",
                field_name=field_name,
                value=command
            )
        frozen.append(arg)

    if not frozen[0]:
        raise ValidationError(
            f"{field_name} program path must not be empty",
            field_name=field_name,
            value=command
        )
    return tuple(frozen)
