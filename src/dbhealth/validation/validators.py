"""
Field validators for config.toml, rules.toml and the command-line overrides.

Each validator returns the converted value or raises ValidationError naming
the offending field, e.g. ``monitor.thresholds.slow_threshold`` or ``--slowis``.
"""

import re
from typing import Any, List, Optional, Union

from .exceptions import ValidationError


def _reject(field_name: str, value: Any, problem: str) -> ValidationError:
    return ValidationError(f"{field_name} {problem}", field_name=field_name, value=value)


def _check_bounds(number, value: Any, min_value, max_value, field_name: str):
    if number < min_value:
        raise _reject(field_name, value, f"must be >= {min_value}, got {number}")
    if max_value is not None and number > max_value:
        raise _reject(field_name, value, f"must be <= {max_value}, got {number}")
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate a bounded integer such as a threshold, port or pool size.

    Thresholds accept 0 (``min_value=0``); booleans are rejected even though
    Python treats them as integers, so ``slow_threshold = true`` is an error.

    Raises:
        ValidationError: If the value is not an integer or is out of bounds
    """
    if isinstance(value, bool):
        raise _reject(field_name, value, f"must be a valid integer, got {value}")
    try:
        number = int(value)
    except (ValueError, TypeError):
        raise _reject(field_name, value, f"must be a valid integer, got {value}")
    return _check_bounds(number, value, min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """Validate a bounded number of seconds: poller intervals and the shutdown timeout."""
    try:
        number = float(value)
    except (ValueError, TypeError):
        raise _reject(field_name, value, f"must be a valid number, got {value}")
    return _check_bounds(number, value, min_value, max_value, field_name)


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    if not isinstance(value, bool):
        raise _reject(field_name, value, f"must be a boolean, got {value!r}")
    return value


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    if not isinstance(value, str) or not value.strip():
        raise _reject(field_name, value, "must be a non-empty string")
    return value


def validate_regex_pattern(pattern: str, field_name: str = "regex_pattern") -> str:
    """Check that a regex rule's pattern compiles."""
    if not pattern or not isinstance(pattern, str):
        raise _reject(field_name, pattern, "must be a non-empty string")
    try:
        re.compile(pattern)
    except re.error as e:
        raise _reject(field_name, pattern, f"is not a valid regex pattern: {e}")
    return pattern


def validate_enum_choice(
    value: Any,
    valid_choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate a value against a fixed set, such as a rule's match_type or the
    log level.

    Returns:
        The choice spelled as in ``valid_choices``, so "debug" becomes "DEBUG"
        when matching case-insensitively
    """
    text = str(value)
    choices = valid_choices if case_sensitive else [c.lower() for c in valid_choices]
    key = text if case_sensitive else text.lower()
    if key not in choices:
        raise _reject(field_name, value, f"must be one of {valid_choices}, got {value}")
    return valid_choices[choices.index(key)]


def validate_choice_list(
    values: Union[str, List[str]],
    valid_choices: List[str],
    field_name: str = "values"
) -> List[str]:
    """
    Validate a poller selection, e.g. ``--pollers processlist,locks``.

    Accepts a comma-separated string or a list. Names are matched
    case-insensitively and repeats are dropped, keeping first-seen order.

    Raises:
        ValidationError: If the selection is empty or names an unknown poller
    """
    if isinstance(values, str):
        values = [v.strip() for v in values.split(",") if v.strip()]
    if not isinstance(values, list) or not values:
        raise _reject(field_name, values, f"must be a non-empty list of {valid_choices}")

    selected: List[str] = []
    for i, value in enumerate(values):
        choice = validate_enum_choice(
            value, valid_choices, field_name=f"{field_name} item {i}", case_sensitive=False
        )
        if choice not in selected:
            selected.append(choice)
    return selected
