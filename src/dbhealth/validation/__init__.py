"""
Validation and error handling for the dbhealth package.

This module provides input validation and the error taxonomy used to decide
whether a failure ends the process, the current cycle, or a single record.
"""

from .exceptions import (
    DBConnectionError,
    ErrorSeverity,
    MonitorError,
    QueryError,
    ValidationError,
    handle_cli_error,
    handle_config_error,
    handle_error,
    handle_query_error,
)

from .validators import (
    validate_boolean,
    validate_choice_list,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)

__all__ = [
    # Errors
    "DBConnectionError",
    "ErrorSeverity",
    "MonitorError",
    "QueryError",
    "ValidationError",
    "handle_cli_error",
    "handle_config_error",
    "handle_error",
    "handle_query_error",
    # Validators
    "validate_boolean",
    "validate_choice_list",
    "validate_enum_choice",
    "validate_non_empty_string",
    "validate_positive_float",
    "validate_positive_integer",
    "validate_regex_pattern",
]
