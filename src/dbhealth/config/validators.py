"""
Configuration validation utilities.

This module provides specialized validation functions for the different
parts of the configuration: thresholds and mode, pollers, the database
connection, and the diagnostic statement rules.
"""

import logging
from typing import Any, Dict, List

from ..models.config import (
    POLLER_LOCKS,
    POLLER_NAMES,
    POLLER_PROCESSLIST,
    POLLER_TRANSACTIONS,
    DatabaseConfig,
    DiagnosticRule,
    PollerSettings,
    RunConfig,
)
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
    validate_regex_pattern,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
RULE_MATCH_TYPES = ["prefix", "contains", "regex", "in_list"]

DEFAULT_POLLER_INTERVALS = {
    POLLER_PROCESSLIST: 1.0,
    POLLER_TRANSACTIONS: 1.0,
    POLLER_LOCKS: 10.0,
}
DEFAULT_ENABLED_POLLERS = {
    POLLER_PROCESSLIST: True,
    POLLER_TRANSACTIONS: True,
    POLLER_LOCKS: False,
}


def validate_run_config(monitor_data: Dict[str, Any]) -> RunConfig:
    """
    Validate and create a RunConfig from the [monitor] table.

    Args:
        monitor_data: Raw monitor configuration from TOML

    Returns:
        Validated RunConfig instance

    Raises:
        ValidationError: If validation fails
    """
    thresholds = monitor_data.get("thresholds", {})
    mode = monitor_data.get("mode", {})
    locks = monitor_data.get("locks", {})

    slow_threshold = validate_positive_integer(
        thresholds.get("slow_threshold", 10),
        min_value=0,
        max_value=86400,
        field_name="monitor.thresholds.slow_threshold",
    )
    rows_threshold = validate_positive_integer(
        thresholds.get("rows_threshold", 0),
        min_value=0,
        field_name="monitor.thresholds.rows_threshold",
    )
    transaction_limit = validate_positive_integer(
        thresholds.get("transaction_limit", 100),
        min_value=1,
        max_value=10000,
        field_name="monitor.thresholds.transaction_limit",
    )

    kill = validate_boolean(mode.get("kill", False), "monitor.mode.kill")
    batch = validate_boolean(mode.get("batch", False), "monitor.mode.batch")
    verbose = validate_boolean(mode.get("verbose", False), "monitor.mode.verbose")

    lock_threshold = validate_positive_integer(
        locks.get("lock_threshold", 7),
        min_value=0,
        field_name="monitor.locks.lock_threshold",
    )
    lock_min_time = validate_positive_integer(
        locks.get("min_time", 3),
        min_value=0,
        field_name="monitor.locks.min_time",
    )
    lock_min_waiting = validate_positive_integer(
        locks.get("min_waiting", 2),
        min_value=1,
        field_name="monitor.locks.min_waiting",
    )

    if kill:
        logger.warning(
            f"KILL is enabled: sessions running longer than {slow_threshold}s will be terminated"
        )

    return RunConfig(
        slow_threshold=slow_threshold,
        rows_threshold=rows_threshold,
        kill=kill,
        batch=batch,
        verbose=verbose,
        lock_threshold=lock_threshold,
        transaction_limit=transaction_limit,
        lock_min_time=lock_min_time,
        lock_min_waiting=lock_min_waiting,
    )


def validate_pollers_config(pollers_data: Dict[str, Any]) -> Dict[str, PollerSettings]:
    """
    Validate the [pollers.<name>] tables.

    Every known poller gets an entry; missing tables fall back to defaults.

    Raises:
        ValidationError: On unknown poller names or invalid values
    """
    unknown = sorted(set(pollers_data) - set(POLLER_NAMES))
    if unknown:
        raise ValidationError(
            f"Unknown poller(s) {unknown}; expected any of {POLLER_NAMES}",
            field_name="pollers",
            value=unknown,
        )

    pollers: Dict[str, PollerSettings] = {}
    for name in POLLER_NAMES:
        settings = pollers_data.get(name, {})
        enabled = validate_boolean(
            settings.get("enabled", DEFAULT_ENABLED_POLLERS[name]),
            f"pollers.{name}.enabled",
        )
        interval = validate_positive_float(
            settings.get("interval_seconds", DEFAULT_POLLER_INTERVALS[name]),
            min_value=0.01,
            max_value=3600.0,
            field_name=f"pollers.{name}.interval_seconds",
        )
        pollers[name] = PollerSettings(name=name, enabled=enabled, interval_seconds=interval)

    if not any(p.enabled for p in pollers.values()):
        raise ValidationError("At least one poller must be enabled", field_name="pollers")

    return pollers


def validate_database_config(database_data: Dict[str, Any]) -> DatabaseConfig:
    """
    Validate and create a DatabaseConfig from the merged [database] table
    and environment overrides.

    Raises:
        ValidationError: If a required field is missing or invalid
    """
    host = validate_non_empty_string(database_data.get("host", ""), "database.host")
    user = validate_non_empty_string(database_data.get("user", ""), "database.user")

    password = database_data.get("password", "")
    if not isinstance(password, str):
        raise ValidationError("database.password must be a string", field_name="database.password")

    database = database_data.get("database", "")
    if not isinstance(database, str):
        raise ValidationError("database.database must be a string", field_name="database.database")

    port = validate_positive_integer(
        database_data.get("port", 3306),
        min_value=1,
        max_value=65535,
        field_name="database.port",
    )
    pool_size = validate_positive_integer(
        database_data.get("pool_size", 5),
        min_value=1,
        max_value=32,
        field_name="database.pool_size",
    )
    connection_timeout = validate_positive_integer(
        database_data.get("connection_timeout", 10),
        min_value=1,
        max_value=600,
        field_name="database.connection_timeout",
    )

    return DatabaseConfig(
        host=host,
        user=user,
        password=password,
        database=database,
        port=port,
        pool_size=pool_size,
        connection_timeout=connection_timeout,
    )


def validate_rules_config(rules_data: List[Dict[str, Any]]) -> List[DiagnosticRule]:
    """
    Validate diagnostic statement rules and sort them by priority, highest first.

    Raises:
        ValidationError: If any rule is malformed
    """
    rules: List[DiagnosticRule] = []
    for i, rule_data in enumerate(rules_data):
        prefix = f"rules[{i}]"
        priority = validate_positive_integer(
            rule_data.get("priority", 0), min_value=0, field_name=f"{prefix}.priority"
        )
        category = validate_non_empty_string(rule_data.get("category", ""), f"{prefix}.category")
        match_type = validate_enum_choice(
            rule_data.get("match_type", ""),
            valid_choices=RULE_MATCH_TYPES,
            field_name=f"{prefix}.match_type",
        )
        patterns = rule_data.get("patterns", rule_data.get("pattern", ""))

        if match_type == "in_list":
            if isinstance(patterns, str):
                patterns = [patterns]
            if not isinstance(patterns, list) or not patterns:
                raise ValidationError(
                    f"{prefix}.patterns must be a non-empty list for in_list rules",
                    field_name=f"{prefix}.patterns",
                    value=patterns,
                )
        else:
            if not isinstance(patterns, str) or not patterns:
                raise ValidationError(
                    f"{prefix}.patterns must be a non-empty string for {match_type} rules",
                    field_name=f"{prefix}.patterns",
                    value=patterns,
                )
            if match_type == "regex":
                validate_regex_pattern(patterns, field_name=f"{prefix}.patterns")

        rules.append(
            DiagnosticRule(
                priority=priority,
                category=category,
                match_type=match_type,
                patterns=patterns,
                comment=rule_data.get("comment", ""),
            )
        )

    rules.sort(key=lambda r: r.priority, reverse=True)
    return rules


def validate_log_level(level: Any) -> str:
    return validate_enum_choice(level, LOG_LEVELS, field_name="monitor.log_level", case_sensitive=False)
