"""
Configuration management and singleton pattern.

This module provides the main configuration loading interface, loading
config.toml only once per process, plus the helper that layers command-line
overrides on top of the loaded file.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..classification.rules import DEFAULT_RULES
from ..models.config import AppConfig
from ..validation import (
    ErrorSeverity,
    ValidationError,
    handle_config_error,
    validate_choice_list,
    validate_positive_float,
    validate_positive_integer,
)
from .loader import (
    get_rules_path,
    load_database_environment,
    load_main_config,
    load_rules_config,
)
from .validators import (
    validate_database_config,
    validate_log_level,
    validate_pollers_config,
    validate_rules_config,
    validate_run_config,
)

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[AppConfig] = None

# Default location of config.toml: <repo>/conf/config.toml. Overridden by the
# CLI --config flag or by tests through set_config_path().
_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "config.toml"

# run-config fields the command line may override, with their lower bounds
_INTEGER_OVERRIDES = {
    "slow_threshold": 0,
    "rows_threshold": 0,
    "lock_threshold": 0,
    "transaction_limit": 1,
    "lock_min_time": 0,
    "lock_min_waiting": 1,
}
_BOOLEAN_OVERRIDES = ("kill", "batch", "verbose")


def set_config_path(config_path: Path) -> None:
    """
    Set a custom configuration file path.

    Must be called before the first call to get_config() to have any effect;
    it also clears a previously cached configuration.
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = config_path
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def clear_config_cache() -> None:
    """Clear the cached configuration, forcing a reload on next access."""
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def load_config(config_path: Path, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Load and validate the complete application configuration.

    Args:
        config_path: Path to the main config.toml file
        environ: Environment to read MYSQL_* overrides from (defaults to os.environ)

    Returns:
        Fully validated AppConfig instance

    Raises:
        FileNotFoundError: If configuration files are missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If TOML files are malformed
    """
    try:
        main_config_data = load_main_config(config_path)
        monitor_data = main_config_data.get("monitor", {})

        run_config = validate_run_config(monitor_data)
        pollers = validate_pollers_config(main_config_data.get("pollers", {}))

        database_data = dict(main_config_data.get("database", {}))
        database_data.update(load_database_environment(environ))
        database_config = validate_database_config(database_data)

        rules_path = get_rules_path(main_config_data, config_path.parent)
        if rules_path is not None:
            rules = validate_rules_config(load_rules_config(rules_path))
        else:
            rules = list(DEFAULT_RULES)

        app_config = AppConfig(
            run=run_config,
            database=database_config,
            pollers=pollers,
            rules=rules,
            log_level=validate_log_level(monitor_data.get("log_level", "INFO")),
            classifier_cache_size=validate_positive_integer(
                monitor_data.get("classifier_cache_size", 4096),
                min_value=16,
                max_value=1048576,
                field_name="monitor.classifier_cache_size",
            ),
            shutdown_timeout=validate_positive_float(
                monitor_data.get("shutdown_timeout", 30.0),
                min_value=0.1,
                max_value=600.0,
                field_name="monitor.shutdown_timeout",
            ),
        )

        logger.info(
            f"Loaded configuration for {database_config.user}@{database_config.host}:{database_config.port} "
            f"with pollers {[p.name for p in app_config.enabled_pollers()]} and {len(rules)} rules"
        )
        return app_config

    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> AppConfig:
    """
    Get the global application configuration, loading it if necessary.

    Returns:
        The singleton AppConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    """Check if configuration has been loaded and cached."""
    return _CONFIG is not None


def get_config_info() -> dict:
    """Get information about the current configuration state."""
    return {
        "config_loaded": is_config_loaded(),
        "config_path": str(_CONFIG_FILE_PATH),
        "pollers": [p.name for p in _CONFIG.enabled_pollers()] if _CONFIG else [],
        "rules_count": len(_CONFIG.rules) if _CONFIG else 0,
    }


def apply_overrides(
    app_config: AppConfig,
    run_overrides: Optional[Dict[str, Any]] = None,
    pollers: Optional[List[str]] = None,
    log_level: Optional[str] = None,
) -> AppConfig:
    """
    Return a copy of ``app_config`` with command-line overrides applied.

    Args:
        app_config: Configuration loaded from file
        run_overrides: RunConfig field -> value; None values are ignored
        pollers: If given, exactly these pollers are enabled
        log_level: Replacement log level

    Raises:
        ValidationError: If an override is invalid
    """
    changes: Dict[str, Any] = {}
    for name, value in (run_overrides or {}).items():
        if value is None:
            continue
        if name in _INTEGER_OVERRIDES:
            changes[name] = validate_positive_integer(
                value, min_value=_INTEGER_OVERRIDES[name], field_name=f"--{name}"
            )
        elif name in _BOOLEAN_OVERRIDES:
            changes[name] = bool(value)
        else:
            raise ValidationError(f"Unknown run setting '{name}'", field_name=name, value=value)

    run_config = dataclasses.replace(app_config.run, **changes)

    poller_settings = app_config.pollers
    if pollers is not None:
        selected = validate_choice_list(pollers, list(app_config.pollers), field_name="--pollers")
        poller_settings = {
            name: dataclasses.replace(settings, enabled=name in selected)
            for name, settings in app_config.pollers.items()
        }

    return dataclasses.replace(
        app_config,
        run=run_config,
        pollers=poller_settings,
        log_level=validate_log_level(log_level) if log_level else app_config.log_level,
    )
