"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of TOML configuration
files (the main config.toml and the optional rules.toml) and the MYSQL_*
environment variables that carry database credentials.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..validation import handle_config_error, ErrorSeverity

logger = logging.getLogger(__name__)

# Environment variable -> [database] key
DATABASE_ENVIRONMENT = {
    "MYSQL_HOST": "host",
    "MYSQL_USERNAME": "user",
    "MYSQL_PASSWORD": "password",
    "MYSQL_DATABASE": "database",
}


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Load the main configuration file (config.toml)."""
    return load_toml_file(config_path, "main configuration file")


def load_rules_config(rules_path: Path) -> List[Dict[str, Any]]:
    """
    Load the diagnostic statement rules file (rules.toml).

    Args:
        rules_path: Path to the rules.toml file

    Returns:
        List of rule dictionaries
    """
    rules_data = load_toml_file(rules_path, "rules configuration file")
    return rules_data.get("rules", [])


def get_rules_path(main_config_data: Dict[str, Any], config_dir: Path) -> Optional[Path]:
    """
    Resolve the rules file named in the [paths] table, relative to config.toml.

    Returns None when no rules file is configured, in which case the
    built-in rules apply.
    """
    rules_file = main_config_data.get("paths", {}).get("rules_config")
    if not rules_file:
        return None
    return config_dir / rules_file


def load_database_environment(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """
    Collect database settings from the MYSQL_* environment variables.

    Only variables that are set and non-empty are returned, so they override
    the [database] table key by key.
    """
    environ = os.environ if environ is None else environ
    overrides = {}
    for variable, key in DATABASE_ENVIRONMENT.items():
        value = environ.get(variable)
        if value:
            overrides[key] = value
    if overrides:
        logger.debug(f"Database settings taken from environment: {sorted(overrides)}")
    return overrides
