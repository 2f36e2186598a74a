"""
Configuration management for the dbhealth package.

This module provides a clean interface for loading, validating, and accessing
configuration data from TOML files and the environment.
"""

# Main configuration interface
from .manager import (
    apply_overrides,
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    load_config,
    set_config_path,
)

# For advanced usage - direct access to loaders and validators
from .loader import (
    load_database_environment,
    load_main_config,
    load_rules_config,
    load_toml_file,
)
from .validators import (
    validate_database_config,
    validate_pollers_config,
    validate_rules_config,
    validate_run_config,
)

__all__ = [
    # Main interface
    "apply_overrides",
    "clear_config_cache",
    "get_config",
    "get_config_info",
    "is_config_loaded",
    "load_config",
    "set_config_path",
    # Advanced interface
    "load_database_environment",
    "load_main_config",
    "load_rules_config",
    "load_toml_file",
    "validate_database_config",
    "validate_pollers_config",
    "validate_rules_config",
    "validate_run_config",
]
