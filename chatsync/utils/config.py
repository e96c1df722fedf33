"""
Configuration utilities for the chatsync framework.

This module provides functions for loading and accessing configuration from YAML files.
"""

import os
import re
import yaml
from typing import Dict, Any, List, Optional

from chatsync.core.exceptions import ConfigurationError


DEFAULT_CONFIG_PATH = "config.yaml"
CONFIG_PATH_ENV_VAR = "CHATSYNC_CONFIG_PATH"


def _process_env_vars(value: Any) -> Any:
    """
    Process a configuration value to replace environment variable references.

    Replaces any string containing $ENV_VAR or ${ENV_VAR} with the corresponding
    environment variable value.

    Args:
        value: The configuration value to process

    Returns:
        The processed value with environment variables substituted
    """
    if isinstance(value, str):
        # Pattern to match ${VAR} and $VAR formats
        pattern = r"\${([a-zA-Z0-9_]+)}|\$([a-zA-Z0-9_]+)"

        def replace_env_var(match):
            env_var = match.group(1) or match.group(2)
            env_value = os.environ.get(env_var)
            if env_value is None:
                return match.group(0)  # Keep original if not found
            return env_value

        return re.sub(pattern, replace_env_var, value)
    elif isinstance(value, dict):
        return {k: _process_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_process_env_vars(item) for item in value]
    else:
        return value


def resolve_config_path(config_path: Optional[str] = None) -> str:
    """Return the explicit path, else $CHATSYNC_CONFIG_PATH, else config.yaml."""
    if config_path is not None:
        return config_path
    return os.environ.get(CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. If None, uses the environment
                    variable CHATSYNC_CONFIG_PATH or defaults to 'config.yaml'

    Returns:
        Dict[str, Any]: The loaded configuration with environment variables processed

    Raises:
        ConfigurationError: If the configuration file cannot be loaded
    """
    config_path = resolve_config_path(config_path)

    try:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ValueError(f"Invalid configuration format: expected dictionary, got {type(config)}")

        return _process_env_vars(config)

    except FileNotFoundError as e:
        raise ConfigurationError(f"Configuration file error: {str(e)}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"YAML parsing error: {str(e)}")
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {str(e)}")


def get_section(config: Dict[str, Any], component_name: str) -> Dict[str, Any]:
    """
    Walk a dotted path (e.g. 'messaging.transport') into an already loaded config.

    Missing sections yield an empty dictionary.

    Raises:
        ConfigurationError: If the section exists but is not a mapping
    """
    section: Any = config
    for part in component_name.split("."):
        if not isinstance(section, dict):
            section = {}
            break
        section = section.get(part) or {}

    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Invalid configuration for component '{component_name}': "
            f"expected dictionary, got {type(section)}"
        )
    return section


def get_component_config(component_name: str, config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration for a specific component.

    Args:
        component_name: Dotted name of the component (e.g., 'messaging.transport')
        config_path: Optional path to the configuration file

    Returns:
        Dict[str, Any]: The component's configuration section

    Raises:
        ConfigurationError: If the configuration cannot be loaded or the component
                           section is malformed
    """
    return get_section(load_config(config_path), component_name)


def require_keys(section: Dict[str, Any], keys: List[str], component_name: str) -> None:
    """
    Raise ConfigurationError naming every key of `keys` missing (or empty) in `section`.
    """
    missing = [key for key in keys if section.get(key) in (None, "")]
    if missing:
        raise ConfigurationError(
            f"Missing required parameters for '{component_name}': {', '.join(missing)}"
        )
