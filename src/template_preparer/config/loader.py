"""Configuration loader with merge logic and precedence handling."""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from template_preparer.config.defaults import DEFAULT_BITBUCKET_HOST, DEFAULT_CONFIG
from template_preparer.config.schema import PreparerConfig
from template_preparer.utils.paths import expand_path

PROJECT_CONFIG_NAME = "template-preparer.yaml"
USER_CONFIG_PATH = "~/.config/template-preparer/config.yaml"


def find_config_files() -> list[Path]:
    """Find configuration files in standard locations.

    Searches for configuration files in order of precedence (lowest to highest):
    1. Project config (./template-preparer.yaml in current directory)
    2. User config (~/.config/template-preparer/config.yaml)

    Returns:
        List of Path objects for existing config files, ordered from lowest
        to highest precedence (so later configs override earlier ones)
    """
    config_files = []

    project_config = Path.cwd() / PROJECT_CONFIG_NAME
    if project_config.exists():
        config_files.append(project_config)

    user_config = expand_path(USER_CONFIG_PATH)
    if user_config.exists():
        config_files.append(user_config)

    return config_files


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """Load and parse a YAML configuration file.

    Raises:
        yaml.YAMLError: If the file contains invalid YAML
        FileNotFoundError: If the file doesn't exist
    """
    with open(file_path, "r") as f:
        content = yaml.safe_load(f)
        return content if content is not None else {}


def merge_configs(configs: list[dict[str, Any]]) -> dict[str, Any]:
    """Deep merge multiple configuration dictionaries.

    Later configs override earlier ones. Nested dictionaries are merged
    recursively; lists (such as the integration list) are replaced whole.

    Args:
        configs: List of configuration dictionaries in order from lowest to
                highest precedence

    Returns:
        Merged configuration dictionary
    """
    result: dict[str, Any] = {}

    for config in configs:
        result = _deep_merge(result, config)

    return result


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides to configuration.

    Supports the following environment variables:
    - TEMPLATE_PREPARER_WORKING_DIR: Override settings.working_directory
    - TEMPLATE_PREPARER_LOG_LEVEL: Override settings.log_level
    - BITBUCKET_USERNAME, BITBUCKET_TOKEN, BITBUCKET_APP_PASSWORD: Override the
      identity fields of the bitbucket.org integration (added if missing)

    Args:
        config: Configuration dictionary to apply overrides to

    Returns:
        Configuration dictionary with environment overrides applied
    """
    result = config.copy()
    result["settings"] = dict(result.get("settings") or {})

    if working_dir := os.getenv("TEMPLATE_PREPARER_WORKING_DIR"):
        result["settings"]["working_directory"] = working_dir

    if log_level := os.getenv("TEMPLATE_PREPARER_LOG_LEVEL"):
        result["settings"]["log_level"] = log_level

    identity = {
        "username": os.getenv("BITBUCKET_USERNAME"),
        "token": os.getenv("BITBUCKET_TOKEN"),
        "appPassword": os.getenv("BITBUCKET_APP_PASSWORD"),
    }
    identity = {k: v for k, v in identity.items() if v}
    if not identity:
        return result

    integrations = dict(result.get("integrations") or {})
    bitbucket = [dict(entry) for entry in integrations.get("bitbucket") or []]

    entry = next(
        (e for e in bitbucket if e.get("host", DEFAULT_BITBUCKET_HOST) == DEFAULT_BITBUCKET_HOST),
        None,
    )
    if entry is None:
        entry = {"host": DEFAULT_BITBUCKET_HOST}
        bitbucket.append(entry)

    if "appPassword" in identity and "app_password" in entry:
        entry["app_password"] = identity.pop("appPassword")
    entry.update(identity)

    integrations["bitbucket"] = bitbucket
    result["integrations"] = integrations
    return result


def load_config(config_path: Optional[Path] = None) -> PreparerConfig:
    """Load and merge configuration from all sources.

    Configuration precedence (lowest to highest):
    1. Built-in defaults
    2. Project config (./template-preparer.yaml)
    3. User config (~/.config/template-preparer/config.yaml)
    4. Environment variables
    5. Explicitly provided config_path (if given)
    6. CLI flags (handled by caller)

    Raises:
        ValidationError: If the merged configuration is invalid
        yaml.YAMLError: If a config file contains invalid YAML
        FileNotFoundError: If config_path is provided but doesn't exist
    """
    configs_to_merge = [DEFAULT_CONFIG]

    for config_file in find_config_files():
        try:
            configs_to_merge.append(load_yaml_file(config_file))
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error loading {config_file}: {e}") from e

    merged_config = apply_env_overrides(merge_configs(configs_to_merge))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        merged_config = merge_configs([merged_config, load_yaml_file(config_path)])

    return PreparerConfig(**merged_config)
