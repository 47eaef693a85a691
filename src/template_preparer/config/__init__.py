"""Configuration loading and management."""

from template_preparer.config.loader import (
    find_config_files,
    load_config,
    merge_configs,
)
from template_preparer.config.schema import (
    BitbucketIntegrationConfig,
    IntegrationsConfig,
    PreparerConfig,
    SettingsConfig,
    find_bitbucket_integration,
)

__all__ = [
    # Loader functions
    "find_config_files",
    "load_config",
    "merge_configs",
    # Schema classes
    "BitbucketIntegrationConfig",
    "IntegrationsConfig",
    "PreparerConfig",
    "SettingsConfig",
    "find_bitbucket_integration",
]
