"""Pydantic models for template preparer configuration."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from template_preparer.config.defaults import DEFAULT_BITBUCKET_HOST


class SettingsConfig(BaseModel):
    """Global settings for the preparer."""

    working_directory: Optional[str] = Field(
        default=None,
        description="Root for checkout directories (system temp dir when unset)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level for preparer output"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log level names in any case."""
        return v.upper() if isinstance(v, str) else v


class BitbucketIntegrationConfig(BaseModel):
    """Identity material for one Bitbucket host."""

    model_config = ConfigDict(populate_by_name=True)

    host: str = Field(default=DEFAULT_BITBUCKET_HOST, description="Bitbucket host name")
    username: Optional[str] = Field(default=None, description="Bitbucket user name")
    token: Optional[str] = Field(default=None, repr=False, description="Access token")
    app_password: Optional[str] = Field(
        default=None,
        alias="appPassword",
        repr=False,
        description="App password, used together with username",
    )


class IntegrationsConfig(BaseModel):
    """Configured SCM integrations."""

    bitbucket: list[BitbucketIntegrationConfig] = Field(
        default_factory=list, description="Bitbucket integrations, one per host"
    )

    @field_validator("bitbucket")
    @classmethod
    def validate_unique_hosts(
        cls, v: list[BitbucketIntegrationConfig]
    ) -> list[BitbucketIntegrationConfig]:
        """Validate that each host is configured at most once."""
        hosts = [integration.host for integration in v]
        duplicates = sorted({h for h in hosts if hosts.count(h) > 1})
        if duplicates:
            raise ValueError(f"Duplicate Bitbucket integration hosts: {', '.join(duplicates)}")
        return v


class PreparerConfig(BaseModel):
    """Root configuration for the template preparer."""

    version: str = Field(description="Config schema version")
    settings: SettingsConfig = Field(default_factory=SettingsConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version format."""
        if not v.startswith("1."):
            raise ValueError(
                f"Unsupported config version: {v}. Only version 1.x is supported."
            )
        return v


def find_bitbucket_integration(
    config: PreparerConfig, host: str
) -> BitbucketIntegrationConfig:
    """Return the Bitbucket integration for a host.

    Falls back to an anonymous integration when the host is not configured.
    """
    for integration in config.integrations.bitbucket:
        if integration.host.lower() == host.lower():
            return integration
    return BitbucketIntegrationConfig(host=host)
