"""
Configuration system using Pydantic for type-safe settings management.

Settings are loaded once at startup (from YAML or the environment) and the
relevant sections are handed explicitly to the provider adapters and the
verification engine. Nothing inside the engine reads the environment.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from alignment_verifier.exceptions import ConfigurationError

DEFAULT_COMPLETION_KEYWORDS = ["fix", "complete", "done", "finish", "implement", "resolve", "feat:", "add"]


class TrackerConfig(BaseModel):
    """Task tracker (Jira Cloud) connection settings.

    All fields are optional so that the service can start without a tracker;
    missing values are reported as a ConfigurationError when a verification
    is requested.
    """

    base_url: str | None = Field(default=None, description="Jira site URL, e.g. https://acme.atlassian.net")
    email: str | None = Field(default=None, description="Account email used for Basic auth")
    api_token: SecretStr | None = Field(default=None, description="Jira API token")
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.email and self.api_token and self.api_token.get_secret_value())


class CodeHostConfig(BaseModel):
    """Code host (GitHub) connection settings."""

    provider_type: Literal["github"] = Field(default="github", description="Type of code host")
    base_url: str = Field(default="https://api.github.com", description="API base URL (GitHub Enterprise aware)")
    owner: str | None = Field(default=None, description="Organization or user owning the repositories")
    api_token: SecretStr | None = Field(default=None, description="Personal access token")

    @property
    def is_configured(self) -> bool:
        return bool(self.owner and self.api_token and self.api_token.get_secret_value())


class DomainHintConfig(BaseModel):
    """Fallback matching rule for task keys that leave no textual trace.

    When ``pattern`` matches a task key, an item matches the task if at
    least ``min_hits`` of ``keywords`` occur in its text.
    """

    pattern: str = Field(..., description="Regular expression matched against the task key")
    keywords: list[str] = Field(..., min_length=1, description="Hint-specific keywords")
    min_hits: int = Field(default=2, ge=1, description="Keywords required for a match")

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid domain hint pattern {value!r}: {e}") from e
        return value

    @field_validator("keywords")
    @classmethod
    def lowercase_keywords(cls, value: list[str]) -> list[str]:
        return [kw.lower() for kw in value]


class VerificationConfig(BaseModel):
    """Bounds and heuristics of the verification engine."""

    default_max_tasks: int = Field(default=100, ge=1, description="Tasks analyzed when the caller sets no limit")
    board_page_size: int = Field(default=50, ge=1, le=100, description="Issues requested per board page")
    commit_limit: int = Field(default=100, ge=1, description="Most recent commits fetched per run")
    pull_request_limit: int = Field(default=50, ge=1, description="Pull requests fetched per run")
    display_limit: int = Field(default=5, ge=1, description="Evidence items kept per kind and task")
    code_search_terms: int = Field(default=2, ge=0, description="Search terms tried per task")
    code_search_results: int = Field(default=3, ge=1, description="Code hits requested per term")
    code_search_concurrency: int = Field(default=2, ge=1, le=10, description="Parallel code searches")
    recent_commit_days: int = Field(default=30, ge=1, description="Window for completion signals")
    completion_keywords: list[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPLETION_KEYWORDS),
        description="Commit message fragments that suggest the work is finished",
    )
    domain_hints: list[DomainHintConfig] = Field(default_factory=list, description="Key-pattern fallback rules")


class AppSettings(BaseSettings):
    """Main application settings.

    Combines all configuration sections and provides a loader for YAML
    files with environment variable interpolation. Values can also come
    straight from the environment, e.g. ``ALIGNMENT_TRACKER__API_TOKEN``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALIGNMENT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    tracker: TrackerConfig = Field(default_factory=TrackerConfig)
    code_host: CodeHostConfig = Field(default_factory=CodeHostConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)

    def require_credentials(self) -> None:
        """Fail fast when either collaborator lacks credentials.

        Raises:
            ConfigurationError: If the tracker or the code host is not configured
        """
        if not self.tracker.is_configured:
            raise ConfigurationError(
                "Jira is not configured (tracker.base_url, tracker.email and tracker.api_token are required)",
                service="tracker",
            )
        if not self.code_host.is_configured:
            raise ConfigurationError(
                "GitHub token not configured (code_host.owner and code_host.api_token are required)",
                service="code_host",
            )

    @classmethod
    def from_yaml(cls, config_path: str) -> AppSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            AppSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines are left untouched.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
