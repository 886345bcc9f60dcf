"""Factory for creating tracker and code host instances from configuration."""

import structlog

from alignment_verifier.config.settings import AppSettings
from alignment_verifier.exceptions import ConfigurationError
from alignment_verifier.providers.base import CodeHost, TaskTracker
from alignment_verifier.providers.github_rest import GitHubRestCodeHost
from alignment_verifier.providers.jira_rest import JiraRestTracker

log = structlog.get_logger(__name__)


def create_task_tracker(settings: AppSettings) -> TaskTracker:
    """Create the task tracker adapter.

    Raises:
        ConfigurationError: If tracker credentials are missing
    """
    tracker = settings.tracker
    if not tracker.is_configured:
        raise ConfigurationError(
            "Jira is not configured (tracker.base_url, tracker.email and tracker.api_token are required)",
            service="tracker",
        )

    log.info("creating_jira_tracker", base_url=tracker.base_url)
    return JiraRestTracker(
        base_url=tracker.base_url,
        email=tracker.email,
        token=tracker.api_token.get_secret_value(),
        timeout=tracker.timeout,
    )


def create_code_host(settings: AppSettings) -> CodeHost:
    """Create the code host adapter.

    Raises:
        ConfigurationError: If code host credentials are missing or the
            provider type is not supported
    """
    code_host = settings.code_host
    if not code_host.is_configured:
        raise ConfigurationError(
            "GitHub token not configured (code_host.owner and code_host.api_token are required)",
            service="code_host",
        )

    if code_host.provider_type == "github":
        log.info("creating_github_code_host", base_url=code_host.base_url, owner=code_host.owner)
        return GitHubRestCodeHost(
            token=code_host.api_token.get_secret_value(),
            owner=code_host.owner,
            base_url=code_host.base_url,
        )

    raise ConfigurationError(
        f"Unsupported code host type: {code_host.provider_type}. Supported types: github",
        service="code_host",
    )
