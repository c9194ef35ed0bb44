"""Reconciles configuration between CLI arguments and environment variables."""

import structlog

from gitlab_ops_manager.configuration.env import Settings
from gitlab_ops_manager.configuration.exceptions import RequiredConfigurationElementError
from gitlab_ops_manager.configuration.models import GitLabClientConfig

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def reconcile_gitlab_client_configuration(
    cli_gitlab_api_url: str | None = None,
    cli_gitlab_api_token: str | None = None,
    settings: Settings | None = None,
) -> GitLabClientConfig:
    """Reconciles the GitLab client configuration.

    Values given on the command line take precedence over values read from the
    environment (or a .env file).

    Args:
        cli_gitlab_api_url (str | None): The GitLab API URL given on the command line.
        cli_gitlab_api_token (str | None): The GitLab API token given on the command line.
        settings (Settings | None): Environment settings. Read from the environment when omitted.

    Raises:
        RequiredConfigurationElementError: If no API token is available from any source.

    Returns:
        GitLabClientConfig: The configuration to construct the GitLab adapter with.
    """
    if settings is None:
        settings = Settings()

    base_url = cli_gitlab_api_url or settings.GITLAB_API_URL
    token = cli_gitlab_api_token or settings.gitlab_api_token
    if not token:
        raise RequiredConfigurationElementError(
            name="GitLab API token",
            cli_name="gitlab_api_token",
            env_name="GITLAB_API_TOKEN",
        )

    logger.debug("Reconciled GitLab client configuration", gitlab_api_url=base_url)
    return GitLabClientConfig(base_url=base_url.rstrip("/"), credential=token)
