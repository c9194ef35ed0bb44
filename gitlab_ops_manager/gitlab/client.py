"""Sets up the authenticated httpx client used to talk to the GitLab API."""

import httpx

from gitlab_ops_manager.configuration.models import GitLabClientConfig


def get_gitlab_client(config: GitLabClientConfig, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Returns an httpx client authenticated against the configured GitLab instance.

    A custom transport may be supplied to route requests somewhere other than
    the network.
    """
    if not config.credential:
        raise RuntimeError("GitLab authentication requires an API token in config.")
    return httpx.AsyncClient(
        base_url=config.base_url,
        headers={
            "PRIVATE-TOKEN": config.credential,
            "Content-Type": "application/json",
        },
        transport=transport,
    )
