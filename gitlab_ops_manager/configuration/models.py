"""Models for configuration between CLI arguments and environment variables."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GitLabClientConfig:
    """Configuration handed to the GitLab adapter when it is constructed."""

    base_url: str
    credential: str

    def __repr__(self) -> str:
        """Represent the configuration without leaking the credential."""
        return f"GitLabClientConfig(base_url={self.base_url!r}, credential='***')"
