"""Pydantic Settings model for application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from gitlab_ops_manager.utils.constants import DEFAULT_GITLAB_API_URL


class Settings(BaseSettings):
    """Environment variable settings for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # GitLab API settings
    GITLAB_API_URL: str = DEFAULT_GITLAB_API_URL

    # GitLab token settings. The housekeeper variable is honoured so existing
    # CI jobs keep working without renaming their secrets.
    GITLAB_API_TOKEN: str | None = None
    HOUSEKEEPER_GITLAB_API_TOKEN: str | None = None

    @property
    def gitlab_api_token(self) -> str | None:
        """Return the configured API token, preferring GITLAB_API_TOKEN."""
        return self.GITLAB_API_TOKEN or self.HOUSEKEEPER_GITLAB_API_TOKEN
