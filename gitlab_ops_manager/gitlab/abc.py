"""Base ABC for GitLab clients."""

from abc import ABC, abstractmethod
from typing import Any, Literal

from gitlab_ops_manager.schemas.change import MergeRequestRef


class GitLabClientBase(ABC):
    """Base ABC for GitLab clients."""

    @abstractmethod
    async def request(
        self,
        method: Literal["GET", "POST", "PUT", "DELETE"],
        path: str,
        query: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a request against the GitLab API and return the decoded JSON response."""
        pass

    # Merge Request CRUD
    @abstractmethod
    async def list_open_merge_requests(self, ref: MergeRequestRef) -> list[Any]:
        """List open merge requests matching a source/target branch pair."""
        pass

    @abstractmethod
    async def get_existing_merge_request_iid(self, ref: MergeRequestRef) -> int | None:
        """Get the iid of the single open merge request matching a ref, if any."""
        pass

    @abstractmethod
    async def create_merge_request(self, source_project_id: int, payload: dict[str, Any]) -> Any:
        """Create a merge request."""
        pass

    @abstractmethod
    async def update_merge_request(self, project_id: int, iid: int, payload: dict[str, Any]) -> Any:
        """Update some fields of a merge request."""
        pass

    # Merge Request history
    @abstractmethod
    async def list_merge_request_notes(self, project_id: int, iid: int) -> list[Any]:
        """List the notes of a merge request."""
        pass

    @abstractmethod
    async def list_merge_request_label_events(self, project_id: int, iid: int) -> list[Any]:
        """List the resource label events of a merge request."""
        pass

    # Users
    @abstractmethod
    async def get_current_user_id(self) -> int:
        """Get the id of the authenticated user."""
        pass

    @abstractmethod
    async def get_user_id_by_username(self, username: str) -> int:
        """Get the id of a user from their username."""
        pass
