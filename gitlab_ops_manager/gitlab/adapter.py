"""GitLab client adapter built on httpx."""

from typing import Any, Literal, Self

import httpx
import structlog

from gitlab_ops_manager.configuration.models import GitLabClientConfig
from gitlab_ops_manager.gitlab.exceptions import AmbiguousMergeRequest, RemoteRequestFailed, UnknownReviewer
from gitlab_ops_manager.schemas.change import MergeRequestRef
from gitlab_ops_manager.schemas.gitlab import LabelEvent, MergeRequest, Note, User
from gitlab_ops_manager.utils.constants import DEFAULT_PER_PAGE

from .abc import GitLabClientBase
from .client import get_gitlab_client

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


class GitLabAdapter(GitLabClientBase):
    """GitLab client adapter for the GitLab REST API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        """Initialize the GitLab client adapter with an already-initialized client."""
        self.client = client
        self._current_user_id: int | None = None

    @classmethod
    def create(cls, config: GitLabClientConfig, transport: httpx.AsyncBaseTransport | None = None) -> Self:
        """Create a new GitLab client adapter from configuration.

        Args:
            config: Base URL and credential of the GitLab instance
            transport: Optional httpx transport, used in place of the network

        Returns:
            Configured GitLabAdapter instance
        """
        logger.info("Creating client for GitLab instance", gitlab_api_url=config.base_url)
        return cls(get_gitlab_client(config, transport=transport))

    async def __aenter__(self) -> Self:
        """Enter the adapter context."""
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        """Close the adapter when leaving its context."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    def _omit_null_parameters(self, **kwargs: Any) -> dict[str, Any]:
        """Omit parameters that are None."""
        return {k: v for k, v in kwargs.items() if v is not None}

    async def request(
        self,
        method: Literal["GET", "POST", "PUT", "DELETE"],
        path: str,
        query: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a request against the GitLab API and return the decoded JSON response.

        Any response outside the 2xx range raises RemoteRequestFailed carrying
        the status code and the raw body. Nothing is retried here.
        """
        params = self._omit_null_parameters(**(query or {}))
        logger.debug("Sending GitLab API request", method=method, path=path, query=params)
        response = await self.client.request(method, path, params=params, json=body)
        if not 200 <= response.status_code <= 299:
            logger.error(
                "GitLab API request failed",
                method=method,
                path=path,
                status_code=response.status_code,
                body=response.text,
            )
            raise RemoteRequestFailed(response.status_code, response.text)
        if not response.content:
            return None
        return response.json()

    async def _list_all(self, path: str, per_page: int = DEFAULT_PER_PAGE, **query: Any) -> list[dict[str, Any]]:
        """List every item of a paginated endpoint, following pages until a short page is returned."""
        items: list[dict[str, Any]] = []
        page: int = 1
        while True:
            data: list[dict[str, Any]] = await self.request("GET", path, query={**query, "per_page": per_page, "page": page})
            if not data:
                break
            items.extend(data)
            if len(data) < per_page:
                break
            page += 1
        return items

    # Merge Request CRUD
    async def list_open_merge_requests(self, ref: MergeRequestRef) -> list[MergeRequest]:
        """List open merge requests matching a source/target branch pair."""
        data = await self.request(
            "GET",
            f"/projects/{ref.target_project_id}/merge_requests",
            query={
                "state": "opened",
                "source_branch": ref.source_branch,
                "target_branch": ref.target_branch,
                "source_project_id": ref.source_project_id,
            },
        )
        return [MergeRequest.model_validate(item) for item in data]

    async def get_existing_merge_request_iid(self, ref: MergeRequestRef) -> int | None:
        """Get the iid of the single open merge request matching a ref.

        Returns None when there is no match. More than one match means GitLab
        holds duplicate merge requests for the same branches, which is raised as
        AmbiguousMergeRequest rather than guessing.
        """
        merge_requests = await self.list_open_merge_requests(ref)
        if not merge_requests:
            logger.debug("No open merge request found", source_branch=ref.source_branch, target_branch=ref.target_branch)
            return None
        iids = [mr.iid for mr in merge_requests]
        if len(iids) != 1:
            logger.error("More than one open merge request matches", iids=iids, source_branch=ref.source_branch)
            raise AmbiguousMergeRequest(iids)
        return iids[0]

    async def create_merge_request(self, source_project_id: int, payload: dict[str, Any]) -> MergeRequest:
        """Create a merge request from the source project."""
        data = await self.request("POST", f"/projects/{source_project_id}/merge_requests", body=payload)
        return MergeRequest.model_validate(data)

    async def update_merge_request(self, project_id: int, iid: int, payload: dict[str, Any]) -> MergeRequest:
        """Update some fields of a merge request in the target project."""
        data = await self.request("PUT", f"/projects/{project_id}/merge_requests/{iid}", body=payload)
        return MergeRequest.model_validate(data)

    # Merge Request history
    async def list_merge_request_notes(self, project_id: int, iid: int) -> list[Note]:
        """List every note of a merge request."""
        data = await self._list_all(f"/projects/{project_id}/merge_requests/{iid}/notes")
        return [Note.model_validate(item) for item in data]

    async def list_merge_request_label_events(self, project_id: int, iid: int) -> list[LabelEvent]:
        """List every resource label event of a merge request."""
        data = await self._list_all(f"/projects/{project_id}/merge_requests/{iid}/resource_label_events")
        return [LabelEvent.model_validate(item) for item in data]

    # Users
    async def get_current_user_id(self) -> int:
        """Get the id of the authenticated user, fetching it once per adapter."""
        if self._current_user_id is None:
            data = await self.request("GET", "/user")
            self._current_user_id = User.model_validate(data).id
            logger.debug("Resolved current GitLab user", user_id=self._current_user_id)
        return self._current_user_id

    async def get_user_id_by_username(self, username: str) -> int:
        """Get the id of the first user matching a username.

        Raises:
            UnknownReviewer: If no user has that username.
        """
        data = await self.request("GET", "/users", query={"username": username})
        if not data:
            logger.error("No GitLab user found for username", username=username)
            raise UnknownReviewer(username)
        return User.model_validate(data[0]).id

    async def usernames_to_ids(self, usernames: list[str] | tuple[str, ...]) -> list[int]:
        """Resolve usernames to user ids one at a time, stopping at the first unknown username."""
        return [await self.get_user_id_by_username(username) for username in usernames]
