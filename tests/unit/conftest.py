"""Fixtures for unit tests."""

import json
import re
from typing import Any, Generator

import httpx
import pytest
import structlog

from gitlab_ops_manager.configuration.models import GitLabClientConfig
from gitlab_ops_manager.gitlab.adapter import GitLabAdapter

API_URL = "https://gitlab.example.com/api/v4"
AUTOMATION_USER_ID = 1000
HUMAN_USER_ID = 7


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


def system_note(body: str, author_id: int = HUMAN_USER_ID) -> dict[str, Any]:
    """Build a system note as the GitLab API returns it."""
    return {"id": len(body), "body": body, "system": True, "author": {"id": author_id, "username": f"user{author_id}"}}


def comment_note(body: str, author_id: int = HUMAN_USER_ID) -> dict[str, Any]:
    """Build a human comment as the GitLab API returns it."""
    return {"id": len(body), "body": body, "system": False, "author": {"id": author_id, "username": f"user{author_id}"}}


def label_event(action: str, user_id: int = HUMAN_USER_ID) -> dict[str, Any]:
    """Build a resource label event as the GitLab API returns it."""
    return {"id": user_id, "action": action, "user": {"id": user_id}, "label": {"name": "bug"}}


class FakeGitLab:
    """An in-memory stand-in for the GitLab REST API that records every request."""

    def __init__(self) -> None:
        """Initialize an instance with no merge requests, notes, or label events."""
        self.requests: list[httpx.Request] = []
        self.merge_requests: list[dict[str, Any]] = []
        self.notes: list[dict[str, Any]] = []
        self.label_events: list[dict[str, Any]] = []
        self.users: dict[str, int] = {}
        self.current_user_id = AUTOMATION_USER_ID
        self.created_iid = 42
        self.failure: tuple[int, str] | None = None

    @property
    def writes(self) -> list[httpx.Request]:
        """Requests that would modify GitLab."""
        return [request for request in self.requests if request.method in ("POST", "PUT", "DELETE")]

    def requested_paths(self) -> list[str]:
        """Method and API path of every recorded request."""
        return [f"{request.method} {request.url.path.removeprefix('/api/v4')}" for request in self.requests]

    @staticmethod
    def json_body(request: httpx.Request) -> Any:
        """Decode the JSON body of a recorded request."""
        return json.loads(request.content)

    def _page(self, request: httpx.Request, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        per_page = int(request.url.params.get("per_page", 20))
        page = int(request.url.params.get("page", 1))
        return items[(page - 1) * per_page : page * per_page]

    def handler(self, request: httpx.Request) -> httpx.Response:
        """Route a request to the matching fake endpoint."""
        self.requests.append(request)
        if self.failure is not None:
            status_code, body = self.failure
            return httpx.Response(status_code, text=body)

        path = request.url.path.removeprefix("/api/v4")
        if request.method == "GET" and path == "/user":
            return httpx.Response(200, json={"id": self.current_user_id, "username": "housekeeper"})
        if request.method == "GET" and path == "/users":
            username = request.url.params["username"]
            if username in self.users:
                return httpx.Response(200, json=[{"id": self.users[username], "username": username}])
            return httpx.Response(200, json=[])
        if re.fullmatch(r"/projects/\d+/merge_requests", path):
            if request.method == "GET":
                return httpx.Response(200, json=self.merge_requests)
            if request.method == "POST":
                return httpx.Response(201, json={"id": 1, "iid": self.created_iid, **self.json_body(request)})
        if request.method == "PUT" and (match := re.fullmatch(r"/projects/\d+/merge_requests/(\d+)", path)):
            return httpx.Response(200, json={"id": 1, "iid": int(match.group(1))})
        if request.method == "GET" and re.fullmatch(r"/projects/\d+/merge_requests/\d+/notes", path):
            return httpx.Response(200, json=self._page(request, self.notes))
        if request.method == "GET" and re.fullmatch(r"/projects/\d+/merge_requests/\d+/resource_label_events", path):
            return httpx.Response(200, json=self._page(request, self.label_events))
        return httpx.Response(404, json={"message": "404 Not Found"})


@pytest.fixture
def gitlab_config() -> GitLabClientConfig:
    """Configuration pointing at the fake GitLab instance."""
    return GitLabClientConfig(base_url=API_URL, credential="glpat-test-token")


@pytest.fixture
def fake_gitlab() -> FakeGitLab:
    """A fresh fake GitLab API."""
    return FakeGitLab()


@pytest.fixture
def transport(fake_gitlab: FakeGitLab) -> httpx.MockTransport:
    """An httpx transport serving requests from the fake GitLab API."""
    return httpx.MockTransport(fake_gitlab.handler)


@pytest.fixture
def gitlab_adapter(gitlab_config: GitLabClientConfig, transport: httpx.MockTransport) -> GitLabAdapter:
    """A GitLab adapter talking to the fake GitLab API."""
    return GitLabAdapter.create(gitlab_config, transport=transport)
