"""Contains exceptions raised when talking to the GitLab API."""


class GitLabClientError(Exception):
    """Base class for errors raised by the GitLab client."""

    pass


class RemoteRequestFailed(GitLabClientError):
    """Raised when the GitLab API responds with a non-2xx status code."""

    def __init__(self, status_code: int, body: str) -> None:
        """Initializes the exception with the response code and raw response body."""
        super().__init__(f"Failed with response code: {status_code} and body:\n{body}")
        self.status_code = status_code
        self.body = body


class AmbiguousMergeRequest(GitLabClientError):
    """Raised when more than one open merge request matches a branch/project pair."""

    def __init__(self, iids: list[int]) -> None:
        """Initializes the exception with the iids of every matching merge request."""
        super().__init__(f"More than one matching MR exists: iids: {','.join(str(iid) for iid in iids)}")
        self.iids = iids


class UnknownReviewer(GitLabClientError):
    """Raised when a reviewer username does not resolve to any GitLab user."""

    def __init__(self, username: str) -> None:
        """Initializes the exception with the username that could not be resolved."""
        super().__init__(f"No GitLab user found with username: {username}")
        self.username = username
