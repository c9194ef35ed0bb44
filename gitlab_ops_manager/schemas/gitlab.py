"""Pydantic models for the subset of GitLab API responses the client reads."""

from typing import Literal

from pydantic import BaseModel, ConfigDict


class UserRef(BaseModel):
    """A GitLab user as embedded in notes and events."""

    model_config = ConfigDict(extra="ignore")

    id: int
    username: str | None = None


class User(UserRef):
    """A GitLab user as returned by the users endpoints."""

    name: str | None = None


class MergeRequest(BaseModel):
    """An open GitLab merge request."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    iid: int
    title: str | None = None
    source_branch: str | None = None
    target_branch: str | None = None
    web_url: str | None = None


class Note(BaseModel):
    """A merge request note: either a human comment or a system audit entry."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    body: str
    system: bool = False
    author: UserRef

    @property
    def author_id(self) -> int:
        """The id of the user who authored the note."""
        return self.author.id


class LabelEvent(BaseModel):
    """A resource label event recording a label being added or removed."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    action: Literal["add", "remove"]
    user: UserRef | None = None

    @property
    def actor_id(self) -> int | None:
        """The id of the user who performed the action, if GitLab reports one."""
        return self.user.id if self.user is not None else None
