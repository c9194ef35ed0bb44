"""Pydantic schemas describing a desired merge request and where it lives."""

from collections.abc import Iterable

import jinja2
from pydantic import BaseModel, ConfigDict

from gitlab_ops_manager.synchronize.models import ChangeKind
from gitlab_ops_manager.utils.templates import default_merge_request_description_template, render_template_with_model


class Change(BaseModel):
    """An automated modification that should be proposed as a merge request."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    labels: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    keep_name: str | None = None

    @property
    def mr_description(self) -> str:
        """The merge request body rendered from the default description template."""
        return render_merge_request_description(self)


def render_merge_request_description(change: Change, template: jinja2.Template | None = None) -> str:
    """Render the merge request body for a change, using the default template unless one is given."""
    if template is None:
        template = default_merge_request_description_template()
    return render_template_with_model(model=change, template=template)


class MergeRequestRef(BaseModel):
    """Identifies the open merge request for a source/target branch pair."""

    model_config = ConfigDict(frozen=True)

    source_project_id: int
    source_branch: str
    target_branch: str
    target_project_id: int


class UpdatePolicy(BaseModel):
    """Which fields of an existing merge request may be overwritten."""

    model_config = ConfigDict(frozen=True)

    update_title: bool = True
    update_description: bool = True
    update_labels: bool = True
    update_reviewers: bool = True

    @classmethod
    def from_manual_changes(cls, changes: Iterable[ChangeKind]) -> "UpdatePolicy":
        """Build a policy that leaves alone every field someone else has already edited.

        Code changes are evidence only; they never map onto a field.
        """
        kinds = set(changes)
        return cls(
            update_title=ChangeKind.TITLE not in kinds,
            update_description=ChangeKind.DESCRIPTION not in kinds,
            update_labels=ChangeKind.LABELS not in kinds,
            update_reviewers=ChangeKind.REVIEWERS not in kinds,
        )
