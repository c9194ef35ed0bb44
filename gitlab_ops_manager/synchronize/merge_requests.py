"""Contains logic for reconciling automated changes with GitLab merge requests."""

from typing import Any

import jinja2
import structlog
from structlog.contextvars import bound_contextvars

from gitlab_ops_manager.gitlab.adapter import GitLabAdapter
from gitlab_ops_manager.schemas.change import Change, MergeRequestRef, UpdatePolicy, render_merge_request_description
from gitlab_ops_manager.schemas.gitlab import LabelEvent, Note
from gitlab_ops_manager.synchronize.models import ChangeKind, ReconcileAction
from gitlab_ops_manager.synchronize.results import MergeRequestReconciliationResult
from gitlab_ops_manager.utils.constants import (
    COMMITS_ADDED_NOTE_PATTERN,
    DESCRIPTION_CHANGED_NOTE,
    REVIEWER_NOTE_FRAGMENTS,
    TITLE_CHANGED_NOTE_PREFIX,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def classify_note(note: Note, automation_user_id: int) -> set[ChangeKind]:
    """Return the kinds of manual change a merge request note is evidence of.

    Only system notes count; comments are never evidence, and neither is
    anything the automation user did itself.
    """
    if not note.system or note.author_id == automation_user_id:
        return set()

    changes: set[ChangeKind] = set()
    if note.body.startswith(TITLE_CHANGED_NOTE_PREFIX):
        changes.add(ChangeKind.TITLE)
    if note.body == DESCRIPTION_CHANGED_NOTE:
        changes.add(ChangeKind.DESCRIPTION)
    if COMMITS_ADDED_NOTE_PATTERN.search(note.body):
        changes.add(ChangeKind.CODE)
    if any(fragment in note.body for fragment in REVIEWER_NOTE_FRAGMENTS):
        changes.add(ChangeKind.REVIEWERS)
    return changes


def classify_label_event(event: LabelEvent, automation_user_id: int) -> set[ChangeKind]:
    """Return the kinds of manual change a resource label event is evidence of.

    Labels are routinely added by humans and bots alike, so additions are
    ignored. A removal by someone else may mean the automation added a wrong
    label, and it should not be re-added.
    """
    if event.actor_id == automation_user_id:
        return set()
    if event.action == "remove":
        return {ChangeKind.LABELS}
    return set()


async def detect_manual_changes(gitlab_adapter: GitLabAdapter, ref: MergeRequestRef) -> set[ChangeKind]:
    """Detect which facets of the open merge request for a ref were changed by someone else.

    Returns an empty set when no open merge request exists.
    """
    with bound_contextvars(source_branch=ref.source_branch, target_branch=ref.target_branch):
        iid = await gitlab_adapter.get_existing_merge_request_iid(ref)
        if iid is None:
            return set()

        notes = await gitlab_adapter.list_merge_request_notes(ref.target_project_id, iid)
        automation_user_id = await gitlab_adapter.get_current_user_id()

        changes: set[ChangeKind] = set()
        for note in notes:
            changes |= classify_note(note, automation_user_id)

        # TODO: Compare removed labels with the change's labels, and re-add any that were never removed.
        label_events = await gitlab_adapter.list_merge_request_label_events(ref.target_project_id, iid)
        for event in label_events:
            changes |= classify_label_event(event, automation_user_id)

        logger.info(
            "Detected manual merge request changes",
            merge_request_iid=iid,
            note_count=len(notes),
            label_event_count=len(label_events),
            changes=sorted(kind.value for kind in changes),
        )
        return changes


def build_create_payload(change: Change, ref: MergeRequestRef, reviewer_ids: list[int], description: str | None = None) -> dict[str, Any]:
    """Build the request body that creates a merge request for a change."""
    return {
        "title": change.title,
        "description": description if description is not None else change.mr_description,
        "labels": ",".join(change.labels),
        "source_branch": ref.source_branch,
        "target_branch": ref.target_branch,
        "target_project_id": ref.target_project_id,
        "remove_source_branch": True,
        "reviewer_ids": reviewer_ids,
    }


def build_update_payload(
    change: Change,
    policy: UpdatePolicy,
    reviewer_ids: list[int] | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """Build a partial update body containing only the fields the policy allows.

    Labels are added rather than replaced so labels applied by others survive.
    """
    payload: dict[str, Any] = {}
    if policy.update_title:
        payload["title"] = change.title
    if policy.update_description:
        payload["description"] = description if description is not None else change.mr_description
    if policy.update_labels:
        payload["add_labels"] = ",".join(change.labels)
    if policy.update_reviewers:
        payload["reviewer_ids"] = reviewer_ids or []
    return payload


async def reconcile_merge_request(
    gitlab_adapter: GitLabAdapter,
    change: Change,
    ref: MergeRequestRef,
    policy: UpdatePolicy,
    description_template: jinja2.Template | None = None,
    dry_run: bool = False,
) -> MergeRequestReconciliationResult:
    """Create the merge request for a change, or update the existing one within the limits of a policy.

    Reviewer usernames are resolved before anything is written, so an unknown
    reviewer leaves GitLab untouched. A dry run resolves everything and returns
    the action and payload that would be sent, without sending them.
    """
    with bound_contextvars(source_branch=ref.source_branch, target_branch=ref.target_branch):
        existing_iid = await gitlab_adapter.get_existing_merge_request_iid(ref)
        description = render_merge_request_description(change, description_template)

        if existing_iid is None:
            reviewer_ids = await gitlab_adapter.usernames_to_ids(change.reviewers)
            payload = build_create_payload(change, ref, reviewer_ids, description)
            if dry_run:
                logger.info("Dry run, not creating merge request", title=change.title)
                return MergeRequestReconciliationResult(change, ref, ReconcileAction.CREATE, payload=payload, dry_run=True)
            merge_request = await gitlab_adapter.create_merge_request(ref.source_project_id, payload)
            logger.info("Created merge request", merge_request_iid=merge_request.iid, title=change.title)
            return MergeRequestReconciliationResult(change, ref, ReconcileAction.CREATE, merge_request.iid, payload)

        reviewer_ids = await gitlab_adapter.usernames_to_ids(change.reviewers) if policy.update_reviewers else None
        payload = build_update_payload(change, policy, reviewer_ids, description)
        if not payload:
            logger.info("Nothing to update on merge request", merge_request_iid=existing_iid)
            return MergeRequestReconciliationResult(change, ref, ReconcileAction.NOOP, existing_iid, dry_run=dry_run)

        if dry_run:
            logger.info("Dry run, not updating merge request", merge_request_iid=existing_iid, fields=sorted(payload))
            return MergeRequestReconciliationResult(change, ref, ReconcileAction.UPDATE, existing_iid, payload, dry_run=True)

        await gitlab_adapter.update_merge_request(ref.target_project_id, existing_iid, payload)
        logger.info("Updated merge request", merge_request_iid=existing_iid, fields=sorted(payload))
        return MergeRequestReconciliationResult(change, ref, ReconcileAction.UPDATE, existing_iid, payload)
