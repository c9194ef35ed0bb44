"""Contains results of merge request reconciliation."""

from typing import Any

from gitlab_ops_manager.schemas.change import Change, MergeRequestRef
from gitlab_ops_manager.synchronize.models import ChangeKind, ReconcileAction


class MergeRequestReconciliationResult:
    """Contains the outcome of reconciling one change against GitLab."""

    def __init__(
        self,
        change: Change,
        ref: MergeRequestRef,
        action: ReconcileAction,
        merge_request_iid: int | None = None,
        payload: dict[str, Any] | None = None,
        manual_changes: set[ChangeKind] | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize the result with the change, the action taken, and the payload sent.

        For a dry run the action and payload are the ones that would have been sent.
        """
        self.change = change
        self.ref = ref
        self.action = action
        self.merge_request_iid = merge_request_iid
        self.payload = payload
        self.manual_changes = manual_changes or set()
        self.dry_run = dry_run

    def __repr__(self) -> str:
        """Represent the result by its action and merge request."""
        return f"MergeRequestReconciliationResult(action={self.action.value!r}, merge_request_iid={self.merge_request_iid!r}, dry_run={self.dry_run!r})"
