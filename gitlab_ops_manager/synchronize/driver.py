"""Orchestrates the reconciliation of automated changes with GitLab."""

import time

import httpx
import jinja2
import structlog

from gitlab_ops_manager.configuration.models import GitLabClientConfig
from gitlab_ops_manager.gitlab.adapter import GitLabAdapter
from gitlab_ops_manager.schemas.change import Change, MergeRequestRef, UpdatePolicy
from gitlab_ops_manager.synchronize.merge_requests import detect_manual_changes, reconcile_merge_request
from gitlab_ops_manager.synchronize.models import ChangeKind
from gitlab_ops_manager.synchronize.results import MergeRequestReconciliationResult

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


async def run_detect_changes_workflow(
    config: GitLabClientConfig,
    ref: MergeRequestRef,
    transport: httpx.AsyncBaseTransport | None = None,
) -> set[ChangeKind]:
    """Run the detect-changes workflow: report what others changed on the open merge request."""
    async with GitLabAdapter.create(config, transport=transport) as gitlab_adapter:
        return await detect_manual_changes(gitlab_adapter, ref)


async def run_reconcile_change_workflow(
    config: GitLabClientConfig,
    change: Change,
    ref: MergeRequestRef,
    dry_run: bool = False,
    description_template: jinja2.Template | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> MergeRequestReconciliationResult:
    """Run the reconcile workflow for one change.

    Fields someone else has edited are left alone. Commits pushed by someone
    else are reported but never block updating the remaining fields. A dry run
    previews the action that would be taken.
    """
    start_time = time.time()
    async with GitLabAdapter.create(config, transport=transport) as gitlab_adapter:
        manual_changes = await detect_manual_changes(gitlab_adapter, ref)

        if ChangeKind.CODE in manual_changes:
            logger.warning(
                "Someone else has pushed commits to the merge request",
                source_branch=ref.source_branch,
                title=change.title,
            )

        result = await reconcile_merge_request(
            gitlab_adapter,
            change,
            ref,
            UpdatePolicy.from_manual_changes(manual_changes),
            description_template=description_template,
            dry_run=dry_run,
        )
        result.manual_changes = manual_changes

    end_time = time.time()
    logger.info(
        "Reconciled change",
        action=result.action.value,
        dry_run=result.dry_run,
        merge_request_iid=result.merge_request_iid,
        duration=round(end_time - start_time, 2),
    )
    return result
