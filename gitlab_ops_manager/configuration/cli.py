"""Defines the Command Line Interface (CLI) using Typer."""

import asyncio
import sys
from pathlib import Path

import httpx
import jinja2
import typer
from dotenv import load_dotenv
from typer import Argument, Option
from typing_extensions import Annotated

from gitlab_ops_manager.configuration.exceptions import RequiredConfigurationElementError
from gitlab_ops_manager.configuration.reconcile import reconcile_gitlab_client_configuration
from gitlab_ops_manager.gitlab.exceptions import GitLabClientError
from gitlab_ops_manager.processing.exceptions import YAMLProcessingError
from gitlab_ops_manager.processing.yaml_processor import ChangeYAMLProcessor
from gitlab_ops_manager.schemas.change import MergeRequestRef
from gitlab_ops_manager.synchronize.driver import run_detect_changes_workflow, run_reconcile_change_workflow
from gitlab_ops_manager.utils.templates import construct_jinja2_template_from_file

load_dotenv()

typer_app = typer.Typer(pretty_exceptions_show_locals=False)


@typer_app.callback()
def gitlab_callback(
    ctx: typer.Context,
    gitlab_api_url: Annotated[str | None, Option(envvar="GITLAB_API_URL", help="GitLab API URL.")] = None,
    gitlab_api_token: Annotated[
        str | None,
        Option(envvar=["GITLAB_API_TOKEN", "HOUSEKEEPER_GITLAB_API_TOKEN"], help="GitLab API token of the automation user."),
    ] = None,
) -> None:
    """Reconcile automated changes with GitLab merge requests."""
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = asyncio.run(
            reconcile_gitlab_client_configuration(
                cli_gitlab_api_url=gitlab_api_url,
                cli_gitlab_api_token=gitlab_api_token,
            )
        )
    except RequiredConfigurationElementError as e:
        typer.echo(f"{e} (command line option --{e.cli_name.replace('_', '-')}, environment variable {e.env_name})", err=True)
        raise typer.Exit(1) from e


SourceProjectIdOption = Annotated[int, Option(envvar="SOURCE_PROJECT_ID", help="ID of the project the source branch lives in.")]
SourceBranchOption = Annotated[str, Option(envvar="SOURCE_BRANCH", help="Source branch of the merge request.")]
TargetBranchOption = Annotated[str, Option(envvar="TARGET_BRANCH", help="Target branch of the merge request.")]
TargetProjectIdOption = Annotated[int, Option(envvar="TARGET_PROJECT_ID", help="ID of the project the merge request targets.")]


@typer_app.command(name="detect-changes")
def detect_changes_cli(
    ctx: typer.Context,
    source_project_id: SourceProjectIdOption,
    source_branch: SourceBranchOption,
    target_branch: TargetBranchOption,
    target_project_id: TargetProjectIdOption,
) -> None:
    """Report which parts of the open merge request were changed by someone other than the automation user."""
    ref = MergeRequestRef(
        source_project_id=source_project_id,
        source_branch=source_branch,
        target_branch=target_branch,
        target_project_id=target_project_id,
    )
    try:
        changes = asyncio.run(run_detect_changes_workflow(ctx.obj["config"], ref))
    except (GitLabClientError, httpx.HTTPError) as e:
        typer.echo(f"GitLab request failed: {e}", err=True)
        sys.exit(1)

    if not changes:
        typer.echo("No manual changes detected")
        return
    for kind in sorted(kind.value for kind in changes):
        typer.echo(kind)


@typer_app.command(name="reconcile")
def reconcile_cli(
    ctx: typer.Context,
    change_path: Annotated[Path, Argument(envvar="CHANGE_PATH", help="Path to YAML file describing the change.")],
    source_project_id: SourceProjectIdOption,
    source_branch: SourceBranchOption,
    target_branch: TargetBranchOption,
    target_project_id: TargetProjectIdOption,
    dry_run: Annotated[bool, Option(envvar="DRY_RUN", help="Show what would be created or updated without writing to GitLab.")] = False,
    description_template: Annotated[
        Path | None, Option(envvar="DESCRIPTION_TEMPLATE", help="Path to a Jinja2 template for the merge request description.")
    ] = None,
) -> None:
    """Create or update the merge request for a change, preserving fields edited by others."""
    if not change_path.exists():
        error = f"Change file not found: {change_path.absolute()}"
        typer.echo(error, err=True)
        raise typer.Exit(1)

    try:
        change = ChangeYAMLProcessor().load_change(change_path)
    except YAMLProcessingError as e:
        typer.echo("Error(s) encountered while processing YAML:", err=True)
        for err in e.errors:
            typer.echo(str(err), err=True)
        sys.exit(1)
    if change is None:
        typer.echo(f"No change could be loaded from {change_path.absolute()}", err=True)
        sys.exit(1)

    template: jinja2.Template | None = None
    if description_template is not None:
        try:
            template = construct_jinja2_template_from_file(description_template)
        except (OSError, jinja2.TemplateSyntaxError) as e:
            typer.echo(f"Error loading description template {description_template}: {e}", err=True)
            sys.exit(1)

    ref = MergeRequestRef(
        source_project_id=source_project_id,
        source_branch=source_branch,
        target_branch=target_branch,
        target_project_id=target_project_id,
    )
    try:
        result = asyncio.run(
            run_reconcile_change_workflow(
                ctx.obj["config"],
                change,
                ref,
                dry_run=dry_run,
                description_template=template,
            )
        )
    except (GitLabClientError, httpx.HTTPError) as e:
        typer.echo(f"GitLab request failed: {e}", err=True)
        sys.exit(1)
    except jinja2.TemplateError as e:
        typer.echo(f"Error rendering merge request description: {e}", err=True)
        sys.exit(1)

    if result.manual_changes:
        typer.echo(f"Manual changes detected: {', '.join(sorted(kind.value for kind in result.manual_changes))}")
    if result.dry_run:
        typer.echo(f"Merge request action (dry run): {result.action.value}")
    else:
        typer.echo(f"Merge request action: {result.action.value}")
    if result.merge_request_iid is not None:
        typer.echo(f"Merge request: !{result.merge_request_iid}")


if __name__ == "__main__":
    typer_app()
