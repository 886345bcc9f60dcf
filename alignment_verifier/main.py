"""CLI entry point for the alignment verifier."""

import asyncio
import json
import sys
from pathlib import Path

import click
import structlog

from alignment_verifier.config.settings import AppSettings
from alignment_verifier.engine.verifier import run_verification
from alignment_verifier.exceptions import AlignmentVerifierError, ConfigurationError
from alignment_verifier.models.domain import TrackerProject
from alignment_verifier.providers.factory import create_task_tracker
from alignment_verifier.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

EXIT_ALIGNED = 0
EXIT_MISALIGNED = 1
EXIT_ERROR = 2


@click.group()
@click.option(
    "--config",
    default="alignment_config.yaml",
    envvar="ALIGNMENT_CONFIG",
    help="Path to configuration file (falls back to ALIGNMENT_* environment variables if missing)",
)
@click.option("--log-level", default="WARNING", help="Logging level")
@click.option("--json-logs/--console-logs", default=False, help="Log format")
@click.pass_context
def cli(ctx: click.Context, config: str, log_level: str, json_logs: bool) -> None:
    """alignment-verifier: Check task statuses against code evidence."""
    configure_logging(log_level, json_output=json_logs)

    config_path = Path(config)
    try:
        if config_path.exists():
            settings = AppSettings.from_yaml(str(config_path))
        else:
            settings = AppSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(EXIT_ERROR)

    ctx.obj = {"settings": settings}


@cli.command()
@click.argument("repo")
@click.option("--project", "-p", default=None, help="Project key or name (default: all projects)")
@click.option("--status", "statuses", multiple=True, help="Only check tasks whose status contains this text")
@click.option("--max-tasks", type=click.IntRange(min=1), default=None, help="Maximum number of tasks to check")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write the report to a file")
@click.pass_context
def verify(
    ctx: click.Context,
    repo: str,
    project: str | None,
    statuses: tuple[str, ...],
    max_tasks: int | None,
    as_json: bool,
    output: str | None,
) -> None:
    """Verify that task statuses in a project match the code in REPO.

    Exits with 0 when every task is aligned and 1 when misalignments were found.
    """
    settings: AppSettings = ctx.obj["settings"]

    try:
        report = asyncio.run(
            run_verification(
                settings,
                repo,
                project_hint=project,
                status_filter=list(statuses) or None,
                max_tasks=max_tasks,
            )
        )
    except AlignmentVerifierError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("verify_error", exc_info=True)
        sys.exit(EXIT_ERROR)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    rendered = json.dumps(report.to_dict(), indent=2) if as_json else report.to_markdown()

    if output:
        Path(output).write_text(rendered)
        click.echo(f"Report written to {output}")
        click.echo(report.summary)
    else:
        click.echo(rendered)

    sys.exit(EXIT_ALIGNED if report.all_aligned else EXIT_MISALIGNED)


@cli.command()
@click.pass_context
def projects(ctx: click.Context) -> None:
    """List projects visible in the task tracker."""
    settings: AppSettings = ctx.obj["settings"]

    try:
        found = asyncio.run(_list_projects(settings))
    except AlignmentVerifierError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("projects_error", exc_info=True)
        sys.exit(EXIT_ERROR)

    if not found:
        click.echo("No projects found")
        return

    for project in found:
        click.echo(f"{project.key:<12} {project.name}")


async def _list_projects(settings: AppSettings) -> list[TrackerProject]:
    async with create_task_tracker(settings) as tracker:
        return await tracker.list_projects()


if __name__ == "__main__":
    cli()
