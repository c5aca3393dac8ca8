"""
CLI interface for taskdock.

Provides commands to check a task file and inspect what its tasks resolve
to. Running containers is left to the execution layer.
"""

import json

import click

from taskdock import __version__
from taskdock.errors import ManifestValidationError, TaskdockError


@click.group()
@click.version_option(version=__version__, prog_name="taskdock")
@click.option("--task-file", "-t", help="Task file to use (default: search upwards for .taskdock.yaml)")
@click.option("--env-file", "-e", help="Dotenv file to read variables from (default: .env)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def main(ctx, task_file, env_file, log_level):
    """
    taskdock - Docker based task runner.

    Define tasks as lists of steps, each running commands in a Docker image.
    """
    from taskdock.config import load_settings
    from taskdock.utils import setup_logging

    ctx.ensure_object(dict)
    try:
        settings = load_settings(task_file=task_file, dotenv_file=env_file, log_level=log_level)
    except ValueError as e:
        raise click.UsageError(str(e))
    setup_logging(settings.log_level)
    ctx.obj["settings"] = settings


def _load(ctx, validate: bool = True):
    from taskdock.loader import load_and_validate, load_manifest

    settings = ctx.obj["settings"]
    loader = load_and_validate if validate else load_manifest
    try:
        return loader(settings.task_file, settings.dotenv_file)
    except ManifestValidationError as e:
        for message in e.errors:
            click.echo(f"✗ {message}", err=True)
        raise SystemExit(1)
    except (TaskdockError, OSError) as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)


@main.command("validate")
@click.pass_context
def validate_cmd(ctx):
    """Validate the task file and report every problem found."""
    loaded = _load(ctx)
    click.echo(f"✓ {loaded.path} is valid ({len(loaded.configs.tasks)} tasks)")


@main.command("list")
@click.pass_context
def list_tasks(ctx):
    """List the tasks defined in the task file."""
    loaded = _load(ctx, validate=False)
    if not loaded.configs.tasks:
        click.echo("No tasks defined.")
        return
    for name, task in loaded.configs.tasks.items():
        count = len(task.steps)
        click.echo(f"{name} ({count} step{'s' if count != 1 else ''})")


@main.command("plan")
@click.argument("task")
@click.pass_context
def plan_cmd(ctx, task: str):
    """Show the resolved steps of TASK as JSON."""
    from taskdock.plan import plan_task

    loaded = _load(ctx)
    try:
        plans = plan_task(loaded.configs, task, loaded.resolver)
    except TaskdockError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)

    click.echo(json.dumps([p.to_dict() for p in plans], indent=2))


if __name__ == "__main__":
    main()
