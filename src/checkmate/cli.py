"""CheckMate CLI - context-aware task manager."""

import json
import logging
import sys
import time
from pathlib import Path

import click

from .config import load_config
from .core.context import UserContext
from .core.export import ExportFormat, ExportScope
from .core.focus import FocusSession
from .core.progress import format_report
from .core.recommend import headline
from .core.tasks import (
    Location,
    MentalLoad,
    Priority,
    SortOrder,
    TaskNotFoundError,
    TaskStatus,
    TaskValidationError,
    TimeEstimate,
    filter_by_status,
    find_task,
    format_task_line,
    sort_tasks,
)
from .ports.task_store import StoreError
from .workflows import (
    create_task,
    export_tasks,
    import_tasks,
    load_tasks,
    progress,
    remove_task,
    suggest,
    toggle_completion,
)

TIME_CHOICES = click.Choice([t.label for t in TimeEstimate], case_sensitive=False)
LOAD_CHOICES = click.Choice([m.label for m in MentalLoad], case_sensitive=False)
PRIORITY_CHOICES = click.Choice([p.label for p in Priority], case_sensitive=False)
LOCATION_CHOICES = click.Choice([loc.label for loc in Location], case_sensitive=False)
PLACE_CHOICES = click.Choice(
    [loc.label for loc in Location if loc != Location.ANYWHERE], case_sensitive=False
)

# Errors a command reports to the user instead of crashing on.
USER_ERRORS = (StoreError, TaskValidationError, TaskNotFoundError)


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable info logging")
@click.version_option(package_name="checkmate")
def main(verbose: bool):
    """CheckMate - smarter to-dos for your current context."""
    if verbose:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.INFO,
        )


@main.command()
@click.argument("title")
@click.option("--time", "time_estimate", type=TIME_CHOICES, default="medium", show_default=True,
              help="Rough duration: quick (<15m), medium (30m), long (1hr+)")
@click.option("--load", "mental_load", type=LOAD_CHOICES, default="medium", show_default=True,
              help="Focus the task needs")
@click.option("--location", type=LOCATION_CHOICES, default="anywhere", show_default=True)
@click.option("--priority", type=PRIORITY_CHOICES, default="medium", show_default=True)
@click.option("--description", "-d", default=None, help="Optional details")
@click.option("--due", type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help="Due date (YYYY-MM-DD), informational only")
def add(title, time_estimate, mental_load, location, priority, description, due):
    """Add a task."""
    config = load_config()
    try:
        task = create_task(
            config,
            title,
            time_estimate=TimeEstimate.parse(time_estimate),
            mental_load=MentalLoad.parse(mental_load),
            location=Location.parse(location),
            priority=Priority.parse(priority),
            description=description,
            due_date=due,
        )
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"Added: {format_task_line(task)}")


@main.command("list")
@click.option("--status", type=click.Choice([s.value for s in TaskStatus]), default="active",
              show_default=True)
@click.option("--sort", "sort_by", type=click.Choice([s.value for s in SortOrder]),
              default="priority", show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(status: str, sort_by: str, as_json: bool):
    """List tasks."""
    config = load_config()
    try:
        tasks = load_tasks(config)
    except StoreError as e:
        _fail(e)

    shown = sort_tasks(filter_by_status(tasks, TaskStatus(status)), SortOrder(sort_by))

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in shown], indent=2))
        return

    if not shown:
        click.echo("No tasks yet. Add one with 'checkmate add'." if not tasks else "No matching tasks.")
        return

    for task in shown:
        click.echo(format_task_line(task))
    click.echo(f"\n{len(shown)} {'task' if len(shown) == 1 else 'tasks'}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Toggle a task between done and active."""
    config = load_config()
    try:
        task = toggle_completion(config, task_id)
    except USER_ERRORS as e:
        _fail(e)

    verb = "Completed" if task.completed else "Reopened"
    click.echo(f"{verb}: {task.title}")


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
def delete(task_id: str, yes: bool):
    """Delete a task."""
    config = load_config()
    try:
        task = find_task(load_tasks(config), task_id)
        if not yes and not click.confirm(f"Delete '{task.title}'?"):
            return
        remove_task(config, task.id)
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"Deleted: {task.title}")


def _resolve_context(config, available_time, energy, location) -> UserContext:
    default = config.default_context()
    return UserContext(
        available_time=TimeEstimate.parse(available_time) if available_time else default.available_time,
        energy_level=MentalLoad.parse(energy) if energy else default.energy_level,
        current_location=Location.parse(location) if location else default.current_location,
    )


@main.command("suggest")
@click.option("--time", "available_time", type=TIME_CHOICES, default=None,
              help="Time you have right now")
@click.option("--energy", type=LOAD_CHOICES, default=None, help="Your energy level right now")
@click.option("--location", type=PLACE_CHOICES, default=None, help="Where you are right now")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def suggest_cmd(available_time, energy, location, as_json: bool):
    """Suggest what to work on right now."""
    config = load_config()
    try:
        context = _resolve_context(config, available_time, energy, location)
        picks = suggest(config, context)
    except USER_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in picks], indent=2))
        return

    click.echo(f"Context: {context.describe()}\n")
    if not picks:
        click.echo("Nothing fits right now. Try a different context.")
        return

    top = headline(picks, config.headline_count)
    click.echo("Perfect for right now:")
    for task in top:
        click.echo(f"  {format_task_line(task)}")

    rest = picks[len(top):]
    if rest:
        click.echo("\nAlso fits:")
        for task in rest:
            click.echo(f"  {format_task_line(task)}")


@main.command("progress")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def progress_cmd(as_json: bool):
    """Show completion stats and patterns."""
    config = load_config()
    try:
        report = progress(config)
    except StoreError as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "total": report.total,
                    "completed": report.completed_count,
                    "active": report.active_count,
                    "completion_rate": report.completion_rate,
                    "completed_today": report.completed_today,
                    "completed_this_week": report.completed_this_week,
                    "mental_load": {k.label: v for k, v in report.mental_load_distribution.items()},
                    "time_estimate": {k.label: v for k, v in report.time_estimate_distribution.items()},
                    "location": {k.label: v for k, v in report.location_distribution.items()},
                    "most_productive_location": report.most_productive_location.label,
                },
                indent=2,
            )
        )
        return

    click.echo(format_report(report))


@main.command("export")
@click.option("--format", "fmt", type=click.Choice([f.value for f in ExportFormat]),
              default="json", show_default=True)
@click.option("--scope", type=click.Choice([s.value for s in ExportScope]),
              default="all", show_default=True)
@click.option("--no-metadata", is_flag=True, help="Leave out progress analytics")
@click.option("--output", "-o", default=None,
              help="File to write (default: checkmate-<scope>-<date>.<format>, '-' for stdout)")
def export_cmd(fmt: str, scope: str, no_metadata: bool, output: str | None):
    """Export tasks and progress data."""
    config = load_config()
    try:
        filename, content = export_tasks(
            config, ExportFormat(fmt), ExportScope(scope), include_metadata=not no_metadata
        )
    except StoreError as e:
        _fail(e)

    if output == "-":
        click.echo(content)
        return

    path = Path(output or filename)
    try:
        path.write_text(content)
    except OSError as e:
        _fail(e)
    click.echo(f"✓ Exported to {path}")


@main.command("import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--replace", is_flag=True, help="Replace all tasks instead of merging")
def import_cmd(source: Path, replace: bool):
    """Import tasks from a JSON export."""
    config = load_config()
    if replace and not click.confirm("Replace ALL existing tasks with the imported ones?"):
        return
    try:
        added = import_tasks(config, source.read_text(), replace=replace)
    except USER_ERRORS as e:
        _fail(e)

    click.echo(f"Imported {added} {'task' if added == 1 else 'tasks'}.")


@main.command()
@click.argument("task_id")
def focus(task_id: str):
    """Work on one task with a running timer (Ctrl+C to stop)."""
    config = load_config()
    try:
        task = find_task(load_tasks(config), task_id)
    except USER_ERRORS as e:
        _fail(e)

    session = FocusSession(task)
    click.echo(f"Focus: {task.title}")
    if task.description:
        click.echo(task.description)
    click.echo(
        f"{task.time_estimate.long_label} | {task.mental_load.label} mental load | "
        f"{task.location.label} | {task.priority.label} priority\n"
    )

    break_shown = False
    try:
        while True:
            time.sleep(1)
            session = session.tick()
            click.echo(
                f"\r{session.format_elapsed():>6}  {round(session.progress_percent):3}%  "
                f"{session.status_line()}",
                nl=False,
            )
            if session.break_due and not break_shown:
                click.echo("\nYou've been focused for 25 minutes. Consider a short break.")
                break_shown = True
    except KeyboardInterrupt:
        click.echo()

    if not task.completed and click.confirm("Mark task as done?", default=False):
        try:
            toggle_completion(config, task.id)
        except USER_ERRORS as e:
            _fail(e)
        click.echo(f"Completed: {task.title}")


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def bot(debug: bool):
    """Run the Telegram bot."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )

    try:
        from .telegram_bot import run_bot
        click.echo("Starting CheckMate Telegram bot...")
        click.echo("Press Ctrl+C to stop")
        run_bot()
    except ImportError as e:
        click.echo("Error: Missing dependencies. Run 'pip install python-telegram-bot'", err=True)
        click.echo(f"Details: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBot stopped.")


if __name__ == "__main__":
    main()
