"""
Main CLI application using Typer.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..adapters.http_repository import HttpScheduleRepository
from ..adapters.mock_repository import MockScheduleRepository
from ..config import AppConfig, get_default_config_path
from ..domain.clock import format_range, time_options
from ..domain.exceptions import AvailabilityError, ValidationError
from ..domain.models import AvailabilitySchedule
from ..domain.overrides import (
    SOURCE_OVERRIDE,
    format_override_date,
    format_override_slots,
    resolve_availability,
    resolve_range,
)
from ..domain.summarizer import SummaryStyle, summarize
from ..services.repository import ListParams, ScheduleRepository

app = typer.Typer(
    name="availability",
    help="Inspect and manage weekly availability schedules",
    add_completion=False
)

console = Console()


@dataclass
class CliContext:
    """Global options; config and repository are built on first use."""
    config_file: Optional[Path] = None
    mock: bool = False

    @cached_property
    def config(self) -> AppConfig:
        try:
            return _load_config(self.config_file, self.mock)
        except (FileNotFoundError, ValueError) as e:
            _fail(str(e))

    @cached_property
    def repository(self) -> ScheduleRepository:
        return _build_repository(self.config, self.mock)


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    config_path = config_file or get_default_config_path()
    if mock and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _build_repository(config: AppConfig, mock: bool) -> ScheduleRepository:
    if mock:
        return MockScheduleRepository(owner_id=config.owner_id)
    return HttpScheduleRepository(
        base_url=config.api_base_url,
        access_token=config.api_token,
        timeout=config.request_timeout,
    )


def _fail(message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


def _run(ctx: typer.Context, operation):
    """Run one repository coroutine and turn domain errors into CLI errors."""
    try:
        return asyncio.run(operation(ctx.obj.repository))
    except ValidationError as e:
        for error in e.errors:
            console.print(f"[red]• {error.field}: {error.message}[/red]")
        _fail("Schedule is invalid")
    except AvailabilityError as e:
        _fail(str(e))


def _parse_date_option(value: str, tz: str):
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        _fail(f"Could not parse date {value!r}: {e}")


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    mock: Annotated[bool, typer.Option("--mock", help="Use bundled sample schedules instead of the API.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log repository calls.")] = False,
):
    """
    Weekly availability schedules: summaries, date overrides and lifecycle.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ctx.obj = CliContext(config_file=config_file, mock=mock)


@app.command("list")
def list_schedules(
    ctx: typer.Context,
    style: Annotated[Optional[SummaryStyle], typer.Option("--style", help="Summary style (compact or grouped).")] = None,
    search: Annotated[Optional[str], typer.Option("--search", "-s", help="Only schedules whose name contains this text.")] = None,
):
    """
    List schedules with a summary of their weekly hours.
    """
    config: AppConfig = ctx.obj.config
    summary_style = style or config.summary_style

    result = _run(
        ctx,
        lambda repo: repo.list_page(config.owner_id, ListParams(search=search)),
    )

    if not result.schedules:
        console.print("[yellow]No availability schedules found.[/yellow]")
        return

    table = Table(
        title="Availability",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold yellow")
    table.add_column("Hours")
    table.add_column("Timezone", style="dim")

    for schedule in result.schedules:
        name = f"{schedule.name} [green](default)[/green]" if schedule.is_default else schedule.name
        table.add_row(
            schedule.id,
            name,
            summarize(schedule.weekly, summary_style),
            schedule.timezone,
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def show(
    ctx: typer.Context,
    schedule_id: Annotated[str, typer.Argument(help="Schedule id")],
):
    """
    Show weekly hours and date overrides of one schedule.
    """
    schedule: AvailabilitySchedule = _run(ctx, lambda repo: repo.get(schedule_id))

    lines = [f"[bold]{summarize(schedule.weekly, SummaryStyle.COMPACT)}[/bold]", ""]
    for template in schedule.weekly:
        if template.enabled and template.slots:
            hours = ", ".join(format_range(slot.start, slot.end) for slot in template.slots)
        else:
            hours = "[dim]Unavailable[/dim]"
        lines.append(f"{template.day.value:<10} {hours}")

    if schedule.overrides:
        lines.append("")
        lines.append("[bold]Date overrides[/bold]")
        for override in schedule.overrides:
            lines.append(f"{format_override_date(override.date):<13} {format_override_slots(override)}")

    title = f"{schedule.name} ({schedule.timezone})"
    if schedule.is_default:
        title += " - default"

    console.print(Panel.fit("\n".join(lines), title=title))


@app.command()
def resolve(
    ctx: typer.Context,
    schedule_id: Annotated[str, typer.Argument(help="Schedule id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD)")],
):
    """
    Show the hours a schedule offers on one date.
    """
    schedule: AvailabilitySchedule = _run(ctx, lambda repo: repo.get(schedule_id))
    day = _parse_date_option(date, schedule.timezone)
    resolved = resolve_availability(schedule, day)

    source = "date override" if resolved.source == SOURCE_OVERRIDE else "weekly hours"
    if resolved.is_available:
        hours = ", ".join(format_range(slot.start, slot.end) for slot in resolved.slots)
        console.print(f"{format_override_date(day)} ({resolved.weekday.value}): [green]{hours}[/green] [dim]({source})[/dim]")
    else:
        console.print(f"{format_override_date(day)} ({resolved.weekday.value}): [yellow]Unavailable[/yellow] [dim]({source})[/dim]")


@app.command()
def week(
    ctx: typer.Context,
    schedule_id: Annotated[str, typer.Argument(help="Schedule id")],
    start: Annotated[Optional[str], typer.Option("--start", help="First date (YYYY-MM-DD). Defaults to today.")] = None,
    days: Annotated[int, typer.Option("--days", "-d", min=1, max=62, help="Number of days to show.")] = 7,
):
    """
    Show effective hours for a run of dates, overrides applied.
    """
    schedule: AvailabilitySchedule = _run(ctx, lambda repo: repo.get(schedule_id))
    tz = schedule.timezone

    first = _parse_date_option(start, tz) if start else pendulum.now(tz).date()
    last = first.add(days=days - 1)

    table = Table(
        title=f"{schedule.name} ({tz})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold")
    table.add_column("Day")
    table.add_column("Hours")
    table.add_column("Source", style="dim")

    for resolved in resolve_range(schedule, first, last):
        hours = (
            ", ".join(format_range(slot.start, slot.end) for slot in resolved.slots)
            if resolved.is_available
            else "[yellow]Unavailable[/yellow]"
        )
        table.add_row(
            format_override_date(resolved.date),
            resolved.weekday.abbreviation,
            hours,
            resolved.source,
        )

    console.print()
    console.print(table)
    console.print()


@app.command("set-default")
def set_default(
    ctx: typer.Context,
    schedule_id: Annotated[str, typer.Argument(help="Schedule id")],
):
    """
    Make a schedule the default one.
    """
    schedule = _run(ctx, lambda repo: repo.set_default(schedule_id))
    console.print(f"[green]✓ {schedule.name} is now the default schedule.[/green]")


@app.command()
def duplicate(
    ctx: typer.Context,
    schedule_id: Annotated[str, typer.Argument(help="Schedule id")],
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Name for the copy.")] = None,
):
    """
    Copy a schedule, including its date overrides.
    """
    copied = _run(ctx, lambda repo: repo.duplicate(schedule_id, name))
    console.print(f"[green]✓ Schedule duplicated as {copied.name} ({copied.id}).[/green]")


@app.command()
def delete(
    ctx: typer.Context,
    schedule_id: Annotated[str, typer.Argument(help="Schedule id")],
):
    """
    Delete a schedule that is neither the default nor in use.
    """
    _run(ctx, lambda repo: repo.delete(schedule_id))
    console.print("[green]✓ Schedule deleted.[/green]")


@app.command()
def times():
    """
    List the selectable times (15-minute steps).
    """
    for value, label in time_options():
        console.print(f"{value}  {label}")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]availability[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
