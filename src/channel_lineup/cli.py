"""Command-line interface for the channel lineup engine."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from channel_lineup.config import get_settings
from channel_lineup.errors import LineupError
from channel_lineup.lineup.entries import LineupEntry, ProgramEntry, RedirectEntry, ScheduleResult
from channel_lineup.logging import configure_logging

app = typer.Typer(
    name="lineup",
    help="Channel lineup engine - build and rewrite virtual channel lineups",
    add_completion=False,
)

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug mode"),
) -> None:
    """Channel lineup CLI."""
    settings = get_settings()
    if debug or settings.debug:
        configure_logging(log_level="DEBUG", log_file=settings.log_file)
    else:
        configure_logging(log_level=settings.log_level, log_file=settings.log_file)


# Config commands
config_app = typer.Typer(help="Configuration management")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show current configuration."""
    settings = get_settings()

    if json_output:
        config_dict = {}
        for field_name in type(settings).model_fields:
            value = getattr(settings, field_name)
            config_dict[field_name] = str(value) if isinstance(value, Path) else value
        typer.echo(json.dumps(config_dict, indent=2))
    else:
        table = Table(title="Channel Lineup Configuration", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        for field_name in type(settings).model_fields:
            table.add_row(field_name, str(getattr(settings, field_name)))

        console.print(table)


# Schedule commands
schedule_app = typer.Typer(help="Generate lineups from schedule specs")
app.add_typer(schedule_app, name="schedule")


@schedule_app.command("time-slots")
def schedule_time_slots_command(
    spec_path: Path = typer.Argument(..., help="Time slot schedule (YAML or JSON)"),
    programs_path: Path = typer.Argument(..., help="Program pool (YAML or JSON)"),
    now: Optional[int] = typer.Option(None, "--now", help="Reference instant in epoch ms"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Generate a lineup from fixed time-of-day slots."""
    from channel_lineup.scheduler import schedule_time_slots
    from channel_lineup.scheduler.loader import load_programs, load_time_slot_schedule

    try:
        spec = load_time_slot_schedule(spec_path)
        programs = load_programs(programs_path)
        result = schedule_time_slots(programs, spec, now=now, seed=seed)
    except LineupError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    _show_result(result, json_output, title="Time Slot Lineup")


@schedule_app.command("random-slots")
def schedule_random_slots_command(
    spec_path: Path = typer.Argument(..., help="Random slot schedule (YAML or JSON)"),
    programs_path: Path = typer.Argument(..., help="Program pool (YAML or JSON)"),
    now: Optional[int] = typer.Option(None, "--now", help="Start instant in epoch ms"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Generate a lineup from weighted random slots."""
    from channel_lineup.scheduler import schedule_random_slots
    from channel_lineup.scheduler.loader import load_programs, load_random_slot_schedule

    try:
        spec = load_random_slot_schedule(spec_path)
        programs = load_programs(programs_path)
        result = schedule_random_slots(programs, spec, now=now, seed=seed)
    except LineupError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    _show_result(result, json_output, title="Random Slot Lineup")


# Transform commands
transform_app = typer.Typer(help="Rewrite existing lineups")
app.add_typer(transform_app, name="transform")


@transform_app.command("restrict-hours")
def transform_restrict_hours(
    lineup_path: Path = typer.Argument(..., help="Lineup file (YAML or JSON)"),
    start: str = typer.Option(..., "--start", help="Window start (HH:MM)"),
    end: str = typer.Option(..., "--end", help="Window end (HH:MM, may be earlier than start)"),
    now: Optional[int] = typer.Option(None, "--now", help="Reference instant in epoch ms"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Only play content between two times of day."""
    from channel_lineup.scheduler.timing import DAY_MS
    from channel_lineup.transforms import restrict_hours

    start_ms = _parse_time_of_day(start)
    end_ms = _parse_time_of_day(end)
    if end_ms <= start_ms:
        end_ms += DAY_MS

    _, entries = _load_lineup(lineup_path)
    result = restrict_hours(entries, start_ms, end_ms, now=now)
    if result.new_start_time is None and result.entries:
        rprint("[yellow]Invalid window, lineup left unchanged[/yellow]")
        raise typer.Exit(1)
    if not result.entries:
        rprint("[yellow]No entries fit the window[/yellow]")
        raise typer.Exit(1)

    _show_result(
        ScheduleResult(start_time=result.new_start_time, entries=result.entries),
        json_output,
        title="Restricted Lineup",
    )


@transform_app.command("replicate")
def transform_replicate(
    lineup_path: Path = typer.Argument(..., help="Lineup file (YAML or JSON)"),
    count: int = typer.Option(2, "--count", "-n", min=0, help="Number of copies"),
    mode: str = typer.Option("fixed", "--mode", help="fixed or random"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Repeat a lineup, optionally shuffling the copies together."""
    from channel_lineup.transforms import replicate

    start_time, entries = _load_lineup(lineup_path)
    try:
        replicated = replicate(entries, count, mode=mode, seed=seed)
    except LineupError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    _show_result(ScheduleResult(start_time=start_time or 0, entries=replicated), json_output, title="Replicated Lineup")


@transform_app.command("consolidate")
def transform_consolidate(
    lineup_path: Path = typer.Argument(..., help="Lineup file (YAML or JSON)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Merge adjacent flex and same-channel redirects."""
    from channel_lineup.transforms import consolidate

    start_time, entries = _load_lineup(lineup_path)
    consolidated = consolidate(entries)
    if not json_output:
        rprint(f"[cyan]Merged {len(entries) - len(consolidated)} entries[/cyan]")

    _show_result(ScheduleResult(start_time=start_time or 0, entries=consolidated), json_output, title="Consolidated Lineup")


@transform_app.command("balance")
def transform_balance(
    lineup_path: Path = typer.Argument(..., help="Lineup file (YAML or JSON)"),
    by: str = typer.Option("duration", "--by", help="duration or program_count"),
    tolerance: Optional[int] = typer.Option(None, "--tolerance", min=0, help="Allowed spread between groups"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Append programs until every group gets similar airtime."""
    from channel_lineup.transforms import balance

    start_time, entries = _load_lineup(lineup_path)
    try:
        balanced = balance(entries, by=by, tolerance=tolerance)
    except LineupError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    _show_result(ScheduleResult(start_time=start_time or 0, entries=balanced), json_output, title="Balanced Lineup")


def _load_lineup(path: Path) -> tuple[Optional[int], List[LineupEntry]]:
    """Helper to load a lineup file or exit with an error."""
    from channel_lineup.scheduler.loader import load_lineup

    try:
        return load_lineup(path)
    except LineupError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _parse_time_of_day(value: str) -> int:
    """Parse ``HH:MM`` into milliseconds after midnight."""
    try:
        parsed = datetime.strptime(value, "%H:%M")
    except ValueError:
        raise typer.BadParameter(f"Invalid time: {value}. Use HH:MM")
    return (parsed.hour * 60 + parsed.minute) * 60_000


def _format_duration(duration_ms: int) -> str:
    seconds = duration_ms // 1000
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def _describe(entry: LineupEntry) -> str:
    if isinstance(entry, ProgramEntry):
        return entry.program_id if entry.group_key is None else f"{entry.program_id} ({entry.group_key})"
    if isinstance(entry, RedirectEntry):
        return f"-> {entry.target_channel_id}"
    return ""


def _show_result(result: ScheduleResult, json_output: bool, title: str) -> None:
    """Helper to print a lineup as JSON or a table."""
    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    table = Table(title=title, show_header=True)
    table.add_column("#", style="cyan", width=4)
    table.add_column("Start (UTC)", style="yellow")
    table.add_column("Type", style="green")
    table.add_column("Content", style="white")
    table.add_column("Duration", style="magenta")

    t = result.start_time
    for position, entry in enumerate(result.entries, start=1):
        start = datetime.fromtimestamp(t / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(str(position), start, entry.type, _describe(entry), _format_duration(entry.duration_ms))
        t += entry.duration_ms

    console.print(table)

    programs = sum(1 for entry in result.entries if isinstance(entry, ProgramEntry))
    rprint(f"\n[cyan]Entries:[/cyan] {len(result.entries)} ({programs} programs)")
    rprint(f"[cyan]Total Duration:[/cyan] {_format_duration(result.total_duration_ms)}")


if __name__ == "__main__":
    app()
