# daylog/commands/hour_module.py
'''
Daylog CLI - Hour Logging Module
Assign a category, rating and notes to an hour slot, clear a slot, or view
a whole day as a 24-slot timeline.
'''

import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

import daylog.config.config_manager as cf
from daylog.commands.shared_options import day_option, day_or_exit, fail
from daylog.utils.core_utils import format_hour, now_local
from daylog.utils.db import category_repository, hour_log_repository
from daylog.utils.error_handler import DatabaseError, ValidationError

app = typer.Typer(help="🕐 Log what you did with each hour of the day.")

console = Console()
logger = logging.getLogger(__name__)


def resolve_rating(value: Optional[str]) -> Optional[float]:
    """
    A rating is either a number or one of the configured moods (e.g. "focused").
    """
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        pass
    moods = cf.get_mood_ratings()
    mood = value.strip().lower()
    if mood in moods:
        return moods[mood]
    raise ValidationError(
        f"Rating '{value}' is neither a number nor a known mood ({', '.join(sorted(moods))})")


def parse_hours(value: str) -> List[int]:
    """
    Hours to log: a single hour ("9"), an inclusive range ("9-11"), or a
    comma-separated mix ("9-11,14"). Returned sorted and de-duplicated.
    """
    hours = set()
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        first, sep, last = part.partition("-")
        try:
            start = int(first)
            end = int(last) if sep else start
        except ValueError:
            raise ValidationError(f"Invalid hour '{part}', expected e.g. 9, 9-11 or 9,14")
        for hour in (start, end):
            if not 0 <= hour <= 23:
                raise ValidationError("Hour must be between 0 and 23")
        if end < start:
            raise ValidationError(f"Hour range '{part}' runs backwards")
        hours.update(range(start, end + 1))
    if not hours:
        raise ValidationError("No hours given")
    return sorted(hours)


@app.command("set")
def set_hour(
    hours: str = typer.Argument(
        ..., help="Hour of day 0-23 (14 = 2 PM - 3 PM), a range like 9-11, or 9,14."),
    day: Optional[str] = day_option,
    category: Optional[str] = typer.Option(
        None, "-c", "--category", help="Category name (case-insensitive)."),
    rating: Optional[str] = typer.Option(
        None, "-r", "--rating", help="Numeric rating or a mood name."),
    notes: Optional[str] = typer.Option(None, "-n", "--notes", help="Free-text notes."),
):
    """
    Log one or more hour slots. Saving into a slot that already has a log
    replaces it; with several hours, an existing rating is kept unless -r is given.
    """
    target_day = day_or_exit(console, day)
    category_id = None
    if category:
        cat = category_repository.get_category_by_name(category)
        if cat is None:
            fail(console, f"Unknown category '{category}'. See `dlog category list`.")
        category_id = cat.id

    try:
        slots = parse_hours(hours)
        value = resolve_rating(rating)
        if len(slots) == 1:
            saved = [hour_log_repository.save_hour_log({
                "day": target_day,
                "hour": slots[0],
                "category_id": category_id,
                "rating": value,
                "notes": notes,
            })]
        else:
            saved = hour_log_repository.save_hour_range(
                target_day, slots, category_id=category_id, notes=notes, rating=value)
    except (ValidationError, DatabaseError) as e:
        logger.error(f"Failed to save hour log: {e}", exc_info=True)
        fail(console, str(e))

    label = category or "uncategorized"
    if len(saved) == 1:
        console.print(
            f"[green]✓ {target_day.isoformat()} {format_hour(saved[0].hour)} logged as {label}[/green]")
    else:
        console.print(
            f"[green]✓ {target_day.isoformat()} {len(saved)} hours "
            f"({format_hour(saved[0].hour)} to {format_hour(saved[-1].hour)}) logged as {label}[/green]")


@app.command("clear")
def clear_hour(
    hour: int = typer.Argument(..., help="Hour of day, 0-23."),
    day: Optional[str] = day_option,
):
    """Remove the log for an hour slot."""
    target_day = day_or_exit(console, day)
    try:
        removed = hour_log_repository.delete_hour_log(target_day, hour)
    except DatabaseError as e:
        fail(console, str(e))
    if removed:
        console.print(f"[green]✓ Cleared {target_day.isoformat()} {format_hour(hour)}[/green]")
    else:
        console.print(f"[yellow]Nothing logged at {format_hour(hour)} on {target_day.isoformat()}[/yellow]")


@app.command("day")
def show_day(day: Optional[str] = day_option):
    """Show the 24 hour slots of a day."""
    target_day = day_or_exit(console, day)
    logs = {log.hour: log for log in hour_log_repository.get_logs_for_day(target_day)}
    index = category_repository.load_category_index()
    now = now_local()

    table = Table(title=f"{target_day.strftime('%A')} {target_day.isoformat()}")
    table.add_column("Hour", style="cyan", no_wrap=True)
    table.add_column("Category")
    table.add_column("Group", style="dim")
    table.add_column("Rating", justify="right")
    table.add_column("Notes")

    categorized = 0
    for hour in range(24):
        log = logs.get(hour)
        label = format_hour(hour)
        if target_day == now.date() and hour == now.hour:
            label = f"[bold]{label} ◀[/bold]"
        if log is None:
            table.add_row(label, "[dim]-[/dim]", "", "", "")
            continue
        category = index.category(log.category_id)
        group = index.group_for_category(log.category_id)
        if category is not None:
            categorized += 1
        group_cell = f"[{group.color_hex}]{group.name}[/]" if group else ""
        rating = f"{log.rating:g}" if log.rating is not None else ""
        table.add_row(label, category.name if category else "[dim]uncategorized[/dim]",
                      group_cell, rating, log.notes)

    console.print(table)
    # a log without a category still occupies its slot
    occupied = len(logs)
    summary = f"[bold]{occupied}[/bold] hours logged, [bold]{24 - occupied}[/bold] remaining"
    if categorized < occupied:
        summary += f" ({occupied - categorized} without a category)"
    console.print(summary)
