# daylog/commands/parse_module.py
'''
Daylog CLI - Natural Language Logging
Describe your day in plain words and let the configured language model
split it into hour logs.
'''

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

import daylog.config.config_manager as cf
from daylog.commands.shared_options import day_option, day_or_exit, fail
from daylog.services.log_parser import (
    LogParseError,
    LogParser,
    apply_parsed_entries,
    build_time_context,
    category_choices,
)
from daylog.utils.core_utils import format_hour
from daylog.utils.error_handler import DatabaseError, ValidationError

console = Console()
logger = logging.getLogger(__name__)


def parse_command(
    text: str = typer.Argument(..., help='What you did, e.g. "deep work 9 to 12 then lunch".'),
    day: Optional[str] = day_option,
    apply: bool = typer.Option(False, "--apply", help="Save the parsed hours."),
):
    """
    🤖 Turn a plain-language description into hour logs.
    """
    target_day = day_or_exit(console, day)
    if not cf.get_ai_settings().get("enabled", False):
        fail(console, "AI parsing is disabled. Set ai.enabled = true in your config.")

    parser = LogParser.from_config()
    try:
        with console.status("Parsing..."):
            entries = parser.parse(text, category_choices(), build_time_context(target_day))
    except LogParseError as e:
        fail(console, str(e))

    if not entries:
        console.print("[yellow]No hours could be parsed from that text.[/yellow]")
        return

    table = Table(title=f"Parsed hours for {target_day.isoformat()}")
    table.add_column("Hour", style="cyan")
    table.add_column("Category")
    table.add_column("Mood")
    table.add_column("Rating", justify="right")
    table.add_column("Notes")
    for entry in entries:
        rating = f"{entry.rating:g}" if entry.rating is not None else ""
        table.add_row(format_hour(entry.hour), entry.category_name, entry.mood, rating, entry.notes)
    console.print(table)

    if not apply:
        console.print("[dim]Run again with --apply to save these hours.[/dim]")
        return
    try:
        saved = apply_parsed_entries(entries, target_day)
    except (ValidationError, DatabaseError) as e:
        logger.error(f"Failed to save parsed hours: {e}", exc_info=True)
        fail(console, str(e))
    console.print(f"[green]✓ Saved {len(saved)} hours[/green]")
