# daylog/commands/shared_options.py
'''
Daylog Shared Options Module
Options and small helpers shared by the command modules so that every
command accepts days and output flags the same way.
'''

from datetime import date
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from daylog.utils.core_utils import now_local
from daylog.utils.error_handler import ValidationError, parse_day


day_option = typer.Option(
    None,
    "-d", "--day",
    help="Day to work on (YYYY-MM-DD). Defaults to today.",
    show_default=False,
)

date_option = typer.Option(
    None,
    "--date",
    help="Any day inside the period to report on (YYYY-MM-DD). Defaults to today.",
    show_default=False,
)

json_option = typer.Option(
    False,
    "--json",
    help="Print the report as JSON instead of tables.",
)


def resolve_day(value: Optional[str]) -> date:
    """Parse a --day/--date value, falling back to today (local time)."""
    if not value:
        return now_local().date()
    return parse_day(value)


def fail(console: Console, message: str, code: int = 1):
    """Print an error and stop the command."""
    console.print(f"[red]⚠️ {escape(message)}[/red]")
    raise typer.Exit(code=code)


def day_or_exit(console: Console, value: Optional[str]) -> date:
    try:
        return resolve_day(value)
    except ValidationError as e:
        fail(console, str(e))
