# daylog/commands/export_module.py
'''
Daylog CLI - Export Module
'''

import logging
from datetime import timedelta
from typing import Optional

import typer
from rich.console import Console

from daylog.commands.shared_options import day_or_exit, fail
from daylog.utils.core_utils import now_local
from daylog.utils.error_handler import DatabaseError
from daylog.utils.reporting import csv_export

app = typer.Typer(help="📤 Export your hour logs.")

console = Console()
logger = logging.getLogger(__name__)


@app.command("csv")
def export_csv(
    start: Optional[str] = typer.Option(
        None, "--start", help="First day to export (YYYY-MM-DD). Defaults to 30 days ago."),
    end: Optional[str] = typer.Option(
        None, "--end", help="Last day to export, inclusive. Defaults to today."),
    out: Optional[str] = typer.Option(
        None, "--out", help="Directory to write the CSV file into."),
):
    """Write hour logs between two days to a CSV file."""
    last = day_or_exit(console, end)
    first = day_or_exit(console, start) if start else now_local().date() - timedelta(days=30)
    try:
        path = csv_export.export_logs(first, last, out)
    except (DatabaseError, OSError) as e:
        logger.error(f"CSV export failed: {e}", exc_info=True)
        fail(console, f"Export failed: {e}")
    rows = len(csv_export.read_csv(path))
    console.print(f"[green]✓ Exported {rows} hours to {path}[/green]")
