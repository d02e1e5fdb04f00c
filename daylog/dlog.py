#!/usr/bin/env python3
'''
Daylog CLI
A command-line journal of how each hour of the day was spent, with day, week
and month reports and rule-based insights.
'''
import logging
import sys

import typer
from rich.console import Console
from rich.panel import Panel

import daylog.config.config_manager as cf
from daylog.commands import category_module, export_module, hour_module, parse_module, report
from daylog.utils import default_data, log_utils
from daylog.utils.db import database_manager
from daylog.utils.error_handler import DatabaseError

app = typer.Typer(
    help="📔 Daylog CLI: log your hours, then review where the time went.")

console = Console()
logger = logging.getLogger(__name__)

app.add_typer(hour_module.app, name="hour",
              help="Log, clear and view hour slots.")
app.add_typer(category_module.app, name="category",
              help="Manage category groups and categories.")
app.add_typer(report.app, name="report",
              help="Day, week and month reports with insights.")
app.add_typer(export_module.app, name="export",
              help="Export hour logs.")
app.command("parse")(parse_module.parse_command)


def initialize_application() -> bool:
    """
    Create the base directory and schema, then seed the default groups and
    categories if there are none. Returns True if defaults were seeded.
    """
    cf.BASE_DIR.mkdir(parents=True, exist_ok=True)
    if not database_manager.is_initialized():
        database_manager.initialize_schema()
        logger.info("Database schema initialized")
    return default_data.ensure_defaults()


@app.command("setup")
def setup_command(
    reset: bool = typer.Option(
        False, "--reset", help="Delete all data and restore the default categories."),
):
    """Initialize the database and default categories."""
    try:
        seeded = initialize_application()
        if reset:
            if not typer.confirm("Delete every hour log and category?", default=False):
                console.print("[yellow]Reset aborted[/yellow]")
                raise typer.Exit()
            default_data.reset_to_defaults()
            seeded = True
    except DatabaseError as e:
        logger.error(f"Setup failed: {e}", exc_info=True)
        console.print(f"[red]⚠️ Setup failed: {e}[/red]")
        raise typer.Exit(1)

    config = cf.load_config()
    meta = config.setdefault("meta", {})
    if not meta.get("first_run_complete", False):
        meta["first_run_complete"] = True
        if not cf.save_config(config):
            console.print("[red]⚠️ Configuration save failed after setup.[/red]")

    if seeded:
        console.print("[dim]• Default groups and categories added[/dim]")
    console.print(Panel("[green]✓ Daylog is ready.[/green] Try `dlog hour set 9 -c \"Deep Work\"`",
                        style="green", expand=False))


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging."),
):
    """
    Runs before every command: logging, then a silent initialization.
    """
    level = "DEBUG" if verbose else cf.get_config_value("logging", "level", "INFO")
    log_utils.setup_logging(level, log_dir=cf.BASE_DIR / "logs")
    if ctx.invoked_subcommand == "setup":
        return
    try:
        initialize_application()
    except DatabaseError as e:
        logger.error(f"Initialization error in main_callback: {e}", exc_info=True)
        console.print(f"[red]Initialization error: {e}[/red]")
        raise typer.Exit(1)


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]🚪 Exiting...[/yellow]")
        sys.exit(0)
