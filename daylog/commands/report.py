# daylog/commands/report.py
'''
Daylog CLI - Report Module
Day, week and month reports: totals against the previous period, where the
hours went, and up to four insights.
'''

import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from daylog.commands.shared_options import date_option, day_or_exit, fail, json_option
from daylog.utils.db.models import CategoryIndex
from daylog.utils.db import category_repository
from daylog.utils.error_handler import DatabaseError
from daylog.utils.reporting.periods import PeriodKind
from daylog.utils.reporting.summary import PeriodReport, load_period_report

app = typer.Typer(help="📊 Review your hours by day, week or month.")

console = Console()
logger = logging.getLogger(__name__)

ICONS = {
    "arrow-up": "↑",
    "arrow-down": "↓",
    "star": "★",
    "pie": "◔",
    "sun": "☀",
    "moon": "☾",
    "calendar": "▦",
}

# insight color tags that are not valid Rich colors as-is
COLORS = {
    "orange": "dark_orange",
    "gray": "grey50",
}


def _style(color: str) -> str:
    return COLORS.get(color, color)


def render_report(report: PeriodReport, index: CategoryIndex):
    period = report.kind.value
    current = report.current
    console.print(Panel(f"[bold]{report.title}[/bold]", style="cyan", expand=False))

    if report.insufficient_data:
        console.print(f"[yellow]No hours logged this {period}.[/yellow]")
        console.print("[dim]Start logging with `dlog hour set` to see insights.[/dim]")
        return

    change = report.total_change
    if change.has_prior_data:
        sign = "+" if change.delta >= 0 else ""
        trend = f"{sign}{change.delta}h ({sign}{change.percent_delta}%) vs last {period}"
    else:
        trend = f"no data for last {period}"
    console.print(
        f"[bold]{current.total_hours}h[/bold] logged of {current.slot_hours}h, {trend}")
    if current.average_rating is not None:
        console.print(
            f"Average rating [bold]{current.average_rating:.1f}[/bold] over {current.rated_count} hours")

    table = Table(title="Where the hours went")
    table.add_column("Category")
    table.add_column("Group")
    table.add_column("Hours", justify="right")
    table.add_column("Share", justify="right")
    for category_id, hours in current.hours_by_category.items():
        category = index.category(category_id)
        group = index.group_for_category(category_id)
        table.add_row(
            category.name if category else f"#{category_id}",
            f"[{group.color_hex}]{group.name}[/]" if group else "[dim]ungrouped[/dim]",
            f"{hours}h",
            f"{current.share_of_total(hours)}%",
        )
    if current.unlogged_hours:
        table.add_row("[dim]unlogged[/dim]", "", f"{current.unlogged_hours}h",
                      f"{current.share_of_total(current.unlogged_hours)}%")
    console.print(table)

    console.print("[bold]Insights[/bold]")
    for insight in report.insights.insights:
        icon = ICONS.get(insight.icon, "•")
        console.print(f"  [{_style(insight.color)}]{icon}[/] {insight.text}")


def _run(kind: PeriodKind, date: Optional[str], as_json: bool):
    reference = day_or_exit(console, date)
    try:
        report = load_period_report(reference, kind)
    except DatabaseError as e:
        logger.error(f"Failed to build {kind.value} report: {e}", exc_info=True)
        fail(console, str(e))
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return
    render_report(report, category_repository.load_category_index())


@app.command("day")
def day_report(date: Optional[str] = date_option, as_json: bool = json_option):
    """Report on a single day."""
    _run(PeriodKind.DAY, date, as_json)


@app.command("week")
def week_report(date: Optional[str] = date_option, as_json: bool = json_option):
    """Report on a Sunday-to-Saturday week."""
    _run(PeriodKind.WEEK, date, as_json)


@app.command("month")
def month_report(date: Optional[str] = date_option, as_json: bool = json_option):
    """Report on a calendar month."""
    _run(PeriodKind.MONTH, date, as_json)
