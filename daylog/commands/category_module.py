# daylog/commands/category_module.py
'''
Daylog CLI - Category Module
Manage category groups and the categories inside them.
'''

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from daylog.commands.shared_options import fail
from daylog.utils.db import category_repository
from daylog.utils.error_handler import DatabaseError, ValidationError

app = typer.Typer(help="🗂️  Manage category groups and categories.")

console = Console()
logger = logging.getLogger(__name__)


@app.command("groups")
def list_groups():
    """List category groups with their category counts."""
    index = category_repository.load_category_index()
    if not index.groups:
        console.print("[yellow]No groups yet. Run `dlog setup` to add the defaults.[/yellow]")
        return
    table = Table(title="Category Groups")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Group")
    table.add_column("Color")
    table.add_column("Categories", justify="right")
    for group in index.groups:
        table.add_row(str(group.id), f"[{group.color_hex}]{group.name}[/]", group.color_hex,
                      str(len(index.categories_in_group(group.id))))
    console.print(table)


@app.command("list")
def list_categories(
    group: Optional[str] = typer.Option(None, "-g", "--group", help="Only this group."),
):
    """List categories, grouped."""
    index = category_repository.load_category_index()
    groups = index.groups
    if group:
        match = index.group_by_name(group)
        if match is None:
            fail(console, f"Unknown group '{group}'")
        groups = [match]

    table = Table(title="Categories")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Category")
    table.add_column("Group")
    table.add_column("Icon", style="dim")
    for grp in groups:
        for cat in index.categories_in_group(grp.id):
            table.add_row(str(cat.id), cat.name, f"[{grp.color_hex}]{grp.name}[/]", cat.icon)
    if not group:
        for cat in index.categories:
            if index.group(cat.group_id) is None:
                table.add_row(str(cat.id), cat.name, "[dim]ungrouped[/dim]", cat.icon)
    console.print(table)


@app.command("add-group")
def add_group(
    name: str = typer.Argument(..., help="Group name."),
    color: str = typer.Option("#8E8E93", "--color", help="Hex color, e.g. #34C759."),
    sort_order: Optional[int] = typer.Option(None, "--order", help="Position in lists."),
):
    """Create a category group."""
    if sort_order is None:
        sort_order = len(category_repository.get_all_groups())
    try:
        group = category_repository.add_group(
            {"name": name, "color_hex": color, "sort_order": sort_order})
    except (ValidationError, DatabaseError) as e:
        fail(console, str(e))
    console.print(f"[green]✓ Added group '{group.name}'[/green]")


@app.command("add")
def add_category(
    name: str = typer.Argument(..., help="Category name."),
    group: str = typer.Option(..., "-g", "--group", help="Group the category belongs to."),
    icon: str = typer.Option("circle.fill", "--icon", help="Icon tag."),
):
    """Create a category inside a group."""
    grp = category_repository.get_group_by_name(group)
    if grp is None:
        fail(console, f"Unknown group '{group}'")
    try:
        cat = category_repository.add_category({
            "name": name,
            "icon": icon,
            "group_id": grp.id,
            "sort_order": len(category_repository.get_all_categories(grp.id)),
        })
    except (ValidationError, DatabaseError) as e:
        fail(console, str(e))
    console.print(f"[green]✓ Added category '{cat.name}' to {grp.name}[/green]")


@app.command("edit-group")
def edit_group(
    name: str = typer.Argument(..., help="Current group name."),
    new_name: Optional[str] = typer.Option(None, "--name", help="Rename the group."),
    color: Optional[str] = typer.Option(None, "--color", help="New hex color."),
    sort_order: Optional[int] = typer.Option(None, "--order", help="New position in lists."),
):
    """Rename, recolor or reorder a group."""
    grp = category_repository.get_group_by_name(name)
    if grp is None:
        fail(console, f"Unknown group '{name}'")
    updates = {k: v for k, v in
               (("name", new_name), ("color_hex", color), ("sort_order", sort_order))
               if v is not None}
    if not updates:
        fail(console, "Nothing to change. Pass --name, --color or --order.")
    try:
        updated = category_repository.update_group(grp.id, **updates)
    except (ValidationError, DatabaseError) as e:
        fail(console, str(e))
    console.print(f"[green]✓ Updated group '{updated.name}'[/green]")


@app.command("edit")
def edit_category(
    name: str = typer.Argument(..., help="Current category name."),
    new_name: Optional[str] = typer.Option(None, "--name", help="Rename the category."),
    group: Optional[str] = typer.Option(None, "-g", "--group", help="Move to another group."),
    icon: Optional[str] = typer.Option(None, "--icon", help="New icon tag."),
    sort_order: Optional[int] = typer.Option(None, "--order", help="New position in its group."),
):
    """Rename a category, move it to another group, or change its icon or order."""
    cat = category_repository.get_category_by_name(name)
    if cat is None:
        fail(console, f"Unknown category '{name}'")
    updates = {k: v for k, v in
               (("name", new_name), ("icon", icon), ("sort_order", sort_order))
               if v is not None}
    if group is not None:
        grp = category_repository.get_group_by_name(group)
        if grp is None:
            fail(console, f"Unknown group '{group}'")
        updates["group_id"] = grp.id
    if not updates:
        fail(console, "Nothing to change. Pass --name, --group, --icon or --order.")
    try:
        updated = category_repository.update_category(cat.id, **updates)
    except (ValidationError, DatabaseError) as e:
        fail(console, str(e))
    console.print(f"[green]✓ Updated category '{updated.name}'[/green]")


@app.command("delete-group")
def delete_group(
    name: str = typer.Argument(..., help="Group name."),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation."),
):
    """Delete a group and all of its categories. Their hours become unlogged."""
    grp = category_repository.get_group_by_name(name)
    if grp is None:
        fail(console, f"Unknown group '{name}'")
    if not yes and not typer.confirm(
            f"Delete '{grp.name}' and all of its categories?", default=False):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit()
    try:
        removed = category_repository.delete_group(grp.id)
    except DatabaseError as e:
        fail(console, str(e))
    console.print(f"[green]✓ Deleted group '{grp.name}' ({removed} categories)[/green]")


@app.command("delete")
def delete_category(
    name: str = typer.Argument(..., help="Category name."),
    yes: bool = typer.Option(False, "-y", "--yes", help="Skip confirmation."),
):
    """Delete a category. Its logged hours are kept as unlogged."""
    cat = category_repository.get_category_by_name(name)
    if cat is None:
        fail(console, f"Unknown category '{name}'")
    if not yes and not typer.confirm(f"Delete category '{cat.name}'?", default=False):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit()
    try:
        orphaned = category_repository.delete_category(cat.id)
    except DatabaseError as e:
        fail(console, str(e))
    console.print(f"[green]✓ Deleted '{cat.name}', {orphaned} hours now unlogged[/green]")
