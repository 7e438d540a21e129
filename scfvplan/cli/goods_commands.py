"""Goods and services CLI commands for SCFV Plan."""

import json

import click

from scfvplan.sdk import (
    PARANA_RUBRICS,
    ProjectStoreError,
    ValidationError,
    goods_total,
    group_by_rubric,
    new_goods_item,
    resolve_project,
)
from scfvplan.sdk.goods import apply_percent_adjustment, item_annual_total, scale_to_target
from scfvplan.sdk.projects import add_goods_item, remove_goods_item, replace_goods_items

from .renderers.cost_renderer import format_brl


def _resolve(project_id):
    try:
        return resolve_project(project_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))


@click.group()
def goods():
    """Manage goods and services line items (QDD)."""
    pass


@goods.command("rubrics")
def goods_rubrics():
    """List the rubric catalog."""
    for rubric in PARANA_RUBRICS:
        click.echo(f"{rubric.code}  {rubric.short_name:<18} {rubric.description}")


@goods.command("add")
@click.argument("name")
@click.option("--rubric", "rubric_code", required=True, help="Rubric code (see 'goods rubrics')")
@click.option("--unit-value", type=float, required=True, help="Unit price (R$)")
@click.option("--quantity", "-q", type=float, default=1, show_default=True)
@click.option("--frequency", "-f", type=int, default=12, show_default=True,
              help="Months per year the item is bought (12 recurring, 1 one-off)")
@click.option("--justification", help="Why the item is needed")
@click.option("--project", "project_id", help="Project id (default: active project)")
def goods_add(name, rubric_code, unit_value, quantity, frequency, justification, project_id):
    """Add a goods/services item named NAME."""
    proj = _resolve(project_id)
    try:
        item = new_goods_item(
            name,
            rubric_code=rubric_code,
            unit_value=unit_value,
            quantity=quantity,
            frequency=frequency,
            justification=justification,
        )
    except ValidationError as e:
        raise click.ClickException("; ".join(e.errors))

    add_goods_item(proj.id, item)
    click.echo(f"Added {item.id[:8]}: {item.name} ({item.rubric_code})")
    click.echo(f"Annual total: {format_brl(item_annual_total(item))}")


@goods.command("list")
@click.option("--project", "project_id", help="Project id (default: active project)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def goods_list(project_id, output_format):
    """List items grouped by rubric with subtotals."""
    proj = _resolve(project_id)
    groups = group_by_rubric(proj.items)

    if output_format == "json":
        payload = {
            "project": {"id": proj.id, "title": proj.title},
            "groups": [
                {
                    "rubric": key,
                    "items": [
                        dict(item.model_dump(), annual_total=item_annual_total(item))
                        for item in items
                    ],
                    "subtotal": goods_total(items),
                }
                for key, items in groups.items()
            ],
            "total": goods_total(proj.items),
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not proj.items:
        click.echo(f"No goods items in '{proj.title}'.")
        return

    for key, items in groups.items():
        click.echo(click.style(key, bold=True))
        for item in items:
            click.echo(
                f"  {item.id[:8]}  {item.name:<30} {format_brl(item.unit_value):>14} "
                f"x{item.quantity:g} x{item.frequency}  {format_brl(item_annual_total(item)):>16}"
            )
        click.echo(f"  {'Subtotal':<40} {format_brl(goods_total(items)):>40}")
        click.echo()

    click.echo(click.style(f"TOTAL: {format_brl(goods_total(proj.items))}", bold=True))


@goods.command("remove")
@click.argument("item_id")
@click.option("--project", "project_id", help="Project id (default: active project)")
def goods_remove(item_id, project_id):
    """Remove a goods item by id (prefix accepted)."""
    proj = _resolve(project_id)
    try:
        removed = remove_goods_item(proj.id, item_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))
    click.echo(f"Removed {removed.id[:8]}: {removed.name}")


@goods.command("adjust")
@click.argument("percent", type=float)
@click.option("--project", "project_id", help="Project id (default: active project)")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def goods_adjust(percent, project_id, force):
    """Raise (or lower, with a negative PERCENT) every unit value.

    Example:
        scfv-plan goods adjust 4.5     # inflation update
        scfv-plan goods adjust -- -10  # 10% cut
    """
    proj = _resolve(project_id)
    if percent == 0 or not proj.items:
        click.echo("Nothing to adjust.")
        return

    if not force:
        click.confirm(f"Apply {percent:+g}% to all goods of '{proj.title}'?", abort=True)

    before = goods_total(proj.items)
    adjusted = apply_percent_adjustment(proj.items, percent)
    replace_goods_items(proj.id, adjusted)
    click.echo(f"Goods total: {format_brl(before)} -> {format_brl(goods_total(adjusted))}")


@goods.command("scale")
@click.argument("target", type=float)
@click.option("--project", "project_id", help="Project id (default: active project)")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def goods_scale(target, project_id, force):
    """Scale all unit values so the goods total approaches TARGET."""
    if target <= 0:
        raise click.ClickException("Target total must be greater than zero")

    proj = _resolve(project_id)
    if not proj.items or goods_total(proj.items) == 0:
        click.echo("Nothing to scale.")
        return

    if not force:
        click.confirm(f"Scale goods of '{proj.title}' to {format_brl(target)}?", abort=True)

    before = goods_total(proj.items)
    scaled = scale_to_target(proj.items, target)
    replace_goods_items(proj.id, scaled)
    click.echo(f"Goods total: {format_brl(before)} -> {format_brl(goods_total(scaled))}")
