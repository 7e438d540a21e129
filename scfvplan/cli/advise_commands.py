"""AI advisor CLI commands for SCFV Plan.

Requires the Gemini CLI on PATH. Advice is never applied without asking,
and an unavailable advisor only prints a notice.
"""

import click

from scfvplan.sdk import ProjectStoreError, find_rubric, goods_total, resolve_project
from scfvplan.sdk.advisor import (
    analyze_budget_reduction,
    suggest_price,
    suggest_rubric,
    validate_rubric_context,
)
from scfvplan.sdk.goods import apply_reduction
from scfvplan.sdk.projects import replace_goods_items

from .renderers.cost_renderer import format_brl

UNAVAILABLE = "No advice available (is the gemini CLI installed and authenticated?)."


@click.group()
def advise():
    """Ask the AI advisor about goods items."""
    pass


@advise.command("rubric")
@click.argument("item_name")
@click.option("--check", "rubric_code", help="Check whether ITEM_NAME fits this rubric code instead")
def advise_rubric(item_name, rubric_code):
    """Suggest the rubric for ITEM_NAME."""
    if rubric_code:
        rubric = find_rubric(rubric_code)
        if rubric is None:
            raise click.ClickException(f"Unknown rubric code: {rubric_code}")
        check = validate_rubric_context(item_name, rubric)
        if check.is_valid:
            click.echo(f"OK: '{item_name}' fits {rubric.code} ({rubric.short_name}).")
            return
        click.echo(f"'{item_name}' does not fit {rubric.code} ({rubric.short_name}).")
        if check.suggested_rubric:
            click.echo(f"Suggested: {check.suggested_rubric.code} {check.suggested_rubric.description}")
        if check.reason:
            click.echo(f"Reason: {check.reason}")
        return

    rubric = suggest_rubric(item_name)
    if rubric is None:
        click.echo(UNAVAILABLE)
        return
    click.echo(f"{rubric.code}  {rubric.description}")


@advise.command("price")
@click.argument("item_name")
def advise_price(item_name):
    """Estimate the regional unit price of ITEM_NAME."""
    suggestion = suggest_price(item_name)
    if suggestion is None:
        click.echo(UNAVAILABLE)
        return
    click.echo(f"{format_brl(suggestion.price)} (confidence: {suggestion.confidence})")


@advise.command("reduce")
@click.argument("percent", type=float)
@click.option("--project", "project_id", help="Project id (default: active project)")
@click.option("--apply", "apply_changes", is_flag=True, help="Apply the suggestions after confirmation")
def advise_reduce(percent, project_id, apply_changes):
    """Ask for item cuts that reduce the goods total by about PERCENT."""
    try:
        proj = resolve_project(project_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))

    if not proj.items:
        click.echo(f"No goods items in '{proj.title}'.")
        return

    suggestions = analyze_budget_reduction(proj.items, percent)
    if not suggestions:
        click.echo("No reductions suggested. " + UNAVAILABLE)
        return

    names = {item.id: item.name for item in proj.items}
    for s in suggestions:
        click.echo(
            f"{s.item_id[:8]}  {names[s.item_id]:<30} "
            f"{format_brl(s.original_value):>14} -> {format_brl(s.suggested_value):>14}  {s.reason}"
        )

    before = goods_total(proj.items)
    reduced = apply_reduction(proj.items, suggestions)
    after = goods_total(reduced)
    click.echo(f"Goods total: {format_brl(before)} -> {format_brl(after)}")

    if not apply_changes:
        return
    if click.confirm("Apply these reductions?"):
        replace_goods_items(proj.id, reduced)
        click.echo("Reductions applied.")
