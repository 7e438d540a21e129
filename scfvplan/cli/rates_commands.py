"""Rate table CLI commands for SCFV Plan.

Manages rates.yaml - the payroll rates applied to every personnel item.
"""

import json

import click
from rich.console import Console

from scfvplan.sdk import ConfigError, get_rates_path
from scfvplan.sdk.payroll import (
    FRACTION_FIELDS,
    RATE_FIELDS,
    RateInputError,
    load_rate_table,
    reset_rate_table,
    set_rate_fraction,
    set_rate_percent,
)

from .renderers.cost_renderer import render_rates


@click.group()
def rates():
    """Manage the payroll rate table (rates.yaml).

    \b
    Keys:
      fgts_rate, employer_inss_rate, pis_rate, provision_inss_rate,
      multa_fgts_rate, one_third_vacation_provision_rate,
      thirteenth_salary_provision_rate

    Changing a rate changes every displayed and exported total, since
    costs are never stored.
    """
    pass


@rates.command("show")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def rates_show(output_format):
    """Show the rate table in effect."""
    try:
        table = load_rate_table()
    except ConfigError as e:
        raise click.ClickException(str(e))

    if output_format == "json":
        click.echo(json.dumps(table.model_dump(), indent=2))
        return

    rates_path = get_rates_path()
    source = str(rates_path) if rates_path.exists() else "defaults"
    render_rates(Console(), table, source)


@rates.command("set")
@click.argument("key", type=click.Choice(RATE_FIELDS))
@click.argument("percent", type=float)
def rates_set(key, percent):
    """Set KEY to PERCENT (e.g. 'rates set fgts_rate 8')."""
    try:
        table = set_rate_percent(key, percent)
    except (RateInputError, ConfigError) as e:
        raise click.ClickException(str(e))
    click.echo(f"{key} = {getattr(table, key)!r} ({percent:g}%)")


@rates.command("set-fraction")
@click.argument("key", type=click.Choice(FRACTION_FIELDS))
@click.argument("denominator", type=float)
def rates_set_fraction(key, denominator):
    """Set a provision rate to 1 / DENOMINATOR (e.g. 36 for the vacation third)."""
    try:
        table = set_rate_fraction(key, denominator)
    except (RateInputError, ConfigError) as e:
        raise click.ClickException(str(e))
    click.echo(f"{key} = {getattr(table, key)!r} (1 / {denominator:g})")


@rates.command("reset")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def rates_reset(force):
    """Restore the default rate table."""
    if not force:
        click.confirm("Restore all rates to the system defaults?", abort=True)
    reset_rate_table()
    click.echo("Rate table reset to defaults.")
