"""SCFV Plan CLI - Command-line interface for SCFV budget planning."""

import click

from scfvplan import __version__
from scfvplan.sdk import (
    ConfigError,
    ProjectStoreError,
    export_workbook,
    load_rate_table,
    resolve_project,
)

from .project_commands import project as project_group
from .hr_commands import hr as hr_group
from .goods_commands import goods as goods_group
from .rates_commands import rates as rates_group
from .settings_commands import settings as settings_group
from .advise_commands import advise as advise_group


@click.group()
@click.version_option(version=__version__, prog_name="scfv-plan")
def cli():
    """SCFV Plan - Budget planning for SCFV social assistance projects.

    Builds the goods/services ledger (QDD) and the personnel (RH) cost
    projection, and exports both to a spreadsheet with live formulas.

    Configuration is loaded from (in order):

    \b
    1. SCFV_PLAN_CONFIG_PATH environment variable (config directory)
    2. ~/.config/scfv-plan/ (XDG default)

    Run 'scfv-plan rates show' to see the payroll rates in effect.
    """
    pass


# Add subcommand groups
cli.add_command(project_group)
cli.add_command(hr_group)
cli.add_command(goods_group)
cli.add_command(rates_group)
cli.add_command(settings_group)
cli.add_command(advise_group)


@cli.command("export")
@click.option("--project", "project_id", help="Project id (default: active project)")
@click.option("--output", "-o", type=click.Path(dir_okay=False),
              help="Output .xlsx file (default: exports dir / TITLE_SCFV.xlsx)")
def export(project_id, output):
    """Export the project to an .xlsx workbook.

    Personnel costs are written as formulas over the row's own cells,
    with the current rates inlined as literals.
    """
    try:
        proj = resolve_project(project_id)
        rates = load_rate_table()
    except (ProjectStoreError, ConfigError) as e:
        raise click.ClickException(str(e))

    try:
        path = export_workbook(proj, rates, output)
    except OSError as e:
        raise click.ClickException(f"Cannot write workbook: {e}")

    click.echo(f"Exported '{proj.title}' to {path}")


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
