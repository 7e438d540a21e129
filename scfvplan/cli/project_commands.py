"""Project CLI commands for SCFV Plan.

Manages budget projects (create, switch, inspect, delete).
"""

import json

import click
from rich.console import Console

from scfvplan.sdk import (
    ConfigError,
    ProjectStoreError,
    create_project,
    delete_project,
    get_active_project,
    get_setting,
    list_projects,
    load_rate_table,
    project_summary,
    resolve_project,
    set_active_project,
)

from .renderers.cost_renderer import render_summary


@click.group()
def project():
    """Manage budget projects.

    Commands that add or list line items work on the active project
    unless --project is given.
    """
    pass


@project.command("create")
@click.argument("title")
@click.option("--start", "start_date", help="Start date (YYYY-MM-DD, default: today)")
@click.option("--end", "end_date", help="End date (YYYY-MM-DD, default: one year from today)")
@click.option("--no-activate", is_flag=True, help="Do not switch to the new project")
def project_create(title, start_date, end_date, no_activate):
    """Create a new project."""
    try:
        proj = create_project(title, start_date=start_date, end_date=end_date)
    except ValueError as e:
        raise click.ClickException(str(e))

    click.echo(f"Created project {proj.id[:8]}: {proj.title} ({proj.start_date} - {proj.end_date})")
    if not no_activate:
        set_active_project(proj.id)
        click.echo("Now active.")


@project.command("list")
def project_list():
    """List all projects (* marks the active one)."""
    projects = list_projects()
    if not projects:
        click.echo("No projects yet. Create one with: scfv-plan project create TITLE")
        return

    active_id = get_setting("active_project") or projects[0].id
    for proj in projects:
        marker = "*" if proj.id == active_id else " "
        click.echo(
            f"{marker} {proj.id[:8]}  {proj.title}  "
            f"({len(proj.items)} goods, {len(proj.hr_items)} personnel)"
        )


@project.command("use")
@click.argument("project_id")
def project_use(project_id):
    """Make PROJECT_ID the active project (id prefix accepted)."""
    try:
        proj = set_active_project(project_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))
    click.echo(f"Active project: {proj.id[:8]} {proj.title}")


@project.command("show")
@click.argument("project_id", required=False)
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def project_show(project_id, output_format):
    """Show annual totals of a project (default: active project)."""
    try:
        proj = resolve_project(project_id)
        rates = load_rate_table()
    except (ProjectStoreError, ConfigError) as e:
        raise click.ClickException(str(e))

    summary = project_summary(proj, rates)

    if output_format == "json":
        click.echo(json.dumps(summary.model_dump(), indent=2, ensure_ascii=False))
        return

    click.echo(f"Period: {proj.start_date} - {proj.end_date}")
    render_summary(Console(), summary)


@project.command("delete")
@click.argument("project_id")
@click.option("--force", is_flag=True, help="Skip confirmation prompt.")
def project_delete(project_id, force):
    """Delete a project and all its line items."""
    try:
        proj = resolve_project(project_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))

    if not force:
        click.confirm(f"Delete project '{proj.title}' ({proj.id[:8]})?", abort=True)

    try:
        delete_project(proj.id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))

    click.echo(f"Deleted project {proj.id[:8]}.")
    click.echo(f"Active project: {get_active_project().title}")
