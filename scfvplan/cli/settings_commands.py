"""Settings CLI commands for SCFV Plan.

Shows where projects, exports and rates live, and moves the data
directory. The active project is changed with 'project use'.
"""

import json
from pathlib import Path

import click

from scfvplan.sdk import (
    clear_setting,
    get_config_dir,
    get_data_path,
    get_exports_path,
    get_projects_path,
    get_rates_path,
    get_setting,
    get_settings_path,
    list_projects,
    set_setting,
)


def _active_project_label():
    active_id = get_setting("active_project")
    if not active_id:
        return "(none, oldest project is used)"
    for proj in list_projects():
        if proj.id == active_id:
            return f"{proj.title} ({proj.id[:8]})"
    return f"{active_id[:8]} (missing, oldest project is used)"


@click.group()
def settings():
    """Show and change where SCFV Plan keeps its files."""
    pass


@settings.command("show")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def settings_show(output_format):
    """Show config files, data paths and the active project."""
    rates_path = get_rates_path()
    projects_path = get_projects_path()
    info = {
        "config_dir": str(get_config_dir()),
        "settings_file": str(get_settings_path()),
        "rates_file": str(rates_path),
        "custom_rates": rates_path.exists(),
        "data_dir": str(get_data_path()),
        "data_dir_is_custom": get_setting("data_dir") is not None,
        "projects_dir": str(projects_path),
        "project_count": len(list(projects_path.glob("*.json"))),
        "exports_dir": str(get_exports_path()),
        "active_project": get_setting("active_project"),
    }

    if output_format == "json":
        click.echo(json.dumps(info, indent=2, ensure_ascii=False))
        return

    rates_note = "custom" if info["custom_rates"] else "not present, defaults apply"
    data_note = "custom" if info["data_dir_is_custom"] else "default"
    click.echo(f"Config dir:     {info['config_dir']}")
    click.echo(f"Settings file:  {info['settings_file']}")
    click.echo(f"Rates file:     {info['rates_file']} ({rates_note})")
    click.echo()
    click.echo(f"Data dir:       {info['data_dir']} ({data_note})")
    click.echo(f"Projects:       {info['projects_dir']} ({info['project_count']} files)")
    click.echo(f"Exports:        {info['exports_dir']}")
    click.echo(f"Active project: {_active_project_label()}")


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path(file_okay=False))
@click.option("--clear", is_flag=True, help="Go back to the default data directory")
def settings_data_dir(path, clear):
    """Set or clear the directory holding projects and exports.

    Existing projects are not moved; copy the projects/ folder yourself.

    Examples:
        scfv-plan settings data-dir ~/Documentos/scfv
        scfv-plan settings data-dir --clear
    """
    if clear:
        if clear_setting("data_dir"):
            click.echo(f"Cleared data_dir. Projects are now read from {get_projects_path()}")
        else:
            click.echo("data_dir was not set.")
        return

    if not path:
        click.echo(f"Data dir: {get_data_path()}")
        return

    data_path = Path(path).expanduser().resolve()
    try:
        for sub in ("projects", "exports"):
            (data_path / sub).mkdir(parents=True, exist_ok=True)
        write_test = data_path / "projects" / ".write_test"
        write_test.touch()
        write_test.unlink()
    except OSError as e:
        raise click.ClickException(f"Cannot use {data_path} as data directory: {e}")

    previous = get_data_path()
    set_setting("data_dir", str(data_path))
    click.echo(f"Set data_dir: {data_path}")
    if previous != data_path and any((previous / "projects").glob("*.json")):
        click.echo(f"Projects in {previous / 'projects'} were not moved.")
