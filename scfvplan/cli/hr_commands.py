"""Personnel (HR) CLI commands for SCFV Plan.

Every displayed cost is recomputed from the stored record and the current
rate table; one table is loaded per command and used for all rows.
"""

import json

import click
from rich.console import Console

from scfvplan.sdk import (
    ConfigError,
    EmployeeRecord,
    ProjectStoreError,
    ValidationError,
    column_totals,
    compute_cost,
    load_rate_table,
    new_employee,
    resolve_project,
)
from scfvplan.sdk.payroll import compute_costs
from scfvplan.sdk.projects import add_employee, get_employee, remove_employee

from .renderers.cost_renderer import format_brl, render_breakdown, render_hr_table


def _load_rates():
    try:
        return load_rate_table()
    except ConfigError as e:
        raise click.ClickException(str(e))


def _resolve(project_id):
    try:
        return resolve_project(project_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))


def _employee_options(func):
    """Shared form options for add and preview."""
    options = [
        click.option("--salary", "gross_salary", type=float, required=True,
                     help="Monthly gross salary per individual (R$)"),
        click.option("--quantity", "-q", type=int, default=1, show_default=True,
                     help="Number of people in this role"),
        click.option("--months", "-m", type=int, default=12, show_default=True,
                     help="Months budgeted in the year (1-12)"),
        click.option("--weekly-hours", type=float, default=40, show_default=True,
                     help="Weekly workload (C.H. semanal)"),
        click.option("--education", default="Ensino Médio", show_default=True,
                     help="Education level (escolaridade)"),
        click.option("--benefits", type=float, default=None,
                     help="Monthly transport/meal allowance per individual (R$)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def hr():
    """Manage personnel line items and view their costs."""
    pass


@hr.command("add")
@click.argument("role")
@_employee_options
@click.option("--project", "project_id", help="Project id (default: active project)")
def hr_add(role, gross_salary, quantity, months, weekly_hours, education, benefits, project_id):
    """Add ROLE to the project's personnel.

    Example:
        scfv-plan hr add "Psicólogo" --salary 4200 --quantity 2 --benefits 300
    """
    proj = _resolve(project_id)
    try:
        employee = new_employee(
            role,
            gross_salary=gross_salary,
            quantity=quantity,
            months=months,
            weekly_hours=weekly_hours,
            education=education,
            benefits=benefits,
        )
    except ValidationError as e:
        raise click.ClickException("; ".join(e.errors))

    add_employee(proj.id, employee)
    cost = compute_cost(employee, _load_rates())
    click.echo(f"Added {employee.id[:8]}: {employee.role} x{employee.quantity}")
    click.echo(f"Annual cost: {format_brl(cost.annual_total)}")


@hr.command("list")
@click.option("--project", "project_id", help="Project id (default: active project)")
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def hr_list(project_id, output_format):
    """List personnel with monthly/annual costs and column totals."""
    proj = _resolve(project_id)
    rates = _load_rates()

    rows = compute_costs(proj.hr_items, rates)
    totals = column_totals(proj.hr_items, rates)

    if output_format == "json":
        payload = {
            "project": {"id": proj.id, "title": proj.title},
            "rates": rates.model_dump(),
            "rows": [
                {"employee": emp.model_dump(), "cost": cost.model_dump()}
                for emp, cost in rows
            ],
            "totals": totals.model_dump(),
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not rows:
        click.echo(f"No personnel in '{proj.title}'.")
        return

    render_hr_table(Console(), rows, totals, title=f"Recursos Humanos - {proj.title}")


@hr.command("show")
@click.argument("employee_id")
@click.option("--project", "project_id", help="Project id (default: active project)")
def hr_show(employee_id, project_id):
    """Show the full cost breakdown of one personnel item."""
    proj = _resolve(project_id)
    try:
        employee = get_employee(proj.id, employee_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))

    cost = compute_cost(employee, _load_rates())
    render_breakdown(
        Console(), cost,
        title=f"{employee.role} x{employee.quantity} ({employee.months} meses)",
    )


@hr.command("remove")
@click.argument("employee_id")
@click.option("--project", "project_id", help="Project id (default: active project)")
def hr_remove(employee_id, project_id):
    """Remove a personnel item by id (prefix accepted)."""
    proj = _resolve(project_id)
    try:
        removed = remove_employee(proj.id, employee_id)
    except ProjectStoreError as e:
        raise click.ClickException(str(e))
    click.echo(f"Removed {removed.id[:8]}: {removed.role}")


@hr.command("preview")
@click.option("--role", default="Simulação", help="Role label for the preview")
@_employee_options
@click.option("--format", "output_format", type=click.Choice(["text", "json"]), default="text",
              help="Output format (default: text)")
def hr_preview(role, gross_salary, quantity, months, weekly_hours, education, benefits, output_format):
    """Compute a cost breakdown without saving anything."""
    employee = EmployeeRecord(
        id="preview",
        role=role,
        education=education,
        weekly_hours=weekly_hours,
        monthly_hours=weekly_hours * 5,
        quantity=quantity,
        gross_salary=gross_salary,
        months=months,
        benefits=benefits,
    )
    cost = compute_cost(employee, _load_rates())

    if output_format == "json":
        click.echo(json.dumps(cost.model_dump(), indent=2))
        return

    render_breakdown(Console(), cost, title=f"Simulação: {role} x{quantity} ({months} meses)")
