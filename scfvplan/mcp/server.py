"""SCFV Plan MCP Server - FastMCP implementation for budget tools."""

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from scfvplan.sdk import (
    ConfigError,
    EmployeeRecord,
    ProjectStoreError,
    compute_cost as sdk_compute_cost,
    list_projects,
    load_rate_table,
    project_summary as sdk_project_summary,
    resolve_project,
)
from scfvplan.sdk.payroll import column_totals, compute_costs, validate_employee_entry

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("scfv-plan")


# --- Tools ---

@mcp.tool()
async def compute_cost(
    gross_salary: float = Field(description="Monthly gross salary per individual (R$)"),
    quantity: int = Field(default=1, description="Number of people in the role"),
    months: int = Field(default=12, description="Months budgeted in the year (1-12)"),
    benefits: float | None = Field(default=None, description="Monthly benefits per individual (R$)"),
    role: str = Field(default="Simulação", description="Role label"),
) -> dict[str, Any]:
    """Compute the employer cost breakdown of a personnel line under the current rate table."""
    errors = validate_employee_entry(role, gross_salary, quantity, months, 40, benefits)
    if errors:
        return {"error": "; ".join(errors), "cost": None}

    try:
        rates = load_rate_table()
    except ConfigError as e:
        return {"error": str(e), "cost": None}

    employee = EmployeeRecord(
        id="preview",
        role=role,
        weekly_hours=40,
        monthly_hours=200,
        quantity=quantity,
        gross_salary=gross_salary,
        months=months,
        benefits=benefits,
    )
    return {
        "cost": sdk_compute_cost(employee, rates).rounded(),
        "rates": rates.model_dump(),
    }


@mcp.tool()
async def list_employees(
    project_id: str | None = Field(default=None, description="Project id or prefix (default: active project)"),
) -> dict[str, Any]:
    """List a project's personnel items with their monthly and annual costs, plus column totals."""
    try:
        proj = resolve_project(project_id)
        rates = load_rate_table()
    except (ProjectStoreError, ConfigError) as e:
        return {"error": str(e), "employees": [], "count": 0}

    employees = [
        {
            "id": emp.id,
            "role": emp.role,
            "quantity": emp.quantity,
            "months": emp.months,
            "gross_salary": emp.gross_salary,
            "monthly_total": round(cost.monthly_total, 2),
            "annual_total": round(cost.annual_total, 2),
        }
        for emp, cost in compute_costs(proj.hr_items, rates)
    ]
    return {
        "project": {"id": proj.id, "title": proj.title},
        "employees": employees,
        "count": len(employees),
        "totals": column_totals(proj.hr_items, rates).rounded(),
    }


@mcp.tool()
async def project_summary(
    project_id: str | None = Field(default=None, description="Project id or prefix (default: active project)"),
) -> dict[str, Any]:
    """Get goods, personnel and grand annual totals of a project."""
    try:
        proj = resolve_project(project_id)
        rates = load_rate_table()
    except (ProjectStoreError, ConfigError) as e:
        return {"error": str(e), "summary": None}

    return {
        "summary": sdk_project_summary(proj, rates).model_dump(),
        "period": {"start": proj.start_date, "end": proj.end_date},
    }


@mcp.tool()
async def get_rate_table() -> dict[str, Any]:
    """Get the payroll rate table in effect (fractions, e.g. 0.08 for 8%)."""
    try:
        return {"rates": load_rate_table().model_dump()}
    except ConfigError as e:
        return {"error": str(e), "rates": None}


# --- Resources ---

@mcp.resource("scfvplan://projects")
async def list_projects_resource() -> str:
    """List projects with item counts."""
    try:
        projects = [
            {"id": p.id, "title": p.title, "goods": len(p.items), "personnel": len(p.hr_items)}
            for p in list_projects()
        ]
        return json.dumps({"projects": projects}, indent=2, ensure_ascii=False)
    except ProjectStoreError as e:
        logger.error(f"Error listing projects: {e}")
        return json.dumps({"error": str(e)})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
