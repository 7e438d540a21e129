"""
Project store for SCFV budgets.

This module contains all business logic for project storage. CLI and MCP
tools should be thin wrappers that call these functions.

Layout
------

One JSON file per project under {data_dir}/projects/{id}.json, holding the
project metadata, its goods items and its personnel (HR) items. Cost
breakdowns are never stored: they depend on the current rate table and are
recomputed on every read.

Active project
--------------

CLI commands operate on the project named by settings.json "active_project".
If it is unset or points at a deleted project, the oldest project is used;
an empty store gets a fresh "Novo Orçamento {year}" project so there is
always something to work on. For the same reason the last remaining project
cannot be deleted.

IDs
---

Project, employee and goods ids are uuid4 strings. Lookups accept any
unique prefix, so the 8-char form shown by the CLI is enough.
"""

import json
import logging
import os
import time
import uuid
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .config import clear_setting, get_projects_path, get_setting, set_setting
from .goods import BudgetItem, goods_total
from .payroll import EmployeeRecord, RateTable, total_annual_cost

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)


class ProjectStoreError(Exception):
    """Raised when a store operation is not allowed."""
    pass


class ProjectNotFoundError(ProjectStoreError):
    """Raised when no project (or line item) matches an id."""
    pass


class BudgetProject(BaseModel):
    """A budget plan: goods ledger plus personnel items."""

    model_config = ConfigDict(extra="forbid")

    id: str
    title: str
    start_date: str = Field(..., description="YYYY-MM-DD")
    end_date: str = Field(..., description="YYYY-MM-DD")
    items: List[BudgetItem] = Field(default_factory=list, description="Goods and services")
    hr_items: List[EmployeeRecord] = Field(default_factory=list, description="Personnel")
    created_at: int = Field(..., description="Epoch milliseconds")
    last_modified: int = Field(..., description="Epoch milliseconds")


class ProjectSummary(BaseModel):
    """Annual totals of a project under one rate table."""

    model_config = ConfigDict(extra="forbid")

    project_id: str
    title: str
    goods_count: int
    hr_count: int
    goods_total: float
    hr_total: float
    grand_total: float


def _now_ms() -> int:
    return int(time.time() * 1000)


def _one_year_later(start: date) -> date:
    try:
        return start.replace(year=start.year + 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return start.replace(year=start.year + 1, day=28)


def _project_file(project_id: str) -> Path:
    return get_projects_path() / f"{project_id}.json"


def _match_id(candidates: Iterable[str], prefix: str, kind: str) -> str:
    """Resolve a full id from an exact id or unique prefix."""
    candidates = list(candidates)
    if prefix in candidates:
        return prefix
    matches = [c for c in candidates if c.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise ProjectNotFoundError(f"No {kind} matches id '{prefix}'")
    raise ProjectStoreError(f"Ambiguous {kind} id '{prefix}' matches {len(matches)} entries")


# =============================================================================
# PROJECT CRUD
# =============================================================================

def save_project(project: BudgetProject) -> Path:
    """Write a project to disk, bumping last_modified.

    Returns:
        Path to the saved JSON file
    """
    project.last_modified = _now_ms()
    path = _project_file(project.id)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(project.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
    logger.debug(f"saved project {project.id[:8]} to {path}")
    return path


def create_project(
    title: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> BudgetProject:
    """Create and persist an empty project.

    Args:
        title: Project title (used in the export file name)
        start_date: YYYY-MM-DD, defaults to today
        end_date: YYYY-MM-DD, defaults to one year after today

    Raises:
        ValueError: If title is empty
    """
    if not title or not title.strip():
        raise ValueError("Project title is required")

    today = date.today()
    now = _now_ms()
    project = BudgetProject(
        id=str(uuid.uuid4()),
        title=title.strip(),
        start_date=start_date or today.isoformat(),
        end_date=end_date or _one_year_later(today).isoformat(),
        created_at=now,
        last_modified=now,
    )
    save_project(project)
    logger.info(f"created project '{project.title}' ({project.id[:8]})")
    return project


def list_projects() -> List[BudgetProject]:
    """List all stored projects, oldest first.

    Files that cannot be parsed are skipped with a warning.
    """
    results = []
    for json_file in get_projects_path().glob("*.json"):
        try:
            with open(json_file, encoding="utf-8") as f:
                results.append(BudgetProject.model_validate(json.load(f)))
        except (json.JSONDecodeError, OSError, PydanticValidationError) as e:
            logger.warning(f"{json_file.name}: skipping unreadable project file ({e})")
            continue

    results.sort(key=lambda p: (p.created_at, p.id))
    return results


def get_project(project_id: str) -> BudgetProject:
    """Get a project by id or unique id prefix.

    Raises:
        ProjectNotFoundError: If no stored project matches
    """
    projects = {p.id: p for p in list_projects()}
    return projects[_match_id(projects, project_id, "project")]


def delete_project(project_id: str) -> BudgetProject:
    """Delete a project. The last remaining project cannot be deleted.

    Returns:
        The deleted project

    Raises:
        ProjectNotFoundError: If no stored project matches
        ProjectStoreError: If it is the only project
    """
    project = get_project(project_id)
    if len(list_projects()) <= 1:
        raise ProjectStoreError("At least one project must remain; create another first")

    _project_file(project.id).unlink()
    if get_setting("active_project") == project.id:
        clear_setting("active_project")
    logger.info(f"deleted project '{project.title}' ({project.id[:8]})")
    return project


# =============================================================================
# ACTIVE PROJECT
# =============================================================================

def set_active_project(project_id: str) -> BudgetProject:
    """Make a project the target of CLI commands."""
    project = get_project(project_id)
    set_setting("active_project", project.id)
    return project


def get_active_project() -> BudgetProject:
    """Return the active project, falling back to the oldest one.

    Creates a default project when the store is empty.
    """
    active_id = get_setting("active_project")
    projects = list_projects()

    if active_id:
        for project in projects:
            if project.id == active_id:
                return project
        logger.warning(f"active project {active_id[:8]} not found, falling back")

    if projects:
        return projects[0]

    return create_project(f"Novo Orçamento {date.today().year}")


def resolve_project(project_id: Optional[str] = None) -> BudgetProject:
    """The named project, or the active one when no id is given."""
    if project_id:
        return get_project(project_id)
    return get_active_project()


# =============================================================================
# LINE ITEMS
# =============================================================================

def add_employee(project_id: str, employee: EmployeeRecord) -> BudgetProject:
    """Append a personnel record to a project."""
    project = get_project(project_id)
    project.hr_items.append(employee)
    save_project(project)
    return project


def get_employee(project_id: str, employee_id: str) -> EmployeeRecord:
    """Find a personnel record by id or unique prefix."""
    project = get_project(project_id)
    full_id = _match_id((e.id for e in project.hr_items), employee_id, "employee")
    return next(e for e in project.hr_items if e.id == full_id)


def remove_employee(project_id: str, employee_id: str) -> EmployeeRecord:
    """Delete a personnel record by id or unique prefix.

    Returns:
        The removed record

    Raises:
        ProjectNotFoundError: If the project or the record is not found
    """
    project = get_project(project_id)
    full_id = _match_id((e.id for e in project.hr_items), employee_id, "employee")
    removed = next(e for e in project.hr_items if e.id == full_id)
    project.hr_items = [e for e in project.hr_items if e.id != full_id]
    save_project(project)
    return removed


def add_goods_item(project_id: str, item: BudgetItem) -> BudgetProject:
    """Append a goods/services item to a project."""
    project = get_project(project_id)
    project.items.append(item)
    save_project(project)
    return project


def remove_goods_item(project_id: str, item_id: str) -> BudgetItem:
    """Delete a goods item by id or unique prefix.

    Raises:
        ProjectNotFoundError: If the project or the item is not found
    """
    project = get_project(project_id)
    full_id = _match_id((i.id for i in project.items), item_id, "item")
    removed = next(i for i in project.items if i.id == full_id)
    project.items = [i for i in project.items if i.id != full_id]
    save_project(project)
    return removed


def replace_goods_items(project_id: str, items: List[BudgetItem]) -> BudgetProject:
    """Overwrite the goods ledger (after an adjustment or reduction)."""
    project = get_project(project_id)
    project.items = list(items)
    save_project(project)
    return project


def project_summary(project: BudgetProject, rates: RateTable) -> ProjectSummary:
    """Annual goods, personnel and grand totals of a project."""
    goods = goods_total(project.items)
    hr = total_annual_cost(project.hr_items, rates)
    return ProjectSummary(
        project_id=project.id,
        title=project.title,
        goods_count=len(project.items),
        hr_count=len(project.hr_items),
        goods_total=goods,
        hr_total=hr,
        grand_total=goods + hr,
    )
