"""SCFV Plan SDK - Core functionality for SCFV budget planning."""

from .config import (
    ConfigError,
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    clear_setting,
    get_rates_path,
    # XDG paths
    get_data_path,
    get_projects_path,
    get_exports_path,
)

from .payroll import (
    CostBreakdown,
    EmployeeRecord,
    RateTable,
    DEFAULT_RATE_TABLE,
    RateInputError,
    ValidationError,
    compute_cost,
    column_totals,
    load_rate_table,
    new_employee,
)

from .goods import (
    PARANA_RUBRICS,
    BudgetItem,
    ReductionSuggestion,
    Rubric,
    find_rubric,
    goods_total,
    group_by_rubric,
    new_goods_item,
)

from .projects import (
    BudgetProject,
    ProjectSummary,
    ProjectNotFoundError,
    ProjectStoreError,
    create_project,
    list_projects,
    get_project,
    delete_project,
    get_active_project,
    set_active_project,
    resolve_project,
    project_summary,
)

from .export import export_workbook

from . import payroll

__all__ = [
    # Config
    "ConfigError",
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "clear_setting",
    "get_rates_path",
    "get_data_path",
    "get_projects_path",
    "get_exports_path",
    # Payroll
    "CostBreakdown",
    "EmployeeRecord",
    "RateTable",
    "DEFAULT_RATE_TABLE",
    "RateInputError",
    "ValidationError",
    "compute_cost",
    "column_totals",
    "load_rate_table",
    "new_employee",
    # Goods
    "PARANA_RUBRICS",
    "BudgetItem",
    "ReductionSuggestion",
    "Rubric",
    "find_rubric",
    "goods_total",
    "group_by_rubric",
    "new_goods_item",
    # Projects
    "BudgetProject",
    "ProjectSummary",
    "ProjectNotFoundError",
    "ProjectStoreError",
    "create_project",
    "list_projects",
    "get_project",
    "delete_project",
    "get_active_project",
    "set_active_project",
    "resolve_project",
    "project_summary",
    # Export
    "export_workbook",
    # Payroll module
    "payroll",
]
