"""payroll - Personnel cost projection for SCFV budgets.

Scope:
- Rate table schema, defaults and editor conversions (rates.py)
- The formula graph shared by calculator and spreadsheet export (formula.py)
- Cost breakdown of one record and column totals of many (calculator.py)
- Personnel entry-form validation (entry.py)

Constraints:
- The calculator is pure: no config reads, no I/O, no rounding
- Callers pass one RateTable to every row of a batch
- Rates are loaded from config only through load_rate_table()

Usage:
    from scfvplan.sdk.payroll import compute_cost, new_employee, DEFAULT_RATE_TABLE

    emp = new_employee("Psicólogo", gross_salary=4200, quantity=2)
    cost = compute_cost(emp, DEFAULT_RATE_TABLE)
    cost.annual_total
"""

from .schemas import CostBreakdown, EmployeeRecord, RateTable

from .formula import (
    BREAKDOWN_FIELDS,
    MONTHLY_COMPONENTS,
    STEPS,
    STEPS_BY_NAME,
    FormulaStep,
    Operand,
    iter_dependencies,
    steps_depending_on,
)

from .calculator import (
    column_totals,
    compute_cost,
    compute_costs,
    evaluate_steps,
    total_annual_cost,
)

from .rates import (
    DEFAULT_RATE_TABLE,
    FRACTION_FIELDS,
    RATE_FIELDS,
    RATE_LABELS,
    RateInputError,
    denominator_to_rate,
    load_rate_table,
    percent_to_rate,
    rate_to_denominator,
    rate_to_percent,
    reset_rate_table,
    save_rate_table,
    set_rate_fraction,
    set_rate_percent,
)

from .entry import ValidationError, new_employee, validate_employee_entry

__all__ = [
    # Schemas
    "CostBreakdown",
    "EmployeeRecord",
    "RateTable",
    # Formula graph
    "BREAKDOWN_FIELDS",
    "MONTHLY_COMPONENTS",
    "STEPS",
    "STEPS_BY_NAME",
    "FormulaStep",
    "Operand",
    "iter_dependencies",
    "steps_depending_on",
    # Calculator
    "column_totals",
    "compute_cost",
    "compute_costs",
    "evaluate_steps",
    "total_annual_cost",
    # Rates
    "DEFAULT_RATE_TABLE",
    "FRACTION_FIELDS",
    "RATE_FIELDS",
    "RATE_LABELS",
    "RateInputError",
    "denominator_to_rate",
    "load_rate_table",
    "percent_to_rate",
    "rate_to_denominator",
    "rate_to_percent",
    "reset_rate_table",
    "save_rate_table",
    "set_rate_fraction",
    "set_rate_percent",
    # Entry form
    "ValidationError",
    "new_employee",
    "validate_employee_entry",
]
