"""Payroll cost calculator.

Expands an EmployeeRecord into its monthly and annual cost under a
RateTable by evaluating the formula graph in formula.py.

The calculator is pure and total. It performs no validation: zero,
negative or non-finite inputs flow through to the result unchanged, and
nothing is rounded here. Callers that need input checks run the entry
form validation (entry.py) first; rounding happens at display/export.
"""

from typing import Dict, Iterable, List, Tuple

from .formula import BREAKDOWN_FIELDS, STEPS, FormulaStep, Operand
from .schemas import CostBreakdown, EmployeeRecord, RateTable


def _employee_value(employee: EmployeeRecord, name: str) -> float:
    value = getattr(employee, name)
    # benefits is optional on the record; absent means no allowance
    return 0 if value is None else value


def _resolve(
    operand: Operand,
    employee: EmployeeRecord,
    rates: RateTable,
    values: Dict[str, float],
) -> float:
    if operand.source == "employee":
        return _employee_value(employee, operand.name)
    if operand.source == "rate":
        return getattr(rates, operand.name)
    return values[operand.name]


def _evaluate(
    formula_step: FormulaStep,
    employee: EmployeeRecord,
    rates: RateTable,
    values: Dict[str, float],
) -> float:
    result = sum(_resolve(op, employee, rates, values) for op in formula_step.addends)
    for op in formula_step.factors:
        result = result * _resolve(op, employee, rates, values)
    return result


def evaluate_steps(employee: EmployeeRecord, rates: RateTable) -> Dict[str, float]:
    """Evaluate every formula step in declaration order.

    Returns:
        Mapping of step name to value, in evaluation order
    """
    values: Dict[str, float] = {}
    for formula_step in STEPS:
        values[formula_step.name] = _evaluate(formula_step, employee, rates, values)
    return values


def compute_cost(employee: EmployeeRecord, rates: RateTable) -> CostBreakdown:
    """Compute the full cost breakdown for one employee record.

    Args:
        employee: The personnel line item (salary and benefits per individual)
        rates: Complete rate table to apply

    Returns:
        CostBreakdown with all fourteen components at full precision
    """
    return CostBreakdown(**evaluate_steps(employee, rates))


def compute_costs(
    employees: Iterable[EmployeeRecord], rates: RateTable
) -> List[Tuple[EmployeeRecord, CostBreakdown]]:
    """Compute breakdowns for a batch, all under the same rate table."""
    return [(emp, compute_cost(emp, rates)) for emp in employees]


def column_totals(employees: Iterable[EmployeeRecord], rates: RateTable) -> CostBreakdown:
    """Sum every breakdown field independently across records.

    Unit values (gross_salary, benefits) are not part of the result; only
    quantities derived from `base` are aggregated.
    """
    totals = {name: 0.0 for name in BREAKDOWN_FIELDS}
    for _, breakdown in compute_costs(employees, rates):
        for name in BREAKDOWN_FIELDS:
            totals[name] += getattr(breakdown, name)
    return CostBreakdown(**totals)


def total_annual_cost(employees: Iterable[EmployeeRecord], rates: RateTable) -> float:
    """Annual personnel cost of a set of records."""
    return sum(compute_cost(emp, rates).annual_total for emp in employees)
