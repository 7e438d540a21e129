"""The payroll formula graph.

Each cost component is one FormulaStep:

    value = (sum of addends) * (product of factors)

Operands point at an employee field, a rate, or an earlier step. The
calculator evaluates the steps to numbers; the spreadsheet export renders
the same steps as cell formulas. Both read STEPS, so the live preview and
the exported workbook cannot drift apart.

Order matters: a step may only reference steps declared before it, and the
order of MONTHLY_COMPONENTS is the order of the spreadsheet columns.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Literal, Tuple

Source = Literal["employee", "rate", "step"]


@dataclass(frozen=True)
class Operand:
    source: Source
    name: str


def employee(name: str) -> Operand:
    return Operand("employee", name)


def rate(name: str) -> Operand:
    return Operand("rate", name)


def step(name: str) -> Operand:
    return Operand("step", name)


@dataclass(frozen=True)
class FormulaStep:
    """A named cost component and the operands it is computed from."""

    name: str
    addends: Tuple[Operand, ...]
    factors: Tuple[Operand, ...]
    label: str


# Components summed into monthly_total, in column order.
MONTHLY_COMPONENTS = (
    "base",
    "fgts",
    "inss",
    "pis",
    "one_third_vacation_provision",
    "fgts_on_vacation_provision",
    "inss_on_vacation_provision",
    "thirteenth_salary_provision",
    "fgts_on_thirteenth",
    "inss_on_thirteenth",
    "benefits_total",
    "severance_fine_provision",
)

STEPS: Tuple[FormulaStep, ...] = (
    FormulaStep(
        "base",
        (employee("gross_salary"),),
        (employee("quantity"),),
        "Salário Base Total",
    ),
    FormulaStep("fgts", (step("base"),), (rate("fgts_rate"),), "FGTS (8%)"),
    FormulaStep("inss", (step("base"),), (rate("employer_inss_rate"),), "INSS Patronal (20%)"),
    FormulaStep(
        "one_third_vacation_provision",
        (step("base"),),
        (rate("one_third_vacation_provision_rate"),),
        "Prov. 1/3 Férias",
    ),
    FormulaStep(
        "fgts_on_vacation_provision",
        (step("one_third_vacation_provision"),),
        (rate("fgts_rate"),),
        "Prov. FGTS 1/3",
    ),
    # Provisions use the provision INSS rate, not the employer rate.
    FormulaStep(
        "inss_on_vacation_provision",
        (step("one_third_vacation_provision"),),
        (rate("provision_inss_rate"),),
        "Prov. INSS 1/3",
    ),
    FormulaStep(
        "thirteenth_salary_provision",
        (step("base"),),
        (rate("thirteenth_salary_provision_rate"),),
        "Prov. 13º Salário",
    ),
    FormulaStep(
        "fgts_on_thirteenth",
        (step("thirteenth_salary_provision"),),
        (rate("fgts_rate"),),
        "Prov. FGTS 13º",
    ),
    FormulaStep(
        "inss_on_thirteenth",
        (step("thirteenth_salary_provision"),),
        (rate("provision_inss_rate"),),
        "Prov. INSS 13º",
    ),
    # PIS is levied on payroll plus both provisions.
    FormulaStep(
        "pis",
        (
            step("base"),
            step("one_third_vacation_provision"),
            step("thirteenth_salary_provision"),
        ),
        (rate("pis_rate"),),
        "PIS (1%)",
    ),
    FormulaStep(
        "benefits_total",
        (employee("benefits"),),
        (employee("quantity"),),
        "Bem Estar Social",
    ),
    # Fine is provisioned on every FGTS deposit, regular and provisioned.
    FormulaStep(
        "severance_fine_provision",
        (
            step("fgts"),
            step("fgts_on_vacation_provision"),
            step("fgts_on_thirteenth"),
        ),
        (rate("multa_fgts_rate"),),
        "Prov. Multa FGTS 40%",
    ),
    FormulaStep(
        "monthly_total",
        tuple(step(name) for name in MONTHLY_COMPONENTS),
        (),
        "Total Mês",
    ),
    FormulaStep(
        "annual_total",
        (step("monthly_total"),),
        (employee("months"),),
        "Total Anual",
    ),
)

STEPS_BY_NAME: Dict[str, FormulaStep] = {s.name: s for s in STEPS}

# Breakdown fields in presentation (and spreadsheet column) order.
BREAKDOWN_FIELDS: Tuple[str, ...] = MONTHLY_COMPONENTS + ("monthly_total", "annual_total")


def operands(formula_step: FormulaStep) -> Iterator[Operand]:
    yield from formula_step.addends
    yield from formula_step.factors


def iter_dependencies(name: str) -> Iterator[Operand]:
    """Yield every operand a step depends on, directly or transitively.

    Each operand is yielded once, depth first.
    """
    seen = set()

    def walk(step_name: str) -> Iterator[Operand]:
        for operand in operands(STEPS_BY_NAME[step_name]):
            if operand in seen:
                continue
            seen.add(operand)
            yield operand
            if operand.source == "step":
                yield from walk(operand.name)

    yield from walk(name)


def steps_depending_on(source: Source, name: str) -> Tuple[str, ...]:
    """Names of the steps whose value changes when the given input changes."""
    target = Operand(source, name)
    return tuple(s.name for s in STEPS if target in set(iter_dependencies(s.name)))
