"""Spreadsheet export (XLSX) of a budget project.

Two sheets:

- "Bens e Serviços": the QDD (quadro de detalhamento de despesas), items
  grouped by rubric with an annual-total formula per row and a subtotal
  per rubric.
- "Recursos Humanos": one row per personnel record. Every cost column is
  a live formula rendered from the payroll formula graph, so editing the
  salary or quantity in the workbook recomputes the whole row. Rates are
  inlined as literals. Formula cells also carry the value computed by the
  calculator, for readers that do not recalculate.

Rows are first built as plain Cell lists (build_goods_rows,
build_hr_rows) and then written with XlsxWriter.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import xlsxwriter
from xlsxwriter.utility import xl_col_to_name

from .config import get_exports_path
from .goods import BudgetItem, group_by_rubric, item_annual_total
from .payroll import (
    BREAKDOWN_FIELDS,
    STEPS_BY_NAME,
    EmployeeRecord,
    FormulaStep,
    Operand,
    RateTable,
    column_totals,
    compute_cost,
)
from .projects import BudgetProject

logger = logging.getLogger(__name__)

CURRENCY_FORMAT = '"R$ "#,##0.00'

GOODS_SHEET = "Bens e Serviços"
HR_SHEET = "Recursos Humanos"

GOODS_TITLE = "QDD - QUADRO DE DETALHAMENTO DE DESPESAS"
GOODS_HEADER = ["Item", "Valor Unit.", "Qtd", "Freq. (Meses)", "TOTAL ANUAL"]
GOODS_WIDTHS = [40, 15, 10, 15, 20]

HR_TITLE = "PLANILHA DE CUSTOS DE PESSOAL (RH)"
HR_TOTAL_LABEL = "TOTAIS GERAIS"

# Record fields written as plain values, columns A-F.
HR_INPUT_COLUMNS: Tuple[Tuple[str, str, int], ...] = (
    ("role", "Cargo/Função", 25),
    ("quantity", "Qtd", 5),
    ("education", "Escolaridade", 15),
    ("weekly_hours", "C.H. Semanal", 10),
    ("months", "Meses", 5),
    ("gross_salary", "Salário Unitário", 15),
)

# First data row, 1-based as shown in the spreadsheet.
HR_FIRST_DATA_ROW = 4


@dataclass(frozen=True)
class Cell:
    """A cell to write: plain value, or formula with its cached value."""

    value: Any = None
    formula: Optional[str] = None
    currency: bool = False
    bold: bool = False


Row = List[Optional[Cell]]


def export_filename(title: str) -> str:
    """'Plano de Trabalho 2025' -> 'Plano_de_Trabalho_2025_SCFV.xlsx'"""
    safe_title = re.sub(r"\s+", "_", title)
    return f"{safe_title}_SCFV.xlsx"


def _literal(value: float) -> str:
    return repr(value)


def render_operand(
    operand: Operand,
    employee: EmployeeRecord,
    rates: RateTable,
    cells: Mapping[Tuple[str, str], str],
) -> str:
    """Render one operand: its cell reference if mapped, else a literal."""
    ref = cells.get((operand.source, operand.name))
    if ref is not None:
        return ref
    if operand.source == "step":
        raise KeyError(f"No cell mapped for step '{operand.name}'")
    if operand.source == "rate":
        return _literal(getattr(rates, operand.name))
    value = getattr(employee, operand.name)
    return _literal(0 if value is None else value)


def render_step_formula(
    formula_step: FormulaStep,
    employee: EmployeeRecord,
    rates: RateTable,
    cells: Mapping[Tuple[str, str], str],
) -> str:
    """Render a formula step as spreadsheet formula text (without '=').

    Example: pis -> "(G4+K4+N4)*0.01"
    """
    addends = [render_operand(op, employee, rates, cells) for op in formula_step.addends]
    factors = [render_operand(op, employee, rates, cells) for op in formula_step.factors]

    expression = "+".join(addends)
    if factors:
        if len(addends) > 1:
            expression = f"({expression})"
        expression = "*".join([expression] + factors)
    return expression


def hr_column_letters() -> Dict[Tuple[str, str], str]:
    """Column letter of every HR sheet input and breakdown field."""
    letters = {}
    for index, (field, _, _) in enumerate(HR_INPUT_COLUMNS):
        letters[("employee", field)] = xl_col_to_name(index)
    offset = len(HR_INPUT_COLUMNS)
    for index, name in enumerate(BREAKDOWN_FIELDS):
        letters[("step", name)] = xl_col_to_name(offset + index)
    return letters


# Per-individual benefits are inlined as a literal, not given a column.
_HR_CELL_FIELDS = {("employee", f) for f in ("quantity", "months", "gross_salary")}


def build_hr_rows(employees: List[EmployeeRecord], rates: RateTable) -> List[Row]:
    """Rows of the personnel sheet: title, blank, header, data, totals."""
    letters = hr_column_letters()
    header = [Cell(label, bold=True) for _, label, _ in HR_INPUT_COLUMNS]
    header += [Cell(STEPS_BY_NAME[name].label, bold=True) for name in BREAKDOWN_FIELDS]

    rows: List[Row] = [[Cell(HR_TITLE, bold=True)], [], header]

    for offset, employee in enumerate(employees):
        r = HR_FIRST_DATA_ROW + offset
        cells = {
            key: f"{letter}{r}"
            for key, letter in letters.items()
            if key[0] == "step" or key in _HR_CELL_FIELDS
        }
        breakdown = compute_cost(employee, rates)

        row: Row = []
        for field, _, _ in HR_INPUT_COLUMNS:
            row.append(Cell(getattr(employee, field), currency=field == "gross_salary"))
        for name in BREAKDOWN_FIELDS:
            row.append(Cell(
                getattr(breakdown, name),
                formula=render_step_formula(STEPS_BY_NAME[name], employee, rates, cells),
                currency=True,
                bold=name in ("monthly_total", "annual_total"),
            ))
        rows.append(row)

    last_row = HR_FIRST_DATA_ROW + len(employees) - 1
    totals = column_totals(employees, rates)
    total_row: Row = [Cell(HR_TOTAL_LABEL, bold=True)] + [None] * (len(HR_INPUT_COLUMNS) - 1)
    for name in BREAKDOWN_FIELDS:
        letter = letters[("step", name)]
        total_row.append(Cell(
            getattr(totals, name),
            formula=f"SUM({letter}{HR_FIRST_DATA_ROW}:{letter}{last_row})",
            currency=True,
            bold=True,
        ))
    rows.append(total_row)
    return rows


def build_goods_rows(items: List[BudgetItem]) -> List[Row]:
    """Rows of the QDD sheet, grouped by rubric in sorted order."""
    rows: List[Row] = [[Cell(GOODS_TITLE, bold=True)], []]

    for group_title, group_items in group_by_rubric(items).items():
        rows.append([Cell(group_title.upper(), bold=True)])
        rows.append([Cell(label, bold=True) for label in GOODS_HEADER])

        first_row = len(rows) + 1
        for item in group_items:
            r = len(rows) + 1
            rows.append([
                Cell(item.name),
                Cell(item.unit_value, currency=True),
                Cell(item.quantity),
                Cell(item.frequency),
                Cell(item_annual_total(item), formula=f"B{r}*C{r}*D{r}", currency=True),
            ])
        last_row = len(rows)

        subtotal = sum(item_annual_total(item) for item in group_items)
        rows.append([
            Cell(f"TOTAL {group_title}", bold=True),
            None,
            None,
            None,
            Cell(subtotal, formula=f"SUM(E{first_row}:E{last_row})", currency=True, bold=True),
        ])
        rows.append([])

    return rows


class _Formats:
    """XlsxWriter formats, created once per workbook."""

    def __init__(self, workbook):
        self._workbook = workbook
        self._cache = {}

    def get(self, cell: Cell):
        key = (cell.currency, cell.bold)
        if key == (False, False):
            return None
        if key not in self._cache:
            props = {}
            if cell.currency:
                props["num_format"] = CURRENCY_FORMAT
            if cell.bold:
                props["bold"] = True
            self._cache[key] = self._workbook.add_format(props)
        return self._cache[key]


def _write_rows(worksheet, rows: List[Row], formats: _Formats) -> None:
    for row_index, row in enumerate(rows):
        for col_index, cell in enumerate(row):
            if cell is None:
                continue
            cell_format = formats.get(cell)
            if cell.formula is not None:
                worksheet.write_formula(
                    row_index, col_index, f"={cell.formula}", cell_format, cell.value
                )
            else:
                worksheet.write(row_index, col_index, cell.value, cell_format)


def export_workbook(
    project: BudgetProject,
    rates: RateTable,
    path: Optional[Path] = None,
) -> Path:
    """Write the project spreadsheet.

    Args:
        project: Project to export
        rates: Rate table inlined into every personnel formula
        path: Output file (default: exports dir / "{title}_SCFV.xlsx")

    Returns:
        Path to the written workbook
    """
    if path is None:
        path = get_exports_path() / export_filename(project.title)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    workbook = xlsxwriter.Workbook(str(path))
    try:
        formats = _Formats(workbook)

        goods_sheet = workbook.add_worksheet(GOODS_SHEET)
        _write_rows(goods_sheet, build_goods_rows(project.items), formats)
        for col, width in enumerate(GOODS_WIDTHS):
            goods_sheet.set_column(col, col, width)

        if project.hr_items:
            hr_sheet = workbook.add_worksheet(HR_SHEET)
            _write_rows(hr_sheet, build_hr_rows(project.hr_items, rates), formats)
            for col, (_, _, width) in enumerate(HR_INPUT_COLUMNS):
                hr_sheet.set_column(col, col, width)
            first_cost_col = len(HR_INPUT_COLUMNS)
            hr_sheet.set_column(first_cost_col, first_cost_col + len(BREAKDOWN_FIELDS) - 1, 14)
    finally:
        workbook.close()

    logger.info(
        f"exported '{project.title}': {len(project.items)} goods items, "
        f"{len(project.hr_items)} personnel items -> {path}"
    )
    return path
