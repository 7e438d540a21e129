"""Rich renderers for personnel costs, rate tables and project totals.

Values are rounded to cents here and only here; the SDK keeps full
precision.
"""

from typing import List, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from scfvplan.sdk.payroll import (
    BREAKDOWN_FIELDS,
    FRACTION_FIELDS,
    RATE_FIELDS,
    RATE_LABELS,
    STEPS_BY_NAME,
    CostBreakdown,
    EmployeeRecord,
    RateTable,
    rate_to_denominator,
    rate_to_percent,
)
from scfvplan.sdk.projects import ProjectSummary


def format_brl(amount: float | None) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    if amount is None:
        return "-"
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def render_breakdown(console: Console, breakdown: CostBreakdown, title: str) -> None:
    """Render every breakdown field as a two-column table."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("", style="bold", min_width=24)
    table.add_column("Valor", justify="right", min_width=14)

    for name in BREAKDOWN_FIELDS:
        label = STEPS_BY_NAME[name].label
        value = format_brl(getattr(breakdown, name))
        if name in ("monthly_total", "annual_total"):
            table.add_row(f"[bold green]{label}[/bold green]", f"[bold green]{value}[/bold green]")
        else:
            table.add_row(f"  {label}", value)

    console.print(table)


def render_hr_table(
    console: Console,
    rows: List[Tuple[EmployeeRecord, CostBreakdown]],
    totals: CostBreakdown,
    title: str,
) -> None:
    """Render personnel rows with monthly/annual totals and a totals row."""
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("ID", style="dim")
    table.add_column("Cargo/Função")
    table.add_column("Qtd", justify="right")
    table.add_column("Meses", justify="right")
    table.add_column("Salário Unit.", justify="right")
    table.add_column("Total Mês", justify="right")
    table.add_column("Total Anual", justify="right")

    for employee, breakdown in rows:
        table.add_row(
            employee.id[:8],
            employee.role,
            str(employee.quantity),
            str(employee.months),
            format_brl(employee.gross_salary),
            format_brl(breakdown.monthly_total),
            format_brl(breakdown.annual_total),
        )

    table.add_row(
        "",
        "[bold]TOTAIS[/bold]",
        "",
        "",
        "",
        f"[bold]{format_brl(totals.monthly_total)}[/bold]",
        f"[bold]{format_brl(totals.annual_total)}[/bold]",
    )
    console.print(table)


def render_rates(console: Console, rates: RateTable, source: str) -> None:
    """Render the rate table, provision fractions also as '1 / N'."""
    table = Table(title=f"Rate table ({source})", box=box.ROUNDED)
    table.add_column("Key", style="dim")
    table.add_column("Rate")
    table.add_column("Percent", justify="right")
    table.add_column("Fraction", justify="right")

    for key in RATE_FIELDS:
        value = getattr(rates, key)
        fraction = ""
        if key in FRACTION_FIELDS and value:
            fraction = f"1 / {rate_to_denominator(value)}"
        table.add_row(key, RATE_LABELS[key], f"{rate_to_percent(value):.2f}%", fraction)

    console.print(table)


def render_summary(console: Console, summary: ProjectSummary) -> None:
    """Render annual totals of a project."""
    table = Table(title=f"{summary.title} ({summary.project_id[:8]})", box=box.ROUNDED)
    table.add_column("", style="bold")
    table.add_column("Itens", justify="right")
    table.add_column("Total Anual", justify="right")

    table.add_row("Bens e Serviços", str(summary.goods_count), format_brl(summary.goods_total))
    table.add_row("Recursos Humanos", str(summary.hr_count), format_brl(summary.hr_total))
    table.add_row(
        "[bold green]TOTAL GERAL[/bold green]",
        "",
        f"[bold green]{format_brl(summary.grand_total)}[/bold green]",
    )
    console.print(table)
