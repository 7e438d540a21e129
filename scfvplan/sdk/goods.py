"""Goods and services ledger.

Line items are classified by rubric (PCASP chart of accounts used by the
State of Paraná). Annual total of an item is unit_value * quantity *
frequency, where frequency is the number of months per year the purchase
recurs (12 recurring, 1 one-off).

Ledger adjustments return new item lists; stored projects are only changed
by the project store.
"""

import uuid
from typing import Dict, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .payroll.entry import ValidationError


class Rubric(BaseModel):
    """Budget classification (natureza de despesa)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: str = Field(..., description="PCASP code, e.g. '3.3.90.30.07'")
    description: str
    short_name: str = Field(..., description="Short label for tables and tabs")


class BudgetItem(BaseModel):
    """One goods/services line item."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    rubric_code: str
    rubric_desc: str
    unit_value: float
    quantity: float
    frequency: int = Field(..., description="Months per year the item is bought")
    justification: Optional[str] = None


class ReductionSuggestion(BaseModel):
    """A proposed new annual total for one item, from the budget advisor."""

    model_config = ConfigDict(extra="forbid")

    item_id: str
    original_value: float
    suggested_value: float = Field(..., description="Suggested new annual total")
    reason: str = ""
    section: Literal["GOODS", "HR"] = "GOODS"


PARANA_RUBRICS: List[Rubric] = [
    Rubric(code="3.3.90.30.07", description="Gêneros de Alimentação", short_name="Alimentação"),
    Rubric(code="3.3.90.30.16", description="Material de Expediente", short_name="Expediente"),
    Rubric(code="3.3.90.30.22", description="Material de Limpeza e Prod. de Higienização", short_name="Limpeza"),
    Rubric(code="3.3.90.30.24", description="Material p/ Manutenção de Bens Imóveis", short_name="Manut. Predial"),
    Rubric(code="3.3.90.30.14", description="Material Educativo e Esportivo", short_name="Educativo/Esporte"),
    Rubric(code="3.3.90.32.00", description="Material de Distribuição Gratuita", short_name="Distrib. Gratuita"),
    Rubric(code="3.3.90.36.00", description="Outros Serv. Terceiros - Pessoa Física", short_name="Serv. PF"),
    Rubric(code="3.3.90.39.05", description="Serviços Técnicos Profissionais (PJ)", short_name="Técnicos PJ"),
    Rubric(code="3.3.90.39.19", description="Manutenção e Conservação de Veículos", short_name="Manut. Veículos"),
    Rubric(code="3.3.90.39.43", description="Serviços de Energia Elétrica", short_name="Energia"),
    Rubric(code="3.3.90.39.44", description="Serviços de Água e Esgoto", short_name="Água"),
    Rubric(code="3.3.90.39.63", description="Serviços Gráficos", short_name="Gráfica"),
    Rubric(code="3.3.90.39.98", description="Outros Serviços de Terceiros - PJ (Específico)", short_name="Outros PJ Esp."),
    Rubric(code="3.3.90.39.99", description="Outros Serviços de Terceiros - PJ", short_name="Outros Serv. PJ"),
    Rubric(code="4.4.90.52.12", description="Aparelhos e Utensílios Domésticos", short_name="Utensílios"),
    Rubric(code="4.4.90.52.33", description="Equipamentos para Áudio, Vídeo e Foto", short_name="Áudio/Vídeo"),
    Rubric(code="4.4.90.52.35", description="Equipamentos de Processamento de Dados", short_name="Informática"),
    Rubric(code="4.4.90.52.42", description="Mobiliário em Geral", short_name="Mobiliário"),
]

_RUBRICS_BY_CODE: Dict[str, Rubric] = {r.code: r for r in PARANA_RUBRICS}


def find_rubric(code: str) -> Optional[Rubric]:
    """Look up a catalog rubric by code."""
    return _RUBRICS_BY_CODE.get(code)


def rubric_key(item: BudgetItem) -> str:
    """Grouping key used by the ledger and the QDD sheet."""
    return f"{item.rubric_code} - {item.rubric_desc}"


def item_annual_total(item: BudgetItem) -> float:
    return item.unit_value * item.quantity * item.frequency


def goods_total(items: Iterable[BudgetItem]) -> float:
    """Annual total of the whole ledger."""
    return sum(item_annual_total(item) for item in items)


def group_by_rubric(items: Iterable[BudgetItem]) -> Dict[str, List[BudgetItem]]:
    """Group items by rubric key, keys in sorted order.

    Items keep their insertion order within a group.
    """
    groups: Dict[str, List[BudgetItem]] = {}
    for item in items:
        groups.setdefault(rubric_key(item), []).append(item)
    return {key: groups[key] for key in sorted(groups)}


# =============================================================================
# ENTRY FORM
# =============================================================================

def validate_goods_entry(
    name: str,
    rubric_code: str,
    unit_value: float,
    quantity: float,
    frequency: float,
) -> List[str]:
    """Check goods form values. Returns a list of error messages."""
    errors = []

    if not name or not name.strip():
        errors.append("name is required")
    if find_rubric(rubric_code) is None:
        errors.append(f"unknown rubric code '{rubric_code}'")
    if unit_value <= 0:
        errors.append(f"unit_value must be positive, got {unit_value}")
    if quantity <= 0:
        errors.append(f"quantity must be positive, got {quantity}")
    if frequency != int(frequency) or not 1 <= frequency <= 12:
        errors.append(f"frequency must be a whole number between 1 and 12, got {frequency}")

    return errors


def new_goods_item(
    name: str,
    rubric_code: str,
    unit_value: float,
    quantity: float = 1,
    frequency: int = 12,
    justification: Optional[str] = None,
) -> BudgetItem:
    """Validate form values and build a new BudgetItem.

    Raises:
        ValidationError: If any field is rejected
    """
    errors = validate_goods_entry(name, rubric_code, unit_value, quantity, frequency)
    if errors:
        raise ValidationError(errors)

    rubric = find_rubric(rubric_code)
    return BudgetItem(
        id=str(uuid.uuid4()),
        name=name.strip(),
        rubric_code=rubric.code,
        rubric_desc=rubric.description,
        unit_value=unit_value,
        quantity=quantity,
        frequency=int(frequency),
        justification=justification,
    )


# =============================================================================
# LEDGER ADJUSTMENTS
# =============================================================================

def _with_unit_value(item: BudgetItem, unit_value: float) -> BudgetItem:
    return item.model_copy(update={"unit_value": round(unit_value, 2)})


def apply_percent_adjustment(items: List[BudgetItem], percent: float) -> List[BudgetItem]:
    """Raise or lower every unit value by `percent` (e.g. 10 or -5)."""
    if percent == 0:
        return list(items)
    factor = 1 + percent / 100
    return [_with_unit_value(item, item.unit_value * factor) for item in items]


def scale_to_target(items: List[BudgetItem], target: float) -> List[BudgetItem]:
    """Scale all unit values so the ledger total approaches `target`.

    Unit values are rounded to cents, so the new total may differ from
    the target by a few cents. A target that is not positive, or a ledger
    that totals zero, leaves the items unchanged.
    """
    current = goods_total(items)
    if not items or current == 0 or target <= 0:
        return list(items)
    ratio = target / current
    return [_with_unit_value(item, item.unit_value * ratio) for item in items]


def apply_reduction(
    items: List[BudgetItem], suggestions: Iterable[ReductionSuggestion]
) -> List[BudgetItem]:
    """Apply advisor suggestions by back-solving each item's unit value.

    Suggestions for other sections, unknown ids, or items with a zero
    quantity * frequency are ignored.
    """
    by_id = {item.id: item for item in items}
    for suggestion in suggestions:
        if suggestion.section != "GOODS":
            continue
        item = by_id.get(suggestion.item_id)
        if item is None:
            continue
        denominator = item.quantity * item.frequency
        if denominator > 0:
            by_id[item.id] = _with_unit_value(item, suggestion.suggested_value / denominator)
    return [by_id[item.id] for item in items]
