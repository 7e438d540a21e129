"""AI budget advisor.

Thin layer over the Gemini CLI (see scfvplan.gemini_client). Everything
here is advisory: if the CLI is missing, times out or answers with
something unusable, the failure is logged and the caller gets the neutral
result (None, "valid", or no suggestions). Rubric answers are only
accepted when the code exists in the catalog.
"""

import json
import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .. import gemini_client
from .goods import (
    PARANA_RUBRICS,
    BudgetItem,
    ReductionSuggestion,
    Rubric,
    find_rubric,
    item_annual_total,
)

logger = logging.getLogger(__name__)

REGION = "Medianeira, Paraná, Brazil"


class PriceSuggestion(BaseModel):
    """Estimated unit retail price for an item."""

    model_config = ConfigDict(extra="ignore")

    price: float = Field(..., ge=0, description="Unit price in BRL")
    confidence: Literal["high", "medium", "low"] = "low"


class RubricCheck(BaseModel):
    """Whether an item fits the rubric it was filed under."""

    model_config = ConfigDict(extra="forbid")

    is_valid: bool
    suggested_rubric: Optional[Rubric] = None
    reason: Optional[str] = None


class _RubricAnswer(BaseModel):
    """Raw rubric answer as returned by the model."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    suggested_rubric_code: Optional[str] = Field(default=None, alias="suggestedRubricCode")
    is_valid: bool = Field(default=True, alias="isValid")
    reason: Optional[str] = None


def _catalog_json() -> str:
    return json.dumps(
        [{"code": r.code, "desc": r.description} for r in PARANA_RUBRICS],
        ensure_ascii=False,
    )


def suggest_rubric(item_name: str, timeout: int = 60) -> Optional[Rubric]:
    """Suggest the catalog rubric that best fits an item name."""
    prompt = (
        f'A user is filling a public budget for the State of Paraná (SCFV).\n'
        f'Item: "{item_name}".\n\n'
        f'Suggest the best category/rubric from this list: {_catalog_json()}.\n\n'
        f'Return: {{"suggestedRubricCode": "code", "reason": "short explanation"}}'
    )
    try:
        result = gemini_client.process_json_prompt(prompt, timeout=timeout)
        answer = _RubricAnswer.model_validate(result)
    except (RuntimeError, PydanticValidationError) as e:
        logger.warning(f"rubric suggestion failed for '{item_name}': {e}")
        return None

    code = answer.suggested_rubric_code
    return find_rubric(code) if code else None


def suggest_price(item_name: str, timeout: int = 60) -> Optional[PriceSuggestion]:
    """Estimate the regional unit price of an item."""
    prompt = (
        f'Market price estimation for a public budget in {REGION}.\n'
        f'Item: "{item_name}".\n\n'
        f'Estimate the average unit retail price (R$) for this item in this region. '
        f'Be conservative.\n\n'
        f'Return: {{"price": number, "confidence": "high" | "medium" | "low"}}'
    )
    try:
        result = gemini_client.process_json_prompt(prompt, timeout=timeout)
        return PriceSuggestion.model_validate(result)
    except (RuntimeError, PydanticValidationError) as e:
        logger.warning(f"price suggestion failed for '{item_name}': {e}")
        return None


def validate_rubric_context(item_name: str, rubric: Rubric, timeout: int = 60) -> RubricCheck:
    """Check whether an item belongs under a rubric.

    Any advisor failure counts as valid so the entry is never blocked.
    """
    prompt = (
        f'A user is filling a public budget for the State of Paraná (SCFV).\n'
        f'Current Category/Rubric: "{rubric.code} - {rubric.description}".\n'
        f'Item: "{item_name}".\n\n'
        f'Determine if this item belongs in this category. If YES, return isValid: true. '
        f'If NO, suggest the correct rubric from this list: {_catalog_json()}.\n\n'
        f'Return: {{"isValid": boolean, "suggestedRubricCode": "code", "reason": "text"}}'
    )
    try:
        result = gemini_client.process_json_prompt(prompt, timeout=timeout)
        answer = _RubricAnswer.model_validate(result)
    except (RuntimeError, PydanticValidationError) as e:
        logger.warning(f"rubric check failed for '{item_name}': {e}")
        return RubricCheck(is_valid=True)

    code = answer.suggested_rubric_code
    return RubricCheck(
        is_valid=answer.is_valid,
        suggested_rubric=find_rubric(code) if code else None,
        reason=answer.reason,
    )


def analyze_budget_reduction(
    items: List[BudgetItem],
    target_percent: float,
    timeout: int = 120,
) -> List[ReductionSuggestion]:
    """Ask for item-level cuts that reduce the goods ledger by ~target_percent.

    Suggestions referring to unknown item ids are dropped.
    """
    if not items:
        return []

    summary = [
        {
            "id": item.id,
            "name": item.name,
            "rubric": item.rubric_desc,
            "justification": item.justification,
            "annualTotal": item_annual_total(item),
        }
        for item in items
    ]
    prompt = (
        f'You are a rigorous financial controller for a social assistance program (SCFV).\n'
        f'We need to reduce the total budget by approximately {target_percent}%.\n'
        f'Prioritize cutting non-essential consumables; protect items whose '
        f'justification shows they are essential.\n\n'
        f'Items: {json.dumps(summary, ensure_ascii=False)}\n\n'
        f'Return a JSON array with ONLY the items that should be reduced, each: '
        f'{{"itemId": "id", "originalValue": number, '
        f'"suggestedValue": number (new annual total), "reason": "short explanation"}}'
    )
    try:
        raw = gemini_client.process_json_prompt(prompt, timeout=timeout)
    except RuntimeError as e:
        logger.warning(f"budget reduction analysis failed: {e}")
        return []

    if not isinstance(raw, list):
        logger.warning(f"budget reduction analysis: expected a list, got {type(raw).__name__}")
        return []

    known_ids = {item.id for item in items}
    suggestions = []
    for entry in raw:
        try:
            suggestion = ReductionSuggestion(
                item_id=entry["itemId"],
                original_value=entry["originalValue"],
                suggested_value=entry["suggestedValue"],
                reason=entry.get("reason", ""),
                section="GOODS",
            )
        except (KeyError, TypeError, PydanticValidationError) as e:
            logger.warning(f"skipping malformed reduction suggestion {entry!r}: {e}")
            continue
        if suggestion.item_id in known_ids:
            suggestions.append(suggestion)
    return suggestions
