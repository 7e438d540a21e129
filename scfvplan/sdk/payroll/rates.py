"""Rate table defaults, editing conversions and persistence.

The rate table lives in rates.yaml (see config.py). The editor accepts a
rate either as a percentage or, for the two provision fractions, as the
denominator N of "1 / N"; both forms are stored as the resulting decimal.
"""

import logging
from typing import Dict, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..config import ConfigError, delete_rates_file, load_rates_file, save_rates_file
from .schemas import RateTable

logger = logging.getLogger(__name__)


# 2024 values. provision_inss_rate (29.3%) is an approximation taken from
# reference budget spreadsheets, not a statutory constant.
DEFAULT_RATE_TABLE = RateTable(
    fgts_rate=0.08,
    employer_inss_rate=0.20,
    pis_rate=0.01,
    provision_inss_rate=0.293,
    one_third_vacation_provision_rate=1 / 36,
    thirteenth_salary_provision_rate=1 / 12,
    multa_fgts_rate=0.40,
)

RATE_FIELDS: Tuple[str, ...] = tuple(RateTable.model_fields)

# Rates the editor also accepts as "1 / N".
FRACTION_FIELDS: Tuple[str, ...] = (
    "one_third_vacation_provision_rate",
    "thirteenth_salary_provision_rate",
)

RATE_LABELS: Dict[str, str] = {
    "fgts_rate": "FGTS Mensal",
    "employer_inss_rate": "INSS Patronal",
    "pis_rate": "PIS",
    "provision_inss_rate": "INSS s/ Provisão",
    "multa_fgts_rate": "Multa FGTS",
    "one_third_vacation_provision_rate": "Provisão 1/3 Férias",
    "thirteenth_salary_provision_rate": "Provisão 13º Salário",
}


class RateInputError(ValueError):
    """Raised when the rate editor receives an unusable value or key."""
    pass


def percent_to_rate(percent: float) -> float:
    """20 -> 0.2"""
    return percent / 100


def rate_to_percent(rate: float) -> float:
    """0.2 -> 20.0"""
    return rate * 100


def denominator_to_rate(denominator: float) -> float:
    """36 -> 1/36. A zero denominator is rejected."""
    if denominator == 0:
        raise RateInputError("Denominator must be non-zero")
    return 1 / denominator


def rate_to_denominator(rate: float) -> int:
    """Nearest N such that rate ~= 1 / N (1/36 -> 36)."""
    if rate == 0:
        raise RateInputError("A zero rate has no '1 / N' form")
    return round(1 / rate)


def _check_key(key: str) -> None:
    if key not in RATE_FIELDS:
        raise RateInputError(
            f"Unknown rate '{key}'. Expected one of: {', '.join(RATE_FIELDS)}"
        )


def load_rate_table() -> RateTable:
    """Load the configured rate table, or the default table if none is saved.

    Raises:
        ConfigError: If rates.yaml exists but is incomplete or malformed
    """
    raw = load_rates_file()
    if raw is None:
        return DEFAULT_RATE_TABLE

    try:
        return RateTable.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid rate table in rates.yaml: {e}") from e


def save_rate_table(rates: RateTable):
    """Persist a complete rate table. Returns the path written."""
    path = save_rates_file(rates.model_dump())
    logger.debug(f"rate table saved to {path}")
    return path


def set_rate_percent(key: str, percent: float) -> RateTable:
    """Set one rate from a percentage and persist the full table."""
    _check_key(key)
    updated = load_rate_table().replace(**{key: percent_to_rate(percent)})
    save_rate_table(updated)
    return updated


def set_rate_fraction(key: str, denominator: float) -> RateTable:
    """Set a provision rate as 1 / denominator and persist the full table."""
    _check_key(key)
    if key not in FRACTION_FIELDS:
        raise RateInputError(
            f"'{key}' is not a provision fraction. Use a percentage instead."
        )
    updated = load_rate_table().replace(**{key: denominator_to_rate(denominator)})
    save_rate_table(updated)
    return updated


def reset_rate_table() -> RateTable:
    """Drop the saved table so the defaults apply again."""
    if delete_rates_file():
        logger.info("rate table reset to defaults")
    return DEFAULT_RATE_TABLE
