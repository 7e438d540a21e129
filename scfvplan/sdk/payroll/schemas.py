"""Pydantic schemas for the payroll cost engine.

All schemas use extra='forbid' so a typo in rates.yaml or a project file
raises a clear error instead of being ignored. Values are deliberately
unbounded: the calculator applies whatever numbers it receives, and range
checks belong to the entry form (see entry.py).
"""

from typing import Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RateTable(BaseModel):
    """The seven rates applied by the cost calculator.

    Every field is required; there is no per-field fallback. The uppercase
    keys of older budget files (FGTS, INSS_PATRONAL, ...) are accepted as
    aliases when loading.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    fgts_rate: float = Field(
        ...,
        validation_alias=AliasChoices("fgts_rate", "FGTS"),
        description="FGTS monthly deposit rate",
    )
    employer_inss_rate: float = Field(
        ...,
        validation_alias=AliasChoices("employer_inss_rate", "INSS_PATRONAL"),
        description="Employer-side INSS (INSS patronal) on current payroll",
    )
    pis_rate: float = Field(
        ...,
        validation_alias=AliasChoices("pis_rate", "PIS"),
        description="PIS on payroll plus provisions",
    )
    provision_inss_rate: float = Field(
        ...,
        validation_alias=AliasChoices("provision_inss_rate", "PROVISION_INSS_RATE"),
        description="INSS applied to the vacation and 13th-salary provisions",
    )
    one_third_vacation_provision_rate: float = Field(
        ...,
        validation_alias=AliasChoices(
            "one_third_vacation_provision_rate", "PROVISION_1_3_FERIAS"
        ),
        description="Monthly accrual of the one-third vacation bonus (usually 1/36)",
    )
    thirteenth_salary_provision_rate: float = Field(
        ...,
        validation_alias=AliasChoices("thirteenth_salary_provision_rate", "PROVISION_13"),
        description="Monthly accrual of the 13th salary (usually 1/12)",
    )
    multa_fgts_rate: float = Field(
        ...,
        validation_alias=AliasChoices("multa_fgts_rate", "MULTA_FGTS"),
        description="Severance fine on accumulated FGTS deposits",
    )

    def replace(self, **changes: float) -> "RateTable":
        """Return a copy with some rates changed (the table itself is frozen)."""
        return self.model_copy(update=changes)


class EmployeeRecord(BaseModel):
    """One personnel line item: `quantity` people in the same role.

    `gross_salary` and `benefits` are per individual and per month.
    `monthly_hours` is fixed at creation (weekly_hours x 5).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(..., description="Opaque unique id")
    role: str = Field(..., description="Cargo/Função")
    education: str = Field(default="", description="Escolaridade")
    weekly_hours: float = Field(..., description="Carga horária semanal")
    monthly_hours: float = Field(..., description="Derived at creation: weekly_hours * 5")
    quantity: int = Field(..., description="Number of people in this role")
    gross_salary: float = Field(..., description="Monthly gross salary per individual")
    months: int = Field(..., description="Months budgeted in the fiscal year (1-12)")
    benefits: Optional[float] = Field(
        default=None, description="Monthly transport/meal allowance per individual"
    )


class CostBreakdown(BaseModel):
    """Computed monthly and annual cost of one EmployeeRecord.

    Never persisted: rebuild it from the record and the current RateTable.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    base: float = Field(..., description="gross_salary * quantity")
    fgts: float
    inss: float
    pis: float
    one_third_vacation_provision: float
    fgts_on_vacation_provision: float
    inss_on_vacation_provision: float
    thirteenth_salary_provision: float
    fgts_on_thirteenth: float
    inss_on_thirteenth: float
    benefits_total: float
    severance_fine_provision: float
    monthly_total: float
    annual_total: float

    def rounded(self, ndigits: int = 2) -> Dict[str, float]:
        """Field values rounded for display or export."""
        return {name: round(value, ndigits) for name, value in self.model_dump().items()}
