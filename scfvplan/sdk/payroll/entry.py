"""Personnel entry form: input checks and record creation.

The calculator accepts any numbers. Rejecting an empty role, a zero salary
or an out-of-range month count is the job of this layer, which the CLI and
MCP tools call before anything is stored.
"""

import uuid
from typing import List, Optional

from .schemas import EmployeeRecord


class ValidationError(Exception):
    """Raised when an entry fails validation."""
    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Validation failed: {'; '.join(errors)}")


def validate_employee_entry(
    role: str,
    gross_salary: float,
    quantity: float,
    months: float,
    weekly_hours: float,
    benefits: Optional[float] = None,
) -> List[str]:
    """Check personnel form values.

    Returns:
        List of error messages (empty if the entry is acceptable)
    """
    errors = []

    if not role or not role.strip():
        errors.append("role is required")
    if gross_salary <= 0:
        errors.append(f"gross_salary must be positive, got {gross_salary}")
    if quantity < 1 or quantity != int(quantity):
        errors.append(f"quantity must be a whole number >= 1, got {quantity}")
    if months != int(months) or not 1 <= months <= 12:
        errors.append(f"months must be a whole number between 1 and 12, got {months}")
    if weekly_hours <= 0:
        errors.append(f"weekly_hours must be positive, got {weekly_hours}")
    if benefits is not None and benefits < 0:
        errors.append(f"benefits cannot be negative, got {benefits}")

    return errors


def new_employee(
    role: str,
    gross_salary: float,
    quantity: int = 1,
    months: int = 12,
    weekly_hours: float = 40,
    education: str = "Ensino Médio",
    benefits: Optional[float] = None,
) -> EmployeeRecord:
    """Validate form values and build a new EmployeeRecord.

    monthly_hours is derived once here (weekly_hours * 5) and stored.

    Raises:
        ValidationError: If any field is rejected
    """
    errors = validate_employee_entry(
        role, gross_salary, quantity, months, weekly_hours, benefits
    )
    if errors:
        raise ValidationError(errors)

    return EmployeeRecord(
        id=str(uuid.uuid4()),
        role=role.strip(),
        education=education,
        weekly_hours=weekly_hours,
        monthly_hours=weekly_hours * 5,
        quantity=int(quantity),
        gross_salary=gross_salary,
        months=int(months),
        benefits=benefits,
    )
