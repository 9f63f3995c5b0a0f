"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Tuple

from loan_approval.domain.exceptions import InvalidApplicationError, UnsupportedTenorError
from loan_approval.utils.money import to_decimal


@dataclass(frozen=True)
class LoanApplication:
    """Loan request owned by the external application store"""

    id: str
    requested_amount: Decimal
    applicant_name: str = ""

    def __post_init__(self) -> None:
        amount = to_decimal(self.requested_amount)
        if amount < 0:
            raise InvalidApplicationError(f"Requested amount must not be negative: {amount}")
        object.__setattr__(self, "requested_amount", amount)

    @property
    def first_name(self) -> str:
        parts = self.applicant_name.split()
        return parts[0] if parts else ""


@dataclass(frozen=True)
class InstallmentOption:
    """One selectable installment plan, derived directly from the approved amount"""

    tenor_months: int
    interest_rate: Decimal
    monthly_payment: Decimal
    total_with_interest: Decimal


@dataclass(frozen=True)
class ApprovalDecision:
    """Outcome of the analysis: approved amount plus the plans offered for it"""

    application_id: str
    requested_amount: Decimal
    approved_amount: Decimal
    options: Tuple[InstallmentOption, ...]
    decided_at: datetime

    def option_for(self, tenor_months: int) -> InstallmentOption:
        for option in self.options:
            if option.tenor_months == tenor_months:
                return option
        raise UnsupportedTenorError(tenor_months)


@dataclass(frozen=True)
class PaymentScheduleEntry:
    """Single payment in a repayment schedule"""

    installment_number: int
    due_date: date
    amount: Decimal


@dataclass(frozen=True)
class ApprovalSubmission:
    """Update handed to the application store once the applicant confirms"""

    approved_amount: Decimal
    selected_tenor: int
    monthly_payment: Decimal
    interest_rate: Decimal
    total_with_interest: Decimal
    status: str = field(default="approved")

    def as_payload(self) -> Dict[str, Any]:
        """Key/value update in the application record's field names"""
        return {
            "approved_amount": self.approved_amount,
            "installments_option": self.selected_tenor,
            "monthly_payment": self.monthly_payment,
            "interest_rate": self.interest_rate,
            "total_with_interest": self.total_with_interest,
            "status": self.status,
        }
