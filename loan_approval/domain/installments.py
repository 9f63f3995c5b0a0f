"""Installment plan and payment schedule generation"""

from datetime import date
from typing import List, Tuple

from loan_approval.domain.models import InstallmentOption, PaymentScheduleEntry
from loan_approval.domain.rates import SUPPORTED_TENORS, rate_for
from loan_approval.utils.date_utils import add_months
from loan_approval.utils.money import Amount, to_decimal


def build_installment_option(approved_amount: Amount, tenor_months: int) -> InstallmentOption:
    """Price a single tenor with simple add-on interest over the whole term"""
    amount = to_decimal(approved_amount)
    rate = rate_for(tenor_months)
    total = amount * (1 + rate)

    return InstallmentOption(
        tenor_months=tenor_months,
        interest_rate=rate,
        monthly_payment=total / tenor_months,
        total_with_interest=total,
    )


def generate_installment_options(approved_amount: Amount) -> Tuple[InstallmentOption, ...]:
    """
    Generate one installment option per supported tenor.

    Requirements:
    - Ascending tenor order: 3, 6, 9, 12 months
    - total = approved × (1 + rate), monthly = total / tenor
    - Full precision kept; rounding to cents happens only when presenting

    Example:
        900 → 3×321.00, 6×169.50, 9×120.00, 12×97.50
    """
    # Each option is priced from the approved amount, never from a sibling option
    return tuple(build_installment_option(approved_amount, tenor) for tenor in SUPPORTED_TENORS)


def generate_payment_schedule(option: InstallmentOption, start: date) -> List[PaymentScheduleEntry]:
    """
    Generate the flat monthly schedule for a selected option.

    Args:
        option: Selected installment option
        start: Selection/confirmation instant (date or datetime)

    Returns:
        tenor_months entries; entry k is due k calendar months after start
    """
    return [
        PaymentScheduleEntry(
            installment_number=number,
            due_date=add_months(start, number),
            amount=option.monthly_payment,
        )
        for number in range(1, option.tenor_months + 1)
    ]
