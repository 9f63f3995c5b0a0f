"""Approved amount policy - turns a loan request into a decision"""

from datetime import datetime
from decimal import Decimal

from loan_approval.domain.models import LoanApplication, ApprovalDecision
from loan_approval.domain.exceptions import InvalidApplicationError
from loan_approval.domain.installments import generate_installment_options
from loan_approval.utils.money import Amount, to_decimal

# Flat deduction applied to requests above the threshold
FLAT_FEE = Decimal("100")


def approve(requested_amount: Amount) -> Decimal:
    """
    Derive the approved amount from the requested amount.

    Requests above 100 are approved minus a flat 100; anything up to 100 is
    approved in full, so the result is never negative.

    Example:
        1000 → 900
        50 → 50
    """
    requested = to_decimal(requested_amount)
    if requested < 0:
        raise InvalidApplicationError(f"Requested amount must not be negative: {requested}")

    if requested > FLAT_FEE:
        return requested - FLAT_FEE
    return requested


def make_approval_decision(application: LoanApplication, decided_at: datetime) -> ApprovalDecision:
    """
    Main entry point: approve the application and build its installment options.

    Returns a complete ApprovalDecision with exactly one option per supported tenor.
    """
    approved_amount = approve(application.requested_amount)

    return ApprovalDecision(
        application_id=application.id,
        requested_amount=application.requested_amount,
        approved_amount=approved_amount,
        options=generate_installment_options(approved_amount),
        decided_at=decided_at,
    )
