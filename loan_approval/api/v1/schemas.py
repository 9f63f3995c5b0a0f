"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from loan_approval.domain.models import ApprovalDecision, ApprovalSubmission, InstallmentOption, PaymentScheduleEntry
from loan_approval.utils.money import round_money


class AnalysisResponse(BaseModel):
    """Response for POST /v1/approvals/{application_id}/analysis"""

    application_id: str
    analysis_state: str
    applicant_first_name: str = ""


class InstallmentOptionSchema(BaseModel):
    """One selectable plan, amounts rounded to cents"""

    tenor_months: int
    monthly_payment: Decimal
    interest_rate: Decimal
    total_with_interest: Decimal

    @classmethod
    def from_option(cls, option: InstallmentOption) -> "InstallmentOptionSchema":
        return cls(
            tenor_months=option.tenor_months,
            monthly_payment=round_money(option.monthly_payment),
            interest_rate=option.interest_rate,
            total_with_interest=round_money(option.total_with_interest),
        )


class DecisionResponse(BaseModel):
    """Response for GET /v1/approvals/{application_id}/decision"""

    signal: str = "decision-ready"
    application_id: str
    approved_amount: Decimal
    options: List[InstallmentOptionSchema]

    @classmethod
    def from_decision(cls, decision: ApprovalDecision) -> "DecisionResponse":
        return cls(
            application_id=decision.application_id,
            approved_amount=round_money(decision.approved_amount),
            options=[InstallmentOptionSchema.from_option(option) for option in decision.options],
        )


class SelectionRequest(BaseModel):
    """Request body for PUT /v1/approvals/{application_id}/selection"""

    tenor_months: int = Field(..., gt=0, description="Number of monthly installments")


class ScheduleEntrySchema(BaseModel):
    """Single payment in the schedule"""

    installment_number: int
    due_date: date
    amount: Decimal


class ScheduleResponse(BaseModel):
    """Response for PUT /v1/approvals/{application_id}/selection"""

    signal: str = "schedule-ready"
    tenor_months: int
    monthly_payment: Decimal
    installments: List[ScheduleEntrySchema]

    @classmethod
    def from_schedule(cls, option: InstallmentOption, schedule: Sequence[PaymentScheduleEntry]) -> "ScheduleResponse":
        return cls(
            tenor_months=option.tenor_months,
            monthly_payment=round_money(option.monthly_payment),
            installments=[
                ScheduleEntrySchema(
                    installment_number=entry.installment_number,
                    due_date=entry.due_date,
                    amount=round_money(entry.amount),
                )
                for entry in schedule
            ],
        )


class ConfirmationResponse(BaseModel):
    """Response for POST /v1/approvals/{application_id}/confirmation"""

    signal: str = "confirmed"
    status: str
    next_step: str
    approved_amount: Decimal
    installments_option: int
    monthly_payment: Decimal
    interest_rate: Decimal
    total_with_interest: Decimal

    @classmethod
    def from_submission(cls, submission: ApprovalSubmission, next_step: str) -> "ConfirmationResponse":
        return cls(
            status=submission.status,
            next_step=next_step,
            approved_amount=round_money(submission.approved_amount),
            installments_option=submission.selected_tenor,
            monthly_payment=round_money(submission.monthly_payment),
            interest_rate=submission.interest_rate,
            total_with_interest=round_money(submission.total_with_interest),
        )


class StatusResponse(BaseModel):
    """Response for GET /v1/approvals/{application_id}"""

    application_id: str
    analysis_state: str
    approval_state: Optional[str] = None
    selected_tenor: Optional[int] = None
