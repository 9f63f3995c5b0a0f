"""Installment selection and confirmation state machine"""

import asyncio
import logging
import time
from enum import Enum
from typing import Optional, Tuple

from loan_approval.domain.exceptions import (
    SelectionRequiredError,
    SubmissionError,
    SubmissionInProgressError,
    WorkflowStateError,
)
from loan_approval.domain.installments import generate_payment_schedule
from loan_approval.domain.models import (
    ApprovalDecision,
    ApprovalSubmission,
    InstallmentOption,
    PaymentScheduleEntry,
)
from loan_approval.infrastructure.observability.logging import log_submission
from loan_approval.infrastructure.observability.metrics import record_submission, tenor_selection_counter
from loan_approval.infrastructure.store import ApplicationStore
from loan_approval.workflow.analysis import Clock, local_now
from loan_approval.workflow.signals import Signal, SignalEmitter

logger = logging.getLogger(__name__)


class ApprovalState(str, Enum):
    NO_SELECTION = "no_selection"
    SELECTED = "selected"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"


class ApprovalStateMachine:
    """
    Drives tenor selection and confirmation for one decision.

    NO_SELECTION → SELECTED → SUBMITTING → CONFIRMED, with SUBMITTING → SELECTED
    when the store update fails. Both operations are rejected while an update is
    in flight, so at most one submission is outstanding.
    """

    def __init__(
        self,
        decision: ApprovalDecision,
        store: ApplicationStore,
        emitter: SignalEmitter | None = None,
        clock: Clock = local_now,
    ):
        self.decision = decision
        self.store = store
        self.emitter = emitter or SignalEmitter()
        self.selected: Optional[InstallmentOption] = None
        self.schedule: Tuple[PaymentScheduleEntry, ...] = ()
        self.submission: Optional[ApprovalSubmission] = None
        self._pending: Optional[asyncio.Future] = None
        self._state = ApprovalState.NO_SELECTION
        self._clock = clock

    @property
    def state(self) -> ApprovalState:
        # The store's loading flag is authoritative for in-flight updates
        if self._state is not ApprovalState.CONFIRMED and self.store.loading:
            return ApprovalState.SUBMITTING
        return self._state

    def _ensure_not_submitting(self) -> None:
        if self.state is ApprovalState.SUBMITTING:
            record_submission("rejected")
            raise SubmissionInProgressError("An approval update is already in progress")

    def _ensure_not_confirmed(self) -> None:
        if self._state is ApprovalState.CONFIRMED:
            raise WorkflowStateError("Approval already confirmed")

    def select_tenor(self, tenor_months: int) -> Tuple[PaymentScheduleEntry, ...]:
        """
        Select an installment option and regenerate its schedule from now.

        Any previous selection and schedule are replaced as a whole.

        Raises:
            SubmissionInProgressError: An update is in flight
            WorkflowStateError: Already confirmed
            UnsupportedTenorError: Tenor is not offered
        """
        self._ensure_not_submitting()
        self._ensure_not_confirmed()

        option = self.decision.option_for(tenor_months)
        schedule = tuple(generate_payment_schedule(option, self._clock()))

        self.selected = option
        self.schedule = schedule
        self._state = ApprovalState.SELECTED

        tenor_selection_counter.labels(tenor=str(tenor_months)).inc()
        self.emitter.emit(Signal.SCHEDULE_READY, schedule)
        return schedule

    async def confirm(self) -> ApprovalSubmission:
        """
        Submit the selected option to the application store.

        Raises:
            SubmissionInProgressError: An update is in flight
            WorkflowStateError: Already confirmed
            SelectionRequiredError: No option selected; nothing is sent
            SubmissionError: Store update failed; state returns to SELECTED

        Cancelling the caller does not cancel the update; the machine settles
        to CONFIRMED or SELECTED once the store answers.
        """
        self._ensure_not_submitting()
        self._ensure_not_confirmed()

        option = self.selected
        if self._state is not ApprovalState.SELECTED or option is None:
            raise SelectionRequiredError("Please select the number of installments")

        approved_amount = self.decision.approved_amount
        submission = ApprovalSubmission(
            approved_amount=approved_amount,
            selected_tenor=option.tenor_months,
            monthly_payment=option.monthly_payment,
            interest_rate=option.interest_rate,
            total_with_interest=approved_amount * (1 + option.interest_rate),
        )

        self._state = ApprovalState.SUBMITTING
        start_time = time.monotonic()

        # The update runs as its own task so a cancelled caller cannot abandon it half way
        update = asyncio.ensure_future(self.store.update_application(submission))
        self._pending = update
        update.add_done_callback(lambda task: self._settle(task, submission, start_time))

        try:
            await asyncio.shield(update)
        except Exception as e:
            self._settle(update, submission, start_time)
            raise SubmissionError(f"Could not save approval: {e}") from e

        self._settle(update, submission, start_time)
        return submission

    def _settle(self, update: asyncio.Future, submission: ApprovalSubmission, start_time: float) -> None:
        """Apply the outcome of a finished store update exactly once"""
        if self._pending is not update:
            return
        self._pending = None

        duration_ms = (time.monotonic() - start_time) * 1000
        error = None if update.cancelled() else update.exception()
        if update.cancelled() or error is not None:
            self._state = ApprovalState.SELECTED
            record_submission("failed")
            log_submission(self.decision.application_id, submission.selected_tenor, "failed", duration_ms)
            self.emitter.emit(Signal.SUBMISSION_FAILED, error)
            return

        self._state = ApprovalState.CONFIRMED
        self.submission = submission
        record_submission("confirmed")
        log_submission(self.decision.application_id, submission.selected_tenor, "confirmed", duration_ms)
        self.emitter.emit(Signal.CONFIRMED, submission)
