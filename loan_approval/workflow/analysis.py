"""Simulated underwriting delay gating when a decision becomes available"""

import asyncio
import logging
import time
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from loan_approval.domain.approval import make_approval_decision
from loan_approval.domain.exceptions import MissingApplicationError, WorkflowStateError
from loan_approval.domain.models import ApprovalDecision, LoanApplication
from loan_approval.infrastructure.observability.logging import log_decision
from loan_approval.infrastructure.observability.metrics import analysis_counter, record_decision
from loan_approval.infrastructure.store import ApplicationStore
from loan_approval.workflow.signals import Signal, SignalEmitter

logger = logging.getLogger(__name__)

# Simulated processing time; fixed, not a setting
ANALYSIS_DELAY_MS = 15_000

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


class AnalysisState(str, Enum):
    IDLE = "idle"
    WAITING_FOR_APPLICATION = "waiting_for_application"
    ANALYZING = "analyzing"
    DECISIONED = "decisioned"
    ABORTED = "aborted"


class AnalysisSimulator:
    """
    Runs the analysis delay for the store's current application.

    States: IDLE → WAITING_FOR_APPLICATION → ANALYZING → DECISIONED, or ABORTED
    when there is no application at all. The decision is computed exactly once,
    when the delay elapses without being cancelled.
    """

    def __init__(
        self,
        store: ApplicationStore,
        emitter: SignalEmitter | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = local_now,
    ):
        self.store = store
        self.emitter = emitter or SignalEmitter()
        self.state = AnalysisState.IDLE
        self.decision: Optional[ApprovalDecision] = None
        self._sleep = sleep
        self._clock = clock
        self._task: Optional[asyncio.Task] = None
        self._snapshot: Optional[Tuple[Optional[str], Optional[LoanApplication]]] = None

    def refresh(self) -> AnalysisState:
        """
        Re-evaluate the store's application id and record.

        Does nothing while neither has changed since the last call. Otherwise any
        pending analysis is cancelled and the state is derived again.

        Raises:
            MissingApplicationError: No application id; the caller must redirect
        """
        if self.state is AnalysisState.ABORTED:
            return self.state

        snapshot = (self.store.application_id, self.store.application_data)
        if self.state is not AnalysisState.IDLE and snapshot == self._snapshot:
            return self.state

        self._cancel_pending()
        self._snapshot = snapshot
        self.decision = None
        application_id, application = snapshot

        if application_id is None:
            self.state = AnalysisState.ABORTED
            analysis_counter.labels(outcome="aborted").inc()
            logger.warning("No application available, redirect required")
            self.emitter.emit(Signal.REDIRECT_REQUIRED)
            raise MissingApplicationError("No application found, please start again")

        if application is None:
            self.state = AnalysisState.WAITING_FOR_APPLICATION
            logger.info("Waiting for application data", extra={"application_id": application_id})
            return self.state

        self.state = AnalysisState.ANALYZING
        logger.info("Analysis started", extra={"application_id": application_id})
        self._task = asyncio.get_running_loop().create_task(self._analyze(application))
        return self.state

    async def _analyze(self, application: LoanApplication) -> ApprovalDecision:
        start_time = time.monotonic()
        await self._sleep(ANALYSIS_DELAY_MS / 1000)

        decision = make_approval_decision(application, self._clock())
        self.decision = decision
        self.state = AnalysisState.DECISIONED

        duration_ms = (time.monotonic() - start_time) * 1000
        record_decision(decision.approved_amount)
        log_decision(application.id, decision.requested_amount, decision.approved_amount, duration_ms)

        self.emitter.emit(Signal.DECISION_READY, decision)
        return decision

    async def wait_for_decision(self) -> ApprovalDecision:
        """
        Wait for the pending analysis to finish.

        Raises:
            MissingApplicationError: The analysis aborted
            WorkflowStateError: Nothing is being analyzed, or the analysis was cancelled
        """
        if self.state is AnalysisState.DECISIONED and self.decision is not None:
            return self.decision
        if self.state is AnalysisState.ABORTED:
            raise MissingApplicationError("No application found, please start again")

        task = self._task
        if task is None:
            raise WorkflowStateError(f"No analysis in progress (state: {self.state.value})")

        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise WorkflowStateError("Analysis was cancelled") from None
            raise

    def cancel(self) -> None:
        """Host torn down: drop any pending analysis without deciding"""
        if self._cancel_pending():
            self.state = AnalysisState.IDLE
            self._snapshot = None

    def _cancel_pending(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False

        task.cancel()
        analysis_counter.labels(outcome="cancelled").inc()
        logger.info("Pending analysis cancelled", extra={"application_id": self.store.application_id})
        return True
