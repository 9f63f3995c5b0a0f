"""One approval workflow per application: analysis, selection and confirmation"""

import asyncio
from typing import Optional, Tuple

from loan_approval.domain.exceptions import WorkflowStateError
from loan_approval.domain.models import ApprovalDecision, ApprovalSubmission, PaymentScheduleEntry
from loan_approval.infrastructure.store import ApplicationStore
from loan_approval.workflow.analysis import AnalysisSimulator, AnalysisState, Clock, Sleep, local_now
from loan_approval.workflow.signals import Signal, SignalEmitter
from loan_approval.workflow.state_machine import ApprovalStateMachine


class ApprovalSession:
    """Composes the analysis simulator and the state machine over one store"""

    def __init__(self, store: ApplicationStore, sleep: Sleep = asyncio.sleep, clock: Clock = local_now):
        self.store = store
        self.emitter = SignalEmitter()
        self.analysis = AnalysisSimulator(store, self.emitter, sleep=sleep, clock=clock)
        self.machine: Optional[ApprovalStateMachine] = None
        self._clock = clock
        self.emitter.subscribe(self._on_signal)

    def _on_signal(self, signal: Signal, payload: object) -> None:
        if signal is Signal.DECISION_READY:
            self.machine = ApprovalStateMachine(payload, self.store, self.emitter, clock=self._clock)
        elif signal is Signal.REDIRECT_REQUIRED:
            self.machine = None

    def refresh(self) -> AnalysisState:
        """Start, or restart when the store's application changed"""
        state = self.analysis.refresh()
        if state is not AnalysisState.DECISIONED:
            self.machine = None
        return state

    start = refresh

    async def wait_for_decision(self) -> ApprovalDecision:
        return await self.analysis.wait_for_decision()

    def _require_machine(self) -> ApprovalStateMachine:
        if self.machine is None:
            raise WorkflowStateError("Decision is not available yet")
        return self.machine

    def select_tenor(self, tenor_months: int) -> Tuple[PaymentScheduleEntry, ...]:
        return self._require_machine().select_tenor(tenor_months)

    async def confirm(self) -> ApprovalSubmission:
        return await self._require_machine().confirm()

    def close(self) -> None:
        """Host went away; an in-flight submission is left to finish on its own"""
        self.analysis.cancel()

    def abandon(self) -> None:
        """Applicant walked away from the offer"""
        self.close()
        self.store.clear_application()
