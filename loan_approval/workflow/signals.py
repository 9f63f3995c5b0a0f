"""Signals exposed to the presentation layer"""

import logging
from enum import Enum
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class Signal(str, Enum):
    DECISION_READY = "decision-ready"
    SCHEDULE_READY = "schedule-ready"
    REDIRECT_REQUIRED = "redirect-required"
    CONFIRMED = "confirmed"
    SUBMISSION_FAILED = "submission-failed"


Listener = Callable[[Signal, Any], None]


class SignalEmitter:
    """Synchronous fan-out of workflow signals, in subscription order"""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, signal: Signal, payload: Any = None) -> None:
        logger.debug("Signal %s", signal.value)
        for listener in list(self._listeners):
            listener(signal, payload)
