"""Dependency injection for FastAPI endpoints"""

import asyncio
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Request

from loan_approval.infrastructure.store import ApplicationStore, HttpApplicationStore
from loan_approval.workflow.analysis import Sleep
from loan_approval.workflow.session import ApprovalSession
from loan_approval.workflow.signals import Signal

StoreOpener = Callable[[str], Awaitable[ApplicationStore]]


class SessionRegistry:
    """Live approval sessions keyed by application id; confirmed sessions are dropped"""

    def __init__(self) -> None:
        self._sessions: Dict[str, ApprovalSession] = {}

    def get(self, application_id: str) -> Optional[ApprovalSession]:
        return self._sessions.get(application_id)

    def add(self, application_id: str, session: ApprovalSession) -> None:
        self._sessions[application_id] = session

        def release_on_confirm(signal: Signal, payload: object) -> None:
            # Also fires when the confirming request went away before the store answered
            if signal is Signal.CONFIRMED and self._sessions.get(application_id) is session:
                del self._sessions[application_id]

        session.emitter.subscribe(release_on_confirm)

    def pop(self, application_id: str) -> Optional[ApprovalSession]:
        return self._sessions.pop(application_id, None)

    def __contains__(self, application_id: str) -> bool:
        return application_id in self._sessions

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


async def open_http_store(application_id: str) -> ApplicationStore:
    store = HttpApplicationStore(application_id)
    await store.load()
    return store


def get_store_opener() -> StoreOpener:
    """Provide the application store factory"""
    return open_http_store


def get_sleep() -> Sleep:
    """Provide the sleep used for the analysis delay"""
    return asyncio.sleep
