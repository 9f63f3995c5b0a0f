"""Pytest fixtures for testing"""

import asyncio
import pytest
from datetime import datetime
from typing import Dict, Generator, List
from fastapi.testclient import TestClient

from loan_approval.api.main import create_app
from loan_approval.api.dependencies import get_sleep, get_store_opener
from loan_approval.domain.approval import make_approval_decision
from loan_approval.domain.models import ApprovalDecision, LoanApplication
from loan_approval.infrastructure.store import InMemoryApplicationStore
from loan_approval.workflow.signals import SignalEmitter

FIXED_NOW = datetime(2026, 1, 31, 10, 30)


class ManualSleep:
    """Stands in for asyncio.sleep; blocks until released"""

    def __init__(self) -> None:
        self.delays: List[float] = []
        self._released = asyncio.Event()

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await self._released.wait()

    def release(self) -> None:
        self._released.set()


async def instant_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def application() -> LoanApplication:
    return LoanApplication(id="app-1", requested_amount=1000, applicant_name="Maria Silva Souza")


@pytest.fixture
def store(application: LoanApplication) -> InMemoryApplicationStore:
    return InMemoryApplicationStore(application.id, application)


@pytest.fixture
def decision(application: LoanApplication) -> ApprovalDecision:
    return make_approval_decision(application, FIXED_NOW)


@pytest.fixture
def manual_sleep() -> ManualSleep:
    return ManualSleep()


@pytest.fixture
def signals() -> List[tuple]:
    return []


@pytest.fixture
def emitter(signals: List[tuple]) -> SignalEmitter:
    """Emitter that records every signal it fans out"""
    emitter = SignalEmitter()
    emitter.subscribe(lambda signal, payload: signals.append((signal, payload)))
    return emitter


@pytest.fixture
def stores() -> Dict[str, InMemoryApplicationStore]:
    """Application records the API can open, keyed by application id"""
    return {
        "app-1": InMemoryApplicationStore(
            "app-1", LoanApplication(id="app-1", requested_amount=1000, applicant_name="Maria Silva")
        ),
        "app-small": InMemoryApplicationStore(
            "app-small", LoanApplication(id="app-small", requested_amount=50, applicant_name="João")
        ),
    }


@pytest.fixture
def client(stores: Dict[str, InMemoryApplicationStore]) -> Generator[TestClient, None, None]:
    """Create FastAPI test client backed by in-memory stores and no analysis delay"""
    app = create_app()

    async def open_store(application_id: str) -> InMemoryApplicationStore:
        # Unknown ids behave like a store with no current application
        return stores.get(application_id) or InMemoryApplicationStore()

    app.dependency_overrides[get_store_opener] = lambda: open_store
    app.dependency_overrides[get_sleep] = lambda: instant_sleep

    with TestClient(app) as test_client:
        yield test_client
