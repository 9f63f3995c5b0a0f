"""Application store collaborators - the only boundary the workflow talks to"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Protocol

import httpx

from loan_approval.config import settings
from loan_approval.domain.exceptions import ApplicationStoreError
from loan_approval.domain.models import ApprovalSubmission, LoanApplication
from loan_approval.infrastructure.observability.metrics import store_latency_histogram

logger = logging.getLogger(__name__)


class ApplicationStore(Protocol):
    """Shared application context: current record plus an in-flight flag"""

    application_id: Optional[str]
    application_data: Optional[LoanApplication]
    loading: bool

    async def update_application(self, submission: ApprovalSubmission) -> None: ...

    def clear_application(self) -> None: ...


class InMemoryApplicationStore:
    """In-process store, used by tests and local runs"""

    def __init__(
        self,
        application_id: Optional[str] = None,
        application_data: Optional[LoanApplication] = None,
    ):
        self.application_id = application_id
        self.application_data = application_data
        self.loading = False
        self.submissions: List[ApprovalSubmission] = []
        self.failure: Optional[Exception] = None

    async def update_application(self, submission: ApprovalSubmission) -> None:
        self.loading = True
        try:
            if self.failure is not None:
                raise self.failure
            self.submissions.append(submission)
        finally:
            self.loading = False

    def clear_application(self) -> None:
        self.application_id = None
        self.application_data = None


def _jsonable(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: float(value) if isinstance(value, Decimal) else value for key, value in payload.items()}


class HttpApplicationStore:
    """Client for the remote application API"""

    def __init__(
        self,
        application_id: Optional[str],
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.application_id = application_id
        self.application_data: Optional[LoanApplication] = None
        self.loading = False
        self.base_url = base_url or settings.application_store_base
        self.timeout = timeout or settings.http_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def load(self) -> Optional[LoanApplication]:
        """
        Fetch the application record.

        An unknown application clears the identifier so the workflow redirects.

        Raises:
            ApplicationStoreError: On timeout, HTTP errors, or invalid response
        """
        if self.application_id is None:
            return None

        async with self._client() as client:
            try:
                response = await client.get(f"/applications/{self.application_id}")
                if response.status_code == 404:
                    logger.warning("Application not found", extra={"application_id": self.application_id})
                    self.clear_application()
                    return None
                response.raise_for_status()
                data = response.json()

                self.application_data = LoanApplication(
                    id=str(data.get("id", self.application_id)),
                    requested_amount=data.get("requested_amount") or 0,
                    applicant_name=data.get("name") or "",
                )
                return self.application_data

            except httpx.TimeoutException as e:
                raise ApplicationStoreError(f"Application store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ApplicationStoreError(f"Application store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ApplicationStoreError(f"Application store unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, ArithmeticError) as e:
                raise ApplicationStoreError(f"Invalid application data from store: {e}") from e

    async def update_application(self, submission: ApprovalSubmission) -> None:
        """
        Write the approval onto the application record.

        Raises:
            ApplicationStoreError: When the store rejects or cannot be reached
        """
        if self.application_id is None:
            raise ApplicationStoreError("No application to update")

        self.loading = True
        try:
            async with self._client() as client:
                with store_latency_histogram.time():
                    response = await client.patch(
                        f"/applications/{self.application_id}",
                        json=_jsonable(submission.as_payload()),
                    )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ApplicationStoreError(f"Application store error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ApplicationStoreError(f"Application store unreachable: {e}") from e
        finally:
            self.loading = False

    def clear_application(self) -> None:
        self.application_id = None
        self.application_data = None
