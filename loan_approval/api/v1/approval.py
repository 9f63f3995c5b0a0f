"""/v1/approvals - analysis, plan selection and confirmation for one application"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from loan_approval.api.v1.schemas import (
    AnalysisResponse,
    ConfirmationResponse,
    DecisionResponse,
    ScheduleResponse,
    SelectionRequest,
    StatusResponse,
)
from loan_approval.api.dependencies import (
    SessionRegistry,
    StoreOpener,
    get_request_id,
    get_session_registry,
    get_sleep,
    get_store_opener,
)
from loan_approval.config import settings
from loan_approval.domain.exceptions import (
    ApplicationStoreError,
    MissingApplicationError,
    SubmissionError,
    ValidationError,
    WorkflowStateError,
)
from loan_approval.workflow.analysis import AnalysisState, Sleep
from loan_approval.workflow.session import ApprovalSession

router = APIRouter()


def redirect_required(message: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"signal": "redirect-required", "redirect_to": settings.restart_path, "message": message},
    )


def get_session(application_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> ApprovalSession:
    session = registry.get(application_id)
    if session is None:
        raise redirect_required("No approval in progress for this application")
    return session


def analysis_response(application_id: str, session: ApprovalSession) -> AnalysisResponse:
    application = session.store.application_data
    return AnalysisResponse(
        application_id=application_id,
        analysis_state=session.analysis.state.value,
        applicant_first_name=application.first_name if application else "",
    )


@router.post("/approvals/{application_id}/analysis", response_model=AnalysisResponse, status_code=202)
async def start_analysis(
    application_id: str,
    request: Request,
    registry: SessionRegistry = Depends(get_session_registry),
    open_store: StoreOpener = Depends(get_store_opener),
    sleep: Sleep = Depends(get_sleep),
):
    """
    Load the application and start the simulated analysis.

    Repeated calls for an application already in progress return its current state.
    """
    request_id = get_request_id(request)

    existing = registry.get(application_id)
    if existing is not None:
        return analysis_response(application_id, existing)

    try:
        store = await open_store(application_id)
        session = ApprovalSession(store, sleep=sleep)
        session.start()
    except MissingApplicationError as e:
        logging.warning(f"Missing application: {e}", extra={"request_id": request_id})
        raise redirect_required(str(e))
    except ApplicationStoreError as e:
        logging.error(f"Application store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Application service unavailable")
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    registry.add(application_id, session)
    return analysis_response(application_id, session)


@router.get("/approvals/{application_id}", response_model=StatusResponse)
async def get_status(application_id: str, session: ApprovalSession = Depends(get_session)):
    machine = session.machine
    return StatusResponse(
        application_id=application_id,
        analysis_state=session.analysis.state.value,
        approval_state=machine.state.value if machine else None,
        selected_tenor=machine.selected.tenor_months if machine and machine.selected else None,
    )


@router.get("/approvals/{application_id}/decision", response_model=DecisionResponse)
async def get_decision(application_id: str, session: ApprovalSession = Depends(get_session)):
    """Wait for the analysis to finish and return the approved amount with its four plans"""
    if session.analysis.state is AnalysisState.WAITING_FOR_APPLICATION:
        raise HTTPException(status_code=409, detail="Application data not loaded yet")

    try:
        decision = await session.wait_for_decision()
    except MissingApplicationError as e:
        raise redirect_required(str(e))
    except WorkflowStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return DecisionResponse.from_decision(decision)


@router.put("/approvals/{application_id}/selection", response_model=ScheduleResponse)
async def select_installments(
    application_id: str,
    body: SelectionRequest,
    session: ApprovalSession = Depends(get_session),
):
    """Select a tenor and return its payment schedule"""
    try:
        schedule = session.select_tenor(body.tenor_months)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except WorkflowStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ScheduleResponse.from_schedule(session.machine.selected, schedule)


@router.post("/approvals/{application_id}/confirmation", response_model=ConfirmationResponse)
async def confirm_approval(
    application_id: str,
    request: Request,
    session: ApprovalSession = Depends(get_session),
):
    """
    Accept the selected plan.

    Flow:
    1. Validate a plan is selected and nothing is in flight
    2. Send the approval update to the application store
    3. Return the next workflow step; the registry drops the confirmed session
    """
    request_id = get_request_id(request)

    try:
        submission = await session.confirm()
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except WorkflowStateError as e:
        # Includes SubmissionInProgressError
        raise HTTPException(status_code=409, detail=str(e))
    except SubmissionError as e:
        logging.error(f"Submission failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Could not save approval, please try again")

    return ConfirmationResponse.from_submission(submission, settings.next_step_path)


@router.delete("/approvals/{application_id}", status_code=204)
async def abandon_approval(
    application_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Applicant dismissed the offer: cancel any pending analysis and clear the application"""
    session = registry.pop(application_id)
    if session is not None:
        session.abandon()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
