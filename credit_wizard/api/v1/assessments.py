"""/v1/assessments - step-by-step eligibility, financials, offer and email wizard"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse
from starlette.responses import Response

from credit_wizard.api.v1.schemas import (
    AnswerSchema,
    AssessmentResponse,
    EligibilityRequest,
    EmailRequest,
    FinancialsRequest,
    StepSchema,
)
from credit_wizard.api.dependencies import (
    get_controller,
    get_dispatcher,
    get_exporter,
    get_request_id,
    get_session_store,
)
from credit_wizard.domain.exceptions import InvalidTransitionError, SessionNotFoundError
from credit_wizard.domain.flow import FlowController, StepOutcome
from credit_wizard.domain.models import STEP_LABELS, STEP_ORDER, Step
from credit_wizard.domain.ports import DocumentExporter, NotificationDispatcher
from credit_wizard.domain.summary import format_money
from credit_wizard.infrastructure.sessions import SessionStore
from credit_wizard.infrastructure.observability.metrics import record_eligibility, record_offer
from credit_wizard.infrastructure.observability.logging import log_step

router = APIRouter()


def to_response(session_id: str, controller: FlowController) -> AssessmentResponse:
    """Project the session's assessment (and its last outcome) onto the API schema"""
    assessment = controller.assessment
    outcome = controller.last_outcome

    return AssessmentResponse(
        session_id=session_id,
        step=assessment.step.value,
        steps=[StepSchema(key=step.value, label=STEP_LABELS[step]) for step in STEP_ORDER],
        answers={
            question_id.value: AnswerSchema(value=answer.value, points=answer.points)
            for question_id, answer in assessment.answers.items()
        },
        score=assessment.score,
        income=format_money(assessment.income) if assessment.financials else None,
        expenses=format_money(assessment.expenses) if assessment.financials else None,
        offer=format_money(assessment.offer) if assessment.offer is not None else None,
        recipient_email=assessment.recipient_email,
        message=outcome.message if outcome else None,
        error_kind=outcome.error_kind.value if outcome and outcome.error_kind else None,
    )


def _log_outcome(request: Request, session_id: str, step: Step, outcome: StepOutcome, start_time: float) -> None:
    duration_ms = (time.time() - start_time) * 1000
    log_step(
        get_request_id(request),
        session_id,
        step.value,
        outcome.step.value,
        duration_ms,
        error_kind=outcome.error_kind.value if outcome.error_kind else None,
    )


def _conflict(session_id: str, request: Request, error: InvalidTransitionError) -> HTTPException:
    logging.warning(
        f"Rejected out-of-order submission: {error}",
        extra={"request_id": get_request_id(request), "session_id": session_id},
    )
    return HTTPException(status_code=409, detail=str(error))


@router.post("/assessments", response_model=AssessmentResponse, status_code=201)
def start_assessment(
    store: SessionStore = Depends(get_session_store),
    exporter: DocumentExporter = Depends(get_exporter),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Open a new assessment session at the eligibility step"""
    controller = FlowController(exporter=exporter, dispatcher=dispatcher)
    session_id = store.create(controller)
    return to_response(session_id, controller)


@router.get("/assessments/{session_id}", response_model=AssessmentResponse)
def get_assessment(session_id: str, controller: FlowController = Depends(get_controller)):
    """Current step and everything recorded so far"""
    return to_response(session_id, controller)


@router.get("/assessments/{session_id}/summary", response_class=HTMLResponse)
def get_summary(controller: FlowController = Depends(get_controller)):
    """HTML summary as it would be rendered into the PDF"""
    return HTMLResponse(content=controller.render_summary())


@router.delete("/assessments/{session_id}", status_code=204)
def end_assessment(session_id: str, store: SessionStore = Depends(get_session_store)):
    """Discard the session and its assessment"""
    try:
        store.discard(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Assessment session not found")
    return Response(status_code=204)


@router.post("/assessments/{session_id}/eligibility", response_model=AssessmentResponse)
def submit_eligibility(
    session_id: str,
    request_body: EligibilityRequest,
    request: Request,
    controller: FlowController = Depends(get_controller),
):
    """
    Score the answers.

    Moves to `financials` when the score is above 6, otherwise to the
    terminal `not_eligible` step.
    """
    start_time = time.time()

    try:
        outcome = controller.submit_eligibility(request_body.answers)
    except InvalidTransitionError as e:
        raise _conflict(session_id, request, e)

    record_eligibility(outcome.step is Step.FINANCIALS)
    _log_outcome(request, session_id, Step.ELIGIBILITY, outcome, start_time)
    return to_response(session_id, controller)


@router.post("/assessments/{session_id}/financials", response_model=AssessmentResponse)
def submit_financials(
    session_id: str,
    request_body: FinancialsRequest,
    request: Request,
    controller: FlowController = Depends(get_controller),
):
    """
    Accept monthly income/expenses and compute the offer.

    Invalid figures keep the session on `financials` with a validation message.
    """
    start_time = time.time()

    try:
        outcome = controller.submit_financials(str(request_body.income), str(request_body.expenses))
    except InvalidTransitionError as e:
        raise _conflict(session_id, request, e)

    if outcome.ok:
        record_offer(controller.assessment.offer)
    _log_outcome(request, session_id, Step.FINANCIALS, outcome, start_time)
    return to_response(session_id, controller)


@router.post("/assessments/{session_id}/email", response_model=AssessmentResponse)
async def send_email(
    session_id: str,
    request_body: EmailRequest,
    request: Request,
    controller: FlowController = Depends(get_controller),
):
    """
    Render the summary to PDF and email it.

    Flow:
    1. Render HTML summary
    2. Export to PDF via the rendering service
    3. Send with the PDF attached
    4. Move to `email`; on export/delivery failure stay on `offer`
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        outcome = await controller.send_email(str(request_body.address))

    except InvalidTransitionError as e:
        raise _conflict(session_id, request, e)

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "session_id": session_id})
        raise HTTPException(status_code=500, detail="Internal Server Error")

    _log_outcome(request, session_id, Step.OFFER, outcome, start_time)
    return to_response(session_id, controller)
