from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response

from luxride.api.v1.schemas import (
    BookingDraftSchema,
    BookingSchema,
    ReviewResponseSchema,
    StepResponseSchema,
    StepSchema,
    SubmissionResponseSchema,
    VehicleTypeSchema,
    WizardStateSchema,
    camel_errors,
    steps,
    vehicle_types,
)
from luxride.application.exceptions import SessionNotFoundError, StoreError, WizardBusyError
from luxride.application.use_cases.booking_wizard import BookingWizardUseCase, StepResult
from luxride.application.use_cases.submit_booking import SubmitBookingUseCase
from luxride.domain.entities.profile import Profile
from luxride.domain.entities.wizard_state import WizardSession
from luxride.wiring.dependencies import get_current_owner, get_submit_use_case, get_wizard_use_case

router = APIRouter()
logger = logging.getLogger(__name__)

_SUBMISSION_STATUS_CODES = {
    "confirmed": 201,
    "invalid": 422,
    "guardian_required": 422,
    "in_progress": 409,
    "failed": 503,
    "error": 500,
}


@router.get("/booking/steps", response_model=list[StepSchema])
def list_steps():
    return steps()


@router.get("/vehicle-types", response_model=list[VehicleTypeSchema])
def list_vehicle_types():
    return vehicle_types()


@router.post("/booking/sessions", response_model=WizardStateSchema, status_code=201)
def start_booking(
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    try:
        session = uc.start(owner.id)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return WizardStateSchema.from_session(session)


@router.get("/booking/sessions/{session_id}", response_model=WizardStateSchema)
def get_booking(
    session_id: str,
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    try:
        session = uc.get(session_id, owner.id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return WizardStateSchema.from_session(session)


@router.delete("/booking/sessions/{session_id}", status_code=204)
def discard_booking(
    session_id: str,
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    _run_transition(lambda: uc.discard(session_id, owner.id))
    return Response(status_code=204)


@router.post("/booking/sessions/{session_id}/next", response_model=StepResponseSchema)
def next_step(
    session_id: str,
    values: BookingDraftSchema | None = None,
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    result = _run_transition(lambda: uc.next(session_id, owner.id, _provided(values)))
    body = _step_response(session_id, owner.id, result)
    if result.action == "invalid":
        return JSONResponse(status_code=422, content=body.model_dump(mode="json", by_alias=True))
    return body


@router.post("/booking/sessions/{session_id}/previous", response_model=StepResponseSchema)
def previous_step(
    session_id: str,
    values: BookingDraftSchema | None = None,
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    result = _run_transition(lambda: uc.previous(session_id, owner.id, _provided(values)))
    return _step_response(session_id, owner.id, result)


@router.post("/booking/sessions/{session_id}/reset", response_model=StepResponseSchema)
def reset_booking(
    session_id: str,
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    result = _run_transition(lambda: uc.reset(session_id, owner.id))
    return _step_response(session_id, owner.id, result)


@router.get("/booking/sessions/{session_id}/review", response_model=ReviewResponseSchema)
def review_booking(
    session_id: str,
    owner: Profile = Depends(get_current_owner),
    uc: BookingWizardUseCase = Depends(get_wizard_use_case),
):
    try:
        review = uc.review(session_id, owner.id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ReviewResponseSchema(
        state=WizardStateSchema.from_session(WizardSession(session_id=session_id, owner_id=owner.id, state=review.state)),
        ready=review.ready,
        age=review.age,
        requires_guardian=review.requires_guardian,
        errors=camel_errors(review.errors),
    )


@router.post("/booking/sessions/{session_id}/submit", response_model=SubmissionResponseSchema, status_code=201)
def submit_booking(
    session_id: str,
    owner: Profile = Depends(get_current_owner),
    uc: SubmitBookingUseCase = Depends(get_submit_use_case),
):
    try:
        result = uc.execute(session_id, owner.id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        logger.exception("Booking session store failed", extra={"session_id": session_id, "reason": str(e)})
        raise HTTPException(status_code=503, detail="Booking service unavailable. Please try again.")

    body = SubmissionResponseSchema(
        status=result.status,
        message=result.message,
        booking=BookingSchema.from_entity(result.booking) if result.booking else None,
        errors=camel_errors(result.errors),
    )
    status_code = _SUBMISSION_STATUS_CODES.get(result.status, 500)
    if status_code != 201:
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))
    return body


def _run_transition(apply) -> StepResult:
    try:
        return apply()
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WizardBusyError:
        raise HTTPException(status_code=409, detail="This booking is being updated. Please try again.")
    except StoreError as e:
        logger.exception("Booking session store failed", extra={"reason": str(e)})
        raise HTTPException(status_code=503, detail="Booking service unavailable. Please try again.")


def _step_response(session_id: str, owner_id: str, result: StepResult) -> StepResponseSchema:
    session = WizardSession(session_id=session_id, owner_id=owner_id, state=result.updated_state)
    return StepResponseSchema(
        action=result.action,
        state=WizardStateSchema.from_session(session),
        errors=camel_errors(result.errors),
    )


def _provided(values: BookingDraftSchema | None) -> dict:
    return values.provided_values() if values is not None else {}
