from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from travel_desk.api.dependencies import get_users_repository
from travel_desk.repositories.users_repository import UsersRepository
from travel_desk.schemas.booking_form import (
    BookingFormData,
    BookingPayloadResponse,
    FormValidationRequest,
    FormValidationResult,
    StepInfo,
)
from travel_desk.services.booking_form_validation import STEPS, SUBMIT_STEPS, validate_step_data, validate_steps
from travel_desk.services.booking_payload import build_booking_payload
from travel_desk.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/booking-forms", tags=["booking-forms"])


@router.get("/steps")
def booking_form_steps() -> ResponseEnvelope[List[StepInfo]]:
    return ResponseEnvelope(data=STEPS, meta=build_meta("system"))


@router.post("/validate")
def booking_form_validate(request: FormValidationRequest) -> ResponseEnvelope[FormValidationResult]:
    if request.step is None:
        errors = validate_steps(request.form, SUBMIT_STEPS)
    else:
        errors = validate_step_data(request.form, request.step)
    result = FormValidationResult(step=request.step, valid=not errors, errors=errors)
    return ResponseEnvelope(data=result, meta=build_meta("system"))


@router.post("/payload")
def booking_form_payload(
    form: BookingFormData,
    users_repository: UsersRepository = Depends(get_users_repository),
) -> ResponseEnvelope[BookingPayloadResponse]:
    payload = build_booking_payload(form, users_repository.get_current_user())
    return ResponseEnvelope(data=BookingPayloadResponse(payload=payload), meta=build_meta("booking_api"))
