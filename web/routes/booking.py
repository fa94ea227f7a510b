"""Booking flow routes: drafts, verification codes and promotion."""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from salon_booking.core.enums import VerificationMethod
from salon_booking.services.booking.drafts import Draft
from salon_booking.services.booking.flow import BookingFlowService
from web.dependencies import get_booking_flow
from web.models.booking import (
    CodeConfirmRequest,
    CodeIssuedResponse,
    CodeIssueRequest,
    CodeStatusResponse,
    CodeVerifyRequest,
    ContactUpdateRequest,
    DraftCreateRequest,
    DraftResponse,
    PromotionResponse,
)

router = APIRouter(prefix="/booking", tags=["booking"])


def _draft_response(draft: Draft, flow: BookingFlowService) -> DraftResponse:
    return DraftResponse(
        id=draft.id,
        source=draft.source,
        state=draft.effective_state(flow.drafts.now()),
        service_id=draft.service_id,
        master_id=draft.master_id,
        start_at=draft.start_at,
        end_at=draft.end_at,
        expires_at=draft.expires_at,
        customer_name=draft.customer_name,
        phone=draft.phone,
        email=draft.email,
        verified=draft.verified,
        appointment_id=draft.appointment_id,
    )


@router.post("/drafts", response_model=DraftResponse, status_code=status.HTTP_201_CREATED)
async def create_draft(
    request: DraftCreateRequest, flow: BookingFlowService = Depends(get_booking_flow)
):
    """Create a draft for a chosen slot."""
    draft = await flow.create_draft(
        service_id=request.service_id,
        master_id=request.master_id,
        start_at=request.start_at,
        end_at=request.end_at,
        source=request.source,
        customer_name=request.customer_name,
        phone=request.phone,
        email=request.email,
        notes=request.notes,
        channel_meta=request.channel_meta,
    )
    return _draft_response(draft, flow)


@router.get("/drafts/{draft_id}", response_model=DraftResponse)
async def get_draft(draft_id: str, flow: BookingFlowService = Depends(get_booking_flow)):
    return _draft_response(await flow.get_draft(draft_id), flow)


@router.patch("/drafts/{draft_id}/contact", response_model=DraftResponse)
async def update_draft_contact(
    draft_id: str,
    request: ContactUpdateRequest,
    flow: BookingFlowService = Depends(get_booking_flow),
):
    """Complete contact data before verification."""
    draft = await flow.update_contact(draft_id, **request.model_dump(exclude_none=True))
    return _draft_response(draft, flow)


@router.post(
    "/drafts/{draft_id}/codes",
    response_model=CodeIssuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def issue_code(
    draft_id: str,
    request: CodeIssueRequest,
    flow: BookingFlowService = Depends(get_booking_flow),
):
    """Issue or re-send a verification code."""
    issued = await flow.issue_code(draft_id, request.method, contact=request.contact)
    return CodeIssuedResponse(
        draft_id=issued.draft_id, method=issued.method, expires_at=issued.expires_at
    )


@router.post("/drafts/{draft_id}/codes/verify", response_model=DraftResponse)
async def verify_code(
    draft_id: str,
    request: CodeVerifyRequest,
    flow: BookingFlowService = Depends(get_booking_flow),
):
    draft = await flow.verify_code(draft_id, request.method, request.code, contact=request.contact)
    return _draft_response(draft, flow)


@router.post("/drafts/{draft_id}/codes/confirm", status_code=status.HTTP_204_NO_CONTENT)
async def confirm_code(
    draft_id: str,
    request: CodeConfirmRequest,
    flow: BookingFlowService = Depends(get_booking_flow),
):
    """Out-of-band confirmation from a push-button channel."""
    await flow.confirm_out_of_band(
        draft_id, request.method, actor=request.actor, contact=request.contact
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/drafts/{draft_id}/codes/status", response_model=CodeStatusResponse)
async def poll_code_status(
    draft_id: str,
    method: VerificationMethod,
    contact: Optional[str] = None,
    flow: BookingFlowService = Depends(get_booking_flow),
):
    """Poll whether an out-of-band confirmation arrived."""
    result = await flow.poll_confirmed(draft_id, method, contact=contact)
    return CodeStatusResponse(draft_id=draft_id, status=result)


@router.post("/drafts/{draft_id}/promote", response_model=PromotionResponse)
async def promote_draft(
    draft_id: str,
    response: Response,
    flow: BookingFlowService = Depends(get_booking_flow),
):
    """
    Turn a verified draft into an appointment.

    Returns 201 for a new appointment and 200 when the draft was promoted before.
    """
    result = await flow.promote_draft(draft_id)
    response.status_code = status.HTTP_200_OK if result.already_promoted else status.HTTP_201_CREATED
    return PromotionResponse(
        draft_id=draft_id,
        appointment_id=result.appointment_id,
        already_promoted=result.already_promoted,
    )
