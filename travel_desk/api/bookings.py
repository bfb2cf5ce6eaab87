from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from travel_desk.api.dependencies import get_bookings_service, get_documents_service
from travel_desk.schemas.booking_form import BookingDraftsRequest, BookingFormData
from travel_desk.schemas.bookings import (
    BookingGroup,
    BookingListFilters,
    BookingStatusUpdate,
    BookingSummary,
    NormalizedBooking,
)
from travel_desk.services.bookings_service import BookingsService
from travel_desk.services.documents_service import DocumentsService, RenderedDocument
from travel_desk.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/bookings", tags=["bookings"])

SOURCE = "booking_api"


def get_booking_list_filters(
    search: Optional[str] = Query(default=None),
    status: str = Query(default="all", pattern="^(all|pending|confirmed|cancelled)$"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
) -> BookingListFilters:
    return BookingListFilters(search=search, status=status, page=page, page_size=page_size)


def _pdf_response(document: RenderedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.get("")
def bookings_list(
    filters: BookingListFilters = Depends(get_booking_list_filters),
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[List[NormalizedBooking]]:
    data, pagination = service.list_bookings(filters)
    return ResponseEnvelope(data=data, pagination=pagination, meta=build_meta(SOURCE))


@router.get("/summary")
def bookings_summary(
    filters: BookingListFilters = Depends(get_booking_list_filters),
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[BookingSummary]:
    return ResponseEnvelope(data=service.get_summary(filters), meta=build_meta(SOURCE))


@router.get("/groups")
def bookings_groups(
    filters: BookingListFilters = Depends(get_booking_list_filters),
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[List[BookingGroup]]:
    return ResponseEnvelope(data=service.list_groups(filters), meta=build_meta(SOURCE))


@router.post("", status_code=201)
def bookings_create(
    request: BookingDraftsRequest,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[List[NormalizedBooking]]:
    return ResponseEnvelope(data=service.create_bookings(request.drafts), meta=build_meta(SOURCE))


@router.get("/{booking_id}")
def bookings_detail(
    booking_id: str,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[NormalizedBooking]:
    return ResponseEnvelope(data=service.get_booking(booking_id), meta=build_meta(SOURCE))


@router.get("/{booking_id}/form")
def bookings_form(
    booking_id: str,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[BookingFormData]:
    return ResponseEnvelope(data=service.get_booking_form(booking_id), meta=build_meta(SOURCE))


@router.put("/{booking_id}")
def bookings_update(
    booking_id: str,
    draft: BookingFormData,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[NormalizedBooking]:
    return ResponseEnvelope(data=service.update_booking(booking_id, draft), meta=build_meta(SOURCE))


@router.patch("/{booking_id}/status")
def bookings_update_status(
    booking_id: str,
    update: BookingStatusUpdate,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[NormalizedBooking]:
    return ResponseEnvelope(data=service.update_status(booking_id, update.status), meta=build_meta(SOURCE))


@router.delete("/{booking_id}")
def bookings_delete(
    booking_id: str,
    service: BookingsService = Depends(get_bookings_service),
) -> ResponseEnvelope[dict]:
    return ResponseEnvelope(data={"id": service.delete_booking(booking_id), "deleted": True}, meta=build_meta(SOURCE))


@router.get("/{booking_id}/confirmation.pdf")
def bookings_confirmation_pdf(
    booking_id: str,
    service: DocumentsService = Depends(get_documents_service),
) -> Response:
    return _pdf_response(service.render_confirmation(booking_id))


@router.get("/{booking_id}/invoice.pdf")
def bookings_invoice_pdf(
    booking_id: str,
    service: DocumentsService = Depends(get_documents_service),
) -> Response:
    return _pdf_response(service.render_invoice(booking_id))
