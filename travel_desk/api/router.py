from __future__ import annotations

from fastapi import APIRouter

from travel_desk.api.booking_forms import router as booking_forms_router
from travel_desk.api.bookings import router as bookings_router
from travel_desk.api.dashboard import router as dashboard_router
from travel_desk.api.health import router as health_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(bookings_router)
api_router.include_router(booking_forms_router)
api_router.include_router(dashboard_router)
