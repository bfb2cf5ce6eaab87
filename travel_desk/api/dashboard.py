from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from travel_desk.api.dependencies import get_dashboard_service
from travel_desk.schemas.dashboard import DashboardFilters, DashboardSeries, DashboardStats
from travel_desk.services.dashboard_service import DashboardService
from travel_desk.shared.response import ResponseEnvelope, build_meta

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

SOURCE = "booking_api,inquiries"


def get_dashboard_filters(
    period: str = Query(default="month", pattern="^(week|month|year)$"),
    metric: str = Query(default="count", pattern="^(count|profit|revenue)$"),
) -> DashboardFilters:
    return DashboardFilters(period=period, metric=metric)


@router.get("/summary")
def dashboard_summary(
    filters: DashboardFilters = Depends(get_dashboard_filters),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardStats]:
    return ResponseEnvelope(data=service.get_summary(filters), meta=build_meta(SOURCE, time_window=filters.period))


@router.get("/performance")
def dashboard_performance(
    filters: DashboardFilters = Depends(get_dashboard_filters),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardSeries]:
    return ResponseEnvelope(
        data=service.get_performance(filters),
        meta=build_meta(SOURCE, time_window=filters.period),
    )


@router.get("/agents")
def dashboard_agents(
    filters: DashboardFilters = Depends(get_dashboard_filters),
    service: DashboardService = Depends(get_dashboard_service),
) -> ResponseEnvelope[DashboardSeries]:
    return ResponseEnvelope(
        data=service.get_agent_breakdown(filters),
        meta=build_meta(SOURCE, time_window=filters.period),
    )
