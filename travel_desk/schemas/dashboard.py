from __future__ import annotations

from typing import List

from pydantic import ConfigDict, Field

from travel_desk.shared.base import BaseSchema


class SeriesPoint(BaseSchema):
    label: str
    value: float


class DashboardFilters(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    period: str = Field(default="month", pattern="^(week|month|year)$")
    metric: str = Field(default="count", pattern="^(count|profit|revenue)$")


class DashboardStats(BaseSchema):
    period: str
    period_label: str
    total_bookings: int
    confirmed_bookings: int
    pending_approvals: int
    active_inquiries: int
    resolved_inquiries: int
    total_profit: float
    total_revenue: float


class DashboardSeries(BaseSchema):
    period: str
    metric: str
    points: List[SeriesPoint]
