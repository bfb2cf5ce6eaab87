from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from travel_desk.analytics.agent_resolver import UNASSIGNED, UNKNOWN_AGENT, resolve_agent_name
from travel_desk.core.errors import BadRequestError
from travel_desk.models.bookings import CurrentUser
from travel_desk.schemas.bookings import NormalizedBooking
from travel_desk.schemas.dashboard import SeriesPoint
from travel_desk.shared.time import MONTH_LABELS, month_length, parse_date, resolve_period_window

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

METRICS: Dict[str, Callable[[NormalizedBooking], float]] = {
    "count": lambda booking: 1.0,
    "profit": lambda booking: booking.totals.profit,
    "revenue": lambda booking: booking.totals.total_sale,
}


def metric_value(booking: NormalizedBooking, metric: str) -> float:
    try:
        return METRICS[metric](booking)
    except KeyError as exc:
        raise BadRequestError("Unsupported metric") from exc


def week_label(day: date) -> str:
    return f"{WEEKDAY_LABELS[day.weekday()]}, {MONTH_LABELS[day.month - 1]} {day.day}"


def _created(booking: NormalizedBooking) -> Optional[date]:
    return parse_date(booking.dates.created)


def aggregate_by_period(
    bookings: Iterable[NormalizedBooking],
    period: str,
    metric: str,
    today: Optional[date] = None,
) -> List[SeriesPoint]:
    """Chart series with one zero-initialized bucket per day or month of the requested period.

    Bookings without a usable creation date, or outside the current window, land in no bucket.
    """
    today = today or date.today()
    buckets: Dict[str, float] = {}
    if period == "week":
        days = [today - timedelta(days=offset) for offset in range(6, -1, -1)]
        keys = [day.isoformat() for day in days]
        labels = [week_label(day) for day in days]
    elif period == "month":
        keys = [str(day) for day in range(1, month_length(today.year, today.month) + 1)]
        labels = list(keys)
    elif period == "year":
        keys = [str(month) for month in range(1, 13)]
        labels = list(MONTH_LABELS)
    else:
        raise BadRequestError("Unsupported period")
    for key in keys:
        buckets[key] = 0.0

    for booking in bookings:
        created = _created(booking)
        if created is None:
            continue
        if period == "week":
            key = created.isoformat()
        elif period == "month":
            if (created.year, created.month) != (today.year, today.month):
                continue
            key = str(created.day)
        else:
            if created.year != today.year:
                continue
            key = str(created.month)
        if key in buckets:
            buckets[key] += metric_value(booking, metric)

    return [SeriesPoint(label=label, value=buckets[key]) for key, label in zip(keys, labels)]


def filter_by_period(
    bookings: Iterable[NormalizedBooking],
    period: str,
    today: Optional[date] = None,
) -> List[NormalizedBooking]:
    """Overview window filter. Bookings without a parseable creation date are kept."""
    start, end = resolve_period_window(period, today)
    selected: List[NormalizedBooking] = []
    for booking in bookings:
        created = _created(booking)
        if created is None or start <= created <= end:
            selected.append(booking)
    return selected


def aggregate_by_agent(
    bookings: Iterable[NormalizedBooking],
    metric: str,
    agents: Iterable[object] = (),
    current_user: Optional[CurrentUser] = None,
) -> List[SeriesPoint]:
    roster = list(agents)
    totals: Dict[str, float] = defaultdict(float)
    order: List[str] = []
    unassigned = 0.0
    for booking in bookings:
        value = metric_value(booking, metric)
        if not booking.agent.id:
            unassigned += value
            continue
        if roster or current_user is not None:
            name = resolve_agent_name(
                booking.agent.id,
                roster,
                fallback_name=None if booking.agent.name in {UNASSIGNED, UNKNOWN_AGENT} else booking.agent.name,
                current_user=current_user,
            )
        else:
            name = booking.agent.name
        if name not in totals:
            order.append(name)
        totals[name] += value

    points = [SeriesPoint(label=name, value=totals[name]) for name in order if totals[name] > 0]
    if unassigned > 0:
        points.append(SeriesPoint(label=UNASSIGNED, value=unassigned))
    return sorted(points, key=lambda point: point.value, reverse=True)
