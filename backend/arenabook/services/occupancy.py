"""
Occupancy Aggregator

Booked vs. available slot counts per day, built on expanded occurrences and
court schedules. Feeds the dashboard occupancy heatmap and monthly summary.
"""
import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional, Sequence, Tuple, Union

from arenabook.models.court import Court, CourtStatus
from arenabook.services.court_schedule import available_slot_count
from arenabook.services.occurrence_expander import Occurrence
from arenabook.utils.dates import iter_days, weekday_index

ALL_COURTS = "all"

CourtFilter = Union[int, str]


@dataclass
class DailyOccupancy:
    rate: float
    booked: int
    total: int


@dataclass
class CalendarDay:
    date: date
    in_month: bool
    occupancy: DailyOccupancy


@dataclass
class MonthlySummary:
    year: int
    month: int
    active_courts: int
    courts_in_maintenance: int
    bookings_this_month: int
    bookings_today: int
    average_occupancy: float
    days: List[CalendarDay] = field(default_factory=list)


def _matches_filter(court_id: int, court_filter: CourtFilter) -> bool:
    return court_filter == ALL_COURTS or court_id == court_filter


def relevant_courts(courts: Sequence[Court], court_filter: CourtFilter = ALL_COURTS) -> List[Court]:
    """Active courts selected by `court_filter` (a court id or "all")."""
    return [c for c in courts if c.status == CourtStatus.active and _matches_filter(c.id, court_filter)]


def daily_occupancy(
    day: date,
    occurrences: Sequence[Occurrence],
    courts: Sequence[Court],
    court_filter: CourtFilter = ALL_COURTS,
) -> DailyOccupancy:
    """
    Occupancy for one date.

    total = sum of available slots across the selected active courts
    booked = non-cancelled occurrences on `day` on those courts
    rate = booked / total * 100, capped at 100; 0 when total is 0
    """
    selected = relevant_courts(courts, court_filter)
    if not selected:
        return DailyOccupancy(rate=0.0, booked=0, total=0)

    selected_ids = {c.id for c in selected}
    total = sum(available_slot_count(c, day) for c in selected)
    booked = sum(
        1
        for occ in occurrences
        if occ.date == day and not occ.is_cancelled and occ.court_id in selected_ids
    )

    if total == 0:
        return DailyOccupancy(rate=0.0, booked=booked, total=0)

    rate = min(booked / total * 100, 100.0)
    return DailyOccupancy(rate=rate, booked=booked, total=total)


def month_grid_range(year: int, month: int) -> Tuple[date, date]:
    """
    First and last date of a Sunday-aligned month grid.

    Leading days from the previous month fill the first week back to Sunday,
    trailing days from the next month fill the last week up to Saturday.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    grid_start = first - timedelta(days=weekday_index(first))
    grid_end = last + timedelta(days=6 - weekday_index(last))
    return grid_start, grid_end


def occupancy_calendar(
    year: int,
    month: int,
    occurrences: Sequence[Occurrence],
    courts: Sequence[Court],
    court_filter: CourtFilter = ALL_COURTS,
) -> List[CalendarDay]:
    """
    One entry per grid day. `occurrences` must cover month_grid_range().

    Adjacent-month days carry in_month=False so the heatmap can mute them.
    """
    grid_start, grid_end = month_grid_range(year, month)
    return [
        CalendarDay(
            date=day,
            in_month=day.month == month,
            occupancy=daily_occupancy(day, occurrences, courts, court_filter),
        )
        for day in iter_days(grid_start, grid_end)
    ]


def monthly_summary(
    year: int,
    month: int,
    occurrences: Sequence[Occurrence],
    courts: Sequence[Court],
    today: Optional[date] = None,
    court_filter: CourtFilter = ALL_COURTS,
) -> MonthlySummary:
    """Dashboard figures for a month. Average occupancy only counts in-month days."""
    today = today or date.today()
    days = occupancy_calendar(year, month, occurrences, courts, court_filter)
    in_month = [d for d in days if d.in_month]

    live = [
        occ
        for occ in occurrences
        if not occ.is_cancelled and _matches_filter(occ.court_id, court_filter)
    ]
    bookings_this_month = sum(1 for occ in live if occ.date.year == year and occ.date.month == month)
    bookings_today = sum(1 for occ in live if occ.date == today)

    average = sum(d.occupancy.rate for d in in_month) / len(in_month) if in_month else 0.0

    return MonthlySummary(
        year=year,
        month=month,
        active_courts=sum(1 for c in courts if c.status == CourtStatus.active),
        courts_in_maintenance=sum(1 for c in courts if c.status == CourtStatus.maintenance),
        bookings_this_month=bookings_this_month,
        bookings_today=bookings_today,
        average_occupancy=round(average, 1),
        days=days,
    )
