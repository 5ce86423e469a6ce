from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from arenabook.database import get_session
from arenabook.repositories.court_repository import CourtRepository
from arenabook.repositories.reservation_repository import ReservationRepository
from arenabook.services.occupancy import (
    ALL_COURTS,
    daily_occupancy,
    month_grid_range,
    monthly_summary,
    occupancy_calendar,
)
from arenabook.services.reservation_service import ReservationService

router = APIRouter()


class DailyOccupancyResponse(BaseModel):
    date: date
    rate: float
    booked: int
    total: int


class CalendarDayResponse(BaseModel):
    date: date
    in_month: bool
    rate: float
    booked: int
    total: int


class MonthlySummaryResponse(BaseModel):
    year: int
    month: int
    active_courts: int
    courts_in_maintenance: int
    bookings_this_month: int
    bookings_today: int
    average_occupancy: float


def _validate_month(month: int):
    if month < 1 or month > 12:
        raise HTTPException(status_code=422, detail="month must be between 1 and 12")


def _court_filter(court_id: Optional[int]):
    return ALL_COURTS if court_id is None else court_id


@router.get("/venues/{venue_id}/occupancy/daily", response_model=DailyOccupancyResponse)
def get_daily_occupancy(
    venue_id: int,
    day: date = Query(..., alias="date"),
    court_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """Booked vs. available slots for one date (all active courts or one court)"""
    service = ReservationService(ReservationRepository(session), CourtRepository(session))
    courts = service.courts.list_by_venue(venue_id)
    occurrences = service.occurrences(venue_id, day, day)

    result = daily_occupancy(day, occurrences, courts, _court_filter(court_id))
    return DailyOccupancyResponse(date=day, rate=result.rate, booked=result.booked, total=result.total)


@router.get("/venues/{venue_id}/occupancy/calendar", response_model=List[CalendarDayResponse])
def get_occupancy_calendar(
    venue_id: int,
    year: int,
    month: int,
    court_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """Sunday-aligned month grid with per-day occupancy (adjacent-month days flagged)"""
    _validate_month(month)
    service = ReservationService(ReservationRepository(session), CourtRepository(session))
    courts = service.courts.list_by_venue(venue_id)
    grid_start, grid_end = month_grid_range(year, month)
    occurrences = service.occurrences(venue_id, grid_start, grid_end)

    days = occupancy_calendar(year, month, occurrences, courts, _court_filter(court_id))
    return [
        CalendarDayResponse(
            date=d.date,
            in_month=d.in_month,
            rate=d.occupancy.rate,
            booked=d.occupancy.booked,
            total=d.occupancy.total,
        )
        for d in days
    ]


@router.get("/venues/{venue_id}/occupancy/summary", response_model=MonthlySummaryResponse)
def get_monthly_summary(
    venue_id: int,
    year: int,
    month: int,
    court_id: Optional[int] = None,
    session: Session = Depends(get_session),
):
    """Dashboard figures for a month"""
    _validate_month(month)
    service = ReservationService(ReservationRepository(session), CourtRepository(session))
    courts = service.courts.list_by_venue(venue_id)
    today = date.today()
    grid_start, grid_end = month_grid_range(year, month)
    occurrences = service.occurrences(venue_id, grid_start, grid_end)
    if not grid_start <= today <= grid_end:
        occurrences += service.occurrences(venue_id, today, today)

    summary = monthly_summary(year, month, occurrences, courts, today=today, court_filter=_court_filter(court_id))
    return MonthlySummaryResponse(
        year=summary.year,
        month=summary.month,
        active_courts=summary.active_courts,
        courts_in_maintenance=summary.courts_in_maintenance,
        bookings_this_month=summary.bookings_this_month,
        bookings_today=summary.bookings_today,
        average_occupancy=summary.average_occupancy,
    )
