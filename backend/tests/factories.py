"""Builders for in-memory courts and reservations used by the pure-function tests."""
from datetime import date
from typing import Optional

from arenabook.models.court import Court, CourtStatus
from arenabook.models.reservation import (
    RecurrenceFrequency,
    Reservation,
    ReservationKind,
    ReservationStatus,
)


def make_court(court_id: int = 1, venue_id: int = 1, **overrides) -> Court:
    fields = dict(
        id=court_id,
        venue_id=venue_id,
        name=f"Court {court_id}",
        status=CourtStatus.active,
        weekday_hours="08:00-22:00",
        weekend_hours="08:00-22:00",
        slot_minutes=60,
    )
    fields.update(overrides)
    return Court(**fields)


def make_reservation(
    reservation_id: Optional[int],
    day: str = "2024-06-10",
    start: str = "10:00",
    end: str = "11:00",
    court_id: int = 1,
    venue_id: int = 1,
    status: ReservationStatus = ReservationStatus.confirmed,
    **overrides,
) -> Reservation:
    fields = dict(
        id=reservation_id,
        court_id=court_id,
        venue_id=venue_id,
        date=date.fromisoformat(day),
        start_time=start,
        end_time=end,
        status=status,
        kind=ReservationKind.normal,
        is_recurring=False,
    )
    fields.update(overrides)
    return Reservation(**fields)


def make_series(
    reservation_id: Optional[int],
    day: str,
    frequency: RecurrenceFrequency = RecurrenceFrequency.weekly,
    end_date: Optional[str] = None,
    **kwargs,
) -> Reservation:
    return make_reservation(
        reservation_id,
        day=day,
        is_recurring=True,
        recurrence=frequency,
        recurrence_end_date=date.fromisoformat(end_date) if end_date else None,
        **kwargs,
    )
