from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class ReservationStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"


class ReservationKind(str, Enum):
    normal = "normal"
    lesson = "lesson"
    event = "event"
    block = "block"


class RecurrenceFrequency(str, Enum):
    daily = "daily"
    weekly = "weekly"


class Reservation(SQLModel, table=True):
    """
    Stored master reservation.

    For recurring masters `date` is the anchor (first occurrence). Occurrences
    on other dates are never stored; see services.occurrence_expander.
    """

    id: Optional[int] = Field(default=None, primary_key=True)
    court_id: int = Field(foreign_key="court.id", index=True)
    venue_id: int = Field(index=True)
    profile_id: Optional[str] = Field(default=None)  # empty for admin-entered blocks
    date: date
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    status: ReservationStatus = Field(default=ReservationStatus.pending, sa_column=Column(String, nullable=False))
    kind: ReservationKind = Field(default=ReservationKind.normal, sa_column=Column(String, nullable=False))
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None

    # Recurrence
    is_recurring: bool = Field(default=False)
    recurrence: Optional[RecurrenceFrequency] = Field(default=None, sa_column=Column(String, nullable=True))
    recurrence_end_date: Optional[date] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
