from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator, model_validator
from sqlmodel import Session

from arenabook.database import get_session
from arenabook.models.reservation import (
    RecurrenceFrequency,
    Reservation,
    ReservationKind,
    ReservationStatus,
)
from arenabook.repositories.court_repository import CourtRepository
from arenabook.repositories.reservation_repository import ReservationRepository
from arenabook.services.occurrence_expander import Occurrence
from arenabook.services.reservation_service import (
    ReservationConflictError,
    ReservationNotFoundError,
    ReservationService,
)
from arenabook.utils.dates import is_valid_hhmm

router = APIRouter()

# Widest window a single list request may expand
MAX_LIST_WINDOW_DAYS = 366


def _validate_hhmm(v):
    if v is not None and not is_valid_hhmm(v):
        raise ValueError("time must be HH:MM (24h, zero-padded)")
    return v


class ReservationCreate(BaseModel):
    court_id: int
    date: date
    start_time: str
    end_time: str
    profile_id: Optional[str] = None
    status: ReservationStatus = ReservationStatus.pending
    kind: ReservationKind = ReservationKind.normal
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None
    is_recurring: bool = False
    recurrence: Optional[RecurrenceFrequency] = None
    recurrence_end_date: Optional[date] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return _validate_hhmm(v)

    @model_validator(mode="after")
    def default_recurrence(self):
        if self.is_recurring and self.recurrence is None:
            self.recurrence = RecurrenceFrequency.weekly
        return self


class ReservationUpdate(BaseModel):
    court_id: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    profile_id: Optional[str] = None
    status: Optional[ReservationStatus] = None
    kind: Optional[ReservationKind] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    notes: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurrence: Optional[RecurrenceFrequency] = None
    recurrence_end_date: Optional[date] = None
    # Declared last: the default would shadow `date` in later annotations
    date: Optional[date] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return _validate_hhmm(v)


class BookingCreate(BaseModel):
    court_id: int
    date: date
    start_time: str
    profile_id: Optional[str] = None
    client_name: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v):
        return _validate_hhmm(v)


class ReservationResponse(BaseModel):
    id: int
    court_id: int
    venue_id: int
    profile_id: Optional[str]
    date: date
    start_time: str
    end_time: str
    status: ReservationStatus
    kind: ReservationKind
    client_name: Optional[str]
    client_phone: Optional[str]
    notes: Optional[str]
    is_recurring: bool
    recurrence: Optional[RecurrenceFrequency]
    recurrence_end_date: Optional[date]
    created_at: datetime

    class Config:
        from_attributes = True


class OccurrenceResponse(BaseModel):
    """A dated reservation instance; master_id is set only on generated occurrences."""

    id: str
    master_id: Optional[int] = None
    court_id: int
    venue_id: int
    profile_id: Optional[str]
    date: date
    start_time: str
    end_time: str
    status: ReservationStatus
    kind: ReservationKind
    client_name: Optional[str]
    client_phone: Optional[str]
    notes: Optional[str]
    is_recurring: bool
    recurrence: Optional[RecurrenceFrequency]
    recurrence_end_date: Optional[date]

    @classmethod
    def from_occurrence(cls, occ: Occurrence) -> "OccurrenceResponse":
        master = occ.reservation
        return cls(
            id=occ.id,
            master_id=occ.master_id,
            court_id=master.court_id,
            venue_id=master.venue_id,
            profile_id=master.profile_id,
            date=occ.date,
            start_time=master.start_time,
            end_time=master.end_time,
            status=master.status,
            kind=master.kind,
            client_name=master.client_name,
            client_phone=master.client_phone,
            notes=master.notes,
            is_recurring=master.is_recurring,
            recurrence=master.recurrence,
            recurrence_end_date=master.recurrence_end_date,
        )


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicting_reservation_id: Optional[str] = None
    conflicting_date: Optional[date] = None


def _service(session: Session) -> ReservationService:
    return ReservationService(ReservationRepository(session), CourtRepository(session))


def _raise_http(exc: ValueError):
    if isinstance(exc, ReservationNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ReservationConflictError):
        raise HTTPException(status_code=409, detail=str(exc))
    raise HTTPException(status_code=422, detail=str(exc))


@router.get("/venues/{venue_id}/reservations", response_model=List[OccurrenceResponse])
def list_reservations(
    venue_id: int,
    start: date,
    end: date,
    court_id: Optional[int] = None,
    status: Optional[ReservationStatus] = None,
    kind: Optional[ReservationKind] = None,
    session: Session = Depends(get_session),
):
    """Expanded occurrences (recurring series included) in [start, end], optionally filtered"""
    if end < start:
        raise HTTPException(status_code=422, detail="end must be >= start")
    if (end - start).days > MAX_LIST_WINDOW_DAYS:
        raise HTTPException(status_code=422, detail=f"window must not exceed {MAX_LIST_WINDOW_DAYS} days")

    occurrences = _service(session).occurrences(venue_id, start, end, court_id=court_id, status=status, kind=kind)
    return [OccurrenceResponse.from_occurrence(occ) for occ in occurrences]


@router.get("/venues/{venue_id}/reservations/masters", response_model=List[ReservationResponse])
def list_master_reservations(venue_id: int, session: Session = Depends(get_session)):
    """Stored master reservations of a venue, including cancelled ones"""
    return ReservationRepository(session).list_by_venue(venue_id)


@router.get("/venues/{venue_id}/profiles/{profile_id}/reservations/upcoming", response_model=List[OccurrenceResponse])
def list_upcoming_reservations(venue_id: int, profile_id: str, session: Session = Depends(get_session)):
    """A client's confirmed occurrences from today on, sorted by date then start time"""
    occurrences = _service(session).upcoming_for_profile(venue_id, profile_id)
    return [OccurrenceResponse.from_occurrence(occ) for occ in occurrences]


@router.post("/venues/{venue_id}/reservations", response_model=ReservationResponse, status_code=201)
def create_reservation(venue_id: int, reservation_data: ReservationCreate, session: Session = Depends(get_session)):
    """Create a reservation (single or recurring). 409 if it overlaps an existing occurrence."""
    candidate = Reservation(venue_id=venue_id, **reservation_data.model_dump())
    try:
        return _service(session).save(candidate)
    except ValueError as exc:
        _raise_http(exc)


@router.post("/venues/{venue_id}/reservations/conflict-check", response_model=ConflictCheckResponse)
def check_reservation_conflict(
    venue_id: int,
    reservation_data: ReservationCreate,
    reservation_id: Optional[int] = Query(default=None),
    session: Session = Depends(get_session),
):
    """Dry-run conflict check. Pass reservation_id when checking an edit of an existing master."""
    candidate = Reservation(id=reservation_id, venue_id=venue_id, **reservation_data.model_dump())
    conflict = _service(session).find_conflict(candidate)
    if conflict is None:
        return ConflictCheckResponse(has_conflict=False)
    _, existing = conflict
    return ConflictCheckResponse(has_conflict=True, conflicting_reservation_id=existing.id, conflicting_date=existing.date)


@router.put("/reservations/{reservation_id}", response_model=ReservationResponse)
def update_reservation(
    reservation_id: str, reservation_data: ReservationUpdate, session: Session = Depends(get_session)
):
    """Edit a reservation. Generated occurrence ids edit their master (the whole series)."""
    try:
        return _service(session).update(reservation_id, reservation_data.model_dump(exclude_unset=True))
    except ValueError as exc:
        _raise_http(exc)


@router.post("/reservations/{reservation_id}/cancel", response_model=ReservationResponse)
def cancel_reservation(reservation_id: str, session: Session = Depends(get_session)):
    """Cancel a reservation. For recurring series the entire series is cancelled."""
    try:
        return _service(session).cancel(reservation_id)
    except ValueError as exc:
        _raise_http(exc)


@router.post("/venues/{venue_id}/bookings", response_model=ReservationResponse, status_code=201)
def create_booking(venue_id: int, booking_data: BookingCreate, session: Session = Depends(get_session)):
    """Client booking of one slot; starts out pending"""
    try:
        return _service(session).book_slot(
            venue_id,
            booking_data.court_id,
            booking_data.date,
            booking_data.start_time,
            profile_id=booking_data.profile_id,
            client_name=booking_data.client_name,
        )
    except ValueError as exc:
        _raise_http(exc)
