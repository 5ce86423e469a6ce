from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from arenabook.database import get_session
from arenabook.models.court import Court, CourtStatus
from arenabook.repositories.court_repository import CourtRepository
from arenabook.repositories.reservation_repository import ReservationRepository
from arenabook.services.court_schedule import available_slot_count, parse_hour_ranges
from arenabook.services.reservation_service import ReservationService
from arenabook.services.slot_board import build_slot_board

router = APIRouter()


def _validate_hours(v: Optional[str]) -> Optional[str]:
    """Hours strings are stored as given; at least one range must parse."""
    if v is None:
        return v
    v = v.strip()
    if v and not parse_hour_ranges(v):
        raise ValueError("hours must be comma-separated HH:MM-HH:MM ranges")
    return v


class CourtCreate(BaseModel):
    name: str
    status: CourtStatus = CourtStatus.active
    open_sun: bool = True
    open_mon: bool = True
    open_tue: bool = True
    open_wed: bool = True
    open_thu: bool = True
    open_fri: bool = True
    open_sat: bool = True
    weekday_hours: str = "08:00-22:00"
    weekend_hours: str = "08:00-22:00"
    slot_minutes: int = 60

    @field_validator("weekday_hours", "weekend_hours")
    @classmethod
    def validate_hours(cls, v):
        return _validate_hours(v)

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, v):
        if v < 1:
            raise ValueError("slot_minutes must be >= 1")
        return v


class CourtUpdate(BaseModel):
    name: Optional[str] = None
    status: Optional[CourtStatus] = None
    open_sun: Optional[bool] = None
    open_mon: Optional[bool] = None
    open_tue: Optional[bool] = None
    open_wed: Optional[bool] = None
    open_thu: Optional[bool] = None
    open_fri: Optional[bool] = None
    open_sat: Optional[bool] = None
    weekday_hours: Optional[str] = None
    weekend_hours: Optional[str] = None
    slot_minutes: Optional[int] = None

    @field_validator("weekday_hours", "weekend_hours")
    @classmethod
    def validate_hours(cls, v):
        return _validate_hours(v)

    @field_validator("slot_minutes")
    @classmethod
    def validate_slot_minutes(cls, v):
        if v is not None and v < 1:
            raise ValueError("slot_minutes must be >= 1")
        return v


class CourtResponse(BaseModel):
    id: int
    venue_id: int
    name: str
    status: CourtStatus
    open_sun: bool
    open_mon: bool
    open_tue: bool
    open_wed: bool
    open_thu: bool
    open_fri: bool
    open_sat: bool
    weekday_hours: str
    weekend_hours: str
    slot_minutes: int

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    start_time: str
    end_time: str
    status: str
    reservation_id: Optional[str] = None


class SlotBoardResponse(BaseModel):
    court_id: int
    date: date
    available_slot_count: int
    slots: List[SlotResponse]


@router.post("/venues/{venue_id}/courts", response_model=CourtResponse, status_code=201)
def create_court(venue_id: int, court_data: CourtCreate, session: Session = Depends(get_session)):
    """Create a court for a venue"""
    court = Court(venue_id=venue_id, **court_data.model_dump())
    session.add(court)
    session.commit()
    session.refresh(court)
    return court


@router.get("/venues/{venue_id}/courts", response_model=List[CourtResponse])
def list_courts(venue_id: int, session: Session = Depends(get_session)):
    """List all courts of a venue"""
    return CourtRepository(session).list_by_venue(venue_id)


@router.get("/courts/{court_id}", response_model=CourtResponse)
def get_court(court_id: int, session: Session = Depends(get_session)):
    court = session.get(Court, court_id)
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")
    return court


@router.put("/courts/{court_id}", response_model=CourtResponse)
def update_court(court_id: int, court_data: CourtUpdate, session: Session = Depends(get_session)):
    """Update a court. Existing reservations are not re-validated against new hours."""
    court = session.get(Court, court_id)
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")

    update_dict = court_data.model_dump(exclude_unset=True)
    for field, value in update_dict.items():
        setattr(court, field, value)

    session.add(court)
    session.commit()
    session.refresh(court)
    return court


@router.get("/courts/{court_id}/slots", response_model=SlotBoardResponse)
def get_court_slots(court_id: int, day: date = Query(..., alias="date"), session: Session = Depends(get_session)):
    """Slot board for one court on one date (available / booked / past)"""
    court = session.get(Court, court_id)
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")

    service = ReservationService(ReservationRepository(session), CourtRepository(session))
    occurrences = service.occurrences(court.venue_id, day, day, court_id=court.id)
    board = build_slot_board(court, day, occurrences, now=datetime.now())

    return SlotBoardResponse(
        court_id=court.id,
        date=day,
        available_slot_count=available_slot_count(court, day),
        slots=[SlotResponse(**vars(slot)) for slot in board],
    )
