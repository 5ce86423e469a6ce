"""
Reservation mutation flow.

Every create/edit follows the same sequence: read the venue's full master
collection, validate the candidate, run the conflict detector against the
expanded occurrences, then write the collection back. Edits and
cancellations addressed to a generated occurrence are redirected to its
master; occurrences themselves are never stored.
"""
import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from arenabook.models.court import Court
from arenabook.models.reservation import (
    RecurrenceFrequency,
    Reservation,
    ReservationKind,
    ReservationStatus,
)
from arenabook.repositories.court_repository import CourtRepository
from arenabook.repositories.reservation_repository import ReservationRepository
from arenabook.services.conflict_detector import find_conflict
from arenabook.services.court_schedule import bookable_slots_for_date, is_bookable_on, slot_minutes_for
from arenabook.services.occurrence_expander import Occurrence, expand, parse_occurrence_id
from arenabook.settings import (
    PAST_BOOKING_GRACE_MINUTES,
    PUBLIC_BOOKING_HORIZON_DAYS,
    RECURRENCE_HORIZON_YEARS,
)
from arenabook.utils.dates import add_years, format_hhmm, parse_hhmm, weekday_key, weekday_name

logger = logging.getLogger(__name__)

# Fields a master edit may change; identity and venue are fixed
EDITABLE_FIELDS = (
    "court_id",
    "profile_id",
    "date",
    "start_time",
    "end_time",
    "status",
    "kind",
    "client_name",
    "client_phone",
    "notes",
    "is_recurring",
    "recurrence",
    "recurrence_end_date",
)


class ReservationValidationError(ValueError):
    """Candidate reservation is malformed or temporally invalid."""


class ReservationConflictError(ValueError):
    """Candidate reservation overlaps an existing occurrence on the same court."""

    def __init__(self, message: str, conflict: Optional[Tuple[Occurrence, Occurrence]] = None):
        super().__init__(message)
        self.conflict = conflict


class ReservationNotFoundError(ValueError):
    """No master reservation matches the given id."""


def validate_reservation(
    candidate: Reservation,
    court: Optional[Court],
    *,
    is_new: bool,
    now: datetime,
    grace_minutes: int = PAST_BOOKING_GRACE_MINUTES,
) -> None:
    """
    Checks the booking core relies on its callers for.

    - the court exists and belongs to the reservation's venue
    - times are HH:MM and end is after start on the same date
    - a recurring end date is not before the anchor
    - a daily series is anchored on a day the court is open, so the anchor
      is one of its own occurrences
    - new reservations do not start in the past (editing past ones is allowed)
    """
    if court is None:
        raise ReservationValidationError(f"Court {candidate.court_id} not found")
    if court.venue_id != candidate.venue_id:
        raise ReservationValidationError(f"Court {court.id} does not belong to venue {candidate.venue_id}")

    try:
        start = parse_hhmm(candidate.start_time)
        end = parse_hhmm(candidate.end_time)
    except ValueError as exc:
        raise ReservationValidationError(str(exc)) from exc

    if end <= start:
        raise ReservationValidationError("end_time must be after start_time")

    if candidate.is_recurring and candidate.recurrence_end_date is not None:
        if candidate.recurrence_end_date < candidate.date:
            raise ReservationValidationError("recurrence_end_date must be on or after date")

    if candidate.is_recurring and candidate.recurrence == RecurrenceFrequency.daily:
        if not court.is_open_on(weekday_key(candidate.date)):
            raise ReservationValidationError(
                f"Court {court.id} is closed on {weekday_name(candidate.date)}; a daily series must start on an open day"
            )

    if is_new:
        starts_at = datetime.combine(candidate.date, datetime.min.time()) + timedelta(minutes=start)
        if starts_at < now - timedelta(minutes=grace_minutes):
            raise ReservationValidationError("Cannot create a reservation in the past")


class ReservationService:
    """Create, edit, cancel and list reservations for venues."""

    def __init__(self, reservations: ReservationRepository, courts: CourtRepository):
        self.reservations = reservations
        self.courts = courts

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def resolve_master(self, reservation_id: str) -> Reservation:
        """Master for a master id or a generated occurrence id ("12_2024-06-10")."""
        try:
            master_id = parse_occurrence_id(reservation_id)
        except ValueError as exc:
            raise ReservationNotFoundError(str(exc)) from exc
        master = self.reservations.get(master_id)
        if master is None:
            raise ReservationNotFoundError(f"Reservation {reservation_id} not found")
        return master

    def occurrences(
        self,
        venue_id: int,
        window_start: date,
        window_end: date,
        court_id: Optional[int] = None,
        status: Optional[ReservationStatus] = None,
        kind: Optional[ReservationKind] = None,
    ) -> List[Occurrence]:
        """Expanded occurrences of a venue in a window, sorted by date and start time."""
        masters = self.reservations.list_by_venue(venue_id)
        courts = self.courts.list_by_venue(venue_id)
        expanded = expand(masters, window_start, window_end, courts)
        if court_id is not None:
            expanded = [occ for occ in expanded if occ.court_id == court_id]
        if status is not None:
            expanded = [occ for occ in expanded if occ.status == status]
        if kind is not None:
            expanded = [occ for occ in expanded if occ.reservation.kind == kind]
        return sorted(expanded, key=lambda occ: (occ.date, occ.start_time, occ.court_id))

    def upcoming_for_profile(
        self,
        venue_id: int,
        profile_id: str,
        today: Optional[date] = None,
        horizon_years: int = RECURRENCE_HORIZON_YEARS,
    ) -> List[Occurrence]:
        """A client's confirmed occurrences from today on, earliest first."""
        today = today or date.today()
        return [
            occ
            for occ in self.occurrences(venue_id, today, add_years(today, horizon_years), status=ReservationStatus.confirmed)
            if occ.reservation.profile_id == profile_id
        ]

    def find_conflict(self, candidate: Reservation) -> Optional[Tuple[Occurrence, Occurrence]]:
        masters = self.reservations.list_by_venue(candidate.venue_id)
        courts = self.courts.list_by_venue(candidate.venue_id)
        return find_conflict(candidate, masters, courts)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, candidate: Reservation, now: Optional[datetime] = None) -> Reservation:
        """
        Validate, conflict-check and persist a new or edited master.

        Raises ReservationValidationError or ReservationConflictError; nothing
        is written in either case.
        """
        now = now or datetime.now()
        masters = self.reservations.list_by_venue(candidate.venue_id)
        courts = self.courts.list_by_venue(candidate.venue_id)

        is_new = candidate.id is None or all(r.id != candidate.id for r in masters)
        court = next((c for c in courts if c.id == candidate.court_id), None)
        validate_reservation(candidate, court, is_new=is_new, now=now)

        if candidate.is_recurring and candidate.recurrence is None:
            candidate.recurrence = RecurrenceFrequency.weekly

        conflict = find_conflict(candidate, masters, courts)
        if conflict is not None:
            _, existing = conflict
            logger.info(
                "Rejected reservation on court %s at %s %s-%s: overlaps %s",
                candidate.court_id,
                existing.date,
                candidate.start_time,
                candidate.end_time,
                existing.id,
            )
            raise ReservationConflictError(
                f"Time conflicts with reservation {existing.id} on {existing.date.isoformat()} "
                f"({existing.start_time}-{existing.end_time})",
                conflict=conflict,
            )

        if is_new:
            collection = masters + [candidate]
            position = len(collection) - 1
        else:
            collection = [candidate if r.id == candidate.id else r for r in masters]
            position = next(i for i, r in enumerate(masters) if r.id == candidate.id)

        saved = self.reservations.save(candidate.venue_id, collection)[position]
        logger.info("%s reservation %s on court %s", "Created" if is_new else "Updated", saved.id, saved.court_id)
        return saved

    def update(self, reservation_id: str, changes: Dict[str, Any], now: Optional[datetime] = None) -> Reservation:
        """Apply `changes` to the master behind `reservation_id` (master or occurrence id)."""
        master = self.resolve_master(reservation_id)
        if master.status == ReservationStatus.cancelled:
            raise ReservationValidationError(f"Reservation {master.id} is cancelled and can no longer be edited")
        # getattr loads attributes expired by an earlier commit
        data = {name: getattr(master, name) for name in Reservation.model_fields}
        data.update({k: v for k, v in changes.items() if k in EDITABLE_FIELDS})
        candidate = Reservation.model_validate(data)
        return self.save(candidate, now=now)

    def cancel(self, reservation_id: str) -> Reservation:
        """Cancel the whole series behind `reservation_id`. Cancelled is terminal."""
        master = self.resolve_master(reservation_id)
        if master.status == ReservationStatus.cancelled:
            return master

        masters = self.reservations.list_by_venue(master.venue_id)
        master.status = ReservationStatus.cancelled
        position = next(i for i, r in enumerate(masters) if r.id == master.id)
        saved = self.reservations.save(master.venue_id, masters)[position]
        logger.info("Cancelled reservation %s (recurring=%s)", saved.id, saved.is_recurring)
        return saved

    def book_slot(
        self,
        venue_id: int,
        court_id: int,
        day: date,
        start_time: str,
        profile_id: Optional[str] = None,
        client_name: Optional[str] = None,
        now: Optional[datetime] = None,
        horizon_days: int = PUBLIC_BOOKING_HORIZON_DAYS,
    ) -> Reservation:
        """
        Client self-service booking of a single slot.

        The slot must be one of the court's generated start times, within
        today .. today + horizon_days. The reservation lasts one slot and
        starts out pending.
        """
        now = now or datetime.now()
        today = now.date()
        if day < today or day > today + timedelta(days=horizon_days):
            raise ReservationValidationError(
                f"Bookings are only open from {today.isoformat()} to "
                f"{(today + timedelta(days=horizon_days)).isoformat()}"
            )

        court = self.courts.get(court_id)
        if court is None or court.venue_id != venue_id:
            raise ReservationValidationError(f"Court {court_id} not found")
        if not is_bookable_on(court, day) or start_time not in bookable_slots_for_date(court, day):
            raise ReservationValidationError(f"{start_time} is not a bookable slot on {day.isoformat()}")

        end_time = format_hhmm(parse_hhmm(start_time) + slot_minutes_for(court))
        candidate = Reservation(
            court_id=court_id,
            venue_id=venue_id,
            profile_id=profile_id,
            date=day,
            start_time=start_time,
            end_time=end_time,
            status=ReservationStatus.pending,
            kind=ReservationKind.normal,
            client_name=client_name,
            is_recurring=False,
        )
        return self.save(candidate, now=now)
