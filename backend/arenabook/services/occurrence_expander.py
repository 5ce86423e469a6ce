"""
Occurrence Expander

Turns stored master reservations into the concrete dated occurrences that
fall inside a date window. This is the only place occurrences are derived;
conflict checks, occupancy and list views all go through expand().

Rules:
- Non-recurring masters pass through unchanged when their date is in the
  window (cancelled ones included; consumers filter by status).
- Cancelled recurring masters contribute nothing.
- Recurring masters whose court cannot be resolved contribute nothing.
- Daily series only produce dates on which the court is open.
- Weekly series produce every date sharing the anchor's weekday, without
  re-checking the court's open flags.
- A series without an end date stops RECURRENCE_HORIZON_YEARS after its anchor.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

from arenabook.models.court import Court
from arenabook.models.reservation import RecurrenceFrequency, Reservation, ReservationStatus
from arenabook.settings import RECURRENCE_HORIZON_YEARS
from arenabook.utils.dates import add_years, format_date, iter_days, weekday_index, weekday_key

logger = logging.getLogger(__name__)

OCCURRENCE_ID_SEPARATOR = "_"


@dataclass(frozen=True)
class Anchor:
    """Occurrence on the master's own date."""


@dataclass(frozen=True)
class Derived:
    """Generated occurrence of a recurring master on another date."""

    master_id: Optional[int]


Origin = Union[Anchor, Derived]


@dataclass(frozen=True)
class Occurrence:
    """
    A dated instance of a master reservation.

    Every field except the date is the master's. Occurrences are never
    stored or mutated; edits go to `reservation` (the master).
    """

    reservation: Reservation
    date: date
    origin: Origin

    @property
    def id(self) -> str:
        if isinstance(self.origin, Derived):
            return f"{self.origin.master_id}{OCCURRENCE_ID_SEPARATOR}{format_date(self.date)}"
        return str(self.reservation.id)

    @property
    def master_id(self) -> Optional[int]:
        """Back-reference to the owning master; None for the anchor."""
        if isinstance(self.origin, Derived):
            return self.origin.master_id
        return None

    @property
    def is_anchor(self) -> bool:
        return isinstance(self.origin, Anchor)

    @property
    def court_id(self) -> int:
        return self.reservation.court_id

    @property
    def start_time(self) -> str:
        return self.reservation.start_time

    @property
    def end_time(self) -> str:
        return self.reservation.end_time

    @property
    def status(self) -> ReservationStatus:
        return self.reservation.status

    @property
    def is_cancelled(self) -> bool:
        return self.reservation.status == ReservationStatus.cancelled


def anchor_occurrence(reservation: Reservation) -> Occurrence:
    return Occurrence(reservation=reservation, date=reservation.date, origin=Anchor())


def recurrence_end(reservation: Reservation, horizon_years: int = RECURRENCE_HORIZON_YEARS) -> date:
    """Effective last date of a series: explicit end date or anchor + horizon."""
    if reservation.recurrence_end_date is not None:
        return reservation.recurrence_end_date
    return add_years(reservation.date, horizon_years)


def _includes_day(reservation: Reservation, court: Court, day: date) -> bool:
    if reservation.recurrence == RecurrenceFrequency.daily:
        return court.is_open_on(weekday_key(day))
    # weekly, and unset frequency on a recurring master
    return weekday_index(day) == weekday_index(reservation.date)


def _expand_series(
    reservation: Reservation,
    court: Court,
    window_start: date,
    window_end: date,
    horizon_years: int,
) -> List[Occurrence]:
    start = max(window_start, reservation.date)
    end = min(window_end, recurrence_end(reservation, horizon_years))

    occurrences: List[Occurrence] = []
    for day in iter_days(start, end):
        if not _includes_day(reservation, court, day):
            continue
        if day == reservation.date:
            occurrences.append(anchor_occurrence(reservation))
        else:
            occurrences.append(Occurrence(reservation=reservation, date=day, origin=Derived(reservation.id)))
    return occurrences


def expand(
    masters: Iterable[Reservation],
    window_start: date,
    window_end: date,
    courts: Sequence[Court],
    horizon_years: int = RECURRENCE_HORIZON_YEARS,
) -> List[Occurrence]:
    """
    Materialize every occurrence of `masters` within [window_start, window_end].

    Output order: in-window non-recurring masters in input order, followed by
    recurring occurrences grouped by master (input order) and sorted by date.
    """
    courts_by_id: Dict[int, Court] = {c.id: c for c in courts}

    singles: List[Occurrence] = []
    series: List[Occurrence] = []

    for reservation in masters:
        if not reservation.is_recurring:
            if window_start <= reservation.date <= window_end:
                singles.append(anchor_occurrence(reservation))
            continue

        if reservation.status == ReservationStatus.cancelled:
            continue

        court = courts_by_id.get(reservation.court_id)
        if court is None:
            logger.debug(
                "Recurring reservation %s references unknown court %s; no occurrences generated",
                reservation.id,
                reservation.court_id,
            )
            continue

        series.extend(_expand_series(reservation, court, window_start, window_end, horizon_years))

    return singles + series


def parse_occurrence_id(occurrence_id: str) -> int:
    """
    Resolve an occurrence id ("12" or "12_2024-06-10") to its master id.

    Raises ValueError if the id does not start with an integer master id.
    """
    master_part = str(occurrence_id).split(OCCURRENCE_ID_SEPARATOR, 1)[0]
    try:
        return int(master_part)
    except ValueError:
        raise ValueError(f"Invalid reservation id '{occurrence_id}'") from None
