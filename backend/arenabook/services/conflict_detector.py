"""
Conflict Detector

Decides whether a candidate reservation (single or recurring) can be placed
without overlapping a non-cancelled occurrence on the same court. Both sides
are expanded through occurrence_expander.expand(), so recurring series are
checked occurrence by occurrence, not master by master.

Overlap is half-open: [10:00, 11:00) and [11:00, 12:00) do not conflict.
A reservation whose end is not after its start is treated as crossing
midnight, so its span is at most 24 hours.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from arenabook.models.court import Court
from arenabook.models.reservation import Reservation
from arenabook.services.occurrence_expander import (
    Occurrence,
    anchor_occurrence,
    expand,
    recurrence_end,
)
from arenabook.settings import RECURRENCE_HORIZON_YEARS
from arenabook.utils.dates import MINUTES_PER_DAY, parse_hhmm


def span_minutes(start_time: str, end_time: str) -> Tuple[int, int]:
    """[start, end) in minutes from midnight of the occurrence date."""
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Check if [a_start, a_end) overlaps [b_start, b_end)."""
    return a_start < b_end and a_end > b_start


def occurrences_overlap(a: Occurrence, b: Occurrence) -> bool:
    """Same court, same date, neither cancelled, and overlapping time spans."""
    if a.court_id != b.court_id or a.date != b.date:
        return False
    if a.is_cancelled or b.is_cancelled:
        return False
    a_start, a_end = span_minutes(a.start_time, a.end_time)
    b_start, b_end = span_minutes(b.start_time, b.end_time)
    return intervals_overlap(a_start, a_end, b_start, b_end)


def conflict_horizon(candidate: Reservation, horizon_years: int = RECURRENCE_HORIZON_YEARS) -> Tuple[date, date]:
    """Date range over which a candidate must be checked."""
    if not candidate.is_recurring:
        return candidate.date, candidate.date
    return candidate.date, recurrence_end(candidate, horizon_years)


def find_conflict(
    candidate: Reservation,
    existing_masters: Iterable[Reservation],
    courts: Sequence[Court],
    horizon_years: int = RECURRENCE_HORIZON_YEARS,
) -> Optional[Tuple[Occurrence, Occurrence]]:
    """
    Return the first (candidate occurrence, existing occurrence) pair that
    overlaps, or None.

    The candidate's own master is excluded from `existing_masters` so an edit
    never conflicts with the series it replaces.
    """
    others = [r for r in existing_masters if candidate.id is None or r.id != candidate.id]
    window_start, window_end = conflict_horizon(candidate, horizon_years)

    existing = expand(others, window_start, window_end, courts, horizon_years)
    if candidate.is_recurring:
        candidates: List[Occurrence] = expand([candidate], window_start, window_end, courts, horizon_years)
    else:
        candidates = [anchor_occurrence(candidate)]

    by_court_day: Dict[Tuple[int, date], List[Occurrence]] = defaultdict(list)
    for other in existing:
        by_court_day[(other.court_id, other.date)].append(other)

    for new_occurrence in candidates:
        for other in by_court_day.get((new_occurrence.court_id, new_occurrence.date), ()):
            if occurrences_overlap(new_occurrence, other):
                return new_occurrence, other
    return None


def has_conflict(
    candidate: Reservation,
    existing_masters: Iterable[Reservation],
    courts: Sequence[Court],
    horizon_years: int = RECURRENCE_HORIZON_YEARS,
) -> bool:
    """True if placing `candidate` would double-book its court."""
    return find_conflict(candidate, existing_masters, courts, horizon_years) is not None
