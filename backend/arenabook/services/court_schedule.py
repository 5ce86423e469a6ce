"""
Court schedule resolution: which slots a court offers on a given date.

A court's hours are a comma-separated list of "HH:MM-HH:MM" ranges (split
shifts allowed), one string for weekdays and one for weekends. Each range is
quantized into bookable start times of `slot_minutes` length.
"""
import logging
from datetime import date
from typing import List, Tuple

from arenabook.models.court import Court, CourtStatus
from arenabook.settings import DEFAULT_SLOT_MINUTES
from arenabook.utils.dates import MINUTES_PER_DAY, format_hhmm, is_weekend, parse_hhmm, weekday_key

logger = logging.getLogger(__name__)


def parse_hour_ranges(hours: str) -> List[Tuple[int, int]]:
    """
    Parse "08:00-12:00,14:00-18:00" into [(480, 720), (840, 1080)].

    Malformed ranges are logged and skipped so one bad entry does not wipe
    out the rest of the day. Ranges with end <= start are returned as-is;
    consumers ignore them.
    """
    ranges: List[Tuple[int, int]] = []
    for raw in (hours or "").split(","):
        raw = raw.strip()
        if not raw:
            continue
        parts = raw.split("-")
        if len(parts) != 2:
            logger.warning("Skipping malformed hour range %r", raw)
            continue
        try:
            start = parse_hhmm(parts[0])
            end = parse_hhmm(parts[1])
        except ValueError as exc:
            logger.warning("Skipping malformed hour range %r: %s", raw, exc)
            continue
        ranges.append((start, end))
    return ranges


def slot_minutes_for(court: Court) -> int:
    """Booking interval for a court; unset or non-positive falls back to the default."""
    if court.slot_minutes and court.slot_minutes > 0:
        return court.slot_minutes
    return DEFAULT_SLOT_MINUTES


def is_bookable_on(court: Court, day: date) -> bool:
    """Active and open on that weekday. Hour strings are not consulted."""
    return court.status == CourtStatus.active and court.is_open_on(weekday_key(day))


def available_slot_count(court: Court, day: date) -> int:
    """Number of bookable slots the court offers on `day` (0 when closed or not active)."""
    if not is_bookable_on(court, day):
        return 0

    interval = slot_minutes_for(court)
    total = 0
    for start, end in parse_hour_ranges(court.hours_for(is_weekend(day))):
        if end > start:
            total += (end - start) // interval
    return total


def time_slots_for_date(court: Court, day: date) -> List[str]:
    """
    Slot start labels ("HH:MM") for `day`, in range order.

    Walks start, start+interval, ... while < end for every range of the
    weekday/weekend hours string. Status and open flags are left to callers.
    """
    interval = slot_minutes_for(court)
    labels: List[str] = []
    for start, end in parse_hour_ranges(court.hours_for(is_weekend(day))):
        current = start
        while current < end:
            labels.append(format_hhmm(current))
            current += interval
    return labels


def bookable_slots_for_date(court: Court, day: date) -> List[str]:
    """
    Slot labels a client can actually book on `day`.

    A slot whose end reaches midnight is dropped: its end would wrap to
    "00:00", which a same-day reservation cannot store.
    """
    interval = slot_minutes_for(court)
    return [label for label in time_slots_for_date(court, day) if parse_hhmm(label) + interval < MINUTES_PER_DAY]
