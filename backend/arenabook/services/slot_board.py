"""
Per-court slot board for the public booking page.

Each bookable start time of a court on a date is labelled available, booked
(overlaps a non-cancelled occurrence) or past.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from arenabook.models.court import Court
from arenabook.services.conflict_detector import intervals_overlap, span_minutes
from arenabook.services.court_schedule import bookable_slots_for_date, is_bookable_on, slot_minutes_for
from arenabook.services.occurrence_expander import Occurrence
from arenabook.utils.dates import format_hhmm, parse_hhmm

SLOT_AVAILABLE = "available"
SLOT_BOOKED = "booked"
SLOT_PAST = "past"


@dataclass
class SlotStatus:
    start_time: str
    end_time: str
    status: str
    reservation_id: Optional[str] = None


def build_slot_board(
    court: Court,
    day: date,
    occurrences: Sequence[Occurrence],
    now: Optional[datetime] = None,
) -> List[SlotStatus]:
    """Slot statuses for `court` on `day`; empty when the court is closed or not active.

    Only slots that end before midnight are listed.
    """
    if not is_bookable_on(court, day):
        return []

    now = now or datetime.now()
    interval = slot_minutes_for(court)
    day_occurrences = [
        occ for occ in occurrences if occ.court_id == court.id and occ.date == day and not occ.is_cancelled
    ]

    board: List[SlotStatus] = []
    for label in bookable_slots_for_date(court, day):
        start = parse_hhmm(label)
        end = start + interval
        slot = SlotStatus(start_time=label, end_time=format_hhmm(end), status=SLOT_AVAILABLE)

        if datetime.combine(day, datetime.min.time()) + timedelta(minutes=start) < now:
            slot.status = SLOT_PAST
        else:
            for occ in day_occurrences:
                occ_start, occ_end = span_minutes(occ.start_time, occ.end_time)
                if intervals_overlap(start, end, occ_start, occ_end):
                    slot.status = SLOT_BOOKED
                    slot.reservation_id = occ.id
                    break
        board.append(slot)
    return board
