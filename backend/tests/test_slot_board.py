"""Public slot board: available / booked / past per slot."""
from datetime import date, datetime

from arenabook.models.court import CourtStatus
from arenabook.services.occurrence_expander import expand
from arenabook.services.slot_board import SLOT_AVAILABLE, SLOT_BOOKED, SLOT_PAST, build_slot_board
from tests.factories import make_court, make_reservation, make_series

MONDAY = date(2024, 6, 10)


def _board(court, masters, now):
    occurrences = expand(masters, MONDAY, MONDAY, [court])
    return build_slot_board(court, MONDAY, occurrences, now=now)


def test_statuses():
    court = make_court(weekday_hours="08:00-11:00")
    masters = [make_reservation(1, start="09:00", end="10:00")]
    board = _board(court, masters, now=datetime(2024, 6, 10, 8, 30))

    assert [(s.start_time, s.end_time, s.status) for s in board] == [
        ("08:00", "09:00", SLOT_PAST),
        ("09:00", "10:00", SLOT_BOOKED),
        ("10:00", "11:00", SLOT_AVAILABLE),
    ]
    assert board[1].reservation_id == "1"


def test_long_booking_blocks_every_slot_it_covers():
    court = make_court(weekday_hours="08:00-12:00")
    masters = [make_reservation(1, start="08:30", end="10:30")]
    board = _board(court, masters, now=datetime(2024, 6, 1))
    assert [s.status for s in board] == [SLOT_BOOKED, SLOT_BOOKED, SLOT_BOOKED, SLOT_AVAILABLE]


def test_generated_occurrence_marks_slot_booked():
    court = make_court(weekday_hours="18:00-20:00")
    masters = [make_series(7, day="2024-06-03", start="18:00", end="19:00")]
    board = _board(court, masters, now=datetime(2024, 6, 1))
    assert board[0].status == SLOT_BOOKED
    assert board[0].reservation_id == "7_2024-06-10"


def test_cancelled_reservation_frees_slot():
    court = make_court(weekday_hours="18:00-19:00")
    masters = [make_reservation(1, start="18:00", end="19:00", status="cancelled")]
    board = _board(court, masters, now=datetime(2024, 6, 1))
    assert board[0].status == SLOT_AVAILABLE


def test_closed_or_inactive_court_has_empty_board():
    now = datetime(2024, 6, 1)
    assert _board(make_court(open_mon=False), [], now) == []
    assert _board(make_court(status=CourtStatus.maintenance), [], now) == []


def test_slot_ending_at_midnight_is_left_off_the_board():
    court = make_court(weekday_hours="22:00-23:59")
    board = _board(court, [], now=datetime(2024, 6, 1))
    assert [(s.start_time, s.end_time) for s in board] == [("22:00", "23:00")]
