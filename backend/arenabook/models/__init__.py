from arenabook.models.court import Court, CourtStatus
from arenabook.models.reservation import (
    RecurrenceFrequency,
    Reservation,
    ReservationKind,
    ReservationStatus,
)

__all__ = [
    "Court",
    "CourtStatus",
    "Reservation",
    "ReservationKind",
    "ReservationStatus",
    "RecurrenceFrequency",
]
