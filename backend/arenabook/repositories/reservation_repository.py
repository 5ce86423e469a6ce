"""
Storage boundary for master reservations.

The booking core works on whole in-memory collections: read every master of
a venue, decide, then write the collection back. Records are upserted and
never deleted; cancellation is a status change.
"""
from typing import List, Optional, Sequence

from sqlmodel import Session, select

from arenabook.models.reservation import Reservation


class ReservationRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, reservation_id: int) -> Optional[Reservation]:
        return self.session.get(Reservation, reservation_id)

    def list_by_venue(self, venue_id: int) -> List[Reservation]:
        """All master reservations of a venue, including cancelled ones."""
        return list(
            self.session.exec(
                select(Reservation).where(Reservation.venue_id == venue_id).order_by(Reservation.id)
            ).all()
        )

    def save(self, venue_id: int, collection: Sequence[Reservation]) -> List[Reservation]:
        """
        Write back a venue's full master collection.

        Returns the persistent instances in the same order as `collection`
        (new records come back with their generated ids).
        """
        for reservation in collection:
            if reservation.venue_id != venue_id:
                raise ValueError(
                    f"Reservation {reservation.id} belongs to venue {reservation.venue_id}, not {venue_id}"
                )

        saved = [self.session.merge(reservation) for reservation in collection]
        self.session.commit()
        for reservation in saved:
            self.session.refresh(reservation)
        return saved
