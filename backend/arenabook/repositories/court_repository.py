from typing import List, Optional

from sqlmodel import Session, select

from arenabook.models.court import Court


class CourtRepository:
    """Read access to a venue's courts."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, court_id: int) -> Optional[Court]:
        return self.session.get(Court, court_id)

    def list_by_venue(self, venue_id: int) -> List[Court]:
        return list(self.session.exec(select(Court).where(Court.venue_id == venue_id).order_by(Court.id)).all())
