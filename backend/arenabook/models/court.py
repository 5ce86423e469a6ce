from enum import Enum
from typing import Optional

from sqlalchemy import String
from sqlmodel import Column, Field, SQLModel


class CourtStatus(str, Enum):
    active = "active"
    inactive = "inactive"
    maintenance = "maintenance"


class Court(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    venue_id: int = Field(index=True)
    name: str
    status: CourtStatus = Field(default=CourtStatus.active, sa_column=Column(String, nullable=False))

    # Weekly operating calendar, keyed by weekday (sun..sat)
    open_sun: bool = Field(default=True)
    open_mon: bool = Field(default=True)
    open_tue: bool = Field(default=True)
    open_wed: bool = Field(default=True)
    open_thu: bool = Field(default=True)
    open_fri: bool = Field(default=True)
    open_sat: bool = Field(default=True)

    # Comma-separated "HH:MM-HH:MM" ranges, e.g. "07:00-12:00,17:00-23:00"
    weekday_hours: str = Field(default="08:00-22:00")
    weekend_hours: str = Field(default="08:00-22:00")
    slot_minutes: int = Field(default=60)

    def is_open_on(self, weekday_key: str) -> bool:
        """Open flag for a weekday key ("sun".."sat"); unknown keys are closed."""
        return bool(getattr(self, f"open_{weekday_key}", False))

    def hours_for(self, weekend: bool) -> str:
        return (self.weekend_hours if weekend else self.weekday_hours) or ""
