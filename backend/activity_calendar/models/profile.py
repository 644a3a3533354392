"""Profile model for hosts, parents and friends sharing calendars."""
from __future__ import annotations

import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from activity_calendar.db.base import Base
from activity_calendar.models.mixins import TimestampMixin


class Profile(TimestampMixin, Base):
    """A person who can book activities or share a calendar."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    legal_name: Mapped[str | None] = mapped_column(String(255))
    preferred_first_name: Mapped[str | None] = mapped_column(String(120))

    @property
    def display_name(self) -> str:
        """Preferred first name, then legal name, then a generic label."""
        for candidate in (self.preferred_first_name, self.legal_name):
            if candidate and candidate.strip():
                return candidate.strip()
        return "Friend"
