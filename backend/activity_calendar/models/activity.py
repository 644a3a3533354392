"""Activity model holding the schedule document."""
from __future__ import annotations

import uuid

from sqlalchemy import JSON, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from activity_calendar.db.base import Base
from activity_calendar.models.mixins import TimestampMixin

JSONB_TYPE = JSONB(astext_type=Text()).with_variant(JSON(), "sqlite")


class Activity(TimestampMixin, Base):
    """A camp or class listed by a host.

    ``schedule`` stores the serialized schedule document; ``version`` is bumped
    on every save and guards concurrent edits.
    """

    __tablename__ = "activities"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    host_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    activity_kind: Mapped[str] = mapped_column(String(16), default="camp", nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    image_url: Mapped[str | None] = mapped_column(String(1024))
    schedule: Mapped[dict | None] = mapped_column(JSONB_TYPE)
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    bookings: Mapped[list["Booking"]] = relationship(
        "Booking", back_populates="activity", cascade="all, delete-orphan"
    )
