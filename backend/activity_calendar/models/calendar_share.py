"""Calendar share model."""
from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from activity_calendar.db.base import Base
from activity_calendar.models.mixins import TimestampMixin


class CalendarShareStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class CalendarShare(TimestampMixin, Base):
    """Grant from ``sender`` letting ``recipient`` see the sender's bookings."""

    __tablename__ = "calendar_shares"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[CalendarShareStatus] = mapped_column(
        Enum(CalendarShareStatus), default=CalendarShareStatus.PENDING, nullable=False
    )
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
