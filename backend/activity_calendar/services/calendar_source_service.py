"""Storage-backed calendar sources: own bookings and friends' shared calendars."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from activity_calendar.models import (
    Activity,
    Booking,
    BookingStatus,
    CalendarShare,
    CalendarShareStatus,
    Profile,
)
from activity_calendar.services.calendar_service import SourceFetch
from activity_calendar.services.occurrence_service import SELF_SOURCE_ID, RawBookingRow

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.WAITLISTED,
)

SELF_LABEL = "My bookings"
FALLBACK_NAME = "Friend"


def _bookings_stmt(user_id: UUID) -> Select:
    return (
        select(Booking, Activity)
        .join(Activity, Activity.id == Booking.activity_id)
        .where(Booking.user_id == user_id, Booking.status.in_(ACTIVE_STATUSES))
        .order_by(Booking.created_at, Booking.id)
    )


def _to_row(booking: Booking, activity: Activity) -> RawBookingRow:
    return RawBookingRow(
        booking_id=booking.id,
        activity_id=activity.id,
        user_id=booking.user_id,
        status=booking.status,
        guests_count=booking.guests_count,
        activity_name=activity.name,
        location=activity.location,
        image_url=activity.image_url,
        schedule=activity.schedule,
    )


async def fetch_own_bookings(session: AsyncSession, user_id: UUID) -> list[RawBookingRow]:
    """Return the viewer's non-terminal bookings joined with their activities."""
    result = await session.execute(_bookings_stmt(user_id))
    return [_to_row(booking, activity) for booking, activity in result.all()]


async def fetch_bookings_for(session: AsyncSession, source_id: UUID) -> list[RawBookingRow]:
    """Return the bookings of a friend who shares their calendar."""
    return await fetch_own_bookings(session, source_id)


async def fetch_shared_source_ids(session: AsyncSession, viewer_id: UUID) -> list[UUID]:
    """Senders of accepted shares to ``viewer_id``, once each, by first acceptance."""
    result = await session.execute(
        select(CalendarShare.sender_id)
        .where(
            CalendarShare.recipient_id == viewer_id,
            CalendarShare.status == CalendarShareStatus.ACCEPTED,
        )
        .order_by(CalendarShare.accepted_at, CalendarShare.created_at)
    )
    seen: dict[UUID, None] = {}
    for sender_id in result.scalars():
        if sender_id != viewer_id:
            seen.setdefault(sender_id, None)
    return list(seen)


async def resolve_display_names(
    session: AsyncSession, ids: Iterable[UUID]
) -> dict[UUID, str]:
    """Map profile ids to display names; unknown ids get the fallback name."""
    wanted = list(ids)
    if not wanted:
        return {}
    result = await session.execute(select(Profile).where(Profile.id.in_(wanted)))
    names = {profile.id: profile.display_name for profile in result.scalars()}
    return {profile_id: names.get(profile_id, FALLBACK_NAME) for profile_id in wanted}


def _own_fetch(
    sessionmaker: async_sessionmaker[AsyncSession], viewer_id: UUID
) -> SourceFetch:
    async def _fetch() -> list[RawBookingRow]:
        async with sessionmaker() as session:
            return await fetch_own_bookings(session, viewer_id)

    return SourceFetch(source_id=SELF_SOURCE_ID, label=SELF_LABEL, fetch=_fetch)


def _shared_fetch(
    sessionmaker: async_sessionmaker[AsyncSession], source_id: UUID, label: str
) -> SourceFetch:
    async def _fetch() -> list[RawBookingRow]:
        async with sessionmaker() as session:
            return await fetch_bookings_for(session, source_id)

    return SourceFetch(source_id=str(source_id), label=label, fetch=_fetch)


async def build_source_fetches(
    sessionmaker: async_sessionmaker[AsyncSession], viewer_id: UUID
) -> tuple[SourceFetch, list[SourceFetch]]:
    """Return the viewer's own fetch and one fetch per shared calendar.

    Every fetch opens its own session when awaited, so the aggregator can run
    them concurrently.
    """
    async with sessionmaker() as session:
        source_ids = await fetch_shared_source_ids(session, viewer_id)
        names = await resolve_display_names(session, source_ids)
    logger.debug("Viewer %s has %d shared calendars", viewer_id, len(source_ids))
    shared = [
        _shared_fetch(sessionmaker, source_id, names[source_id]) for source_id in source_ids
    ]
    return _own_fetch(sessionmaker, viewer_id), shared
