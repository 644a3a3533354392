"""Test fixtures for the activity calendar backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from datetime import UTC, date, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from activity_calendar.core.config import get_settings
from activity_calendar.db.base import Base
from activity_calendar.db.session import dispose_engine, get_sessionmaker
from activity_calendar.main import app
from activity_calendar.models import (
    Activity,
    Booking,
    BookingStatus,
    CalendarShare,
    CalendarShareStatus,
    Profile,
)
from activity_calendar.schemas.schedule import (
    ActivityKind,
    CampSession,
    CampSessions,
    ClassOngoing,
    Fixed,
    ScheduleModel,
)
from activity_calendar.services import calendar_view_store


def _day(days: int) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()
    calendar_view_store.clear()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    calendar_view_store.clear()
    await dispose_engine(db_url)


def _document(kind: ActivityKind, schedule: object) -> dict:
    return ScheduleModel(activity_kind=kind, schedule=schedule).model_dump(mode="json")


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus a viewer, two friends, a host and their bookings."""
    sessionmaker = get_sessionmaker(db_url)

    async with sessionmaker() as session:
        viewer = Profile(legal_name="Casey Parent", preferred_first_name="Casey")
        friend = Profile(legal_name="Jordan Lee", preferred_first_name="Jordan")
        pending_friend = Profile(legal_name="Riley Stone")
        host = Profile(legal_name="Sam Host")
        session.add_all([viewer, friend, pending_friend, host])
        await session.flush()

        soon = Activity(
            name="Robotics Day Camp",
            location="Cedar Rapids",
            schedule=_document(
                ActivityKind.CAMP,
                Fixed(start_date=_day(2), start_time="09:00", end_time="12:00"),
            ),
        )
        later = Activity(
            name="Nature Walk",
            schedule=_document(
                ActivityKind.CAMP, Fixed(start_date=_day(5), all_day=True)
            ),
        )
        undated = Activity(
            name="Beginner Piano",
            activity_kind=ActivityKind.CLASS.value,
            schedule=_document(ActivityKind.CLASS, ClassOngoing()),
        )
        friend_camp = Activity(
            name="Art Sessions",
            schedule=_document(
                ActivityKind.CAMP,
                CampSessions(
                    sessions=(
                        CampSession(
                            id="art-1",
                            start_date=_day(3),
                            start_time="10:00",
                            end_time="11:00",
                        ),
                    )
                ),
            ),
        )
        hosted = Activity(
            name="Hosted Camp",
            host_id=host.id,
            schedule=_document(
                ActivityKind.CAMP,
                CampSessions(
                    sessions=(
                        CampSession(id="s1", start_date="2030-06-03", start_time="09:00"),
                        CampSession(id="s2", start_date="2030-06-10", start_time="09:00"),
                    )
                ),
            ),
        )
        session.add_all([soon, later, undated, friend_camp, hosted])
        await session.flush()

        own_booking = Booking(
            activity_id=soon.id, user_id=viewer.id, status=BookingStatus.CONFIRMED
        )
        undated_booking = Booking(
            activity_id=undated.id, user_id=viewer.id, status=BookingStatus.PENDING
        )
        session.add_all(
            [
                own_booking,
                undated_booking,
                Booking(activity_id=later.id, user_id=viewer.id, status=BookingStatus.DECLINED),
                Booking(
                    activity_id=friend_camp.id,
                    user_id=friend.id,
                    status=BookingStatus.CONFIRMED,
                    guests_count=2,
                ),
                Booking(activity_id=later.id, user_id=friend.id, status=BookingStatus.PENDING),
                Booking(
                    activity_id=later.id,
                    user_id=pending_friend.id,
                    status=BookingStatus.CONFIRMED,
                ),
            ]
        )
        accepted_at = datetime.now(UTC)
        session.add_all(
            [
                CalendarShare(
                    sender_id=friend.id,
                    recipient_id=viewer.id,
                    status=CalendarShareStatus.ACCEPTED,
                    accepted_at=accepted_at,
                ),
                CalendarShare(
                    sender_id=friend.id,
                    recipient_id=viewer.id,
                    status=CalendarShareStatus.ACCEPTED,
                    accepted_at=accepted_at + timedelta(minutes=5),
                ),
                CalendarShare(
                    sender_id=pending_friend.id,
                    recipient_id=viewer.id,
                    status=CalendarShareStatus.PENDING,
                ),
            ]
        )
        await session.commit()

        context: dict[str, object] = {
            "viewer_id": viewer.id,
            "friend_id": friend.id,
            "pending_friend_id": pending_friend.id,
            "host_id": host.id,
            "soon_activity_id": soon.id,
            "later_activity_id": later.id,
            "undated_activity_id": undated.id,
            "friend_activity_id": friend_camp.id,
            "hosted_activity_id": hosted.id,
            "own_booking_id": own_booking.id,
            "undated_booking_id": undated_booking.id,
            "sessionmaker": sessionmaker,
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context
