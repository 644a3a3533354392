from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import select

from activity_calendar.core.config import get_settings
from activity_calendar.core.security import create_access_token
from activity_calendar.db.session import get_sessionmaker
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

VIEWER_NAME = "Dev Parent"


def _day(offset: int) -> str:
    return (date.today() + timedelta(days=offset)).isoformat()


def _documents() -> list[tuple[str, ScheduleModel]]:
    return [
        (
            "Robotics Day Camp",
            ScheduleModel(
                activity_kind=ActivityKind.CAMP,
                schedule=Fixed(start_date=_day(3), start_time="09:00", end_time="15:00"),
                pricing={"price_cents": 45000, "display": "450"},
            ),
        ),
        (
            "Summer Art Sessions",
            ScheduleModel(
                activity_kind=ActivityKind.CAMP,
                schedule=CampSessions(
                    sessions=(
                        CampSession(
                            start_date=_day(10),
                            end_date=_day(14),
                            start_time="08:30",
                            end_time="12:00",
                        ),
                    )
                ),
            ),
        ),
        (
            "Beginner Piano",
            ScheduleModel(
                activity_kind=ActivityKind.CLASS,
                schedule=ClassOngoing(start_date=_day(0), duration_minutes=45),
            ),
        ),
    ]


async def main() -> None:
    settings = get_settings()
    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        existing = await session.execute(
            select(Profile).where(Profile.legal_name == VIEWER_NAME)
        )
        viewer = existing.scalars().first()
        if viewer is not None:
            print(f"Profile {VIEWER_NAME} already exists")
            print(create_access_token(str(viewer.id)))
            return

        viewer = Profile(legal_name=VIEWER_NAME, preferred_first_name="Dev")
        friend = Profile(legal_name="Jordan Friend", preferred_first_name="Jordan")
        session.add_all([viewer, friend])
        await session.flush()

        activities = []
        for name, document in _documents():
            activity = Activity(
                name=name,
                activity_kind=document.activity_kind.value,
                location="Cedar Rapids",
                schedule=document.model_dump(mode="json"),
            )
            session.add(activity)
            activities.append(activity)
        await session.flush()

        session.add_all(
            [
                Booking(activity_id=activities[0].id, user_id=viewer.id, status=BookingStatus.CONFIRMED),
                Booking(activity_id=activities[2].id, user_id=viewer.id, status=BookingStatus.PENDING),
                Booking(activity_id=activities[1].id, user_id=friend.id, status=BookingStatus.CONFIRMED),
                CalendarShare(
                    sender_id=friend.id,
                    recipient_id=viewer.id,
                    status=CalendarShareStatus.ACCEPTED,
                    accepted_at=datetime.now(UTC),
                ),
            ]
        )
        await session.commit()
        print(f"Created {VIEWER_NAME} with {len(activities)} activities; bearer token:")
        print(create_access_token(str(viewer.id)))


if __name__ == "__main__":
    asyncio.run(main())
