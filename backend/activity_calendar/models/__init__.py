"""ORM models package export."""

from activity_calendar.models.activity import Activity
from activity_calendar.models.booking import Booking, BookingStatus
from activity_calendar.models.calendar_share import CalendarShare, CalendarShareStatus
from activity_calendar.models.profile import Profile

__all__ = [
    "Activity",
    "Booking",
    "BookingStatus",
    "CalendarShare",
    "CalendarShareStatus",
    "Profile",
]
