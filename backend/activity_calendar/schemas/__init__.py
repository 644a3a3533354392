"""Schema exports."""

from activity_calendar.schemas.age import AgeBucket, AgeRange
from activity_calendar.schemas.calendar import (
    AgendaRead,
    CalendarSourceRead,
    DayBucketRead,
    EventOccurrenceRead,
    MonthRead,
    NextEventRead,
    SourceVisibilityUpdate,
    UnscheduledBookingRead,
    UpcomingRead,
)
from activity_calendar.schemas.pricing import (
    AddOns,
    ExtendedCare,
    PriceUnit,
    Pricing,
    PricingLineRead,
    SiblingDiscount,
    SiblingDiscountType,
    SiblingQuoteRead,
)
from activity_calendar.schemas.schedule import (
    ActivityKind,
    CampSession,
    CampSessions,
    ClassOngoing,
    ClassSessions,
    DayAvailability,
    Fixed,
    OngoingWeekly,
    ScheduleKind,
    ScheduleModel,
    Section,
    TimeBlock,
    Weekday,
    WeeklyHours,
)
from activity_calendar.schemas.schedule_edit import (
    BuilderOp,
    ScheduleConflictRead,
    ScheduleEditRequest,
    ScheduleSubmitRequest,
    StoredScheduleRead,
)

__all__ = [
    "ActivityKind",
    "AddOns",
    "AgeBucket",
    "AgeRange",
    "AgendaRead",
    "BuilderOp",
    "CalendarSourceRead",
    "CampSession",
    "CampSessions",
    "ClassOngoing",
    "ClassSessions",
    "DayAvailability",
    "DayBucketRead",
    "EventOccurrenceRead",
    "ExtendedCare",
    "Fixed",
    "MonthRead",
    "NextEventRead",
    "OngoingWeekly",
    "PriceUnit",
    "Pricing",
    "PricingLineRead",
    "ScheduleConflictRead",
    "ScheduleEditRequest",
    "ScheduleKind",
    "ScheduleModel",
    "ScheduleSubmitRequest",
    "Section",
    "SiblingDiscount",
    "SiblingDiscountType",
    "SiblingQuoteRead",
    "SourceVisibilityUpdate",
    "StoredScheduleRead",
    "TimeBlock",
    "UnscheduledBookingRead",
    "UpcomingRead",
    "Weekday",
    "WeeklyHours",
]
