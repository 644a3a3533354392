"""Service layer exports."""
from activity_calendar.services import (
    calendar_service,
    calendar_source_service,
    calendar_view_store,
    occurrence_service,
    pricing_service,
    schedule_documents,
    schedule_editor,
    schedule_service,
    time_resolver,
)

__all__ = [
    "calendar_service",
    "calendar_source_service",
    "calendar_view_store",
    "occurrence_service",
    "pricing_service",
    "schedule_documents",
    "schedule_editor",
    "schedule_service",
    "time_resolver",
]
