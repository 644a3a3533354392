"""Reading stored schedule documents, including the earlier listing format.

Documents written by the earlier listing form use camelCase keys and one loose
object carrying every variant at once. :func:`document_to_model` recognises
them by the missing ``activity_kind`` key and converts them on read; anything
that still does not fit raises ``ValueError`` (``ValidationError`` included).
"""

from __future__ import annotations

import logging
import re
from typing import Any

from activity_calendar.schemas.pricing import PriceUnit
from activity_calendar.schemas.schedule import (
    ActivityKind,
    CampSession,
    CampSessions,
    ClassOngoing,
    ClassSessions,
    DayAvailability,
    Fixed,
    OngoingWeekly,
    ScheduleModel,
    Section,
    TimeBlock,
)
from activity_calendar.services.pricing_service import parse_money_to_cents

logger = logging.getLogger(__name__)


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _mappings(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _int_or_none(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    digits = re.sub(r"[^0-9]", "", str(value))
    return int(digits) if digits else None


def _text_or_none(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _with_id(raw: dict[str, Any], fields: dict[str, Any]) -> dict[str, Any]:
    if raw.get("id"):
        fields["id"] = str(raw["id"])
    return fields


def _legacy_class_weekly(raw: dict[str, Any]) -> dict[str, DayAvailability]:
    weekly: dict[str, DayAvailability] = {}
    for day, entry in raw.items():
        entry = _mapping(entry)
        available = bool(entry.get("available"))
        blocks = tuple(
            TimeBlock(**_with_id(block, {"start": block.get("start"), "end": block.get("end")}))
            for block in _mappings(entry.get("blocks"))
        )
        weekly[day] = DayAvailability(available=available, blocks=blocks if available else ())
    return weekly


def _legacy_class_schedule(raw: dict[str, Any]) -> ClassOngoing | ClassSessions:
    if raw.get("mode") == "sessions":
        sections = tuple(
            Section(
                **_with_id(
                    section,
                    {
                        "day": section.get("day") or None,
                        "capacity": _int_or_none(section.get("capacity")),
                        "start_time": section.get("startTime"),
                        "end_time": section.get("endTime"),
                    },
                )
            )
            for section in _mappings(raw.get("sections"))
        )
        fields: dict[str, Any] = {
            "start_date": raw.get("sessionStartDate"),
            "session_length_weeks": _int_or_none(raw.get("sessionLength")) or None,
            "meeting_length_minutes": _int_or_none(raw.get("meetingLength")) or None,
        }
        if sections:
            fields["sections"] = sections
        return ClassSessions(**fields)

    fields = {
        "duration_minutes": _int_or_none(raw.get("duration")) or None,
        "students_per_class": _int_or_none(raw.get("studentsPerClass")) or None,
        "frequency": raw.get("frequency"),
    }
    weekly = _mapping(raw.get("weekly"))
    if weekly:
        fields["weekly"] = _legacy_class_weekly(weekly)
    return ClassOngoing(**fields)


def _legacy_camp_schedule(
    meta: dict[str, Any], start_local: str | None, end_local: str | None
) -> Fixed | OngoingWeekly | CampSessions:
    if meta.get("activityType") == "ongoing":
        ongoing = _mapping(meta.get("ongoingSchedule"))
        return OngoingWeekly(
            start_date=ongoing.get("startDate"),
            end_date=ongoing.get("endDate"),
            weekly=_mapping(meta.get("weeklySchedule")),
        )
    raw_sessions = _mappings(meta.get("campSessions"))
    if raw_sessions:
        sessions = []
        for raw in raw_sessions:
            fields: dict[str, Any] = {
                "start_date": raw.get("startDate"),
                "end_date": raw.get("endDate"),
                "start_time": raw.get("startTime"),
                "end_time": raw.get("endTime"),
                "capacity": _int_or_none(raw.get("capacity")),
                "waitlist_enabled": bool(raw.get("enableWaitlist")),
            }
            sessions.append(CampSession(**_with_id(raw, fields)))
        return CampSessions(sessions=tuple(sessions))
    fixed = _mapping(meta.get("fixedSchedule"))
    all_day = bool(fixed.get("allDay"))
    return Fixed(
        start_date=fixed.get("startDate"),
        end_date=fixed.get("endDate"),
        start_time=None if all_day else fixed.get("startTime") or start_local,
        end_time=None if all_day else fixed.get("endTime") or end_local,
        all_day=all_day,
        repeat_rule=fixed.get("repeatRule") or "none",
    )


def _legacy_pricing(meta: dict[str, Any], kind: ActivityKind) -> dict[str, Any]:
    """Listed price of an earlier document.

    Classes kept their price as money text on the class schedule: per class for
    ongoing classes and per meeting for session runs. ``price_unit`` at the top
    level overrides whatever unit the price would otherwise imply.
    """
    pricing = dict(_mapping(meta.get("pricing")))
    if kind is ActivityKind.CLASS and pricing.get("price_cents") is None:
        raw = _mapping(meta.get("classSchedule"))
        if raw.get("mode") == "sessions":
            keys = ("pricePerMeeting", "pricePerClass")
        else:
            keys = ("pricePerClass", "pricePerMeeting")
        text = next(
            (t for t in (_text_or_none(raw.get(key)) for key in keys) if t is not None),
            None,
        )
        cents = parse_money_to_cents(text)
        if cents is not None:
            pricing["price_cents"] = cents
            pricing.setdefault("display", text)
            pricing.setdefault("price_unit", PriceUnit.PER_CLASS.value)

    explicit = meta.get("price_unit")
    if explicit in {unit.value for unit in PriceUnit}:
        pricing["price_unit"] = explicit
    return pricing


def schedule_from_legacy_meta(
    meta: dict[str, Any],
    *,
    start_local: str | None = None,
    end_local: str | None = None,
) -> ScheduleModel:
    """Convert an earlier listing document into a :class:`ScheduleModel`.

    ``start_local``/``end_local`` are the activity-level times older rows kept
    outside the document; they fill a fixed schedule that has none.
    """
    kind = ActivityKind(meta.get("activityKind") or ActivityKind.CAMP.value)
    if kind is ActivityKind.CLASS:
        schedule: Any = _legacy_class_schedule(_mapping(meta.get("classSchedule")))
    else:
        schedule = _legacy_camp_schedule(meta, start_local, end_local)

    advanced = _mapping(meta.get("advanced"))
    return ScheduleModel(
        activity_kind=kind,
        schedule=schedule,
        age={
            key: meta[key]
            for key in ("age_buckets", "age_bucket", "min_age", "max_age")
            if key in meta
        },
        pricing=_legacy_pricing(meta, kind),
        add_ons={
            "early_dropoff": _mapping(advanced.get("earlyDropoff")),
            "extended_day": _mapping(advanced.get("extendedDay")),
            "sibling_discount": _mapping(advanced.get("siblingDiscount")),
        },
    )


def document_to_model(
    document: Any, activity_kind: ActivityKind = ActivityKind.CAMP
) -> ScheduleModel:
    """Read a stored ``schedule`` column value.

    An empty column yields the default document of ``activity_kind``.
    """
    if not document:
        return ScheduleModel.new(activity_kind)
    if not isinstance(document, dict):
        raise ValueError(f"Schedule document must be an object, not {type(document).__name__}")
    if "activity_kind" in document:
        return ScheduleModel.model_validate(document)
    logger.debug("Reading schedule document in the earlier listing format")
    return schedule_from_legacy_meta(document)
