"""Specialized settings adapters for the scheduling core."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from zoneinfo import ZoneInfo

from activity_calendar.core.config import get_settings


@dataclass(slots=True, frozen=True)
class ResolverConfig:
    """Fallback policy applied when turning schedules into concrete instants."""

    timezone: ZoneInfo = field(default_factory=lambda: ZoneInfo("America/Chicago"))
    default_duration: timedelta = timedelta(hours=2)


def get_resolver_config() -> ResolverConfig:
    """Return the resolver configuration for this deployment."""

    settings = get_settings()
    return ResolverConfig(
        timezone=ZoneInfo(settings.schedule_timezone),
        default_duration=timedelta(minutes=settings.default_session_minutes),
    )


def get_source_fetch_timeout() -> float:
    """Return the per-source fetch timeout in seconds."""

    return get_settings().source_fetch_timeout_seconds


def get_calendar_view_ttl() -> timedelta:
    """Return how long an aggregated calendar view may be served from memory."""

    return timedelta(seconds=get_settings().calendar_view_ttl_seconds)
