"""Versioned API router."""

from fastapi import APIRouter

from . import activities, calendar, health

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(calendar.router, prefix="/calendar", tags=["calendar"])
router.include_router(activities.router, prefix="/activities", tags=["activities"])
