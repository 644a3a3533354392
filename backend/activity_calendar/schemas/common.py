"""Shared field types for schedule documents."""

from __future__ import annotations

import uuid
from typing import Annotated, Any

from pydantic import BeforeValidator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]


def new_element_id() -> str:
    """Return a fresh identifier for a session, section or time block."""
    return uuid.uuid4().hex[:12]
