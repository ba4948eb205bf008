"""Domain events emitted while scheduling stable events."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class EventScheduled(BaseModel):
    """Fired when a new Event is persisted."""

    event_id: str


class EventRescheduled(BaseModel):
    """Fired when an existing Event is saved from the editor."""

    event_id: str
    changes: list[str] = Field(default_factory=list)


class CooldownConflictDetected(BaseModel):
    """Fired when a submission is refused because horses are resting.

    ``event_id`` is None for a refused create.
    """

    event_id: str | None = None
    start_time: datetime
    horse_ids: list[str]
