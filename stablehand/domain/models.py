"""Domain models for the stable scheduling service."""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class Role(StrEnum):
    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    LESSON_ASSISTANT = "lessonAssistant"
    HORSE_LEADER = "horseLeader"


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    COOLDOWN_CONFLICT = "cooldown_conflict"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values are returned unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Horse(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    cooldown_start_date: datetime | None = None
    cooldown_end_date: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    username: str
    email: str
    phone: str | None = None
    roles: list[Role] = Field(default_factory=list)
    last_login: datetime | None = None
    height_feet: int | None = None
    height_inches: int | None = None
    years_of_experience: int | None = None

    def has_role(self, role: Role) -> bool:
        return role in self.roles


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    start_time: datetime
    end_time: datetime
    horse_ids: list[str] = Field(default_factory=list)
    instructor_ids: list[str] = Field(default_factory=list)
    cleaning_crew_req: int = Field(default=0, ge=0)
    lesson_assistants_req: int = Field(default=0, ge=0)
    side_walkers_req: int = Field(default=0, ge=0)
    horse_leaders_req: int = Field(default=0, ge=0)
    is_private: bool = False
    created_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _end_after_start(self) -> Event:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventForm(BaseModel):
    """Submitted fields of the event editor (create and update)."""

    title: str = Field(min_length=1)
    start_date: datetime
    duration: int = Field(gt=0, description="Length of the event in minutes")
    horses: list[str] | None = None
    instructor: str | None = None
    cleaning_crew_req: int = Field(default=0, ge=0)
    lesson_assistants_req: int = Field(default=0, ge=0)
    side_walkers_req: int = Field(default=0, ge=0)
    horse_leaders_req: int = Field(default=0, ge=0)
    is_private: bool = False

    @field_validator("start_date")
    @classmethod
    def _start_in_utc(cls, value: datetime) -> datetime:
        # datetime-local inputs arrive without a zone
        return as_utc(value)

    @model_validator(mode="after")
    def _title_not_blank(self) -> EventForm:
        if not self.title.strip():
            raise ValueError("Title is required")
        return self

    @property
    def end_time(self) -> datetime:
        return self.start_date + timedelta(minutes=self.duration)


class HorseCreate(BaseModel):
    name: str = Field(min_length=1)


class CooldownUpdate(BaseModel):
    """Set both dates to start a cooldown, or omit both to clear it."""

    cooldown_start_date: datetime | None = None
    cooldown_end_date: datetime | None = None

    @field_validator("cooldown_start_date", "cooldown_end_date")
    @classmethod
    def _dates_in_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _complete_window(self) -> CooldownUpdate:
        start, end = self.cooldown_start_date, self.cooldown_end_date
        if (start is None) != (end is None):
            raise ValueError(
                "cooldown_start_date and cooldown_end_date must be set together"
            )
        if start is not None and end is not None and end < start:
            raise ValueError("cooldown_end_date must not be before cooldown_start_date")
        return self


class UserCreate(BaseModel):
    name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str | None = None
    roles: list[Role] = Field(default_factory=list)


class UserUpdate(UserCreate):
    """Fields an admin can change from the users table."""


def _blank_to_none(value, label: str):
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{label} must be a number") from None
    return value


class ProfileUpdate(BaseModel):
    """A user's own profile settings; blank numbers are saved as null."""

    name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    height_feet: int | None = None
    height_inches: int | None = None
    years_of_experience: int | None = Field(default=None, ge=0)

    @field_validator("height_feet", mode="before")
    @classmethod
    def _parse_feet(cls, value):
        return _blank_to_none(value, "Feet")

    @field_validator("height_inches", mode="before")
    @classmethod
    def _parse_inches(cls, value):
        return _blank_to_none(value, "Inches")

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def _parse_experience(cls, value):
        return _blank_to_none(value, "Years of experience")

    @model_validator(mode="after")
    def _check_height(self) -> ProfileUpdate:
        feet, inches = self.height_feet, self.height_inches
        if feet is not None and not 0 <= feet <= 8:
            raise ValueError("Feet must be between 0 and 8")
        if inches is not None and not 0 <= inches <= 11:
            raise ValueError("Inches must be between 0 and 11")
        if (feet is None) != (inches is None):
            raise ValueError("You must enter both feet and inches for height")
        return self


class EventEditorData(BaseModel):
    event: Event
    horses: list[Horse]
    instructors: list[User]
    default_duration: int


class CooldownConflictDetail(BaseModel):
    status: str = "horse-error"
    title: str = "The following horses are scheduled for cooldown on the selected date:"
    message: str
    horse_ids: list[str]


class Toast(BaseModel):
    title: str
    description: str
    variant: str | None = None


class EventSaveResponse(BaseModel):
    event: Event
    toast: Toast
