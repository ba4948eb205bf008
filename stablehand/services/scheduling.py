"""Service for turning an event-editor submission into a stored Event."""

from __future__ import annotations

import logging

from stablehand.domain.models import Event, EventForm, Horse
from stablehand.repos.memory import HorseRepository, UserRepository
from stablehand.services.cooldowns import describe_conflicts, find_cooldown_conflicts

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30

_TRACKED_FIELDS = (
    "title",
    "start_time",
    "end_time",
    "horse_ids",
    "instructor_ids",
    "cleaning_crew_req",
    "lesson_assistants_req",
    "side_walkers_req",
    "horse_leaders_req",
    "is_private",
)


class HorseCooldownConflict(Exception):
    """Raised when selected horses are resting on the event's start date."""

    def __init__(self, horses: list[Horse]) -> None:
        self.horses = horses
        super().__init__(describe_conflicts(horses))


class UnknownReference(Exception):
    """Raised when a submission names a horse or instructor that is not stored."""


def _resolve_horses(horse_ids: list[str], horse_repo: HorseRepository) -> list[Horse]:
    try:
        return horse_repo.get_many(horse_ids)
    except KeyError as exc:
        raise UnknownReference(f"Unknown horse: {exc.args[0]}") from exc


def apply_event_form(
    form: EventForm,
    horse_repo: HorseRepository,
    user_repo: UserRepository,
    event: Event | None = None,
) -> Event:
    """Validate *form* against stored horses and instructors and build the Event.

    When *event* is given the result keeps its id (an update); otherwise a new
    event is built.  Horse and instructor associations are replaced, never
    merged.  Raises ``HorseCooldownConflict`` without touching *event* when any
    selected horse is in cooldown at the start time.
    """
    horse_ids = list(form.horses or [])
    horses = _resolve_horses(horse_ids, horse_repo)

    instructor_ids: list[str] = []
    if form.instructor:
        if user_repo.get(form.instructor) is None:
            raise UnknownReference(f"Unknown instructor: {form.instructor}")
        instructor_ids = [form.instructor]

    resting = find_cooldown_conflicts(form.start_date, horses)
    if resting:
        logger.warning(
            "Rejected %r at %s: horses in cooldown: %s",
            form.title,
            form.start_date.isoformat(),
            describe_conflicts(resting),
        )
        raise HorseCooldownConflict(resting)

    fields = dict(
        title=form.title,
        start_time=form.start_date,
        end_time=form.end_time,
        horse_ids=horse_ids,
        instructor_ids=instructor_ids,
        cleaning_crew_req=form.cleaning_crew_req,
        lesson_assistants_req=form.lesson_assistants_req,
        side_walkers_req=form.side_walkers_req,
        horse_leaders_req=form.horse_leaders_req,
        is_private=form.is_private,
    )
    if event is not None:
        fields.update(id=event.id, created_at=event.created_at)
    return Event(**fields)


def changed_fields(before: Event, after: Event) -> list[str]:
    """Return the names of tracked fields that differ between two versions."""
    return [f for f in _TRACKED_FIELDS if getattr(before, f) != getattr(after, f)]


def default_duration_minutes(event: Event | None) -> int:
    if event is None:
        return DEFAULT_DURATION_MINUTES
    return int((event.end_time - event.start_time).total_seconds() // 60)
