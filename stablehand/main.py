"""FastAPI application: entry point for the stable scheduling service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from stablehand.config import load_settings
from stablehand.domain.bus import EventBus
from stablehand.domain.events import (
    CooldownConflictDetected,
    EventRescheduled,
    EventScheduled,
)
from stablehand.domain.handlers import HandlerRegistry
from stablehand.domain.models import (
    CooldownConflictDetail,
    CooldownUpdate,
    Event,
    EventEditorData,
    EventForm,
    EventSaveResponse,
    Horse,
    HorseCreate,
    ProfileUpdate,
    Role,
    TimelineEntry,
    Toast,
    User,
    UserCreate,
    UserUpdate,
)
from stablehand.repos.memory import (
    EventRepository,
    HorseRepository,
    TimelineRepository,
    UserRepository,
    seed_demo_data,
)
from stablehand.services.cooldowns import describe_conflicts
from stablehand.services.scheduling import (
    HorseCooldownConflict,
    UnknownReference,
    apply_event_form,
    changed_fields,
    default_duration_minutes,
)

settings = load_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_title)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
horse_repo = HorseRepository()
user_repo = UserRepository()
event_repo = EventRepository()
timeline_repo = TimelineRepository()

handler_registry = HandlerRegistry(
    bus=event_bus,
    event_repo=event_repo,
    horse_repo=horse_repo,
    timeline_repo=timeline_repo,
)

if settings.seed_demo_data:
    seed_demo_data(horse_repo, user_repo, event_repo)
    logger.info("Loaded demo stable data")


def _cooldown_http_error(exc: HorseCooldownConflict) -> HTTPException:
    detail = CooldownConflictDetail(
        message=describe_conflicts(exc.horses),
        horse_ids=[h.id for h in exc.horses],
    )
    return HTTPException(status_code=409, detail=detail.model_dump())


def _ensure_username_free(username: str, user_id: str | None = None) -> None:
    taken = user_repo.get_by_username(username)
    if taken is not None and taken.id != user_id:
        raise HTTPException(status_code=409, detail="Username is already taken")


# ── Horses ────────────────────────────────────────────────────────────


@app.get("/horses", response_model=list[Horse])
def list_horses() -> list[Horse]:
    return horse_repo.list_all()


@app.post("/horses", response_model=Horse, status_code=201)
def create_horse(body: HorseCreate) -> Horse:
    horse = Horse(name=body.name)
    horse_repo.add(horse)
    logger.info("Added horse %r (%s)", horse.name, horse.id)
    return horse


@app.get("/horses/{horse_id}", response_model=Horse)
def get_horse(horse_id: str) -> Horse:
    horse = horse_repo.get(horse_id)
    if horse is None:
        raise HTTPException(status_code=404, detail="Horse not found")
    return horse


@app.put("/horses/{horse_id}/cooldown", response_model=Horse)
def set_horse_cooldown(horse_id: str, body: CooldownUpdate) -> Horse:
    """Start or clear a horse's cooldown window (the end date is inclusive)."""
    horse = horse_repo.set_cooldown(
        horse_id, body.cooldown_start_date, body.cooldown_end_date
    )
    if horse is None:
        raise HTTPException(status_code=404, detail="Horse not found")
    if body.cooldown_start_date is None:
        logger.info("Cleared cooldown for %r", horse.name)
    else:
        logger.info(
            "Cooldown for %r set to %s..%s",
            horse.name,
            body.cooldown_start_date.date(),
            body.cooldown_end_date.date(),
        )
    return horse


# ── Users ─────────────────────────────────────────────────────────────


@app.get("/admin/users", response_model=list[User])
def list_users() -> list[User]:
    return user_repo.list_all()


@app.post("/admin/users", response_model=User, status_code=201)
def create_user(body: UserCreate) -> User:
    _ensure_username_free(body.username)
    user = User(**body.model_dump())
    user_repo.add(user)
    return user


@app.post("/admin/users/{user_id}/promote", response_model=User)
def toggle_admin(user_id: str) -> User:
    """Promote a user to admin, or demote them if they already are one."""
    user = user_repo.toggle_role(user_id, Role.ADMIN)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info(
        "%s %s", "Promoted" if user.has_role(Role.ADMIN) else "Demoted", user.username
    )
    return user


@app.put("/admin/users/{user_id}", response_model=User)
def update_user(user_id: str, body: UserUpdate) -> User:
    if user_repo.get(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    _ensure_username_free(body.username, user_id)
    return user_repo.update(user_id, **body.model_dump())


@app.delete("/admin/users/{user_id}", status_code=204)
def delete_user(user_id: str) -> None:
    """Delete a user and detach them from the events they instruct."""
    user = user_repo.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    user_repo.delete(user_id)
    touched = event_repo.remove_instructor(user_id)
    logger.info(
        "Deleted user %s (instructor on %d event(s))", user.username, len(touched)
    )


@app.get("/users/{username}", response_model=User)
def get_user_profile(username: str) -> User:
    user = user_repo.get_by_username(username)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@app.put("/users/{user_id}/profile", response_model=User)
def update_profile(user_id: str, body: ProfileUpdate) -> User:
    """Save profile settings; blank height or experience values clear them."""
    if user_repo.get(user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")
    _ensure_username_free(body.username, user_id)
    return user_repo.update(user_id, **body.model_dump())


# ── Calendar ──────────────────────────────────────────────────────────


@app.get("/calendar", response_model=list[Event])
def list_events() -> list[Event]:
    return event_repo.list_all()


@app.post("/calendar", response_model=EventSaveResponse, status_code=201)
def create_event(form: EventForm) -> EventSaveResponse:
    """Create an event unless a selected horse is in cooldown at its start."""
    try:
        event = apply_event_form(form, horse_repo, user_repo)
    except UnknownReference as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except HorseCooldownConflict as exc:
        event_bus.publish(
            CooldownConflictDetected(
                start_time=form.start_date, horse_ids=[h.id for h in exc.horses]
            )
        )
        raise _cooldown_http_error(exc)

    event_repo.add(event)
    event_bus.publish(EventScheduled(event_id=event.id))
    return EventSaveResponse(
        event=event,
        toast=Toast(title="Success", description=f"Created event {event.title}"),
    )


@app.get("/calendar/{event_id}/edit", response_model=EventEditorData)
def load_event_editor(event_id: str) -> EventEditorData:
    """Return the event plus the horses and instructors the editor offers."""
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return EventEditorData(
        event=event,
        horses=horse_repo.list_all(),
        instructors=user_repo.list_by_role(Role.INSTRUCTOR),
        default_duration=default_duration_minutes(event),
    )


@app.put("/calendar/{event_id}", response_model=EventSaveResponse)
def update_event(event_id: str, form: EventForm) -> EventSaveResponse:
    """Save the editor form; nothing is stored if any selected horse is resting."""
    existing = event_repo.get(event_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Event not found")

    try:
        updated = apply_event_form(form, horse_repo, user_repo, event=existing)
    except UnknownReference as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except HorseCooldownConflict as exc:
        event_bus.publish(
            CooldownConflictDetected(
                event_id=event_id,
                start_time=form.start_date,
                horse_ids=[h.id for h in exc.horses],
            )
        )
        raise _cooldown_http_error(exc)

    event_repo.add(updated)
    event_bus.publish(
        EventRescheduled(event_id=event_id, changes=changed_fields(existing, updated))
    )
    return EventSaveResponse(
        event=updated,
        toast=Toast(title="Success", description=f"Updated event {updated.title}"),
    )


@app.get("/calendar/{event_id}/timeline", response_model=list[TimelineEntry])
def get_event_timeline(event_id: str) -> list[TimelineEntry]:
    if event_repo.get(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return timeline_repo.list_for_event(event_id)


@app.delete("/calendar/{event_id}", status_code=204)
def delete_event(event_id: str) -> None:
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    event_repo.delete(event_id)
    timeline_repo.delete_for_event(event_id)
    logger.info("Deleted %r (%s)", event.title, event_id)
