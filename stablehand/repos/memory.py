"""In-memory repositories for horses, users, events and their timelines."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from stablehand.domain.models import Event, Horse, Role, TimelineEntry, User


class HorseRepository:
    """Dict-backed store for Horse instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Horse] = {}

    def add(self, horse: Horse) -> None:
        self._store[horse.id] = horse

    def get(self, horse_id: str) -> Horse | None:
        return self._store.get(horse_id)

    def list_all(self) -> list[Horse]:
        return list(self._store.values())

    def get_many(self, horse_ids: list[str]) -> list[Horse]:
        """Return horses in the order of *horse_ids*; raises KeyError on an unknown id."""
        return [self._store[hid] for hid in horse_ids]

    def set_cooldown(
        self,
        horse_id: str,
        start: datetime | None,
        end: datetime | None,
    ) -> Horse | None:
        horse = self._store.get(horse_id)
        if horse is not None:
            horse.cooldown_start_date = start
            horse.cooldown_end_date = end
        return horse


class UserRepository:
    """Dict-backed store for User instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    def add(self, user: User) -> None:
        self._store[user.id] = user

    def get(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    def list_all(self) -> list[User]:
        return list(self._store.values())

    def get_by_username(self, username: str) -> User | None:
        for user in self._store.values():
            if user.username == username:
                return user
        return None

    def list_by_role(self, role: Role) -> list[User]:
        return [u for u in self._store.values() if u.has_role(role)]

    def update(self, user_id: str, **fields) -> User | None:
        user = self._store.get(user_id)
        if user is not None:
            for name, value in fields.items():
                setattr(user, name, value)
        return user

    def delete(self, user_id: str) -> bool:
        return self._store.pop(user_id, None) is not None

    def toggle_role(self, user_id: str, role: Role) -> User | None:
        """Grant *role* if the user lacks it, otherwise revoke it."""
        user = self._store.get(user_id)
        if user is None:
            return None
        if user.has_role(role):
            user.roles = [r for r in user.roles if r != role]
        else:
            user.roles = [*user.roles, role]
        return user


class EventRepository:
    """Dict-backed store for Event instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return sorted(self._store.values(), key=lambda e: e.start_time)

    def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None

    def remove_instructor(self, user_id: str) -> list[Event]:
        """Detach a user from every event they instruct; returns the events touched."""
        touched = [e for e in self._store.values() if user_id in e.instructor_ids]
        for event in touched:
            event.instructor_ids = [i for i in event.instructor_ids if i != user_id]
        return touched


class TimelineRepository:
    """List-backed store for TimelineEntry instances."""

    def __init__(self) -> None:
        self._entries: list[TimelineEntry] = []

    def add(self, entry: TimelineEntry) -> None:
        self._entries.append(entry)

    def list_for_event(self, event_id: str) -> list[TimelineEntry]:
        return sorted(
            [e for e in self._entries if e.event_id == event_id],
            key=lambda e: e.timestamp,
        )

    def delete_for_event(self, event_id: str) -> None:
        self._entries = [e for e in self._entries if e.event_id != event_id]


# ---------------------------------------------------------------------------
# Seed data – a small stable with one resting horse
# ---------------------------------------------------------------------------


def seed_demo_data(
    horse_repo: HorseRepository,
    user_repo: UserRepository,
    event_repo: EventRepository,
) -> None:
    today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

    biscuit = Horse(name="Biscuit")
    # Resting for the next three days
    clover = Horse(
        name="Clover",
        cooldown_start_date=today,
        cooldown_end_date=today + timedelta(days=2),
    )
    juniper = Horse(name="Juniper")
    for horse in (biscuit, clover, juniper):
        horse_repo.add(horse)

    admin = User(
        name="Avery Admin",
        username="avery",
        email="avery@example.com",
        roles=[Role.ADMIN],
    )
    instructor = User(
        name="Morgan Reyes",
        username="morgan",
        email="morgan@example.com",
        phone="5415550123",
        roles=[Role.INSTRUCTOR],
    )
    volunteer = User(
        name="Sam Lee",
        username="sam",
        email="sam@example.com",
        roles=[Role.LESSON_ASSISTANT, Role.HORSE_LEADER],
    )
    for user in (admin, instructor, volunteer):
        user_repo.add(user)

    event_repo.add(
        Event(
            title="Therapeutic riding lesson",
            start_time=today + timedelta(days=5, hours=16),
            end_time=today + timedelta(days=5, hours=17),
            horse_ids=[biscuit.id],
            instructor_ids=[instructor.id],
            lesson_assistants_req=1,
            side_walkers_req=2,
            horse_leaders_req=1,
        )
    )
    event_repo.add(
        Event(
            title="Barn cleanup",
            start_time=today + timedelta(days=6, hours=9),
            end_time=today + timedelta(days=6, hours=10, minutes=30),
            cleaning_crew_req=3,
            is_private=True,
        )
    )
