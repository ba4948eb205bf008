"""Domain event handlers: wired up at application startup."""

from __future__ import annotations

import logging

from stablehand.domain.bus import EventBus
from stablehand.domain.events import (
    CooldownConflictDetected,
    EventRescheduled,
    EventScheduled,
)
from stablehand.domain.models import TimelineEntry, TimelineEntryType
from stablehand.repos.memory import EventRepository, HorseRepository, TimelineRepository

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the repositories."""

    def __init__(
        self,
        bus: EventBus,
        event_repo: EventRepository,
        horse_repo: HorseRepository,
        timeline_repo: TimelineRepository,
    ) -> None:
        self.bus = bus
        self.event_repo = event_repo
        self.horse_repo = horse_repo
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventScheduled, self.on_event_scheduled)
        self.bus.subscribe(EventRescheduled, self.on_event_rescheduled)
        self.bus.subscribe(CooldownConflictDetected, self.on_cooldown_conflict)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_scheduled(self, event: EventScheduled) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CREATED,
                payload={
                    "start_time": stored.start_time.isoformat(),
                    "horse_ids": stored.horse_ids,
                },
            )
        )
        logger.info("Scheduled %r (%s)", stored.title, stored.id)

    def on_event_rescheduled(self, event: EventRescheduled) -> None:
        stored = self.event_repo.get(event.event_id)
        if stored is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.UPDATED,
                payload={"changes": event.changes},
            )
        )
        logger.info(
            "Updated %r (%s): %s",
            stored.title,
            stored.id,
            event.changes or "no changes",
        )

    def on_cooldown_conflict(self, event: CooldownConflictDetected) -> None:
        names = []
        for hid in event.horse_ids:
            horse = self.horse_repo.get(hid)
            names.append(horse.name if horse else hid)
        logger.info(
            "Cooldown conflict for %s at %s: %s",
            event.event_id or "new event",
            event.start_time.isoformat(),
            ", ".join(names),
        )

        # A refused create has no event to attach a timeline entry to
        if event.event_id is None or self.event_repo.get(event.event_id) is None:
            return

        self.timeline_repo.add(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.COOLDOWN_CONFLICT,
                payload={
                    "start_time": event.start_time.isoformat(),
                    "horse_ids": event.horse_ids,
                    "horse_names": names,
                },
            )
        )
