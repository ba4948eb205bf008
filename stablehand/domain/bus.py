"""Synchronous in-process bus for scheduling domain events."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable

from pydantic import BaseModel

logger = logging.getLogger(__name__)

Handler = Callable[[BaseModel], None]


class EventBus:
    """Publish/subscribe bus for domain events.

    Handlers run inline, in registration order, on the publisher's thread.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type[BaseModel], list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type[BaseModel], handler: Handler) -> None:
        self._subscribers[event_type].append(handler)

    def publish(self, domain_event: BaseModel) -> None:
        handlers = self._subscribers.get(type(domain_event), [])
        logger.debug(
            "Publishing %s to %d handler(s)", type(domain_event).__name__, len(handlers)
        )
        for handler in handlers:
            handler(domain_event)
