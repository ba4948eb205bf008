"""Service for detecting horses that are resting on a proposed event date."""

from __future__ import annotations

from datetime import datetime

from dateutil.relativedelta import relativedelta

from stablehand.domain.models import Horse, as_utc


def cooldown_window(horse: Horse) -> tuple[datetime, datetime] | None:
    """Return the half-open ``[start, end)`` interval a horse is resting.

    The cooldown end date is inclusive of its whole calendar day, so the
    returned upper bound is one day past ``cooldown_end_date``.  A horse with
    only one of the two dates set has no window.
    """
    if horse.cooldown_start_date is None or horse.cooldown_end_date is None:
        return None
    start = as_utc(horse.cooldown_start_date)
    end = as_utc(horse.cooldown_end_date) + relativedelta(days=1)
    return start, end


def find_cooldown_conflicts(
    candidate_start: datetime,
    horses: list[Horse],
) -> list[Horse]:
    """Return the horses whose cooldown window contains ``candidate_start``.

    Input order is preserved.  Horses without a complete window never conflict.
    """
    start = as_utc(candidate_start)
    conflicts: list[Horse] = []
    for horse in horses:
        window = cooldown_window(horse)
        if window is None:
            continue
        window_start, window_end = window
        if window_start <= start < window_end:
            conflicts.append(horse)
    return conflicts


def describe_conflicts(horses: list[Horse]) -> str:
    return ", ".join(h.name for h in horses)
