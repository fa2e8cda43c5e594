"""
Family Chores: Recurrence Evaluator.

Decides whether a chore counts as "completed" at a given moment. The stored
`completed` flag is only the last known state: a daily chore ticked off
yesterday still has completed=True but is due again today.

All calendar comparisons (same day, same month, start of week) use local
date components in the timezone of the `now` argument. A naive `now` means
system local time. Rolling windows (weekly, quarterly) compare elapsed
milliseconds and ignore the calendar.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Iterable

from src.data.models import Chore, Frequency

DAY_MS = 24 * 60 * 60 * 1000
WEEK_MS = 7 * DAY_MS
QUARTER_MS = 90 * DAY_MS

TABS = ("all", "pending", "completed")


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------


def to_millis(dt: datetime) -> int:
    """Epoch milliseconds for a datetime (naive = system local time)."""
    return int(dt.timestamp() * 1000)


def from_millis(ms: int, tz: tzinfo | None = None) -> datetime:
    """Datetime for epoch milliseconds, in tz (None = naive local time)."""
    return datetime.fromtimestamp(ms / 1000, tz=tz)


def weekday_index(dt: datetime) -> int:
    """Day of week with Sunday as 0 and Saturday as 6."""
    return (dt.weekday() + 1) % 7


def is_same_day(ts1: int, ts2: int, tz: tzinfo | None = None) -> bool:
    """True if both timestamps fall on the same local calendar day."""
    return from_millis(ts1, tz).date() == from_millis(ts2, tz).date()


def start_of_week(now: datetime) -> datetime:
    """Midnight of the Sunday that starts the week containing `now`."""
    sunday = now - timedelta(days=weekday_index(now))
    return sunday.replace(hour=0, minute=0, second=0, microsecond=0)


def date_for_day_index(day_index: int, now: datetime) -> datetime:
    """Midnight of the given weekday (0=Sunday) within the current week."""
    return start_of_week(now) + timedelta(days=day_index)


# ---------------------------------------------------------------------------
# Evaluator
# ---------------------------------------------------------------------------


def is_completed(chore: Chore, now: datetime) -> bool:
    """Return whether `chore` counts as done at `now`.

    Rules, in priority order:
    - ONE_TIME: the stored flag, due date is irrelevant.
    - Advanced weekly: False on unscheduled days; otherwise True iff the
      history has an entry on today's calendar date.
    - DAILY / WEEKLY / MONTHLY / QUARTERLY: False when un-ticked, else
      the last completion must fall inside the frequency's window.
    - Anything else (ticked without a timestamp): True.
    """
    if chore.frequency is Frequency.ONE_TIME:
        return chore.completed

    if chore.is_advanced_weekly:
        if weekday_index(now) not in chore.weekly_days:
            return False
        return has_entry_on(chore.completion_history, now)

    if not chore.completed:
        return False
    if chore.last_completed_at is None:
        return True

    last = from_millis(chore.last_completed_at, now.tzinfo)
    elapsed = to_millis(now) - chore.last_completed_at

    if chore.frequency is Frequency.DAILY:
        return last.date() == now.date()
    if chore.frequency is Frequency.WEEKLY:
        return elapsed < WEEK_MS
    if chore.frequency is Frequency.MONTHLY:
        return (last.year, last.month) == (now.year, now.month)
    if chore.frequency is Frequency.QUARTERLY:
        return elapsed < QUARTER_MS

    return True


def has_entry_on(history: Iterable[int], day: datetime) -> bool:
    """True if any history timestamp falls on the calendar date of `day`."""
    target = day.date()
    return any(from_millis(ts, day.tzinfo).date() == target for ts in history)


# ---------------------------------------------------------------------------
# List views
# ---------------------------------------------------------------------------


def filter_chores(chores: Iterable[Chore], tab: str, now: datetime) -> list[Chore]:
    """Select the chores shown under a list tab ("all", "pending", "completed").

    Advanced weekly chores appear under every tab so their per-day
    toggles stay reachable.
    """
    if tab not in TABS:
        raise ValueError(f"Unknown tab: {tab!r}")

    visible: list[Chore] = []
    for chore in chores:
        if chore.is_advanced_weekly or tab == "all":
            visible.append(chore)
            continue
        done = is_completed(chore, now)
        if (tab == "pending" and not done) or (tab == "completed" and done):
            visible.append(chore)
    return visible


@dataclass
class DueLabel:
    """Display hint for a one-time chore's due date."""

    text: str
    urgency: str   # "overdue" | "today" | "tomorrow" | "upcoming" | "neutral"


def due_date_label(chore: Chore, now: datetime) -> DueLabel | None:
    """Describe how urgent a one-time chore is, by whole calendar days.

    Returns None for recurring chores and chores without a due date.
    """
    if chore.frequency is not Frequency.ONE_TIME or chore.due_date is None:
        return None

    due = from_millis(chore.due_date, now.tzinfo).date()
    if is_completed(chore, now):
        return DueLabel(text=f"Due: {due.isoformat()}", urgency="neutral")

    diff_days = (due - now.date()).days
    if diff_days < 0:
        return DueLabel(text=f"Overdue ({abs(diff_days)}d)", urgency="overdue")
    if diff_days == 0:
        return DueLabel(text="Today", urgency="today")
    if diff_days == 1:
        return DueLabel(text="Tomorrow", urgency="tomorrow")
    return DueLabel(text=f"In {diff_days} Days", urgency="upcoming")
