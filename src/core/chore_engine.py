"""
Family Chores: Chore Mutation Engine.

Applies user actions to a chore collection. Every function takes the
current list and returns a new list; chores themselves are frozen, so the
previous snapshot is never modified.

Unknown ids and empty titles are silent no-ops: the caller (the UI layer)
is expected to validate input, and the engine simply hands back the
collection unchanged.
"""

from __future__ import annotations

import logging
import random
import string
import zlib
from dataclasses import replace
from datetime import datetime
from typing import Iterable
from urllib.parse import quote

from src.core.recurrence import (
    date_for_day_index,
    has_entry_on,
    is_completed,
    is_same_day,
    to_millis,
)
from src.data.models import UNASSIGNED, Chore, FamilyMember, Frequency

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"title", "assignee", "frequency", "weekly_days", "due_date"})

MEMBER_COLORS = (
    "bg-indigo-500",
    "bg-emerald-500",
    "bg-rose-500",
    "bg-amber-500",
    "bg-sky-500",
    "bg-violet-500",
    "bg-teal-500",
    "bg-orange-500",
)

_ID_ALPHABET = string.ascii_lowercase + string.digits
_ID_LENGTH = 9


def new_chore_id() -> str:
    return "".join(random.choices(_ID_ALPHABET, k=_ID_LENGTH))


def _canonical_schedule(
    frequency: Frequency,
    weekly_days: Iterable[int] | None,
    due_date: int | None,
) -> tuple[tuple[int, ...] | None, int | None]:
    """Keep weekly_days only for WEEKLY (sorted, 0-6) and due_date only for ONE_TIME."""
    days: tuple[int, ...] | None = None
    if frequency is Frequency.WEEKLY and weekly_days:
        days = tuple(sorted({d for d in weekly_days if 0 <= d <= 6})) or None
    due = due_date if frequency is Frequency.ONE_TIME else None
    return days, due


def _find(chores: list[Chore], chore_id: str) -> Chore | None:
    return next((c for c in chores if c.id == chore_id), None)


def _swap(chores: list[Chore], updated: Chore) -> list[Chore]:
    return [updated if c.id == updated.id else c for c in chores]


# ---------------------------------------------------------------------------
# Create / edit / remove
# ---------------------------------------------------------------------------


def create_chore(
    chores: list[Chore],
    title: str,
    assignee: str = UNASSIGNED,
    frequency: Frequency = Frequency.DAILY,
    weekly_days: Iterable[int] | None = None,
    due_date: int | None = None,
    now: datetime | None = None,
    chore_id: str | None = None,
) -> list[Chore]:
    """Prepend a new, not yet completed chore to the collection."""
    title = title.strip()
    if not title:
        logger.debug("Ignoring create with empty title")
        return list(chores)

    now = now or datetime.now()
    days, due = _canonical_schedule(frequency, weekly_days, due_date)
    chore = Chore(
        id=chore_id or new_chore_id(),
        title=title,
        assignee=assignee.strip() or UNASSIGNED,
        frequency=frequency,
        completed=False,
        created_at=to_millis(now),
        last_completed_at=None,
        completion_count=0,
        weekly_days=days,
        due_date=due,
        completion_history=(),
    )
    logger.info("Chore created: %s '%s' (%s)", chore.id, chore.title, frequency.value)
    return [chore, *chores]


def edit_chore(chores: list[Chore], chore_id: str, **fields) -> list[Chore]:
    """Merge the given fields into the chore with `chore_id`.

    Only title, assignee, frequency, weekly_days and due_date are editable.
    When any scheduling field changes, weekly_days and due_date are
    re-canonicalized against the resulting frequency.
    """
    current = _find(chores, chore_id)
    if current is None:
        logger.debug("Ignoring edit of unknown chore %s", chore_id)
        return list(chores)

    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        logger.warning("Ignoring non-editable chore fields: %s", ", ".join(sorted(unknown)))
    changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}

    if "title" in changes:
        title = changes["title"].strip()
        if not title:
            logger.debug("Ignoring empty title for chore %s", chore_id)
            del changes["title"]
        else:
            changes["title"] = title

    updated = replace(current, **changes)
    if changes.keys() & {"frequency", "weekly_days", "due_date"}:
        days, due = _canonical_schedule(updated.frequency, updated.weekly_days, updated.due_date)
        updated = replace(updated, weekly_days=days, due_date=due)

    return _swap(chores, updated)


def remove_chore(chores: list[Chore], chore_id: str) -> list[Chore]:
    """Return the collection without the chore with `chore_id`."""
    return [c for c in chores if c.id != chore_id]


# ---------------------------------------------------------------------------
# Toggles
# ---------------------------------------------------------------------------


def toggle_standard(chores: list[Chore], chore_id: str, now: datetime) -> list[Chore]:
    """Flip the evaluated completion state of a non advanced-weekly chore.

    The current verdict comes from is_completed, not from the stored flag:
    a daily chore done yesterday is pending today, so toggling it marks it
    done today.
    """
    current = _find(chores, chore_id)
    if current is None or current.is_advanced_weekly:
        logger.debug("Ignoring standard toggle of chore %s", chore_id)
        return list(chores)

    if is_completed(current, now):
        updated = replace(
            current,
            completed=False,
            last_completed_at=None,
            completion_count=max(0, current.completion_count - 1),
        )
    else:
        updated = replace(
            current,
            completed=True,
            last_completed_at=to_millis(now),
            completion_count=current.completion_count + 1,
        )
    return _swap(chores, updated)


def toggle_weekly_day(
    chores: list[Chore], chore_id: str, day_index: int, now: datetime,
) -> list[Chore]:
    """Mark or unmark one weekday of the current week for an advanced weekly chore.

    An existing history entry on that date is removed (the first one found);
    otherwise an entry stamped `now` is appended. completed and
    last_completed_at then mirror whether today has an entry.
    """
    current = _find(chores, chore_id)
    if current is None or not current.is_advanced_weekly or not 0 <= day_index <= 6:
        logger.debug("Ignoring weekly toggle of chore %s day %s", chore_id, day_index)
        return list(chores)

    now_ms = to_millis(now)
    target_ms = to_millis(date_for_day_index(day_index, now))
    history = list(current.completion_history)

    match = next(
        (i for i, ts in enumerate(history) if is_same_day(ts, target_ms, now.tzinfo)),
        None,
    )
    if match is not None:
        del history[match]
    else:
        history.append(now_ms)

    done_today = has_entry_on(history, now)
    updated = replace(
        current,
        completion_history=tuple(history),
        completed=done_today,
        last_completed_at=now_ms if done_today else current.last_completed_at,
    )
    return _swap(chores, updated)


# ---------------------------------------------------------------------------
# Family members
# ---------------------------------------------------------------------------


def member_color(name: str) -> str:
    """Stable color-class token for a member name."""
    return MEMBER_COLORS[zlib.crc32(name.lower().encode("utf-8")) % len(MEMBER_COLORS)]


def avatar_url(name: str) -> str:
    return f"https://picsum.photos/seed/{quote(name)}/100"


def make_member(name: str) -> FamilyMember:
    return FamilyMember(name=name, color=member_color(name), avatar=avatar_url(name))


def default_members(names: Iterable[str]) -> list[FamilyMember]:
    return [make_member(n) for n in names]


def resolve_assignee(
    members: list[FamilyMember], typed_name: str,
) -> tuple[list[FamilyMember], str]:
    """Resolve a typed assignee name, creating the member on first use.

    Returns (members, assignee). Matching is case-insensitive and reuses
    the existing spelling; an empty name means "Unassigned".
    """
    name = typed_name.strip()
    if not name or name.lower() == UNASSIGNED.lower():
        return list(members), UNASSIGNED

    existing = next((m for m in members if m.name.lower() == name.lower()), None)
    if existing is not None:
        return list(members), existing.name

    logger.info("New family member: %s", name)
    return [*members, make_member(name)], name
