"""
Family Chores: Spreadsheet row codec.

The proxy reads cells straight out of a spreadsheet, so numbers and booleans
often arrive as strings ("TRUE", "1718000000000"), weekly days as a
comma-joined string and the completion history as a JSON-encoded array.
This module is the single place where those loose rows become strict Chore
and FamilyMember objects.

Malformed optional fields are replaced by a default and a diagnostic is
recorded. Rows without a usable id or title (or a member without a name)
are rejected, also with a diagnostic. The same encoding is used for the
local cache, so cached JSON goes through the same validation on the way in.

Chore row JSON contract:
{
    "id": "k3j9x0a1b",
    "title": "Dishes",
    "assignee": "Mom",
    "frequency": "Daily",
    "completed": true,
    "createdAt": 1760000000000,
    "lastCompletedAt": 1760003600000,
    "completionCount": 3,
    "weeklyDays": [1, 3],
    "dueDate": null,
    "completionHistory": [1760003600000]
}
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from src.core.chore_engine import avatar_url, member_color
from src.data.models import UNASSIGNED, Chore, FamilyData, FamilyMember, Frequency

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def _note(info: ValidationInfo, message: str) -> None:
    if info.context is not None:
        info.context.setdefault("diagnostics", []).append(message)


def _as_int(value: Any) -> int:
    """Coerce a cell value to int; raises ValueError when impossible."""
    if isinstance(value, bool):
        raise ValueError(f"boolean {value!r} is not a number")
    try:
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str) and value.strip():
            return int(float(value.strip()))
    except OverflowError as exc:
        raise ValueError(f"{value!r} is out of range") from exc
    raise ValueError(f"{value!r} is not a number")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ---------------------------------------------------------------------------
# Row models
# ---------------------------------------------------------------------------


class ChoreRow(BaseModel):
    """A chore row as sent by the proxy, normalized field by field."""

    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    assignee: str = UNASSIGNED
    frequency: Frequency = Frequency.DAILY
    completed: bool = False
    createdAt: int = 0
    lastCompletedAt: int | None = None
    completionCount: int = 0
    weeklyDays: list[int] = []
    dueDate: int | None = None
    completionHistory: list[int] = []

    @field_validator("id", "title", mode="before")
    @classmethod
    def require_text(cls, v: Any) -> str:
        if _is_blank(v):
            raise ValueError("must not be empty")
        return str(v).strip()

    @field_validator("assignee", mode="before")
    @classmethod
    def parse_assignee(cls, v: Any) -> str:
        return UNASSIGNED if _is_blank(v) else str(v).strip()

    @field_validator("frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v: Any, info: ValidationInfo) -> Frequency:
        if isinstance(v, Frequency):
            return v
        text = str(v or "").strip().lower()
        for freq in Frequency:
            if freq.value.lower() == text or freq.name.lower() == text:
                return freq
        _note(info, f"frequency: unknown value {v!r}, using Daily")
        return Frequency.DAILY

    @field_validator("completed", mode="before")
    @classmethod
    def parse_completed(cls, v: Any, info: ValidationInfo) -> bool:
        if isinstance(v, bool):
            return v
        if _is_blank(v):
            return False
        if isinstance(v, (int, float)):
            return v != 0
        text = str(v).strip().upper()
        if text in ("TRUE", "1", "YES"):
            return True
        if text in ("FALSE", "0", "NO"):
            return False
        _note(info, f"completed: unreadable value {v!r}, using false")
        return False

    @field_validator("createdAt", "completionCount", mode="before")
    @classmethod
    def parse_required_number(cls, v: Any, info: ValidationInfo) -> int:
        if _is_blank(v):
            return 0
        try:
            return max(0, _as_int(v))
        except ValueError:
            _note(info, f"{info.field_name}: unreadable value {v!r}, using 0")
            return 0

    @field_validator("lastCompletedAt", "dueDate", mode="before")
    @classmethod
    def parse_optional_timestamp(cls, v: Any, info: ValidationInfo) -> int | None:
        if _is_blank(v):
            return None
        try:
            return _as_int(v) or None
        except ValueError:
            _note(info, f"{info.field_name}: unreadable value {v!r}, dropped")
            return None

    @field_validator("weeklyDays", mode="before")
    @classmethod
    def parse_weekly_days(cls, v: Any, info: ValidationInfo) -> list[int]:
        if _is_blank(v):
            return []
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            items: list[Any] = [v]
        elif isinstance(v, str):
            items = [part for part in v.split(",") if part.strip()]
        elif isinstance(v, list):
            items = v
        else:
            _note(info, f"weeklyDays: unreadable value {v!r}, using none")
            return []

        days: list[int] = []
        for item in items:
            try:
                day = _as_int(item)
            except ValueError:
                _note(info, f"weeklyDays: dropped {item!r}")
                continue
            if 0 <= day <= 6:
                days.append(day)
            else:
                _note(info, f"weeklyDays: dropped out-of-range day {day}")
        return sorted(set(days))

    @field_validator("completionHistory", mode="before")
    @classmethod
    def parse_history(cls, v: Any, info: ValidationInfo) -> list[int]:
        if _is_blank(v):
            return []
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                _note(info, "completionHistory: invalid JSON, using empty history")
                return []
        if not isinstance(v, list):
            _note(info, f"completionHistory: unreadable value {v!r}, using empty history")
            return []

        history: list[int] = []
        for item in v:
            try:
                history.append(_as_int(item))
            except ValueError:
                _note(info, f"completionHistory: dropped {item!r}")
        return history

    def to_chore(self) -> Chore:
        is_weekly = self.frequency is Frequency.WEEKLY
        return Chore(
            id=self.id,
            title=self.title,
            assignee=self.assignee,
            frequency=self.frequency,
            completed=self.completed,
            created_at=self.createdAt,
            last_completed_at=self.lastCompletedAt,
            completion_count=self.completionCount,
            weekly_days=tuple(self.weeklyDays) if is_weekly and self.weeklyDays else None,
            due_date=self.dueDate if self.frequency is Frequency.ONE_TIME else None,
            completion_history=tuple(self.completionHistory),
        )


class MemberRow(BaseModel):
    """A family member row; color and avatar are derived when missing."""

    model_config = ConfigDict(extra="ignore")

    name: str
    color: str = ""
    avatar: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, v: Any) -> str:
        if _is_blank(v):
            raise ValueError("must not be empty")
        return str(v).strip()

    @field_validator("color", "avatar", mode="before")
    @classmethod
    def parse_text(cls, v: Any) -> str:
        return "" if _is_blank(v) else str(v).strip()

    def to_member(self) -> FamilyMember:
        return FamilyMember(
            name=self.name,
            color=self.color or member_color(self.name),
            avatar=self.avatar or avatar_url(self.name),
        )


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def decode_chores(rows: Any) -> tuple[list[Chore], list[str]]:
    """Decode a list of raw chore rows, returning (chores, diagnostics)."""
    diagnostics: list[str] = []
    if rows is None:
        return [], diagnostics
    if not isinstance(rows, list):
        return [], [f"chores: expected a list, got {type(rows).__name__}"]

    chores: list[Chore] = []
    for index, raw in enumerate(rows):
        if not isinstance(raw, dict):
            diagnostics.append(f"chore[{index}]: rejected non-object row")
            continue
        context: dict[str, list[str]] = {"diagnostics": []}
        try:
            row = ChoreRow.model_validate(raw, context=context)
        except ValidationError as exc:
            diagnostics.append(f"chore[{index}]: rejected ({_describe(exc)})")
            continue
        diagnostics.extend(f"chore {row.id}: {msg}" for msg in context["diagnostics"])
        chores.append(row.to_chore())
    return chores, diagnostics


def decode_members(rows: Any) -> tuple[list[FamilyMember], list[str]]:
    """Decode a list of raw member rows, returning (members, diagnostics)."""
    diagnostics: list[str] = []
    if rows is None:
        return [], diagnostics
    if not isinstance(rows, list):
        return [], [f"members: expected a list, got {type(rows).__name__}"]

    members: list[FamilyMember] = []
    seen: set[str] = set()
    for index, raw in enumerate(rows):
        if not isinstance(raw, dict):
            diagnostics.append(f"member[{index}]: rejected non-object row")
            continue
        try:
            row = MemberRow.model_validate(raw)
        except ValidationError as exc:
            diagnostics.append(f"member[{index}]: rejected ({_describe(exc)})")
            continue
        if row.name.lower() in seen:
            diagnostics.append(f"member[{index}]: duplicate name {row.name!r} dropped")
            continue
        seen.add(row.name.lower())
        members.append(row.to_member())
    return members, diagnostics


def decode_family_payload(payload: dict) -> FamilyData:
    """Turn a proxy GET response ({data, members}) into FamilyData."""
    chores, chore_diags = decode_chores(payload.get("data"))
    members, member_diags = decode_members(payload.get("members"))
    return FamilyData(
        chores=chores,
        members=members,
        source="remote",
        diagnostics=chore_diags + member_diags,
    )


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_chore(chore: Chore) -> dict:
    row = {
        "id": chore.id,
        "title": chore.title,
        "assignee": chore.assignee,
        "frequency": chore.frequency.value,
        "completed": chore.completed,
        "createdAt": chore.created_at,
        "completionCount": chore.completion_count,
        "weeklyDays": list(chore.weekly_days or ()),
        "completionHistory": list(chore.completion_history),
    }
    if chore.last_completed_at is not None:
        row["lastCompletedAt"] = chore.last_completed_at
    if chore.due_date is not None:
        row["dueDate"] = chore.due_date
    return row


def encode_member(member: FamilyMember) -> dict:
    return {"name": member.name, "color": member.color, "avatar": member.avatar}


def dump_chores(chores: list[Chore]) -> str:
    return json.dumps([encode_chore(c) for c in chores])


def dump_members(members: list[FamilyMember]) -> str:
    return json.dumps([encode_member(m) for m in members])


def load_json_rows(text: str | None, label: str) -> list:
    """Parse a cached JSON array; unreadable text counts as empty."""
    if not text:
        return []
    try:
        rows = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Cached %s are not valid JSON, ignoring: %s", label, exc)
        return []
    if not isinstance(rows, list):
        logger.warning("Cached %s are not a JSON array, ignoring", label)
        return []
    return rows
