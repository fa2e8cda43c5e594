"""Tests for src.data.models: Chore and FamilyMember dataclasses."""

import dataclasses

import pytest

from src.data.models import UNASSIGNED, Chore, FamilyMember, Frequency, SyncStatus


def test_chore_defaults():
    chore = Chore(id="1", title="Trash")
    assert chore.assignee == UNASSIGNED
    assert chore.frequency is Frequency.DAILY
    assert chore.completed is False
    assert chore.last_completed_at is None
    assert chore.completion_count == 0
    assert chore.weekly_days is None
    assert chore.due_date is None
    assert chore.completion_history == ()


def test_chore_is_immutable():
    chore = Chore(id="1", title="Trash")
    with pytest.raises(dataclasses.FrozenInstanceError):
        chore.completed = True


def test_advanced_weekly_requires_weekly_and_days():
    assert Chore(id="1", title="Bins", frequency=Frequency.WEEKLY, weekly_days=(1,)).is_advanced_weekly
    assert not Chore(id="1", title="Bins", frequency=Frequency.WEEKLY).is_advanced_weekly
    assert not Chore(id="1", title="Bins", frequency=Frequency.WEEKLY, weekly_days=()).is_advanced_weekly
    assert not Chore(id="1", title="Bins", frequency=Frequency.DAILY, weekly_days=(1,)).is_advanced_weekly


def test_frequency_wire_values():
    assert [f.value for f in Frequency] == ["One-time", "Daily", "Weekly", "Monthly", "Quarterly"]
    assert Frequency("Weekly") is Frequency.WEEKLY


def test_member_equality_by_value():
    assert FamilyMember("Mom", "bg-x", "a") == FamilyMember("Mom", "bg-x", "a")


def test_sync_status_values():
    assert {s.value for s in SyncStatus} == {"idle", "syncing", "success", "error"}
