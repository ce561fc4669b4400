"""
Tests for the editor session state machine.
"""

import asyncio

import pytest

from availability_engine.domain.exceptions import (
    DuplicateDateError,
    NotFoundError,
    RepositoryError,
    ValidationError,
)
from availability_engine.domain.models import DateOverride, OverrideType, TimeSlot, Weekday
from availability_engine.services.editor import EditorSession, EditorState
from availability_engine.services.repository import InMemoryScheduleRepository, ScheduleInput

OWNER = "owner-1"


class UnreachableRepository(InMemoryScheduleRepository):
    """Store whose writes fail as if the API were down."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    async def create(self, owner_id, data):
        self.calls += 1
        raise RepositoryError("Session expired")

    async def update(self, schedule_id, patch):
        self.calls += 1
        raise RepositoryError("Session expired")


def _saved_session():
    repo = InMemoryScheduleRepository()
    stored = asyncio.run(repo.create(OWNER, ScheduleInput(name="Working Hours", timezone="Europe/Berlin")))
    session = EditorSession(repo, OWNER)
    asyncio.run(session.load(stored.id))
    return repo, session


class TestLifecycle:
    """Tests for state transitions."""

    def test_starts_idle(self):
        """Test that a fresh session has no draft."""
        session = EditorSession(InMemoryScheduleRepository(), OWNER)

        assert session.state is EditorState.IDLE
        with pytest.raises(RuntimeError):
            session.toggle_day(Weekday.MONDAY, False)

    def test_new_schedule_is_created(self):
        """Test saving a new schedule."""
        repo = InMemoryScheduleRepository()
        session = EditorSession(repo, OWNER)
        draft = session.start_new()

        assert session.state is EditorState.EDITING
        assert draft.name == "Working Hours"
        assert draft.timezone == "America/New_York"

        saved = asyncio.run(session.save())

        assert session.state is EditorState.SAVED
        assert saved.is_default
        assert session.schedule_id == saved.id
        assert asyncio.run(repo.get(saved.id)) == saved

    def test_edit_after_save_returns_to_editing(self):
        """Test that SAVED goes back to EDITING on the next change."""
        _, session = _saved_session()
        asyncio.run(session.save())

        session.rename("Office")

        assert session.state is EditorState.EDITING

    def test_load_unknown_schedule(self):
        """Test that a stale id propagates NotFoundError."""
        session = EditorSession(InMemoryScheduleRepository(), OWNER)

        with pytest.raises(NotFoundError):
            asyncio.run(session.load("missing"))


class TestSave:
    """Tests for validation and persistence on save."""

    def test_invalid_draft_never_reaches_repository(self):
        """Test that validation errors stop the save before any call."""
        repo = UnreachableRepository()
        session = EditorSession(repo, OWNER)
        session.start_new()
        session.rename(" ")

        assert asyncio.run(session.save()) is None
        assert session.state is EditorState.FAILED
        assert isinstance(session.error, ValidationError)
        assert [e.field for e in session.field_errors] == ["name"]
        assert repo.calls == 0

    def test_fix_and_retry(self):
        """Test that a failed draft can be corrected and saved."""
        repo = InMemoryScheduleRepository()
        session = EditorSession(repo, OWNER)
        session.start_new()
        session.set_slot_field(Weekday.MONDAY, 0, "end", "08:00")

        asyncio.run(session.save())
        assert session.field_errors[0].message == "End time must be after start time for Monday"

        session.set_slot_field(Weekday.MONDAY, 0, "end", "12:00")
        assert session.state is EditorState.EDITING
        assert session.error is None

        saved = asyncio.run(session.save())
        assert saved.day(Weekday.MONDAY).slots == (TimeSlot("09:00", "12:00"),)

    def test_repository_failure_keeps_draft(self):
        """Test that a failed write leaves the draft for another attempt."""
        repo = UnreachableRepository()
        session = EditorSession(repo, OWNER)
        session.start_new()
        draft = session.rename("Office")

        assert asyncio.run(session.save()) is None
        assert session.state is EditorState.FAILED
        assert str(session.error) == "Session expired"
        assert session.field_errors == []
        assert session.draft == draft

    def test_update_sends_finalized_overrides(self):
        """Test that unavailable overrides lose their slots on save."""
        repo, session = _saved_session()
        session.add_override(
            DateOverride("2024-12-25", OverrideType.UNAVAILABLE, (TimeSlot("09:00", "17:00"),))
        )

        saved = asyncio.run(session.save())

        assert saved.overrides == (DateOverride("2024-12-25", OverrideType.UNAVAILABLE),)
        assert session.draft.overrides == saved.overrides

    def test_save_keeps_default_flag(self):
        """Test that saving an edited default schedule does not unset it."""
        repo, session = _saved_session()
        session.rename("Office")

        saved = asyncio.run(session.save())

        assert saved.is_default
        assert saved.name == "Office"


class TestEdits:
    """Tests for draft edits through the session."""

    def test_rejected_edit_leaves_draft(self):
        """Test that a duplicate override date keeps the previous draft."""
        _, session = _saved_session()
        session.add_override(DateOverride("2024-12-25", OverrideType.UNAVAILABLE))
        before = session.draft

        with pytest.raises(DuplicateDateError):
            session.add_override(DateOverride("2024-12-25", OverrideType.UNAVAILABLE))

        assert session.draft == before

    def test_copy_to_days(self):
        """Test copying Monday to the weekend."""
        _, session = _saved_session()
        session.add_slot(Weekday.MONDAY)

        draft = session.copy_to_days(Weekday.MONDAY, [Weekday.SATURDAY, Weekday.SUNDAY])

        assert draft.weekly[Weekday.SATURDAY.index].enabled
        assert draft.weekly[Weekday.SUNDAY.index].slots == draft.weekly[Weekday.MONDAY.index].slots

    def test_copy_without_targets_is_a_no_op(self):
        """Test that applying an empty selection changes nothing."""
        _, session = _saved_session()
        before = session.draft

        assert session.copy_to_days(Weekday.MONDAY, []) is before

    def test_copy_from_disabled_day_is_a_no_op(self):
        """Test that a disabled day's hidden slots are not copied."""
        _, session = _saved_session()
        session.toggle_day(Weekday.MONDAY, False)
        before = session.draft

        draft = session.copy_to_days(Weekday.MONDAY, [Weekday.SATURDAY])

        assert draft is before
        assert not draft.weekly[Weekday.SATURDAY.index].enabled

    def test_display_time_entry(self):
        """Test entering times in 12-hour form."""
        _, session = _saved_session()

        draft = session.set_slot_display(Weekday.MONDAY, 0, "start", "10:30am")
        assert draft.weekly[Weekday.MONDAY.index].slots[0].start == "10:30"

        draft = session.set_slot_display(Weekday.MONDAY, 0, "start", "half past ten")
        assert draft.weekly[Weekday.MONDAY.index].slots[0].start == ""

    def test_summary_follows_draft(self):
        """Test that the header summary reflects unsaved edits."""
        _, session = _saved_session()
        assert session.summary() == "Mon - Fri, 9:00am - 5:00pm"

        session.toggle_day(Weekday.FRIDAY, False)

        assert session.summary() == "Mon, Tue, Wed, Thu, 9:00am - 5:00pm"

    def test_override_edit_and_remove(self):
        """Test the override dialog actions."""
        _, session = _saved_session()
        session.add_override(DateOverride("2024-12-25", OverrideType.UNAVAILABLE))

        session.edit_override(
            "2024-12-25",
            DateOverride("2024-12-26", OverrideType.AVAILABLE, (TimeSlot("10:00", "12:00"),)),
        )
        assert [o.date for o in session.draft.overrides] == ["2024-12-26"]

        session.remove_override("2024-12-26")
        assert session.draft.overrides == ()


class TestPromoteDefault:
    """Tests for making the edited schedule the default."""

    def test_promote_saved_schedule(self):
        """Test that the repository moves the default flag."""
        repo, first = _saved_session()
        other = asyncio.run(repo.create(OWNER, ScheduleInput(name="Evenings", timezone="UTC")))
        session = EditorSession(repo, OWNER)
        asyncio.run(session.load(other.id))

        draft = asyncio.run(session.promote_default())

        assert draft.is_default
        assert asyncio.run(repo.get(other.id)).is_default
        assert not asyncio.run(repo.get(first.schedule_id)).is_default

    def test_promote_unsaved_schedule(self):
        """Test that a new schedule is created as the default."""
        repo, first = _saved_session()
        session = EditorSession(repo, OWNER)
        session.start_new(name="Evenings")

        asyncio.run(session.promote_default())
        saved = asyncio.run(session.save())

        assert saved.is_default
        assert not asyncio.run(repo.get(first.schedule_id)).is_default
