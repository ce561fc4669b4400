"""
Tests for date overrides and override resolution.
"""

from datetime import date

import pytest

from availability_engine.domain.exceptions import DuplicateDateError
from availability_engine.domain.models import (
    DateOverride,
    OverrideType,
    ScheduleDraft,
    TimeSlot,
    Weekday,
    default_weekly_template,
)
from availability_engine.domain.overrides import (
    SOURCE_OVERRIDE,
    SOURCE_WEEKLY,
    add_override,
    add_override_slot,
    edit_override,
    finalize_override,
    format_override_date,
    format_override_slots,
    new_override,
    remove_override,
    remove_override_slot,
    resolve_availability,
    resolve_range,
    validate_override,
)

# 2024-11-25 and 2024-12-02 are Mondays, 2024-11-30 is a Saturday.
MONDAY = "2024-11-25"
NEXT_MONDAY = "2024-12-02"
SATURDAY = "2024-11-30"


def _unavailable(day: str) -> DateOverride:
    return DateOverride(date=day, type=OverrideType.UNAVAILABLE)


def _available(day: str, *slots) -> DateOverride:
    return DateOverride(
        date=day,
        type=OverrideType.AVAILABLE,
        slots=tuple(TimeSlot(start, end) for start, end in slots),
    )


def _draft(*overrides) -> ScheduleDraft:
    return ScheduleDraft(
        name="Working Hours",
        timezone="America/New_York",
        weekly=default_weekly_template(),
        overrides=tuple(overrides),
    )


class TestResolution:
    """Tests for override precedence over the weekly template."""

    def test_unavailable_override_wins(self):
        """An unavailable override removes the Monday hours for that date only."""
        schedule = _draft(_unavailable(MONDAY))

        overridden = resolve_availability(schedule, MONDAY)
        regular = resolve_availability(schedule, NEXT_MONDAY)

        assert overridden.slots == ()
        assert overridden.source == SOURCE_OVERRIDE
        assert not overridden.is_available
        assert regular.slots == (TimeSlot("09:00", "17:00"),)
        assert regular.source == SOURCE_WEEKLY
        assert regular.weekday is Weekday.MONDAY

    def test_available_override_replaces_weekly_hours_entirely(self):
        """The weekly template is not merged into an overridden date."""
        schedule = _draft(_available(MONDAY, ("13:00", "15:00")))

        resolved = resolve_availability(schedule, MONDAY)

        assert resolved.slots == (TimeSlot("13:00", "15:00"),)

    def test_override_opens_a_disabled_weekday(self):
        """Test an available override on a weekend day."""
        schedule = _draft(_available(SATURDAY, ("10:00", "12:00")))

        assert resolve_availability(schedule, SATURDAY).slots == (TimeSlot("10:00", "12:00"),)

    def test_disabled_weekday_without_override(self):
        """Test that a disabled day has no hours."""
        assert resolve_availability(_draft(), SATURDAY).slots == ()

    def test_accepts_date_objects(self):
        """Test resolution with a date instead of a string."""
        schedule = _draft(_unavailable(MONDAY))

        assert resolve_availability(schedule, date(2024, 11, 25)).source == SOURCE_OVERRIDE

    def test_invalid_date(self):
        """Test that a malformed date is rejected."""
        with pytest.raises(ValueError):
            resolve_availability(_draft(), "25.11.2024")

    def test_resolve_range(self):
        """Test resolving a full week with one override inside."""
        schedule = _draft(_unavailable("2024-11-27"))

        days = resolve_range(schedule, "2024-11-24", "2024-11-30")

        assert [d.weekday for d in days] == list(Weekday)
        assert [bool(d.slots) for d in days] == [False, True, True, False, True, True, False]
        assert days[3].source == SOURCE_OVERRIDE

    def test_resolve_range_rejects_reversed_bounds(self):
        """Test that the end must not precede the start."""
        with pytest.raises(ValueError):
            resolve_range(_draft(), "2024-11-30", "2024-11-24")


class TestOverrideSet:
    """Tests for adding, editing and removing overrides."""

    def test_add_keeps_dates_sorted(self):
        """Test that overrides are kept in date order."""
        overrides = add_override((_unavailable(NEXT_MONDAY),), _unavailable(MONDAY))

        assert [o.date for o in overrides] == [MONDAY, NEXT_MONDAY]

    def test_add_duplicate_date(self):
        """Test that a second override for the same date is rejected."""
        with pytest.raises(DuplicateDateError):
            add_override((_unavailable(MONDAY),), _available(MONDAY, ("09:00", "10:00")))

    def test_edit_keeping_own_date(self):
        """Test that an override can be edited without changing its date."""
        overrides = (_unavailable(MONDAY), _unavailable(NEXT_MONDAY))

        result = edit_override(overrides, MONDAY, _available(MONDAY, ("09:00", "10:00")))

        assert result[0].type is OverrideType.AVAILABLE
        assert result[1] == _unavailable(NEXT_MONDAY)

    def test_edit_onto_another_overrides_date(self):
        """Test that an edit cannot take over another override's date."""
        overrides = (_unavailable(MONDAY), _unavailable(NEXT_MONDAY))

        with pytest.raises(DuplicateDateError):
            edit_override(overrides, MONDAY, _unavailable(NEXT_MONDAY))

    def test_edit_moves_to_free_date(self):
        """Test moving an override to an unused date."""
        result = edit_override((_unavailable(NEXT_MONDAY),), NEXT_MONDAY, _unavailable(MONDAY))

        assert [o.date for o in result] == [MONDAY]

    def test_edit_unknown_date(self):
        """Test editing a date that has no override."""
        with pytest.raises(ValueError):
            edit_override((), MONDAY, _unavailable(MONDAY))

    def test_remove(self):
        """Test removing an override by date."""
        assert remove_override((_unavailable(MONDAY),), MONDAY) == ()

        with pytest.raises(ValueError):
            remove_override((), MONDAY)


class TestOverrideDraft:
    """Tests for editing a single override."""

    def test_new_override_defaults(self):
        """Test that a new override starts as a day off with a prefilled slot."""
        override = new_override(MONDAY)

        assert override.type is OverrideType.UNAVAILABLE
        assert override.slots == (TimeSlot("09:00", "17:00"),)

    def test_finalize_discards_slots_of_unavailable(self):
        """Test that slots entered before switching to unavailable are dropped."""
        assert finalize_override(new_override(MONDAY)).slots == ()

    def test_finalize_keeps_available_slots(self):
        """Test that available overrides keep their slots."""
        override = _available(MONDAY, ("09:00", "10:00"))

        assert finalize_override(override) == override

    def test_slot_chaining_and_last_slot_kept(self):
        """Test adding and removing override slots."""
        override = add_override_slot(_available(MONDAY, ("09:00", "12:00")))

        assert override.slots[-1] == TimeSlot("13:00", "14:00")
        single = remove_override_slot(remove_override_slot(override, 0), 0)
        assert single.slots == (TimeSlot("13:00", "14:00"),)

    def test_remove_override_slot_out_of_range(self):
        """Test that a bad index is rejected."""
        with pytest.raises(IndexError):
            remove_override_slot(_available(MONDAY, ("09:00", "12:00")), 3)

    def test_validate_available_requires_slots(self):
        """Test that an available override needs a slot."""
        errors = validate_override(_available(MONDAY))

        assert [e.message for e in errors] == ["At least one time slot is required"]

    def test_validate_slot_order(self):
        """Test that start must precede end."""
        errors = validate_override(_available(MONDAY, ("12:00", "09:00")))

        assert [e.message for e in errors] == ["End time must be after start time"]

    def test_validate_malformed_time(self):
        """Test that slot bounds must be HH:MM values."""
        errors = validate_override(_available(MONDAY, ("10:00", "9:99")))

        assert [e.message for e in errors] == ["Invalid time value"]

    def test_validate_unavailable_ignores_slots(self):
        """Test that slots of an unavailable override are not checked."""
        override = DateOverride(MONDAY, OverrideType.UNAVAILABLE, (TimeSlot("12:00", "09:00"),))

        assert validate_override(override) == []


class TestOverrideDisplay:
    """Tests for override labels."""

    def test_format_slots(self):
        """Test override slot labels."""
        assert format_override_slots(_unavailable(MONDAY)) == "Unavailable"
        assert format_override_slots(_available(MONDAY)) == "No times set"
        assert (
            format_override_slots(_available(MONDAY, ("09:00", "12:00"), ("13:00", "17:00")))
            == "9:00am - 12:00pm, 1:00pm - 5:00pm"
        )

    def test_format_date(self):
        """Test override date labels."""
        assert format_override_date("2024-12-25") == "Dec 25, 2024"
