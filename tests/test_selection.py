"""
Tests for picking a schedule outside the editor.
"""

import pytest

from availability_engine.domain.exceptions import NotFoundError
from availability_engine.domain.models import (
    AvailabilitySchedule,
    DateOverride,
    OverrideType,
    TimeSlot,
)
from availability_engine.services.selection import hours_on, select_schedule

DEFAULT = AvailabilitySchedule(
    id="default",
    owner_id="owner-1",
    name="Working Hours",
    timezone="Europe/Berlin",
    is_default=True,
    overrides=(DateOverride("2024-12-25", OverrideType.UNAVAILABLE),),
)
OTHER = AvailabilitySchedule(id="other", owner_id="owner-1", name="Evenings", timezone="Europe/Berlin")


class TestSelection:
    """Tests for schedule selection."""

    def test_falls_back_to_default(self):
        """Test that no explicit choice means the default schedule."""
        assert select_schedule([OTHER, DEFAULT]) is DEFAULT

    def test_explicit_choice_wins(self):
        """Test that an explicit id is used over the default."""
        assert select_schedule([OTHER, DEFAULT], "other") is OTHER

    def test_unknown_explicit_choice(self):
        """Test that a stale schedule reference raises."""
        with pytest.raises(NotFoundError):
            select_schedule([DEFAULT], "deleted")

    def test_no_default(self):
        """Test an owner without schedules."""
        assert select_schedule([]) is None
        assert hours_on([], "2024-12-25") is None

    def test_hours_on_applies_overrides(self):
        """Test that consumers see override-resolved hours."""
        assert hours_on([DEFAULT], "2024-12-25").slots == ()
        assert hours_on([DEFAULT], "2024-12-24").slots == (TimeSlot("09:00", "17:00"),)
