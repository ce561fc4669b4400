"""
Domain models for weekly availability and date overrides.

All models are immutable; editing happens through the pure transform
functions in ``day_template``, ``overrides`` and ``copy_days``.
"""

from dataclasses import dataclass, field, replace
from datetime import date as Date
from enum import Enum
from typing import Iterable, Tuple

import pendulum
from pendulum import DateTime

DEFAULT_SLOT_START = "09:00"
DEFAULT_SLOT_END = "17:00"


class Weekday(Enum):
    """Calendar weekdays in canonical Sunday-first order."""
    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def index(self) -> int:
        """Position in the Sunday-first week (Sunday=0)."""
        return WEEKDAYS.index(self)

    @property
    def abbreviation(self) -> str:
        return self.value[:3]

    @classmethod
    def from_date(cls, day: Date) -> "Weekday":
        """Weekday of a calendar date."""
        # date.weekday() is Monday=0
        return WEEKDAYS[(day.weekday() + 1) % 7]


WEEKDAYS: Tuple[Weekday, ...] = tuple(Weekday)
WEEKEND = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})


class OverrideType(Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class TimeSlot:
    """
    A start/end interval within one day, both as ``HH:MM`` strings.

    Ordering (start < end) is checked at save time, not on construction,
    so drafts may hold a slot that is still being edited.
    """
    start: str
    end: str

    def is_complete(self) -> bool:
        return bool(self.start) and bool(self.end)

    def is_ordered(self) -> bool:
        """Check start < end; lexicographic order is enough for ``HH:MM``."""
        return self.is_complete() and self.start < self.end

    def signature(self) -> str:
        return f"{self.start}-{self.end}"

    def __str__(self) -> str:
        return self.signature()


def default_slot() -> TimeSlot:
    return TimeSlot(start=DEFAULT_SLOT_START, end=DEFAULT_SLOT_END)


@dataclass(frozen=True)
class DayTemplate:
    """One weekday of the recurring weekly template."""
    day: Weekday
    enabled: bool = False
    slots: Tuple[TimeSlot, ...] = ()

    def active_slots(self) -> Tuple[TimeSlot, ...]:
        """Slots that count toward availability (none when disabled)."""
        return self.slots if self.enabled else ()

    def signature(self) -> str:
        """Ordered slot list serialized as ``"09:00-12:00, 13:00-17:00"``."""
        return ", ".join(slot.signature() for slot in self.slots)


WeeklyTemplate = Tuple[DayTemplate, ...]


def default_weekly_template() -> WeeklyTemplate:
    """Mon-Fri 09:00-17:00, weekends disabled."""
    return tuple(
        DayTemplate(day=day, enabled=True, slots=(default_slot(),))
        if day not in WEEKEND
        else DayTemplate(day=day)
        for day in WEEKDAYS
    )


def normalize_week(days: Iterable[DayTemplate]) -> WeeklyTemplate:
    """
    Return exactly seven day templates in Sunday-first order.

    Missing weekdays are filled in as disabled; a repeated weekday keeps
    its first occurrence.
    """
    by_day = {}
    for template in days:
        by_day.setdefault(template.day, template)
    return tuple(by_day.get(day, DayTemplate(day=day)) for day in WEEKDAYS)


@dataclass(frozen=True)
class DateOverride:
    """
    A single-date exception that fully replaces the weekly template.

    ``slots`` is only meaningful for ``OverrideType.AVAILABLE``.
    """
    date: str  # YYYY-MM-DD
    type: OverrideType = OverrideType.UNAVAILABLE
    slots: Tuple[TimeSlot, ...] = ()

    @property
    def is_available(self) -> bool:
        return self.type is OverrideType.AVAILABLE

    def effective_slots(self) -> Tuple[TimeSlot, ...]:
        return self.slots if self.is_available else ()


def parse_calendar_date(value: "str | Date") -> Date:
    """
    Parse an ISO ``YYYY-MM-DD`` date.

    Raises:
        ValueError: If the value is not a valid calendar date
    """
    if isinstance(value, Date):
        return value
    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


@dataclass(frozen=True)
class AvailabilitySchedule:
    """
    Aggregate root: a named, timezone-tagged weekly template plus overrides.

    Invariants kept by the repository: one default schedule per owner,
    non-empty name, no deletion while default or referenced by event types.
    """
    id: str
    owner_id: str
    name: str
    timezone: str
    is_default: bool = False
    weekly: WeeklyTemplate = field(default_factory=default_weekly_template)
    overrides: Tuple[DateOverride, ...] = ()
    event_type_count: int = 0
    created_at: DateTime | None = None
    updated_at: DateTime | None = None

    def day(self, weekday: Weekday) -> DayTemplate:
        return self.weekly[weekday.index]

    def override_for(self, day: "str | Date") -> DateOverride | None:
        key = parse_calendar_date(day).isoformat()
        for override in self.overrides:
            if override.date == key:
                return override
        return None


@dataclass(frozen=True)
class ScheduleDraft:
    """The editable part of a schedule, held by an editor session."""
    name: str
    timezone: str
    is_default: bool = False
    weekly: WeeklyTemplate = field(default_factory=default_weekly_template)
    overrides: Tuple[DateOverride, ...] = ()

    @classmethod
    def from_schedule(cls, schedule: AvailabilitySchedule) -> "ScheduleDraft":
        return cls(
            name=schedule.name,
            timezone=schedule.timezone,
            is_default=schedule.is_default,
            weekly=normalize_week(schedule.weekly),
            overrides=schedule.overrides,
        )

    def with_day(self, template: DayTemplate) -> "ScheduleDraft":
        weekly = list(self.weekly)
        weekly[template.day.index] = template
        return replace(self, weekly=tuple(weekly))
