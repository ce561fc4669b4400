"""
Date overrides and override resolution.

An override fully replaces the weekly template for its date: the weekly
template is never consulted, not even partially, for an overridden date.
"""

from dataclasses import dataclass, replace
from datetime import date as Date
from typing import List, Sequence, Tuple

import pendulum

from .clock import format_range, is_wall_clock
from .day_template import check_slot_index, next_slot, replace_slot_field
from .exceptions import DuplicateDateError, FieldError
from .models import (
    DateOverride,
    OverrideType,
    TimeSlot,
    Weekday,
    default_slot,
    parse_calendar_date,
)

Overrides = Tuple[DateOverride, ...]

SOURCE_OVERRIDE = "override"
SOURCE_WEEKLY = "weekly"


def sort_overrides(overrides: Sequence[DateOverride]) -> Overrides:
    return tuple(sorted(overrides, key=lambda o: o.date))


def add_override(overrides: Sequence[DateOverride], override: DateOverride) -> Overrides:
    """
    Add an override for a date that has none yet.

    Raises:
        DuplicateDateError: If the date already has an override
    """
    if any(existing.date == override.date for existing in overrides):
        raise DuplicateDateError(override.date)
    return sort_overrides([*overrides, override])


def edit_override(
    overrides: Sequence[DateOverride],
    original_date: str,
    override: DateOverride,
) -> Overrides:
    """
    Replace the override stored under ``original_date``.

    Keeping the original date is always allowed; moving onto a date owned
    by another override is not.

    Raises:
        ValueError: If there is no override for ``original_date``
        DuplicateDateError: If the new date belongs to another override
    """
    if not any(existing.date == original_date for existing in overrides):
        raise ValueError(f"No override exists for {original_date}")

    if override.date != original_date and any(
        existing.date == override.date for existing in overrides
    ):
        raise DuplicateDateError(override.date)

    return sort_overrides(
        override if existing.date == original_date else existing
        for existing in overrides
    )


def remove_override(overrides: Sequence[DateOverride], date: str) -> Overrides:
    remaining = tuple(o for o in overrides if o.date != date)
    if len(remaining) == len(overrides):
        raise ValueError(f"No override exists for {date}")
    return remaining


def new_override(date: str) -> DateOverride:
    """
    Draft for a new override: a day off, with one default slot pre-filled
    in case the type is switched to available.
    """
    return DateOverride(date=date, type=OverrideType.UNAVAILABLE, slots=(default_slot(),))


def add_override_slot(override: DateOverride) -> DateOverride:
    return replace(override, slots=override.slots + (next_slot(override.slots),))


def remove_override_slot(override: DateOverride, index: int) -> DateOverride:
    """Remove a slot; an override draft always keeps at least one."""
    check_slot_index(override.slots, index)
    if len(override.slots) <= 1:
        return override
    return replace(override, slots=override.slots[:index] + override.slots[index + 1:])


def set_override_slot_field(
    override: DateOverride,
    index: int,
    field: str,
    value: str | None,
) -> DateOverride:
    return replace(override, slots=replace_slot_field(override.slots, index, field, value))


def finalize_override(override: DateOverride) -> DateOverride:
    """Drop slots that an unavailable override may still carry from editing."""
    if override.type is OverrideType.UNAVAILABLE and override.slots:
        return replace(override, slots=())
    return override


def validate_override(override: DateOverride, field: str = "override") -> List[FieldError]:
    """Save-time checks for one override. Returns field errors, never raises."""
    errors: List[FieldError] = []

    try:
        parse_calendar_date(override.date)
    except ValueError:
        errors.append(FieldError(f"{field}.date", "Please select a date"))

    if not override.is_available:
        return errors

    if not override.slots:
        errors.append(FieldError(f"{field}.slots", "At least one time slot is required"))
        return errors

    for index, slot in enumerate(override.slots):
        slot_field = f"{field}.slots[{index}]"
        if not slot.is_complete():
            errors.append(FieldError(slot_field, "Please fill in all time slots"))
            break
        if not (is_wall_clock(slot.start) and is_wall_clock(slot.end)):
            errors.append(FieldError(slot_field, "Invalid time value"))
            break
        if not slot.is_ordered():
            errors.append(FieldError(slot_field, "End time must be after start time"))
            break

    return errors


def format_override_slots(override: DateOverride) -> str:
    if not override.is_available:
        return "Unavailable"
    if not override.slots:
        return "No times set"
    return ", ".join(format_range(slot.start, slot.end) for slot in override.slots)


def format_override_date(value: "str | Date") -> str:
    """Format a date as ``"Dec 25, 2024"``."""
    day = parse_calendar_date(value)
    return pendulum.date(day.year, day.month, day.day).format("MMM D, YYYY", locale="en")


@dataclass(frozen=True)
class ResolvedDay:
    """Effective availability for one calendar date."""
    date: Date
    weekday: Weekday
    source: str  # "override" or "weekly"
    slots: Tuple[TimeSlot, ...]

    @property
    def is_available(self) -> bool:
        return bool(self.slots)


def resolve_availability(schedule, day: "str | Date") -> ResolvedDay:
    """
    Effective availability of ``schedule`` on ``day``.

    ``schedule`` is anything with ``weekly`` and ``overrides``, so both a
    stored schedule and an editor draft can be resolved.
    """
    target = parse_calendar_date(day)
    weekday = Weekday.from_date(target)
    key = target.isoformat()

    for override in schedule.overrides:
        if override.date == key:
            return ResolvedDay(
                date=target,
                weekday=weekday,
                source=SOURCE_OVERRIDE,
                slots=override.effective_slots(),
            )

    template = schedule.weekly[weekday.index]
    return ResolvedDay(
        date=target,
        weekday=weekday,
        source=SOURCE_WEEKLY,
        slots=template.active_slots(),
    )


def resolve_range(schedule, start: "str | Date", end: "str | Date") -> List[ResolvedDay]:
    """Resolve every date from ``start`` to ``end`` inclusive."""
    first = parse_calendar_date(start)
    last = parse_calendar_date(end)
    if last < first:
        raise ValueError(f"End date {last} is before start date {first}")

    resolved: List[ResolvedDay] = []
    current = pendulum.date(first.year, first.month, first.day)

    while current <= last:
        resolved.append(resolve_availability(schedule, current))
        current = current.add(days=1)

    return resolved
