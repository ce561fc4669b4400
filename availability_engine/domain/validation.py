"""
Save-time validation of a schedule draft.

Validators return ``FieldError`` lists so callers can show them next to the
offending field; only the repository turns them into ``ValidationError``.
Overlapping slots on the same day are accepted.
"""

from typing import List, Sequence

import pendulum

from .clock import is_wall_clock
from .exceptions import FieldError
from .models import DateOverride, DayTemplate, ScheduleDraft
from .overrides import validate_override


def validate_name(name: str | None) -> List[FieldError]:
    if not name or not name.strip():
        return [FieldError("name", "Schedule name is required")]
    return []


def validate_timezone(timezone: str | None) -> List[FieldError]:
    if not timezone or not timezone.strip():
        return [FieldError("timezone", "Timezone is required")]
    try:
        pendulum.timezone(timezone)
    except ValueError:
        return [FieldError("timezone", f"Unknown timezone: {timezone}")]
    return []


def validate_weekly(weekly: Sequence[DayTemplate]) -> List[FieldError]:
    """
    Check every enabled day: it needs at least one slot, and the first bad
    slot per day is reported.
    """
    errors: List[FieldError] = []

    for template in weekly:
        if not template.enabled:
            continue

        day_name = template.day.value
        if not template.slots:
            errors.append(FieldError(
                f"schedule.{day_name}.slots",
                f"Please add a time slot for {day_name} or turn the day off",
            ))
            continue

        for index, slot in enumerate(template.slots):
            field = f"schedule.{day_name}.slots[{index}]"
            if not slot.is_complete():
                errors.append(FieldError(field, f"Please fill in all time slots for {day_name}"))
                break
            if not (is_wall_clock(slot.start) and is_wall_clock(slot.end)):
                errors.append(FieldError(field, f"Invalid time value for {day_name}"))
                break
            if not slot.is_ordered():
                errors.append(FieldError(field, f"End time must be after start time for {day_name}"))
                break

    return errors


def validate_overrides(overrides: Sequence[DateOverride]) -> List[FieldError]:
    errors: List[FieldError] = []
    seen: set[str] = set()

    for override in overrides:
        field = f"dateOverrides.{override.date}"
        if override.date in seen:
            errors.append(FieldError(f"{field}.date", "An override for this date already exists"))
            continue
        seen.add(override.date)
        errors.extend(validate_override(override, field=field))

    return errors


def validate_draft(draft: ScheduleDraft) -> List[FieldError]:
    """All save-time checks for a draft, in display order."""
    return [
        *validate_name(draft.name),
        *validate_timezone(draft.timezone),
        *validate_weekly(draft.weekly),
        *validate_overrides(draft.overrides),
    ]
