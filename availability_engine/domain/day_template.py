"""
Pure transforms over a single weekday template.

Policy: disabling a day keeps its slots in place but they stop counting
(see ``DayTemplate.active_slots``). Re-enabling restores them, and
re-enabling an empty day seeds the default 09:00-17:00 slot.
"""

from dataclasses import replace
from typing import Sequence, Tuple

from .clock import from_minutes, is_wall_clock, to_minutes
from .models import DayTemplate, TimeSlot, default_slot

SLOT_FIELDS = ("start", "end")

# New slots chain one hour after the previous one, capped at 23:00.
CHAIN_GAP_MINUTES = 60
LATEST_CHAINED_MINUTES = 23 * 60


def next_slot(slots: Sequence[TimeSlot]) -> TimeSlot:
    """
    Suggest the slot that follows the last one in ``slots``.

    Start is ``min(last.end + 1h, 23:00)``, end is ``min(start + 1h, 23:00)``.
    With no usable previous slot the default 09:00-17:00 is returned.
    """
    if not slots or not is_wall_clock(slots[-1].end):
        return default_slot()

    last_end = to_minutes(slots[-1].end)
    start = min(last_end + CHAIN_GAP_MINUTES, LATEST_CHAINED_MINUTES)
    end = min(start + CHAIN_GAP_MINUTES, LATEST_CHAINED_MINUTES)
    return TimeSlot(start=from_minutes(start), end=from_minutes(end))


def toggle_day(template: DayTemplate, enabled: bool) -> DayTemplate:
    if enabled and not template.slots:
        return replace(template, enabled=True, slots=(default_slot(),))
    return replace(template, enabled=enabled)


def add_slot(template: DayTemplate) -> DayTemplate:
    return replace(template, slots=template.slots + (next_slot(template.slots),))


def remove_slot(template: DayTemplate, index: int) -> DayTemplate:
    """Remove one slot; removing the last remaining slot disables the day."""
    check_slot_index(template.slots, index)
    slots = template.slots[:index] + template.slots[index + 1:]
    if not slots:
        return replace(template, enabled=False, slots=())
    return replace(template, slots=slots)


def set_slot_field(
    template: DayTemplate,
    index: int,
    field: str,
    value: str | None,
) -> DayTemplate:
    """
    Replace the start or end of one slot.

    No cross-slot checks happen here; ordering is validated on save.
    ``None`` marks the bound as unset.
    """
    return replace(template, slots=replace_slot_field(template.slots, index, field, value))


def replace_slot_field(
    slots: Tuple[TimeSlot, ...],
    index: int,
    field: str,
    value: str | None,
) -> Tuple[TimeSlot, ...]:
    if field not in SLOT_FIELDS:
        raise ValueError(f"Slot field must be one of {SLOT_FIELDS}, got {field!r}")
    check_slot_index(slots, index)
    updated = replace(slots[index], **{field: value or ""})
    return slots[:index] + (updated,) + slots[index + 1:]


def check_slot_index(slots: Sequence[TimeSlot], index: int) -> None:
    if not 0 <= index < len(slots):
        raise IndexError(f"Slot index {index} out of range for {len(slots)} slot(s)")
