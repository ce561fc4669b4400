"""
Copy one day's slots onto other days of the weekly template.
"""

from dataclasses import replace
from typing import Iterable, List

from .models import DayTemplate, WeeklyTemplate


def copy_candidates(source_index: int) -> List[int]:
    """Day indices offered as copy targets (every day but the source)."""
    return [index for index in range(7) if index != source_index]


def can_copy_from(template: DayTemplate) -> bool:
    """Only an enabled day with at least one slot can be copied."""
    return bool(template.active_slots())


def can_apply(target_indices: Iterable[int]) -> bool:
    """Applying with no target days selected is disabled."""
    return any(True for _ in target_indices)


def copy_to_days(
    weekly: WeeklyTemplate,
    source_index: int,
    target_indices: Iterable[int],
) -> WeeklyTemplate:
    """
    Overwrite each target day with a copy of the source day's slots.

    Targets are enabled regardless of their previous state and their old
    slots are discarded, not merged. The source day is never a target. An
    empty selection, or a source that is disabled or has no slots, returns
    the template unchanged.
    """
    if not 0 <= source_index < len(weekly):
        raise IndexError(f"Source day index {source_index} out of range")

    targets = {index for index in target_indices if index != source_index}
    invalid = sorted(index for index in targets if not 0 <= index < len(weekly))
    if invalid:
        raise IndexError(f"Target day index out of range: {invalid}")

    source_slots = weekly[source_index].active_slots()
    if not targets or not source_slots:
        return weekly

    return tuple(
        replace(
            template,
            enabled=True,
            slots=tuple(replace(slot) for slot in source_slots),
        )
        if index in targets
        else template
        for index, template in enumerate(weekly)
    )
