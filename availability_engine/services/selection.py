"""
Schedule lookup for consumers outside the editor, such as event types.
"""

from datetime import date as Date
from typing import Sequence

from ..domain.exceptions import NotFoundError
from ..domain.models import AvailabilitySchedule
from ..domain.overrides import ResolvedDay, resolve_availability


def select_schedule(
    schedules: Sequence[AvailabilitySchedule],
    schedule_id: str | None = None,
) -> AvailabilitySchedule | None:
    """
    Return the explicitly selected schedule, else the owner's default.

    Raises:
        NotFoundError: If ``schedule_id`` is given but not among ``schedules``
    """
    if schedule_id:
        for schedule in schedules:
            if schedule.id == schedule_id:
                return schedule
        raise NotFoundError(schedule_id)

    for schedule in schedules:
        if schedule.is_default:
            return schedule
    return None


def hours_on(
    schedules: Sequence[AvailabilitySchedule],
    day: "str | Date",
    schedule_id: str | None = None,
) -> ResolvedDay | None:
    """What hours the selected schedule offers on ``day``."""
    schedule = select_schedule(schedules, schedule_id)
    if schedule is None:
        return None
    return resolve_availability(schedule, day)
