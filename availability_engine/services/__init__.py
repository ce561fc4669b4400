"""
Service layer helpers that orchestrate the repository and domain logic.
"""

from .editor import EditorSession, EditorState
from .repository import (
    InMemoryScheduleRepository,
    ListParams,
    ScheduleInput,
    ScheduleListResult,
    SchedulePatch,
    ScheduleRepository,
)
from .selection import hours_on, select_schedule

__all__ = [
    "EditorSession",
    "EditorState",
    "InMemoryScheduleRepository",
    "ListParams",
    "ScheduleInput",
    "ScheduleListResult",
    "SchedulePatch",
    "ScheduleRepository",
    "hours_on",
    "select_schedule",
]
