"""
Domain layer - Pure availability logic, no I/O.
"""

from .copy_days import copy_to_days
from .models import (
    AvailabilitySchedule,
    DateOverride,
    DayTemplate,
    OverrideType,
    ScheduleDraft,
    TimeSlot,
    Weekday,
)
from .overrides import resolve_availability, resolve_range
from .summarizer import ScheduleSummarizer, SummaryStyle, summarize

__all__ = [
    "AvailabilitySchedule",
    "DateOverride",
    "DayTemplate",
    "OverrideType",
    "ScheduleDraft",
    "ScheduleSummarizer",
    "SummaryStyle",
    "TimeSlot",
    "Weekday",
    "copy_to_days",
    "resolve_availability",
    "resolve_range",
    "summarize",
]
