"""
Human-readable summaries of a weekly template.

Two styles share one grouping pass:

- ``COMPACT`` for the editor header: ``"Mon - Fri, 9:00am - 5:00pm"``
- ``GROUPED`` for the schedule list: ``"Mon - Fri: 9:00am - 5:00pm | Sat: 10:00am - 2:00pm"``
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence

from .clock import format_range, is_wall_clock
from .models import WEEKDAYS, WEEKEND, DayTemplate

NO_AVAILABILITY = "No availability set"
MAX_TIME_RANGES = 2

WORKWEEK = frozenset(WEEKDAYS) - WEEKEND


class SummaryStyle(Enum):
    COMPACT = "compact"
    GROUPED = "grouped"


@dataclass
class DayGroup:
    """Enabled days sharing an identical ordered slot list."""
    signature: str
    days: List[DayTemplate]


class ScheduleSummarizer:
    """
    Compresses a seven-day template into a short string.

    Algorithm:
    1. Keep enabled days; none left means "No availability set"
    2. Group days by their exact slot signature
    3. Label the days: "Every day", "Mon - Fri", "Weekends" or abbreviations
    4. Label the times: first two distinct ranges, "..." when more exist
    """

    def __init__(self, style: SummaryStyle = SummaryStyle.COMPACT):
        self.style = style

    def summarize(self, weekly: Sequence[DayTemplate]) -> str:
        enabled = [template for template in weekly if template.enabled]
        if not enabled:
            return NO_AVAILABILITY

        if self.style is SummaryStyle.GROUPED:
            parts = [
                self._join(self.day_label(group.days), self.time_label(group.days), ": ")
                for group in self.group_days(enabled)
            ]
            return " | ".join(parts)

        return self._join(self.day_label(enabled), self.time_label(enabled), ", ")

    @staticmethod
    def group_days(enabled: Sequence[DayTemplate]) -> List[DayGroup]:
        """Group days by signature, in order of each group's first day."""
        groups: Dict[str, DayGroup] = {}
        for template in enabled:
            signature = template.signature()
            if signature not in groups:
                groups[signature] = DayGroup(signature=signature, days=[])
            groups[signature].days.append(template)
        return list(groups.values())

    @staticmethod
    def day_label(days: Sequence[DayTemplate]) -> str:
        weekdays = {template.day for template in days}

        if len(days) == 7 and weekdays == set(WEEKDAYS):
            return "Every day"
        if weekdays == WORKWEEK and len(days) == 5:
            return "Mon - Fri"
        if weekdays == WEEKEND and len(days) == 2:
            return "Weekends"

        ordered = sorted(days, key=lambda template: template.day.index)
        return ", ".join(template.day.abbreviation for template in ordered)

    @staticmethod
    def time_label(days: Sequence[DayTemplate]) -> str:
        ranges: List[str] = []
        for template in days:
            for slot in template.slots:
                if not (is_wall_clock(slot.start) and is_wall_clock(slot.end)):
                    continue
                label = format_range(slot.start, slot.end)
                if label not in ranges:
                    ranges.append(label)

        label = ", ".join(ranges[:MAX_TIME_RANGES])
        if len(ranges) > MAX_TIME_RANGES:
            label += "..."
        return label

    @staticmethod
    def _join(day_label: str, time_label: str, separator: str) -> str:
        # An enabled day with no slots has nothing to show after the days.
        if not time_label:
            return day_label
        return f"{day_label}{separator}{time_label}"


def summarize(weekly: Sequence[DayTemplate], style: SummaryStyle = SummaryStyle.COMPACT) -> str:
    """Convenience wrapper around ``ScheduleSummarizer``."""
    return ScheduleSummarizer(style).summarize(weekly)
