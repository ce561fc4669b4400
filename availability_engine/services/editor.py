"""
Editor session: one user editing one schedule draft.

State machine::

    IDLE -> EDITING(draft) -> SAVING -> SAVED
                                     -> FAILED(draft, error) -> EDITING ...

Edits are pure transforms of an immutable draft, so a failed save leaves
the draft exactly as it was and the user can fix it and save again.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, Iterable, List

from ..domain import copy_days, day_template, overrides
from ..domain.clock import parse_display_or_none
from ..domain.exceptions import AvailabilityError, FieldError, ValidationError
from ..domain.models import (
    AvailabilitySchedule,
    DateOverride,
    ScheduleDraft,
    Weekday,
    default_weekly_template,
)
from ..domain.summarizer import SummaryStyle, summarize
from ..domain.validation import validate_draft
from .repository import ScheduleInput, SchedulePatch, ScheduleRepository, finalize_overrides

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_NAME = "Working Hours"
DEFAULT_TIMEZONE = "America/New_York"


class EditorState(Enum):
    IDLE = "idle"
    EDITING = "editing"
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"


class EditorSession:
    """
    Holds the draft for a single schedule and saves it through a repository.

    A session either edits an existing schedule (``open``) or a new one
    (``start_new``); saving calls ``update`` or ``create`` accordingly.
    """

    def __init__(self, repository: ScheduleRepository, owner_id: str):
        self._repository = repository
        self._owner_id = owner_id
        self.state = EditorState.IDLE
        self.draft: ScheduleDraft | None = None
        self.schedule: AvailabilitySchedule | None = None
        self.error: AvailabilityError | None = None

    @property
    def schedule_id(self) -> str | None:
        return self.schedule.id if self.schedule else None

    @property
    def field_errors(self) -> List[FieldError]:
        if isinstance(self.error, ValidationError):
            return self.error.errors
        return []

    def open(self, schedule: AvailabilitySchedule) -> ScheduleDraft:
        self.schedule = schedule
        return self._begin(ScheduleDraft.from_schedule(schedule))

    async def load(self, schedule_id: str) -> ScheduleDraft:
        """Fetch a schedule and start editing it. ``NotFoundError`` propagates."""
        return self.open(await self._repository.get(schedule_id))

    def start_new(
        self,
        name: str = DEFAULT_SCHEDULE_NAME,
        timezone: str = DEFAULT_TIMEZONE,
    ) -> ScheduleDraft:
        self.schedule = None
        return self._begin(
            ScheduleDraft(name=name, timezone=timezone, weekly=default_weekly_template())
        )

    def summary(self, style: SummaryStyle = SummaryStyle.COMPACT) -> str:
        """Header summary of the draft's weekly hours."""
        return summarize(self._require_draft().weekly, style)

    # Weekly template

    def toggle_day(self, day: Weekday, enabled: bool) -> ScheduleDraft:
        return self._edit_day(day, lambda t: day_template.toggle_day(t, enabled))

    def add_slot(self, day: Weekday) -> ScheduleDraft:
        return self._edit_day(day, day_template.add_slot)

    def remove_slot(self, day: Weekday, index: int) -> ScheduleDraft:
        return self._edit_day(day, lambda t: day_template.remove_slot(t, index))

    def set_slot_field(self, day: Weekday, index: int, field: str, value: str | None) -> ScheduleDraft:
        return self._edit_day(day, lambda t: day_template.set_slot_field(t, index, field, value))

    def set_slot_display(self, day: Weekday, index: int, field: str, text: str) -> ScheduleDraft:
        """Set a bound from 12-hour text; unparseable text leaves the bound unset."""
        return self.set_slot_field(day, index, field, parse_display_or_none(text))

    def copy_to_days(self, source: Weekday, targets: Iterable[Weekday]) -> ScheduleDraft:
        target_indices = [target.index for target in targets]
        draft = self._require_draft()
        if not copy_days.can_apply(target_indices):
            return draft
        if not copy_days.can_copy_from(draft.weekly[source.index]):
            return draft
        return self._apply(
            lambda d: replace(d, weekly=copy_days.copy_to_days(d.weekly, source.index, target_indices))
        )

    # Date overrides

    def add_override(self, override: DateOverride) -> ScheduleDraft:
        return self._apply(
            lambda d: replace(d, overrides=overrides.add_override(d.overrides, override))
        )

    def edit_override(self, original_date: str, override: DateOverride) -> ScheduleDraft:
        return self._apply(
            lambda d: replace(
                d, overrides=overrides.edit_override(d.overrides, original_date, override)
            )
        )

    def remove_override(self, date: str) -> ScheduleDraft:
        return self._apply(
            lambda d: replace(d, overrides=overrides.remove_override(d.overrides, date))
        )

    # Schedule fields

    def rename(self, name: str) -> ScheduleDraft:
        return self._apply(lambda d: replace(d, name=name))

    def set_timezone(self, timezone: str) -> ScheduleDraft:
        return self._apply(lambda d: replace(d, timezone=timezone))

    def validate(self) -> List[FieldError]:
        return validate_draft(self._require_draft())

    async def save(self) -> AvailabilitySchedule | None:
        """
        Validate and persist the draft.

        Returns the stored schedule, or ``None`` when the session ended up
        in ``FAILED``; ``error`` then holds the reason.
        """
        draft = self._require_draft()
        if self.state is EditorState.SAVING:
            raise RuntimeError("A save is already in progress")

        errors = validate_draft(draft)
        if errors:
            return self._fail(ValidationError(errors))

        self.state = EditorState.SAVING
        try:
            if self.schedule is None:
                saved = await self._repository.create(
                    self._owner_id,
                    ScheduleInput(
                        name=draft.name.strip(),
                        timezone=draft.timezone,
                        weekly=draft.weekly,
                        overrides=finalize_overrides(draft.overrides),
                        is_default=draft.is_default,
                    ),
                )
            else:
                saved = await self._repository.update(
                    self.schedule.id,
                    SchedulePatch(
                        name=draft.name.strip(),
                        timezone=draft.timezone,
                        weekly=draft.weekly,
                        overrides=finalize_overrides(draft.overrides),
                    ),
                )
        except AvailabilityError as exc:
            return self._fail(exc)

        self.schedule = saved
        self.draft = ScheduleDraft.from_schedule(saved)
        self.error = None
        self.state = EditorState.SAVED
        logger.info("Saved schedule %s", saved.id)
        return saved

    async def promote_default(self) -> ScheduleDraft:
        """
        Make the edited schedule the owner's default.

        Unsaved schedules only flag the draft; the flag is sent on create.
        """
        draft = self._require_draft()
        if draft.is_default:
            return draft

        if self.schedule is not None:
            self.schedule = await self._repository.set_default(self.schedule.id)

        self.draft = replace(draft, is_default=True)
        return self.draft

    def _begin(self, draft: ScheduleDraft) -> ScheduleDraft:
        self.draft = draft
        self.error = None
        self.state = EditorState.EDITING
        return draft

    def _require_draft(self) -> ScheduleDraft:
        if self.draft is None:
            raise RuntimeError("No schedule is being edited")
        return self.draft

    def _apply(self, transform: Callable[[ScheduleDraft], ScheduleDraft]) -> ScheduleDraft:
        draft = self._require_draft()
        if self.state is EditorState.SAVING:
            raise RuntimeError("Cannot edit while a save is in progress")

        # Transform first so a rejected edit leaves the draft untouched.
        updated = transform(draft)
        self.draft = updated
        self.error = None
        self.state = EditorState.EDITING
        return updated

    def _edit_day(self, day: Weekday, transform) -> ScheduleDraft:
        return self._apply(lambda d: d.with_day(transform(d.weekly[day.index])))

    def _fail(self, error: AvailabilityError) -> None:
        self.error = error
        self.state = EditorState.FAILED
        logger.warning("Saving schedule %s failed: %s", self.schedule_id or "<new>", error)
        return None
