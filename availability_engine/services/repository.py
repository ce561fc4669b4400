"""
Schedule repository contract and the in-memory store.

Every repository operation is asynchronous and last-write-wins: no version
token is exchanged, so two editors saving the same schedule silently
overwrite each other. Failures are not retried; they surface to the caller.
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Protocol, Tuple

import pendulum

from ..domain.exceptions import ConflictError, FieldError, NotFoundError, ValidationError
from ..domain.models import (
    AvailabilitySchedule,
    DateOverride,
    ScheduleDraft,
    WeeklyTemplate,
    default_weekly_template,
    normalize_week,
)
from ..domain.overrides import finalize_override, sort_overrides
from ..domain.validation import validate_draft

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = ("name", "created_at", "updated_at")


@dataclass(frozen=True)
class ScheduleInput:
    """Data for creating a schedule. A missing template means Mon-Fri 09:00-17:00."""
    name: str
    timezone: str
    weekly: WeeklyTemplate | None = None
    overrides: Tuple[DateOverride, ...] = ()
    is_default: bool = False


@dataclass(frozen=True)
class SchedulePatch:
    """Partial update; ``None`` leaves a field untouched."""
    name: str | None = None
    timezone: str | None = None
    weekly: WeeklyTemplate | None = None
    overrides: Tuple[DateOverride, ...] | None = None
    is_default: bool | None = None


@dataclass(frozen=True)
class ListParams:
    page: int = 1
    per_page: int | None = None
    search: str | None = None
    sort_by: str | None = None
    sort_direction: str = "asc"


@dataclass
class ScheduleListResult:
    schedules: List[AvailabilitySchedule] = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0


class ScheduleRepository(Protocol):
    """Operations the engine needs from a schedule store."""

    async def list(self, owner_id: str) -> List[AvailabilitySchedule]:
        """Return all schedules of an owner."""

    async def list_page(self, owner_id: str, params: ListParams) -> ScheduleListResult:
        """Return one filtered, sorted page of an owner's schedules."""

    async def get(self, schedule_id: str) -> AvailabilitySchedule:
        """Return a schedule or raise ``NotFoundError``."""

    async def create(self, owner_id: str, data: ScheduleInput) -> AvailabilitySchedule:
        """Create a schedule; an owner's first schedule becomes the default."""

    async def update(self, schedule_id: str, patch: SchedulePatch) -> AvailabilitySchedule:
        """Apply a partial update or raise ``ValidationError``."""

    async def delete(self, schedule_id: str) -> None:
        """Delete a schedule or raise ``ConflictError``."""

    async def set_default(self, schedule_id: str) -> AvailabilitySchedule:
        """Make a schedule the owner's only default."""

    async def duplicate(self, schedule_id: str, name: str | None = None) -> AvailabilitySchedule:
        """Copy a schedule under a new id, never as default."""


def apply_list_params(
    schedules: Iterable[AvailabilitySchedule],
    params: ListParams,
) -> ScheduleListResult:
    """Search, sort and paginate schedules the way the list endpoint does."""
    items = list(schedules)

    if params.search:
        needle = params.search.lower()
        items = [schedule for schedule in items if needle in schedule.name.lower()]

    if params.sort_by:
        if params.sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"sort_by must be one of {SORTABLE_FIELDS}, got {params.sort_by!r}")
        items.sort(
            key=lambda schedule: _sort_key(schedule, params.sort_by),
            reverse=params.sort_direction == "desc",
        )

    total = len(items)
    limit = params.per_page or total
    offset = (max(params.page, 1) - 1) * limit if params.per_page else 0

    return ScheduleListResult(
        schedules=items[offset:offset + limit],
        total=total,
        limit=limit,
        offset=offset,
    )


def _sort_key(schedule: AvailabilitySchedule, sort_by: str):
    value = getattr(schedule, sort_by)
    if sort_by == "name":
        return value.lower()
    # Timestamps may be missing on data that never went through a store.
    return value or pendulum.from_timestamp(0)


def finalize_overrides(overrides: Iterable[DateOverride]) -> Tuple[DateOverride, ...]:
    return sort_overrides(finalize_override(override) for override in overrides)


class InMemoryScheduleRepository:
    """
    Repository keeping schedules in a dict, enforcing the same contracts as
    the remote store: one default per owner, guarded deletes, validation.
    """

    def __init__(self, schedules: Iterable[AvailabilitySchedule] = ()):
        self._schedules: Dict[str, AvailabilitySchedule] = {}
        for schedule in schedules:
            self._schedules[schedule.id] = schedule

    async def list(self, owner_id: str) -> List[AvailabilitySchedule]:
        return [s for s in self._schedules.values() if s.owner_id == owner_id]

    async def list_page(self, owner_id: str, params: ListParams) -> ScheduleListResult:
        return apply_list_params(await self.list(owner_id), params)

    async def get(self, schedule_id: str) -> AvailabilitySchedule:
        try:
            return self._schedules[schedule_id]
        except KeyError:
            raise NotFoundError(schedule_id) from None

    async def create(self, owner_id: str, data: ScheduleInput) -> AvailabilitySchedule:
        draft = ScheduleDraft(
            name=(data.name or "").strip(),
            timezone=data.timezone,
            is_default=data.is_default,
            weekly=normalize_week(data.weekly) if data.weekly is not None else default_weekly_template(),
            overrides=finalize_overrides(data.overrides),
        )
        self._raise_if_invalid(validate_draft(draft))

        owned = await self.list(owner_id)
        is_default = data.is_default or not owned
        now = pendulum.now("UTC")

        schedule = AvailabilitySchedule(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            name=draft.name,
            timezone=draft.timezone,
            is_default=is_default,
            weekly=draft.weekly,
            overrides=draft.overrides,
            event_type_count=0,
            created_at=now,
            updated_at=now,
        )

        if is_default:
            self._clear_default(owner_id, now)
        self._schedules[schedule.id] = schedule

        logger.info("Created schedule %s for owner %s (default=%s)", schedule.id, owner_id, is_default)
        return schedule

    async def update(self, schedule_id: str, patch: SchedulePatch) -> AvailabilitySchedule:
        existing = await self.get(schedule_id)

        draft = ScheduleDraft(
            name=patch.name.strip() if patch.name is not None else existing.name,
            timezone=patch.timezone if patch.timezone is not None else existing.timezone,
            is_default=existing.is_default,
            weekly=normalize_week(patch.weekly) if patch.weekly is not None else existing.weekly,
            overrides=(
                finalize_overrides(patch.overrides)
                if patch.overrides is not None
                else existing.overrides
            ),
        )

        errors = validate_draft(draft)
        if patch.is_default is False and existing.is_default:
            errors.append(FieldError(
                "isDefault",
                "The default schedule cannot be unset; make another schedule the default instead",
            ))
        self._raise_if_invalid(errors)

        now = pendulum.now("UTC")
        updated = replace(
            existing,
            name=draft.name,
            timezone=draft.timezone,
            weekly=draft.weekly,
            overrides=draft.overrides,
            updated_at=now,
        )
        self._schedules[schedule_id] = updated

        if patch.is_default and not existing.is_default:
            updated = await self.set_default(schedule_id)

        logger.info("Updated schedule %s", schedule_id)
        return updated

    async def delete(self, schedule_id: str) -> None:
        schedule = await self.get(schedule_id)

        if schedule.is_default:
            logger.warning("Refused to delete default schedule %s", schedule_id)
            raise ConflictError(ConflictError.DEFAULT)
        if schedule.event_type_count > 0:
            logger.warning(
                "Refused to delete schedule %s used by %d event type(s)",
                schedule_id,
                schedule.event_type_count,
            )
            raise ConflictError(ConflictError.IN_USE)

        del self._schedules[schedule_id]
        logger.info("Deleted schedule %s", schedule_id)

    async def set_default(self, schedule_id: str) -> AvailabilitySchedule:
        target = await self.get(schedule_id)
        if target.is_default:
            return target

        now = pendulum.now("UTC")
        self._clear_default(target.owner_id, now)
        promoted = replace(target, is_default=True, updated_at=now)
        self._schedules[schedule_id] = promoted

        logger.info("Schedule %s is now the default for owner %s", schedule_id, target.owner_id)
        return promoted

    async def duplicate(self, schedule_id: str, name: str | None = None) -> AvailabilitySchedule:
        source = await self.get(schedule_id)
        now = pendulum.now("UTC")

        copied = replace(
            source,
            id=uuid.uuid4().hex,
            name=name.strip() if name and name.strip() else f"{source.name} (copy)",
            is_default=False,
            weekly=copy.deepcopy(source.weekly),
            overrides=copy.deepcopy(source.overrides),
            event_type_count=0,
            created_at=now,
            updated_at=now,
        )
        self._schedules[copied.id] = copied

        logger.info("Duplicated schedule %s as %s", schedule_id, copied.id)
        return copied

    def attach_event_type(self, schedule_id: str) -> None:
        """Record that an event type now uses this schedule."""
        schedule = self._require(schedule_id)
        self._schedules[schedule_id] = replace(schedule, event_type_count=schedule.event_type_count + 1)

    def detach_event_type(self, schedule_id: str) -> None:
        schedule = self._require(schedule_id)
        count = max(schedule.event_type_count - 1, 0)
        self._schedules[schedule_id] = replace(schedule, event_type_count=count)

    def _require(self, schedule_id: str) -> AvailabilitySchedule:
        if schedule_id not in self._schedules:
            raise NotFoundError(schedule_id)
        return self._schedules[schedule_id]

    def _clear_default(self, owner_id: str, now) -> None:
        for schedule_id, schedule in list(self._schedules.items()):
            if schedule.owner_id == owner_id and schedule.is_default:
                self._schedules[schedule_id] = replace(schedule, is_default=False, updated_at=now)

    @staticmethod
    def _raise_if_invalid(errors: List[FieldError]) -> None:
        if errors:
            logger.warning("Rejected schedule: %s", "; ".join(str(error) for error in errors))
            raise ValidationError(errors)
