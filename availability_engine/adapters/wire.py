"""
JSON wire shapes of the schedule API, validated with pydantic.

Field names follow the API's camelCase; Python attributes stay snake_case.
"""

from typing import List, Optional

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.clock import is_wall_clock
from ..domain.models import (
    AvailabilitySchedule,
    DateOverride,
    DayTemplate,
    OverrideType,
    TimeSlot,
    Weekday,
    default_weekly_template,
    normalize_week,
    parse_calendar_date,
)
from ..services.repository import ScheduleInput, ScheduleListResult, SchedulePatch


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self) -> dict:
        """JSON-ready dict using API field names, without unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TimeSlotSchema(WireModel):
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_wall_clock(cls, value: str) -> str:
        """Stored times are 24-hour HH:MM."""
        if not is_wall_clock(value):
            raise ValueError(f"Time must be HH:MM, got {value!r}")
        return value

    @classmethod
    def from_domain(cls, slot: TimeSlot) -> "TimeSlotSchema":
        return cls(start=slot.start, end=slot.end)

    def to_domain(self) -> TimeSlot:
        return TimeSlot(start=self.start, end=self.end)


class DayScheduleSchema(WireModel):
    day: Weekday
    enabled: bool = False
    slots: List[TimeSlotSchema] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, template: DayTemplate) -> "DayScheduleSchema":
        return cls(
            day=template.day,
            enabled=template.enabled,
            slots=[TimeSlotSchema.from_domain(slot) for slot in template.slots],
        )

    def to_domain(self) -> DayTemplate:
        return DayTemplate(
            day=self.day,
            enabled=self.enabled,
            slots=tuple(slot.to_domain() for slot in self.slots),
        )


class DateOverrideSchema(WireModel):
    date: str
    type: OverrideType
    slots: Optional[List[TimeSlotSchema]] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return parse_calendar_date(value).isoformat()

    @classmethod
    def from_domain(cls, override: DateOverride) -> "DateOverrideSchema":
        slots = None
        if override.is_available:
            slots = [TimeSlotSchema.from_domain(slot) for slot in override.slots]
        return cls(date=override.date, type=override.type, slots=slots)

    def to_domain(self) -> DateOverride:
        slots = tuple(slot.to_domain() for slot in self.slots or [])
        if self.type is OverrideType.UNAVAILABLE:
            slots = ()
        return DateOverride(date=self.date, type=self.type, slots=slots)


class ScheduleSchema(WireModel):
    id: str
    user_id: str = Field(default="", alias="userId")
    name: str
    is_default: bool = Field(default=False, alias="isDefault")
    timezone: str
    schedule: List[DayScheduleSchema] = Field(default_factory=list)
    date_overrides: List[DateOverrideSchema] = Field(default_factory=list, alias="dateOverrides")
    event_type_count: int = Field(default=0, alias="eventTypeCount")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_domain(cls, schedule: AvailabilitySchedule) -> "ScheduleSchema":
        return cls(
            id=schedule.id,
            user_id=schedule.owner_id,
            name=schedule.name,
            is_default=schedule.is_default,
            timezone=schedule.timezone,
            schedule=[DayScheduleSchema.from_domain(day) for day in schedule.weekly],
            date_overrides=[DateOverrideSchema.from_domain(o) for o in schedule.overrides],
            event_type_count=schedule.event_type_count,
            created_at=_format_timestamp(schedule.created_at),
            updated_at=_format_timestamp(schedule.updated_at),
        )

    def to_domain(self) -> AvailabilitySchedule:
        # The API does not promise Sunday-first order.
        return AvailabilitySchedule(
            id=self.id,
            owner_id=self.user_id,
            name=self.name,
            timezone=self.timezone,
            is_default=self.is_default,
            weekly=normalize_week(day.to_domain() for day in self.schedule),
            overrides=tuple(
                sorted((o.to_domain() for o in self.date_overrides), key=lambda o: o.date)
            ),
            event_type_count=self.event_type_count,
            created_at=_parse_timestamp(self.created_at),
            updated_at=_parse_timestamp(self.updated_at),
        )


class ScheduleListSchema(WireModel):
    schedules: List[ScheduleSchema] = Field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0

    def to_domain(self) -> ScheduleListResult:
        return ScheduleListResult(
            schedules=[schedule.to_domain() for schedule in self.schedules],
            total=self.total,
            limit=self.limit,
            offset=self.offset,
        )


class CreateScheduleSchema(WireModel):
    name: str
    timezone: str
    schedule: List[DayScheduleSchema]
    date_overrides: Optional[List[DateOverrideSchema]] = Field(default=None, alias="dateOverrides")
    is_default: Optional[bool] = Field(default=None, alias="isDefault")

    @classmethod
    def from_input(cls, data: ScheduleInput) -> "CreateScheduleSchema":
        if data.weekly is not None:
            weekly = normalize_week(data.weekly)
        else:
            weekly = default_weekly_template()
        return cls(
            name=data.name,
            timezone=data.timezone,
            schedule=[DayScheduleSchema.from_domain(day) for day in weekly],
            date_overrides=[DateOverrideSchema.from_domain(o) for o in data.overrides],
            is_default=data.is_default or None,
        )


class UpdateScheduleSchema(WireModel):
    name: Optional[str] = None
    timezone: Optional[str] = None
    schedule: Optional[List[DayScheduleSchema]] = None
    date_overrides: Optional[List[DateOverrideSchema]] = Field(default=None, alias="dateOverrides")
    is_default: Optional[bool] = Field(default=None, alias="isDefault")

    @classmethod
    def from_patch(cls, patch: SchedulePatch) -> "UpdateScheduleSchema":
        return cls(
            name=patch.name,
            timezone=patch.timezone,
            schedule=(
                [DayScheduleSchema.from_domain(day) for day in normalize_week(patch.weekly)]
                if patch.weekly is not None
                else None
            ),
            date_overrides=(
                [DateOverrideSchema.from_domain(o) for o in patch.overrides]
                if patch.overrides is not None
                else None
            ),
            is_default=patch.is_default,
        )


def _parse_timestamp(value: str | None):
    return pendulum.parse(value) if value else None


def _format_timestamp(value) -> str | None:
    return value.to_iso8601_string() if value is not None else None
