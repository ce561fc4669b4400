"""
Schedule repository backed by the availability-schedules HTTP API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

import requests
from pydantic import ValidationError as SchemaError

from ..domain.exceptions import (
    ConflictError,
    FieldError,
    NotFoundError,
    RepositoryError,
    ValidationError,
)
from ..domain.models import AvailabilitySchedule
from ..services.repository import (
    ListParams,
    ScheduleInput,
    ScheduleListResult,
    SchedulePatch,
)
from .wire import (
    CreateScheduleSchema,
    ScheduleListSchema,
    ScheduleSchema,
    UpdateScheduleSchema,
)

logger = logging.getLogger(__name__)


class HttpScheduleRepository:
    """
    Client for the ``/api/availability-schedules`` endpoints.

    The server scopes every call to the owner behind the bearer token, so
    ``owner_id`` arguments are only used for logging. Calls run in a worker
    thread, one request per operation, with no retries.
    """

    RESOURCE = "/api/availability-schedules"
    PAGE_SIZE = 100

    def __init__(
        self,
        base_url: str,
        access_token: str | None = None,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {"Content-Type": "application/json"}
        if access_token:
            self.headers["Authorization"] = f"Bearer {access_token}"

    async def list(self, owner_id: str) -> List[AvailabilitySchedule]:
        schedules: List[AvailabilitySchedule] = []
        page = 1

        while True:
            result = await self.list_page(owner_id, ListParams(page=page, per_page=self.PAGE_SIZE))
            schedules.extend(result.schedules)
            if not result.schedules or len(schedules) >= result.total:
                return schedules
            page += 1

    async def list_page(self, owner_id: str, params: ListParams) -> ScheduleListResult:
        query = self._build_query(params)
        logger.debug("Listing schedules for %s with %s", owner_id, query)
        data = await self._call("GET", self.RESOURCE, params=query)
        return self._parse(ScheduleListSchema, data).to_domain()

    async def get(self, schedule_id: str) -> AvailabilitySchedule:
        data = await self._call("GET", f"{self.RESOURCE}/{schedule_id}", schedule_id=schedule_id)
        return self._parse(ScheduleSchema, data).to_domain()

    async def create(self, owner_id: str, data: ScheduleInput) -> AvailabilitySchedule:
        payload = CreateScheduleSchema.from_input(data).to_payload()
        response = await self._call("POST", self.RESOURCE, json=payload)
        schedule = self._parse(ScheduleSchema, response).to_domain()
        logger.info("Created schedule %s for owner %s", schedule.id, owner_id)
        return schedule

    async def update(self, schedule_id: str, patch: SchedulePatch) -> AvailabilitySchedule:
        payload = UpdateScheduleSchema.from_patch(patch).to_payload()
        response = await self._call(
            "PUT", f"{self.RESOURCE}/{schedule_id}", json=payload, schedule_id=schedule_id
        )
        logger.info("Updated schedule %s", schedule_id)
        return self._parse(ScheduleSchema, response).to_domain()

    async def delete(self, schedule_id: str) -> None:
        await self._call("DELETE", f"{self.RESOURCE}/{schedule_id}", schedule_id=schedule_id)
        logger.info("Deleted schedule %s", schedule_id)

    async def set_default(self, schedule_id: str) -> AvailabilitySchedule:
        response = await self._call(
            "PATCH", f"{self.RESOURCE}/{schedule_id}/set-default", schedule_id=schedule_id
        )
        logger.info("Schedule %s is now the default", schedule_id)
        return self._parse(ScheduleSchema, response).to_domain()

    async def duplicate(self, schedule_id: str, name: str | None = None) -> AvailabilitySchedule:
        response = await self._call(
            "POST", f"{self.RESOURCE}/{schedule_id}/duplicate", schedule_id=schedule_id
        )
        copied = self._parse(ScheduleSchema, response).to_domain()

        # The endpoint picks its own name; a caller-supplied one is applied afterwards.
        if name and name.strip() and name.strip() != copied.name:
            copied = await self.update(copied.id, SchedulePatch(name=name.strip()))

        logger.info("Duplicated schedule %s as %s", schedule_id, copied.id)
        return copied

    async def _call(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any] | None:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    def _request(
        self,
        method: str,
        path: str,
        schedule_id: str | None = None,
        **kwargs: Any,
    ) -> Dict[str, Any] | None:
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            raise RepositoryError(f"Failed to reach schedule API: {e}") from e

        data = self._decode(response)

        if response.ok:
            return data

        message = (data or {}).get("message") or f"HTTP {response.status_code}"
        logger.warning("%s %s failed: %s %s", method, path, response.status_code, message)

        if response.status_code == 401:
            raise RepositoryError("Session expired")
        if response.status_code == 404:
            raise NotFoundError(schedule_id or path)
        if response.status_code == 409 or method == "DELETE":
            lowered = message.lower()
            if "default" in lowered:
                raise ConflictError(ConflictError.DEFAULT)
            if "in use" in lowered:
                raise ConflictError(ConflictError.IN_USE)
            if response.status_code == 409:
                raise ConflictError("conflict", message)
        if response.status_code in (400, 422):
            raise ValidationError(self._field_errors(data, message))

        raise RepositoryError(message)

    @staticmethod
    def _decode(response: requests.Response) -> Dict[str, Any] | None:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _field_errors(data: Dict[str, Any] | None, message: str) -> List[FieldError]:
        """Flatten ``{"errors": {"field": ["msg", ...]}}`` into field errors."""
        errors = (data or {}).get("errors") or {}
        field_errors = [
            FieldError(field, text)
            for field, messages in errors.items()
            for text in (messages if isinstance(messages, list) else [messages])
        ]
        return field_errors or [FieldError("schedule", message)]

    @staticmethod
    def _parse(schema, data):
        try:
            return schema.model_validate(data or {})
        except SchemaError as e:
            raise RepositoryError(f"Unexpected response from schedule API: {e}") from e

    @staticmethod
    def _build_query(params: ListParams) -> Dict[str, str]:
        query: Dict[str, str] = {}
        if params.page:
            query["page"] = str(params.page)
        if params.per_page:
            query["per_page"] = str(params.per_page)
        if params.search:
            query["search"] = params.search
        if params.sort_by:
            query["sort_by"] = params.sort_by
        if params.sort_direction:
            query["sort_direction"] = params.sort_direction
        return query
