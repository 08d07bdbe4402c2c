"""Plan store HTTP client for schedules, fee records and status options"""

import logging
from typing import Any, Dict, List

import httpx

from settlement_plans.config import settings
from settlement_plans.domain.exceptions import DataFetchError
from settlement_plans.domain.fees import parse_fee_map
from settlement_plans.domain.models import FeeRecord, PaymentStatus, PlanSchedule, StatusOption
from settlement_plans.domain.rollups import parse_plan_rollups
from settlement_plans.infrastructure.observability.metrics import plan_store_fetch_failures_counter

logger = logging.getLogger(__name__)

DEFAULT_STATUS_OPTIONS = [StatusOption(label=status.value, value=status.value) for status in PaymentStatus]


class PlanStoreClient:
    """Client for the external plan store API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.plan_store_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _get_json(self, path: str) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}{path}")
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise DataFetchError(f"Plan store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise DataFetchError(f"Plan store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise DataFetchError(f"Plan store unreachable: {e}") from e
            except ValueError as e:
                raise DataFetchError(f"Plan store returned invalid JSON: {e}") from e

    async def fetch_schedule(self, plan_id: str) -> PlanSchedule:
        """
        Fetch the plan header, raw schedule items and optional rollups.

        A response without a plan is an empty schedule, not an error.

        Raises:
            DataFetchError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get_json(f"/plans/{plan_id}/schedule")
        try:
            plan = data.get("plan")
            if not plan:
                return PlanSchedule(plan_header={}, schedule_items=[])

            items = data.get("schedule_items") or []
            if not isinstance(items, list):
                raise TypeError("schedule_items must be a list")

            return PlanSchedule(
                plan_header=dict(plan),
                schedule_items=items,
                rollups=parse_plan_rollups(data.get("rollups")),
            )
        except (AttributeError, KeyError, ValueError, TypeError) as e:
            raise DataFetchError(f"Invalid schedule data from plan store: {e}") from e

    async def fetch_fee_records(self, plan_id: str) -> Dict[str, List[FeeRecord]]:
        """
        Fetch fee records keyed by schedule item id; an empty mapping is success.

        Raises:
            DataFetchError: On timeout, HTTP errors, or invalid response
        """
        data = await self._get_json(f"/plans/{plan_id}/fees")
        try:
            return parse_fee_map(data.get("fees"))
        except (AttributeError, KeyError, ValueError, TypeError) as e:
            raise DataFetchError(f"Invalid fee data from plan store: {e}") from e

    async def fetch_status_options(self) -> List[StatusOption]:
        """Status picklist; falls back to the four built-in statuses on any failure"""
        try:
            data = await self._get_json("/schedule-items/statuses")
            options = [StatusOption(label=str(opt["label"]), value=str(opt["value"])) for opt in data.get("options", [])]
        except (DataFetchError, AttributeError, KeyError, TypeError) as e:
            plan_store_fetch_failures_counter.labels(resource="statuses").inc()
            logger.warning(f"Falling back to default status options: {e}")
            return list(DEFAULT_STATUS_OPTIONS)

        return options or list(DEFAULT_STATUS_OPTIONS)
