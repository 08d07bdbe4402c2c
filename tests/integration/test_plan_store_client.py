"""Integration tests for the plan store client against a stubbed transport"""

import httpx
import pytest
from decimal import Decimal
from settlement_plans.domain.exceptions import DataFetchError
from settlement_plans.domain.models import FeeDimension, RollupCategory
from settlement_plans.infrastructure.clients.plan_store import DEFAULT_STATUS_OPTIONS, PlanStoreClient

BASE_URL = "http://plan-store.test"


def client_for(handler) -> PlanStoreClient:
    return PlanStoreClient(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


async def test_fetch_schedule():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/plans/plan-1/schedule"
        return httpx.Response(
            200,
            json={
                "plan": {"id": "plan-1", "name": "Plan A"},
                "schedule_items": [{"id": "si-1", "draftAmount": 150}],
                "rollups": {"total_draft_amount": "150.00", "total_row_count": 1},
            },
        )

    schedule = await client_for(handler).fetch_schedule("plan-1")

    assert schedule.plan_header["name"] == "Plan A"
    assert schedule.schedule_items == [{"id": "si-1", "draftAmount": 150}]
    assert schedule.rollups.value_for(RollupCategory.ALL, FeeDimension.DRAFT_AMOUNT) == Decimal("150.00")
    assert schedule.rollups.row_count_for(RollupCategory.ALL) == 1


async def test_fetch_schedule_without_plan_is_empty():
    schedule = await client_for(lambda request: httpx.Response(200, json={"plan": None})).fetch_schedule("plan-x")

    assert schedule.plan_header == {}
    assert schedule.schedule_items == []
    assert schedule.rollups is None


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, json={"detail": "down"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"plan": {"id": "p"}, "schedule_items": {"not": "a list"}}),
        httpx.Response(200, json=["unexpected"]),
    ],
)
async def test_fetch_schedule_failures_raise_data_fetch_error(response: httpx.Response):
    with pytest.raises(DataFetchError):
        await client_for(lambda request: response).fetch_schedule("plan-1")


async def test_timeout_raises_data_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(DataFetchError, match="timeout"):
        await client_for(handler).fetch_schedule("plan-1")


async def test_fetch_fee_records():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/plans/plan-1/fees"
        return httpx.Response(200, json={"fees": {"si-1": [{"id": "wf-1", "amount": 75, "fee_type": "Wire"}]}})

    fee_map = await client_for(handler).fetch_fee_records("plan-1")

    assert list(fee_map) == ["si-1"]
    assert fee_map["si-1"][0].amount == Decimal("75")


async def test_fetch_fee_records_empty_is_success():
    fee_map = await client_for(lambda request: httpx.Response(200, json={"fees": {}})).fetch_fee_records("plan-1")
    assert fee_map == {}


async def test_fetch_fee_records_missing_id_raises():
    response = httpx.Response(200, json={"fees": {"si-1": [{"amount": 5}]}})
    with pytest.raises(DataFetchError):
        await client_for(lambda request: response).fetch_fee_records("plan-1")


async def test_fetch_status_options():
    response = httpx.Response(200, json={"options": [{"label": "Scheduled", "value": "Scheduled"}]})

    options = await client_for(lambda request: response).fetch_status_options()

    assert [opt.value for opt in options] == ["Scheduled"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500),
        httpx.Response(200, json={"options": []}),
        httpx.Response(200, json={"options": [{"label": "no value"}]}),
    ],
)
async def test_status_options_fall_back_to_defaults(response: httpx.Response):
    options = await client_for(lambda request: response).fetch_status_options()

    assert [opt.value for opt in options] == ["Scheduled", "Cleared", "NSF", "Cancelled"]
    assert options == DEFAULT_STATUS_OPTIONS
