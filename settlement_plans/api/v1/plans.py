"""GET /v1/plans/{plan_id}/schedule and GET /v1/status-options"""

import asyncio
import logging
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from settlement_plans.api.dependencies import get_plan_store_client, get_request_id
from settlement_plans.api.v1.schemas import PlanViewResponse, StatusOptionSchema, StatusOptionsResponse
from settlement_plans.domain.exceptions import DataFetchError
from settlement_plans.domain.view_model import build_plan_view_model, empty_plan_view_model
from settlement_plans.infrastructure.clients.plan_store import PlanStoreClient
from settlement_plans.infrastructure.observability.logging import log_plan_view
from settlement_plans.infrastructure.observability.metrics import plan_store_fetch_failures_counter, record_plan_view

router = APIRouter()


@router.get("/plans/{plan_id}/schedule", response_model=PlanViewResponse)
async def get_plan_schedule(
    plan_id: str,
    request: Request,
    selected: List[str] = Query(default=[], description="Schedule item ids to flag as selected"),
    plan_store: PlanStoreClient = Depends(get_plan_store_client),
):
    """
    Build the plan view: display rows, rollup table and summary.

    Flow:
    1. Fetch schedule and fee records concurrently
    2. Normalize, number, attach fees and aggregate
    3. Schedule unavailable → empty view, degraded=true
    4. Fees unavailable → view without fee rows, degraded=true
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        schedule, fee_map = await asyncio.gather(
            plan_store.fetch_schedule(plan_id),
            plan_store.fetch_fee_records(plan_id),
            return_exceptions=True,
        )

        for resource, result in (("schedule", schedule), ("fees", fee_map)):
            if isinstance(result, DataFetchError):
                plan_store_fetch_failures_counter.labels(resource=resource).inc()
                logging.error(f"Plan store error: {result}", extra={"request_id": request_id, "plan_id": plan_id})
            elif isinstance(result, BaseException):
                raise result

        degraded = isinstance(schedule, DataFetchError) or isinstance(fee_map, DataFetchError)
        if isinstance(schedule, DataFetchError):
            view = empty_plan_view_model()
        else:
            view = build_plan_view_model(
                schedule.schedule_items,
                fee_map={} if isinstance(fee_map, DataFetchError) else fee_map,
                rollups=schedule.rollups,
                plan_header=schedule.plan_header,
                selected_ids=set(selected),
            )

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "plan_id": plan_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_plan_view(degraded)
    log_plan_view(request_id, plan_id, len(view.rows), degraded, duration_ms)

    return PlanViewResponse.from_view_model(plan_id, view, degraded=degraded)


@router.get("/status-options", response_model=StatusOptionsResponse)
async def get_status_options(plan_store: PlanStoreClient = Depends(get_plan_store_client)):
    """Schedule item statuses; the built-in four when the plan store is unavailable"""
    options = await plan_store.fetch_status_options()
    return StatusOptionsResponse(options=[StatusOptionSchema.from_option(opt) for opt in options])
