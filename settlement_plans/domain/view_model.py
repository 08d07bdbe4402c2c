"""Plan view model - runs the schedule pipeline end to end"""

from typing import AbstractSet, Any, Dict, Iterable, List, Mapping, Optional, Sequence

from settlement_plans.domain.fees import merge_fee_rows
from settlement_plans.domain.models import FeeRecord, PlanRollups, PlanSummary, PlanViewModel, ScheduleItem
from settlement_plans.domain.rollups import aggregate_rollups
from settlement_plans.domain.schedule import process_schedule_items
from settlement_plans.domain.sequencing import assign_draft_numbers, sort_by_payment_date
from settlement_plans.utils.money import ZERO, to_decimal


def summarize(items: Sequence[ScheduleItem], fee_map: Mapping[str, Sequence[FeeRecord]]) -> PlanSummary:
    """
    Summary scalars for the plan header.

    new_weekly_payment is the first draft without its setup fee, since setup
    fees only ride along on the opening drafts.
    """
    if not items:
        return PlanSummary()

    ordered = sort_by_payment_date(items)
    dated = [item.payment_date for item in ordered if item.payment_date is not None]
    first = items[0]
    item_ids = {item.id for item in items if item.id is not None}

    return PlanSummary(
        item_count=sum(1 for item in items if not item.extra.get("isDeleted")),
        program_length=len(items),
        first_payment_date=dated[0] if dated else None,
        last_payment_date=dated[-1] if dated else None,
        new_weekly_payment=max(ZERO, first.draft_amount - first.setup_fee),
        total_wire_fees=sum(
            (fee.amount for item_id, fees in fee_map.items() if item_id in item_ids for fee in fees),
            ZERO,
        ),
        total_wires_received=sum((to_decimal(item.extra.get("wiresReceived")) or ZERO for item in items), ZERO),
    )


def build_plan_view_model(
    raw_items: Optional[Iterable[Mapping[str, Any]]],
    fee_map: Optional[Mapping[str, Sequence[FeeRecord]]] = None,
    rollups: Optional[PlanRollups] = None,
    plan_header: Optional[Dict[str, Any]] = None,
    selected_ids: Optional[AbstractSet[str]] = None,
) -> PlanViewModel:
    """
    Process → sequence → attach fees → aggregate.

    Safe to call on every refresh; nothing is mutated and the same input
    always produces the same view model.
    """
    fee_map = fee_map or {}
    items: List[ScheduleItem] = process_schedule_items(raw_items)

    return PlanViewModel(
        plan_header=dict(plan_header or {}),
        rows=merge_fee_rows(assign_draft_numbers(items), fee_map, selected_ids),
        rollups=aggregate_rollups(items, rollups),
        summary=summarize(items, fee_map),
    )


def empty_plan_view_model(plan_header: Optional[Dict[str, Any]] = None) -> PlanViewModel:
    """Deterministic no-data state: no rows, zero aggregates"""
    return PlanViewModel(plan_header=dict(plan_header or {}))
