"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from settlement_plans.domain.models import (
    CategoryTotals,
    PlanSummary,
    PlanViewModel,
    ScheduleRow,
    StatusOption,
    WireFeeRow,
)
from settlement_plans.domain.segments import SegmentIssue
from settlement_plans.utils.formatting import format_currency, format_date


class ScheduleRowSchema(BaseModel):
    """Schedule item row in the display sequence"""

    unique_key: str
    is_wire_fee: Literal[False] = False
    id: Optional[str] = None
    temp_id: str
    row_number: int
    draft_number: str
    calculated_draft_number: Union[int, str]
    has_draft_number: bool
    is_selected: bool = False
    payment_date: Optional[date] = None
    payment_date_display: str
    draft_amount: Decimal
    draft_amount_formatted: str
    draft_amount_class: str
    setup_fee: Decimal
    setup_fee_formatted: str
    setup_fee_class: str
    program_fee: Decimal
    program_fee_formatted: str
    program_fee_class: str
    banking_fee: Decimal
    banking_fee_formatted: str
    banking_fee_class: str
    savings_balance: Decimal
    savings_balance_formatted: str
    savings_class: str
    status: str
    status_badge_class: str
    row_class: str
    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_row(cls, row: ScheduleRow) -> "ScheduleRowSchema":
        item = row.item
        return cls(
            unique_key=row.unique_key,
            id=item.id,
            temp_id=item.temp_id,
            row_number=item.row_number,
            draft_number=item.draft_number,
            calculated_draft_number=row.calculated_draft_number,
            has_draft_number=row.has_draft_number,
            is_selected=row.is_selected,
            payment_date=item.payment_date,
            payment_date_display=item.payment_date_display,
            draft_amount=item.draft_amount,
            draft_amount_formatted=item.draft_amount_formatted,
            draft_amount_class=item.draft_amount_class,
            setup_fee=item.setup_fee,
            setup_fee_formatted=item.setup_fee_formatted,
            setup_fee_class=item.setup_fee_class,
            program_fee=item.program_fee,
            program_fee_formatted=item.program_fee_formatted,
            program_fee_class=item.program_fee_class,
            banking_fee=item.banking_fee,
            banking_fee_formatted=item.banking_fee_formatted,
            banking_fee_class=item.banking_fee_class,
            savings_balance=item.savings_balance,
            savings_balance_formatted=item.savings_balance_formatted,
            savings_class=item.savings_class,
            status=item.status,
            status_badge_class=item.status_badge_class,
            row_class=item.row_class,
            extra=item.extra,
        )


class WireFeeRowSchema(BaseModel):
    """Fee row nested under its schedule item"""

    unique_key: str
    is_wire_fee: Literal[True] = True
    id: str
    parent_schedule_item_id: str
    fee_type: str
    amount: Decimal
    amount_formatted: str
    wire_row_class: str

    @classmethod
    def from_row(cls, row: WireFeeRow) -> "WireFeeRowSchema":
        return cls(
            unique_key=row.unique_key,
            id=row.fee.id,
            parent_schedule_item_id=row.fee.parent_schedule_item_id,
            fee_type=row.fee.fee_type,
            amount=row.fee.amount,
            amount_formatted=row.amount_formatted,
            wire_row_class=row.wire_row_class,
        )


class CategoryTotalsSchema(BaseModel):
    """Totals for one status category"""

    draft_amount: Decimal
    setup_fee: Decimal
    program_fee: Decimal
    banking_fee: Decimal
    savings_balance: Decimal
    row_count: int
    formatted: Dict[str, str]

    @classmethod
    def from_totals(cls, totals: CategoryTotals) -> "CategoryTotalsSchema":
        amounts = {
            "draft_amount": totals.draft_amount,
            "setup_fee": totals.setup_fee,
            "program_fee": totals.program_fee,
            "banking_fee": totals.banking_fee,
            "savings_balance": totals.savings_balance,
        }
        return cls(
            row_count=totals.row_count,
            formatted={name: format_currency(value) for name, value in amounts.items()},
            **amounts,
        )


class PlanSummarySchema(BaseModel):
    item_count: int
    program_length: int
    first_payment_date: Optional[date] = None
    first_payment_date_display: str
    last_payment_date: Optional[date] = None
    last_payment_date_display: str
    new_weekly_payment: Decimal
    total_wire_fees: Decimal
    total_wires_received: Decimal

    @classmethod
    def from_summary(cls, summary: PlanSummary) -> "PlanSummarySchema":
        return cls(
            item_count=summary.item_count,
            program_length=summary.program_length,
            first_payment_date=summary.first_payment_date,
            first_payment_date_display=format_date(summary.first_payment_date),
            last_payment_date=summary.last_payment_date,
            last_payment_date_display=format_date(summary.last_payment_date),
            new_weekly_payment=summary.new_weekly_payment,
            total_wire_fees=summary.total_wire_fees,
            total_wires_received=summary.total_wires_received,
        )


class PlanViewResponse(BaseModel):
    """Response for GET /v1/plans/{plan_id}/schedule"""

    plan_id: str
    degraded: bool = False
    plan_header: Dict[str, Any]
    rows: List[Union[ScheduleRowSchema, WireFeeRowSchema]]
    rollups: Dict[str, CategoryTotalsSchema]
    summary: PlanSummarySchema

    @classmethod
    def from_view_model(cls, plan_id: str, view: PlanViewModel, degraded: bool = False) -> "PlanViewResponse":
        return cls(
            plan_id=plan_id,
            degraded=degraded,
            plan_header=view.plan_header,
            rows=[
                WireFeeRowSchema.from_row(row) if row.is_wire_fee else ScheduleRowSchema.from_row(row)
                for row in view.rows
            ],
            rollups={
                category.value: CategoryTotalsSchema.from_totals(totals)
                for category, totals in view.rollups.totals.items()
            },
            summary=PlanSummarySchema.from_summary(view.summary),
        )


class StatusOptionSchema(BaseModel):
    label: str
    value: str

    @classmethod
    def from_option(cls, option: StatusOption) -> "StatusOptionSchema":
        return cls(label=option.label, value=option.value)


class StatusOptionsResponse(BaseModel):
    """Response for GET /v1/status-options"""

    options: List[StatusOptionSchema]


class SegmentSchema(BaseModel):
    """Serialized segment as emitted by change notifications"""

    order: int
    type: str
    amount: Optional[Decimal] = None
    count: Optional[int] = None
    frequency: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class SegmentIssueSchema(BaseModel):
    index: Optional[int] = None
    field: str
    message: str

    @classmethod
    def from_issue(cls, issue: SegmentIssue) -> "SegmentIssueSchema":
        return cls(index=issue.index, field=issue.field, message=issue.message)


class SegmentEditRequest(BaseModel):
    """Request body for POST /v1/segments/edit"""

    segments: List[Dict[str, Any]] = Field(default_factory=list, description="Current segment list")
    action: Literal["set", "add", "update", "delete", "move_up", "move_down"]
    index: Optional[int] = Field(None, description="Target segment for update/delete/move")
    field: Optional[str] = Field(None, description="Field to change for update")
    value: Any = None


class SegmentEditResponse(BaseModel):
    """Response for POST /v1/segments/edit"""

    segments: List[SegmentSchema]
    notifications: List[List[SegmentSchema]]
    issues: List[SegmentIssueSchema]
