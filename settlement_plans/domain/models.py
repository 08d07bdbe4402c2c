"""Domain models - pure Python dataclasses representing payment plan entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from settlement_plans.utils.formatting import (
    amount_class,
    format_currency,
    format_date,
    row_class,
    savings_class,
    status_badge_class,
)
from settlement_plans.utils.money import ZERO


class SegmentType(str, Enum):
    FIXED = "Fixed"
    REMAINDER = "Remainder"
    SOLVE_AMOUNT = "SolveAmount"


class Frequency(str, Enum):
    WEEKLY = "Weekly"
    BI_WEEKLY = "Bi-Weekly"
    SEMI_MONTHLY = "Semi-Monthly"
    MONTHLY = "Monthly"


class PaymentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    CLEARED = "Cleared"
    NSF = "NSF"
    CANCELLED = "Cancelled"


class RollupCategory(str, Enum):
    ALL = "all"
    CLEARED = "cleared"
    NSF = "nsf"


class FeeDimension(str, Enum):
    DRAFT_AMOUNT = "draft_amount"
    SETUP_FEE = "setup_fee"
    PROGRAM_FEE = "program_fee"
    BANKING_FEE = "banking_fee"
    SAVINGS_BALANCE = "savings_balance"


@dataclass(frozen=True)
class Segment:
    """One contiguous portion of a plan sharing a generation policy"""

    order: int
    type: SegmentType = SegmentType.FIXED
    amount: Optional[Decimal] = None
    count: Optional[int] = None
    frequency: Frequency = Frequency.MONTHLY
    start_date: Optional[date] = None
    end_date: Optional[date] = None  # second monthly date, Semi-Monthly only
    key: str = ""


@dataclass
class ScheduleItem:
    """Canonical schedule line item after normalization"""

    id: Optional[str]
    temp_id: str
    row_number: int
    draft_number: str
    payment_date: Optional[date]
    draft_amount: Decimal = ZERO
    setup_fee: Decimal = ZERO
    program_fee: Decimal = ZERO
    banking_fee: Decimal = ZERO
    savings_balance: Decimal = ZERO
    status: str = PaymentStatus.SCHEDULED.value
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def identity(self) -> str:
        return self.id if self.id is not None else self.temp_id

    @property
    def payment_date_display(self) -> str:
        return format_date(self.payment_date)

    @property
    def draft_amount_formatted(self) -> str:
        return format_currency(self.draft_amount)

    @property
    def setup_fee_formatted(self) -> str:
        return format_currency(self.setup_fee)

    @property
    def program_fee_formatted(self) -> str:
        return format_currency(self.program_fee)

    @property
    def banking_fee_formatted(self) -> str:
        return format_currency(self.banking_fee)

    @property
    def savings_balance_formatted(self) -> str:
        return format_currency(self.savings_balance)

    @property
    def draft_amount_class(self) -> str:
        return amount_class(self.draft_amount)

    @property
    def setup_fee_class(self) -> str:
        return amount_class(self.setup_fee)

    @property
    def program_fee_class(self) -> str:
        return amount_class(self.program_fee)

    @property
    def banking_fee_class(self) -> str:
        return amount_class(self.banking_fee)

    @property
    def savings_class(self) -> str:
        return savings_class(self.savings_balance)

    @property
    def status_badge_class(self) -> str:
        return status_badge_class(self.status)

    @property
    def row_class(self) -> str:
        return row_class(self.status)

    def get(self, dimension: FeeDimension) -> Decimal:
        return getattr(self, dimension.value)

    def as_dict(self) -> Dict[str, Any]:
        """Canonical shape plus passthrough keys; feeding it back to the processor is a no-op"""
        return {
            **self.extra,
            "id": self.id,
            "temp_id": self.temp_id,
            "row_number": self.row_number,
            "draft_number": self.draft_number,
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "draft_amount": self.draft_amount,
            "setup_fee": self.setup_fee,
            "program_fee": self.program_fee,
            "banking_fee": self.banking_fee,
            "savings_balance": self.savings_balance,
            "status": self.status,
        }


@dataclass
class FeeRecord:
    """Ancillary fee (e.g. a wire transfer) recorded against a schedule item"""

    id: str
    parent_schedule_item_id: str
    fee_type: str
    amount: Decimal = ZERO
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SequencedItem:
    """Schedule item with its display draft number"""

    item: ScheduleItem
    calculated_draft_number: Union[int, str]  # "-" for excluded statuses
    has_draft_number: bool


@dataclass
class ScheduleRow:
    """Parent row in the flattened display sequence"""

    item: ScheduleItem
    calculated_draft_number: Union[int, str]
    has_draft_number: bool
    unique_key: str
    is_selected: bool = False
    is_wire_fee: bool = False


@dataclass
class WireFeeRow:
    """Fee row nested directly under its parent schedule row"""

    fee: FeeRecord
    unique_key: str
    amount_formatted: str
    wire_row_class: str
    is_wire_fee: bool = True


DisplayRow = Union[ScheduleRow, WireFeeRow]


@dataclass
class PlanRollups:
    """Sparse precomputed aggregates supplied by the plan store"""

    values: Dict[Tuple[RollupCategory, FeeDimension], Optional[Decimal]] = field(default_factory=dict)
    row_counts: Dict[RollupCategory, Optional[int]] = field(default_factory=dict)

    def value_for(self, category: RollupCategory, dimension: FeeDimension) -> Optional[Decimal]:
        return self.values.get((category, dimension))

    def row_count_for(self, category: RollupCategory) -> Optional[int]:
        return self.row_counts.get(category)


@dataclass
class CategoryTotals:
    """Aggregates for one status category"""

    draft_amount: Decimal = ZERO
    setup_fee: Decimal = ZERO
    program_fee: Decimal = ZERO
    banking_fee: Decimal = ZERO
    savings_balance: Decimal = ZERO
    row_count: int = 0

    def get(self, dimension: FeeDimension) -> Decimal:
        return getattr(self, dimension.value)


@dataclass
class RollupTable:
    """Aggregates for every category"""

    totals: Dict[RollupCategory, CategoryTotals] = field(
        default_factory=lambda: {category: CategoryTotals() for category in RollupCategory}
    )

    def __getitem__(self, category: RollupCategory) -> CategoryTotals:
        return self.totals[category]


@dataclass
class PlanSummary:
    """Summary scalars shown above the schedule"""

    item_count: int = 0
    program_length: int = 0
    first_payment_date: Optional[date] = None
    last_payment_date: Optional[date] = None
    new_weekly_payment: Decimal = ZERO
    total_wire_fees: Decimal = ZERO
    total_wires_received: Decimal = ZERO


@dataclass
class PlanViewModel:
    """Everything presentation needs to render a plan"""

    plan_header: Dict[str, Any] = field(default_factory=dict)
    rows: List[DisplayRow] = field(default_factory=list)
    rollups: RollupTable = field(default_factory=RollupTable)
    summary: PlanSummary = field(default_factory=PlanSummary)

    @property
    def has_rows(self) -> bool:
        return len(self.rows) > 0


@dataclass
class StatusOption:
    label: str
    value: str


@dataclass
class PlanSchedule:
    """Raw payload returned by the plan store for one plan"""

    plan_header: Dict[str, Any]
    schedule_items: List[Dict[str, Any]]
    rollups: Optional[PlanRollups] = None
