"""Plan rollups - category totals preferring plan store aggregates over live sums"""

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, TypeVar

from settlement_plans.domain.models import (
    CategoryTotals,
    FeeDimension,
    PaymentStatus,
    PlanRollups,
    RollupCategory,
    RollupTable,
    ScheduleItem,
)
from settlement_plans.utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Payload field names are "<prefix>_<dimension>" and "<prefix>_row_count"
ROLLUP_FIELD_PREFIXES: Dict[RollupCategory, str] = {
    RollupCategory.ALL: "total",
    RollupCategory.CLEARED: "cleared",
    RollupCategory.NSF: "nsf",
}

CATEGORY_FILTERS: Dict[RollupCategory, Callable[[ScheduleItem], bool]] = {
    RollupCategory.ALL: lambda item: True,
    RollupCategory.CLEARED: lambda item: item.status == PaymentStatus.CLEARED.value,
    RollupCategory.NSF: lambda item: item.status == PaymentStatus.NSF.value,
}

# The store's savings rollups sum the running savings balance, not the
# per-payment escrow amount, so savings are always summed from the items.
LIVE_ONLY_DIMENSIONS = frozenset({FeeDimension.SAVINGS_BALANCE})


def rollup_field_name(category: RollupCategory, dimension: FeeDimension) -> str:
    return f"{ROLLUP_FIELD_PREFIXES[category]}_{dimension.value}"


def row_count_field_name(category: RollupCategory) -> str:
    return f"{ROLLUP_FIELD_PREFIXES[category]}_row_count"


def _supplied_decimal(payload: Mapping[str, Any], key: str) -> Optional[Decimal]:
    raw = payload.get(key)
    if raw is None:
        return None
    value = to_decimal(raw)
    if value is None:
        logger.warning(
            "Coercion anomaly: non-numeric or out-of-range rollup replaced with 0",
            extra={"field": key, "raw_value": repr(raw)},
        )
        return ZERO
    return value


def parse_plan_rollups(payload: Optional[Mapping[str, Any]]) -> Optional[PlanRollups]:
    """
    Read the sparse rollup fields from a plan store payload.

    A field that is absent or null stays None (live fallback); a present but
    non-numeric field counts as 0.
    """
    if payload is None:
        return None

    rollups = PlanRollups()
    for category in RollupCategory:
        for dimension in FeeDimension:
            rollups.values[(category, dimension)] = _supplied_decimal(payload, rollup_field_name(category, dimension))

        count = _supplied_decimal(payload, row_count_field_name(category))
        rollups.row_counts[category] = int(count) if count is not None else None

    return rollups


def preferred_value(supplied: Optional[T], live: Callable[[], T]) -> T:
    """Supplied value verbatim when present, otherwise the live computation"""
    return supplied if supplied is not None else live()


def live_sum(items: Iterable[ScheduleItem], dimension: FeeDimension) -> Decimal:
    return sum((item.get(dimension) for item in items), ZERO)


def aggregate_rollups(items: Sequence[ScheduleItem], rollups: Optional[PlanRollups] = None) -> RollupTable:
    """
    Totals per category (all / Cleared / NSF) and fee dimension, plus row counts.

    Precedence per (category, dimension): a non-null supplied rollup wins,
    otherwise the items matching the category are summed. Savings are the
    exception and are always summed live.
    """
    rollups = rollups or PlanRollups()
    table = RollupTable()

    for category in RollupCategory:
        matches = CATEGORY_FILTERS[category]
        selected = [item for item in items if matches(item)]

        values = {}
        for dimension in FeeDimension:
            supplied = None if dimension in LIVE_ONLY_DIMENSIONS else rollups.value_for(category, dimension)
            values[dimension.value] = preferred_value(supplied, lambda: live_sum(selected, dimension))

        row_count = preferred_value(rollups.row_count_for(category), lambda: len(selected))
        table.totals[category] = CategoryTotals(row_count=row_count, **values)

    return table
