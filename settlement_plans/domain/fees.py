"""Wire fee attachment - nests fee records under their schedule rows"""

import logging
from decimal import Decimal
from typing import AbstractSet, Any, Dict, Iterable, List, Mapping, Optional, Sequence

from settlement_plans.domain.models import DisplayRow, FeeRecord, ScheduleRow, SequencedItem, WireFeeRow
from settlement_plans.utils.formatting import format_currency
from settlement_plans.utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

WIRE_COVERED_CLASS = "wire-sub-row wire-row-covered"
WIRE_SHORTFALL_CLASS = "wire-sub-row wire-row-shortfall"

_FEE_KNOWN_KEYS = frozenset({"id", "parent_schedule_item_id", "fee_type", "amount"})


def parse_fee_record(raw: Mapping[str, Any], parent_id: str) -> FeeRecord:
    """
    Build a FeeRecord from a plan store payload entry.

    Raises:
        KeyError: entry has no id
    """
    amount = to_decimal(raw.get("amount"))
    if amount is None:
        if raw.get("amount") is not None:
            logger.warning(
                "Coercion anomaly: non-numeric or out-of-range fee amount replaced with 0",
                extra={"fee_id": str(raw["id"]), "raw_value": repr(raw.get("amount"))},
            )
        amount = ZERO

    return FeeRecord(
        id=str(raw["id"]),
        parent_schedule_item_id=str(raw.get("parent_schedule_item_id") or parent_id),
        fee_type=str(raw.get("fee_type") or "Wire"),
        amount=amount,
        extra={key: value for key, value in raw.items() if key not in _FEE_KNOWN_KEYS},
    )


def parse_fee_map(payload: Optional[Mapping[str, Iterable[Mapping[str, Any]]]]) -> Dict[str, List[FeeRecord]]:
    """Normalize ``{schedule item id: [fee, ...]}``; an empty payload is a valid empty map"""
    if not payload:
        return {}
    return {
        str(item_id): [parse_fee_record(raw, str(item_id)) for raw in fees or []]
        for item_id, fees in payload.items()
    }


def wire_status_class(fees: Sequence[FeeRecord], draft_amount: Decimal) -> str:
    """Covered when the wires received reach the draft amount"""
    total = sum((fee.amount for fee in fees), ZERO)
    return WIRE_COVERED_CLASS if total >= draft_amount else WIRE_SHORTFALL_CLASS


def merge_fee_rows(
    sequenced: Iterable[SequencedItem],
    fee_map: Optional[Mapping[str, Sequence[FeeRecord]]] = None,
    selected_ids: Optional[AbstractSet[str]] = None,
) -> List[DisplayRow]:
    """
    Flatten schedule items and their fees into one display sequence.

    Each schedule row is followed by its fee rows in their given order. Keys
    are prefixed by row kind, so a schedule item and a fee sharing an id never
    collide.

    Args:
        sequenced: Output of assign_draft_numbers
        fee_map: Fee records keyed by schedule item id
        selected_ids: Ids the view currently has selected; owned by the caller
    """
    fee_map = fee_map or {}
    selected_ids = selected_ids if selected_ids is not None else frozenset()

    rows: List[DisplayRow] = []
    for entry in sequenced:
        item = entry.item
        rows.append(
            ScheduleRow(
                item=item,
                calculated_draft_number=entry.calculated_draft_number,
                has_draft_number=entry.has_draft_number,
                unique_key=f"schedule_{item.identity}",
                is_selected=item.identity in selected_ids,
            )
        )

        fees = fee_map.get(item.id, []) if item.id is not None else []
        if not fees:
            continue

        row_class = wire_status_class(fees, item.draft_amount)
        for fee in fees:
            rows.append(
                WireFeeRow(
                    fee=fee,
                    unique_key=f"wire_{fee.id}",
                    amount_formatted=format_currency(fee.amount),
                    wire_row_class=row_class,
                )
            )

    return rows
