"""Schedule item normalization - raw plan store records to canonical ScheduleItems"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from settlement_plans.domain.models import PaymentStatus, ScheduleItem
from settlement_plans.utils.date_utils import parse_date
from settlement_plans.utils.money import ZERO, to_decimal

logger = logging.getLogger(__name__)

# Lookup order per canonical field: canonical name, persisted record name,
# then the names used by provisional (not yet saved) estimates.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "Id"),
    "temp_id": ("temp_id", "tempId"),
    "row_number": ("row_number", "rowNumber"),
    "draft_number": ("draft_number", "draftNumber"),
    "payment_date": ("payment_date", "paymentDate", "dueDate", "date"),
    "draft_amount": ("draft_amount", "draftAmount", "totalPayment", "paymentAmount"),
    "setup_fee": ("setup_fee", "setupFee", "setupFeePortion"),
    "program_fee": ("program_fee", "programFee", "programPortion"),
    "banking_fee": ("banking_fee", "bankingFee", "bankingFeePortion"),
    "savings_balance": ("savings_balance", "savingsBalance", "escrowAmount"),
    "status": ("status",),
}

AMOUNT_FIELDS = ("draft_amount", "setup_fee", "program_fee", "banking_fee", "savings_balance")

_KNOWN_KEYS = frozenset(name for aliases in FIELD_ALIASES.values() for name in aliases)


def _lookup(raw: Mapping[str, Any], field: str) -> Tuple[Optional[str], Any]:
    """First alias present with a non-null value, as (source key, value)"""
    for name in FIELD_ALIASES[field]:
        value = raw.get(name)
        if value is not None:
            return name, value
    return None, None


def _amount(raw: Mapping[str, Any], field: str, position: int):
    source, value = _lookup(raw, field)
    if source is None:
        return ZERO

    amount = to_decimal(value)
    if amount is None:
        logger.warning(
            "Coercion anomaly: non-numeric or out-of-range amount replaced with 0",
            extra={"field": field, "source_key": source, "raw_value": repr(value), "position": position},
        )
        return ZERO
    return amount


def _status(value: Any) -> str:
    if isinstance(value, PaymentStatus):
        return value.value
    if value in (None, ""):
        return PaymentStatus.SCHEDULED.value
    return str(value)


def _row_number(raw: Mapping[str, Any], position: int) -> int:
    _, value = _lookup(raw, "row_number")
    number = to_decimal(value)
    if number is None or number < 1 or number != number.to_integral_value():
        return position + 1
    return int(number)


def process_schedule_item(raw: Mapping[str, Any], position: int) -> ScheduleItem:
    """
    Normalize one raw line item.

    Args:
        raw: Persisted record or provisional estimate; field names per FIELD_ALIASES
        position: 0-based position in the source list

    Returns:
        ScheduleItem with Decimal amounts (missing or non-numeric ⇒ 0), a row
        number, a status (default Scheduled) and unrecognized keys in ``extra``
    """
    if isinstance(raw, ScheduleItem):
        raw = raw.as_dict()

    _, item_id = _lookup(raw, "id")
    _, temp_id = _lookup(raw, "temp_id")
    _, status = _lookup(raw, "status")
    _, payment_date = _lookup(raw, "payment_date")
    row_number = _row_number(raw, position)
    _, draft_number = _lookup(raw, "draft_number")

    return ScheduleItem(
        id=str(item_id) if item_id not in (None, "") else None,
        temp_id=str(temp_id) if temp_id not in (None, "") else f"temp_{position}",
        row_number=row_number,
        draft_number=str(draft_number) if draft_number not in (None, "") else str(row_number),
        payment_date=parse_date(payment_date),
        status=_status(status),
        extra={key: value for key, value in raw.items() if key not in _KNOWN_KEYS},
        **{field: _amount(raw, field, position) for field in AMOUNT_FIELDS},
    )


def process_schedule_items(raw_items: Optional[Iterable[Mapping[str, Any]]]) -> List[ScheduleItem]:
    """
    Normalize a schedule. Pure and idempotent: feeding ``item.as_dict()``
    back in produces equal items.
    """
    if not raw_items:
        return []

    items = []
    for position, raw in enumerate(raw_items):
        if not isinstance(raw, (Mapping, ScheduleItem)):
            logger.warning("Skipping non-mapping schedule item", extra={"position": position})
            continue
        items.append(process_schedule_item(raw, position))
    return items
