"""Draft numbering for display - failed and cancelled drafts are not counted"""

from typing import Iterable, List

from settlement_plans.domain.models import PaymentStatus, ScheduleItem, SequencedItem
from settlement_plans.utils.date_utils import sort_key

EXCLUDED_STATUSES = frozenset({PaymentStatus.NSF.value, PaymentStatus.CANCELLED.value})
NO_DRAFT_NUMBER = "-"


def sort_by_payment_date(items: Iterable[ScheduleItem]) -> List[ScheduleItem]:
    """Stable ascending sort; items without a date come first"""
    return sorted(items, key=lambda item: sort_key(item.payment_date))


def assign_draft_numbers(items: Iterable[ScheduleItem]) -> List[SequencedItem]:
    """
    Order items by payment date and number the drafts.

    Example:
        2025-02-01 NSF, 2025-01-01 Cleared, 2025-03-01 Scheduled
        → 01-01: 1, 02-01: "-", 03-01: 2
    """
    counter = 0
    sequenced = []
    for item in sort_by_payment_date(items):
        if item.status in EXCLUDED_STATUSES:
            sequenced.append(SequencedItem(item=item, calculated_draft_number=NO_DRAFT_NUMBER, has_draft_number=False))
            continue

        counter += 1
        sequenced.append(SequencedItem(item=item, calculated_draft_number=counter, has_draft_number=True))

    return sequenced
