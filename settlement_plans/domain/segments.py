"""Payment segment editing - the ordered list of segments that shapes a plan"""

import logging
import uuid
from dataclasses import dataclass, replace
from decimal import ROUND_FLOOR
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from settlement_plans.domain.exceptions import (
    InvalidSegmentFieldError,
    MinimumSegmentError,
    SegmentIndexError,
)
from settlement_plans.domain.models import Frequency, Segment, SegmentType
from settlement_plans.utils.date_utils import parse_date
from settlement_plans.utils.money import to_decimal

logger = logging.getLogger(__name__)

ChangeListener = Callable[[List[Dict[str, Any]]], None]

EDITABLE_FIELDS = ("type", "amount", "count", "frequency", "start_date", "end_date")

# camelCase names sent by older plan builders
LEGACY_FIELD_NAMES = {
    "segmentOrder": "order",
    "segmentType": "type",
    "paymentAmount": "amount",
    "paymentCount": "count",
    "startDate": "start_date",
    "endDate": "end_date",
}

SEGMENT_TYPE_HELP = {
    SegmentType.FIXED: "Fixed amount for a specific number of payments",
    SegmentType.REMAINDER: "Fixed amount until balance is paid",
    SegmentType.SOLVE_AMOUNT: "Calculate amount to pay off in N payments",
}


@dataclass
class SegmentIssue:
    """One problem found by SegmentModel.validate()"""

    index: Optional[int]
    field: str
    message: str


def describe_type(segment_type: Union[SegmentType, str]) -> str:
    """Help text for a segment type, empty for unknown values"""
    try:
        return SEGMENT_TYPE_HELP[SegmentType(segment_type)]
    except ValueError:
        return ""


def _new_key() -> str:
    return f"seg-{uuid.uuid4().hex[:12]}"


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _coerce_type(value: Any) -> SegmentType:
    try:
        return SegmentType(value)
    except ValueError as e:
        raise InvalidSegmentFieldError(f"Unknown segment type: {value!r}") from e


def _coerce_frequency(value: Any) -> Frequency:
    try:
        return Frequency(value)
    except ValueError as e:
        raise InvalidSegmentFieldError(f"Unknown frequency: {value!r}") from e


def _coerce_amount(value: Any):
    if _blank(value):
        return None
    amount = to_decimal(value)
    if amount is None:
        raise InvalidSegmentFieldError(f"Amount is not a usable number: {value!r}")
    return amount


def _coerce_count(value: Any) -> Optional[int]:
    if _blank(value):
        return None
    count = to_decimal(value)
    if count is None:
        raise InvalidSegmentFieldError(f"Count is not a usable number: {value!r}")
    return int(count.to_integral_value(rounding=ROUND_FLOOR))


def _coerce_date(value: Any):
    if _blank(value):
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise InvalidSegmentFieldError(f"Not a date: {value!r}")
    return parsed


_COERCERS: Dict[str, Callable[[Any], Any]] = {
    "type": _coerce_type,
    "amount": _coerce_amount,
    "count": _coerce_count,
    "frequency": _coerce_frequency,
    "start_date": _coerce_date,
    "end_date": _coerce_date,
}

_DEFAULTS: Dict[str, Any] = {
    "type": SegmentType.FIXED,
    "frequency": Frequency.MONTHLY,
}


def _segment_from_mapping(data: Mapping[str, Any], position: int) -> Segment:
    """Build a Segment from caller data; unusable values fall back to defaults"""
    values = {LEGACY_FIELD_NAMES.get(name, name): value for name, value in data.items()}

    fields: Dict[str, Any] = {}
    for name in EDITABLE_FIELDS:
        try:
            fields[name] = _COERCERS[name](values.get(name))
        except InvalidSegmentFieldError as e:
            logger.warning(
                "Dropping unusable segment value",
                extra={"segment_position": position, "field": name, "error": str(e)},
            )
            fields[name] = _DEFAULTS.get(name)
        if fields[name] is None and name in _DEFAULTS:
            fields[name] = _DEFAULTS[name]

    order = values.get("order")
    if not isinstance(order, int) or isinstance(order, bool) or order < 1:
        order = position + 1

    return Segment(order=order, key=values.get("key") or _new_key(), **fields)


def _renumber(segments: Iterable[Segment]) -> List[Segment]:
    return [seg if seg.order == idx + 1 else replace(seg, order=idx + 1) for idx, seg in enumerate(segments)]


class SegmentModel:
    """
    Ordered, always non-empty list of payment segments.

    Segments are immutable records, every mutation builds a new tuple, so
    nothing handed out by this class can be changed behind its back. Each
    mutation notifies every listener once with the serialized list.
    """

    def __init__(self, segments: Optional[Iterable[Any]] = None, on_change: Optional[ChangeListener] = None):
        self._segments: Tuple[Segment, ...] = ()
        self._listeners: List[ChangeListener] = []
        if segments is not None:
            self._segments = self._copy_in(segments)
        if on_change is not None:
            self._listeners.append(on_change)

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    # Mutations

    def set_segments(self, segments: Optional[Iterable[Any]]) -> None:
        """Replace the whole list; None yields an empty list"""
        self._commit(self._copy_in(segments) if segments is not None else ())

    def add_segment(self) -> Segment:
        segments = _renumber(self._segments + (Segment(order=len(self._segments) + 1, key=_new_key()),))
        self._commit(segments)
        return segments[-1]

    def update_field(self, index: int, field: str, value: Any) -> Segment:
        """
        Set one field of one segment, clearing fields the new value makes irrelevant.

        - type → Remainder clears count
        - type → SolveAmount clears amount
        - frequency → anything but Semi-Monthly clears end_date

        Raises:
            SegmentIndexError: index outside the list
            InvalidSegmentFieldError: unknown field or uncoercible value
        """
        self._check_index(index)
        field = LEGACY_FIELD_NAMES.get(field, field)
        if field not in _COERCERS:
            raise InvalidSegmentFieldError(f"Segment field {field!r} cannot be edited")

        coerced = _COERCERS[field](value)
        if coerced is None and field in _DEFAULTS:
            raise InvalidSegmentFieldError(f"Segment field {field!r} is required")

        changes: Dict[str, Any] = {field: coerced}
        if field == "type":
            if coerced is SegmentType.REMAINDER:
                changes["count"] = None
            elif coerced is SegmentType.SOLVE_AMOUNT:
                changes["amount"] = None
        elif field == "frequency" and coerced is not Frequency.SEMI_MONTHLY:
            changes["end_date"] = None

        updated = replace(self._segments[index], **changes)
        segments = list(self._segments)
        segments[index] = updated
        self._commit(segments)
        return updated

    def delete_segment(self, index: int) -> None:
        """
        Raises:
            MinimumSegmentError: only one segment remains
            SegmentIndexError: index outside the list
        """
        if len(self._segments) <= 1:
            raise MinimumSegmentError("Cannot delete the last segment. At least one segment is required.")
        self._check_index(index)

        remaining = [seg for idx, seg in enumerate(self._segments) if idx != index]
        self._commit(_renumber(remaining))

    def move_up(self, index: int) -> None:
        self._check_index(index)
        if index == 0:
            return
        self._swap(index - 1, index)

    def move_down(self, index: int) -> None:
        self._check_index(index)
        if index == len(self._segments) - 1:
            return
        self._swap(index, index + 1)

    # Output

    def serialize(self) -> List[Dict[str, Any]]:
        """The seven canonical fields per segment, in current order"""
        return [
            {
                "order": seg.order,
                "type": seg.type.value,
                "amount": seg.amount,
                "count": seg.count,
                "frequency": seg.frequency.value,
                "start_date": seg.start_date.isoformat() if seg.start_date else None,
                "end_date": seg.end_date.isoformat() if seg.end_date else None,
            }
            for seg in self._segments
        ]

    def validate(self) -> List[SegmentIssue]:
        """
        Check every segment against the field rules for its type.

        Never raises; an empty list means the segments can be submitted for
        schedule generation.
        """
        if not self._segments:
            return [SegmentIssue(index=None, field="segments", message="At least one segment is required")]

        issues: List[SegmentIssue] = []
        for idx, seg in enumerate(self._segments):
            uses_amount = seg.type in (SegmentType.FIXED, SegmentType.REMAINDER)
            uses_count = seg.type in (SegmentType.FIXED, SegmentType.SOLVE_AMOUNT)

            if uses_amount and seg.amount is None:
                issues.append(SegmentIssue(idx, "amount", f"Amount is required for {seg.type.value} segments"))
            elif not uses_amount and seg.amount is not None:
                issues.append(SegmentIssue(idx, "amount", f"Amount is solved for {seg.type.value} segments"))
            elif seg.amount is not None and seg.amount <= 0:
                issues.append(SegmentIssue(idx, "amount", "Amount must be greater than zero"))

            if uses_count and seg.count is None:
                issues.append(SegmentIssue(idx, "count", f"Count is required for {seg.type.value} segments"))
            elif not uses_count and seg.count is not None:
                issues.append(SegmentIssue(idx, "count", f"Count is open-ended for {seg.type.value} segments"))
            elif seg.count is not None and seg.count <= 0:
                issues.append(SegmentIssue(idx, "count", "Count must be greater than zero"))

            if seg.start_date is None and idx == 0:
                issues.append(SegmentIssue(idx, "start_date", "Start date is required for the first segment"))
            elif seg.start_date is None and seg.frequency is Frequency.SEMI_MONTHLY:
                issues.append(SegmentIssue(idx, "start_date", "Start date is required for Semi-Monthly segments"))

            if seg.end_date is not None and seg.frequency is not Frequency.SEMI_MONTHLY:
                issues.append(SegmentIssue(idx, "end_date", "End date only applies to Semi-Monthly segments"))

        return issues

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    # Internals

    def _copy_in(self, segments: Iterable[Any]) -> Tuple[Segment, ...]:
        copied = []
        for position, seg in enumerate(segments):
            if isinstance(seg, Segment):
                copied.append(seg if seg.key else replace(seg, key=_new_key()))
            elif isinstance(seg, Mapping):
                copied.append(_segment_from_mapping(seg, position))
            else:
                logger.warning("Skipping non-mapping segment", extra={"segment_position": position})
        return tuple(copied)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._segments):
            raise SegmentIndexError(f"Segment index {index!r} out of range (0..{len(self._segments) - 1})")

    def _swap(self, first: int, second: int) -> None:
        segments = list(self._segments)
        segments[first], segments[second] = segments[second], segments[first]
        self._commit(_renumber(segments))

    def _commit(self, segments: Iterable[Segment]) -> None:
        self._segments = tuple(segments)
        for listener in list(self._listeners):
            listener(self.serialize())
