"""Unit tests for segment editing"""

import pytest
from datetime import date
from decimal import Decimal
from settlement_plans.domain.exceptions import (
    InvalidSegmentFieldError,
    MinimumSegmentError,
    SegmentIndexError,
)
from settlement_plans.domain.models import Frequency, Segment, SegmentType
from settlement_plans.domain.segments import SegmentModel, describe_type

WEEKLY_FIXED = {
    "order": 1,
    "type": "Fixed",
    "amount": 100,
    "count": 5,
    "frequency": "Weekly",
    "start_date": "2025-01-06",
}


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def model(notifications) -> SegmentModel:
    return SegmentModel([WEEKLY_FIXED], on_change=notifications.append)


def orders(model: SegmentModel) -> list[int]:
    return [seg.order for seg in model.segments]


def test_delete_sole_segment_rejected(model, notifications):
    """Deleting the only segment fails and leaves the list untouched"""
    before = model.serialize()

    with pytest.raises(MinimumSegmentError):
        model.delete_segment(0)

    assert model.serialize() == before
    assert notifications == []


def test_add_then_delete_first_renumbers(model, notifications):
    """Adding a second segment then deleting the first leaves order=1"""
    model.add_segment()
    model.delete_segment(0)

    assert len(model) == 1
    remaining = model.segments[0]
    assert remaining.order == 1
    assert remaining.type is SegmentType.FIXED
    assert remaining.frequency is Frequency.MONTHLY
    assert remaining.amount is None
    assert remaining.start_date is None
    assert len(notifications) == 2


def test_add_segment_defaults(model, notifications):
    """New segments are Fixed/Monthly with empty amounts and dates"""
    added = model.add_segment()

    assert added.order == 2
    assert added.type is SegmentType.FIXED
    assert added.frequency is Frequency.MONTHLY
    assert (added.amount, added.count, added.start_date, added.end_date) == (None, None, None, None)
    assert notifications[-1][-1]["order"] == 2


def test_every_mutation_notifies_once(model, notifications):
    """Each mutation emits exactly one notification with the serialized list"""
    model.add_segment()
    model.update_field(1, "amount", "75")
    model.move_down(0)
    model.move_up(1)
    model.delete_segment(1)

    assert len(notifications) == 5
    assert notifications[-1] == model.serialize()


def test_orders_stay_dense_after_mixed_edits(model):
    """Orders are always 1..N after add/delete/move"""
    for _ in range(4):
        model.add_segment()
        assert orders(model) == list(range(1, len(model) + 1))

    model.move_down(0)
    assert orders(model) == [1, 2, 3, 4, 5]
    model.delete_segment(2)
    assert orders(model) == [1, 2, 3, 4]
    model.move_up(3)
    assert orders(model) == [1, 2, 3, 4]
    model.delete_segment(0)
    assert orders(model) == [1, 2, 3]


SPARSE = [dict(WEEKLY_FIXED, order=3, key="seg-a"), dict(WEEKLY_FIXED, order=5, key="seg-b")]
DUPLICATED = [dict(WEEKLY_FIXED, order=2, key="seg-a"), dict(WEEKLY_FIXED, order=2, key="seg-b")]


@pytest.mark.parametrize("initial", [SPARSE, DUPLICATED], ids=["sparse", "duplicated"])
def test_add_renumbers_inbound_orders(initial):
    model = SegmentModel(initial)

    added = model.add_segment()

    assert orders(model) == [1, 2, 3]
    assert added.order == 3
    assert [seg["order"] for seg in model.serialize()] == [1, 2, 3]


@pytest.mark.parametrize("initial", [SPARSE, DUPLICATED], ids=["sparse", "duplicated"])
@pytest.mark.parametrize(
    "edit",
    [
        lambda model: model.delete_segment(0),
        lambda model: model.move_down(0),
        lambda model: model.move_up(1),
    ],
    ids=["delete", "move_down", "move_up"],
)
def test_edits_renumber_inbound_orders(initial, edit):
    model = SegmentModel(initial)

    edit(model)

    assert orders(model) == list(range(1, len(model) + 1))


def test_set_segments_then_add_is_dense(notifications):
    model = SegmentModel(on_change=notifications.append)
    model.set_segments([dict(WEEKLY_FIXED, order=7), dict(WEEKLY_FIXED, order=7), dict(WEEKLY_FIXED, order=1)])

    model.add_segment()

    assert [seg["order"] for seg in notifications[-1]] == [1, 2, 3, 4]


def test_move_down_swaps_neighbours(model):
    """Moving swaps adjacent segments, keys travel with them"""
    model.add_segment()
    first_key = model.segments[0].key

    model.move_down(0)

    assert model.segments[1].key == first_key
    assert model.segments[1].order == 2
    assert model.segments[1].amount == Decimal("100")
    assert model.segments[0].order == 1


def test_moves_at_boundary_are_noops(model, notifications):
    """move_up(0) and move_down(last) change nothing and notify nobody"""
    model.add_segment()
    notifications.clear()
    before = model.serialize()

    model.move_up(0)
    model.move_down(1)

    assert model.serialize() == before
    assert notifications == []


def test_type_remainder_clears_count(model):
    updated = model.update_field(0, "type", "Remainder")

    assert updated.type is SegmentType.REMAINDER
    assert updated.count is None
    assert updated.amount == Decimal("100")


def test_type_solve_amount_clears_amount(model):
    updated = model.update_field(0, "type", "SolveAmount")

    assert updated.type is SegmentType.SOLVE_AMOUNT
    assert updated.amount is None
    assert updated.count == 5


def test_leaving_semi_monthly_clears_end_date(model):
    """end_date only survives while frequency stays Semi-Monthly"""
    model.update_field(0, "frequency", "Semi-Monthly")
    model.update_field(0, "end_date", "2025-01-20")
    assert model.segments[0].end_date == date(2025, 1, 20)

    model.update_field(0, "frequency", "Semi-Monthly")
    assert model.segments[0].end_date == date(2025, 1, 20)

    model.update_field(0, "frequency", "Monthly")
    assert model.segments[0].end_date is None


def test_numeric_values_are_coerced(model):
    """Counts are floored, blank amounts become None"""
    model.update_field(0, "count", "3.7")
    model.update_field(0, "amount", "")

    assert model.segments[0].count == 3
    assert model.segments[0].amount is None


@pytest.mark.parametrize(
    "index, field, value, error",
    [
        (5, "amount", 10, SegmentIndexError),
        (-1, "amount", 10, SegmentIndexError),
        (0, "order", 3, InvalidSegmentFieldError),
        (0, "type", "Balloon", InvalidSegmentFieldError),
        (0, "frequency", None, InvalidSegmentFieldError),
        (0, "amount", "lots", InvalidSegmentFieldError),
        (0, "start_date", "next tuesday", InvalidSegmentFieldError),
    ],
)
def test_rejected_updates_leave_state_unchanged(model, notifications, index, field, value, error):
    before = model.serialize()

    with pytest.raises(error):
        model.update_field(index, field, value)

    assert model.serialize() == before
    assert notifications == []


def test_delete_out_of_range_rejected(model):
    model.add_segment()
    with pytest.raises(SegmentIndexError):
        model.delete_segment(2)


def test_set_segments_copies_input(notifications):
    """Later changes to the caller's data do not leak into the model"""
    raw = [dict(WEEKLY_FIXED)]
    model = SegmentModel(on_change=notifications.append)

    model.set_segments(raw)
    raw[0]["amount"] = 999
    raw.append(dict(WEEKLY_FIXED))

    assert len(model) == 1
    assert model.segments[0].amount == Decimal("100")
    assert len(notifications) == 1


def test_set_segments_none_is_empty(model, notifications):
    model.set_segments(None)

    assert len(model) == 0
    assert notifications == [[]]


def test_set_segments_assigns_missing_keys_only():
    model = SegmentModel([dict(WEEKLY_FIXED, key="seg-keep"), {"type": "Remainder", "amount": 50}])

    assert model.segments[0].key == "seg-keep"
    assert model.segments[1].key.startswith("seg-")
    assert model.segments[1].order == 2


def test_set_segments_accepts_legacy_names():
    model = SegmentModel(
        [
            {
                "segmentOrder": 1,
                "segmentType": "SolveAmount",
                "paymentCount": 12,
                "frequency": "Bi-Weekly",
                "startDate": "2025-03-03",
            }
        ]
    )

    seg = model.segments[0]
    assert seg.type is SegmentType.SOLVE_AMOUNT
    assert seg.count == 12
    assert seg.frequency is Frequency.BI_WEEKLY
    assert seg.start_date == date(2025, 3, 3)


def test_set_segments_keeps_segment_records():
    """Segment instances are immutable and can be shared"""
    seg = Segment(order=1, amount=Decimal("20"), count=2, start_date=date(2025, 1, 1), key="seg-a")
    model = SegmentModel([seg])

    assert model.segments[0] is seg


def test_serialize_has_canonical_fields_only(model):
    assert model.serialize() == [
        {
            "order": 1,
            "type": "Fixed",
            "amount": Decimal("100"),
            "count": 5,
            "frequency": "Weekly",
            "start_date": "2025-01-06",
            "end_date": None,
        }
    ]


def test_validate_clean_plan(model):
    assert model.validate() == []
    assert model.is_valid


def test_validate_reports_field_rules():
    model = SegmentModel(
        [
            {"type": "Fixed", "amount": 100},
            {"type": "Remainder", "amount": 50, "count": 4, "frequency": "Semi-Monthly"},
            {"type": "SolveAmount", "count": 0, "end_date": "2025-05-20"},
        ]
    )

    found = {(issue.index, issue.field) for issue in model.validate()}

    assert (0, "count") in found
    assert (0, "start_date") in found
    assert (1, "count") in found
    assert (1, "start_date") in found
    assert (2, "count") in found
    assert (2, "end_date") in found
    assert (2, "start_date") not in found
    assert not model.is_valid


def test_validate_empty_list():
    issues = SegmentModel().validate()
    assert len(issues) == 1
    assert issues[0].index is None


def test_describe_type():
    assert describe_type("Remainder") == "Fixed amount until balance is paid"
    assert describe_type(SegmentType.SOLVE_AMOUNT).startswith("Calculate amount")
    assert describe_type("Balloon") == ""
