"""POST /v1/segments/edit - apply one segment builder action"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from settlement_plans.api.v1.schemas import (
    SegmentEditRequest,
    SegmentEditResponse,
    SegmentIssueSchema,
    SegmentSchema,
)
from settlement_plans.domain.exceptions import ValidationError
from settlement_plans.domain.segments import SegmentModel
from settlement_plans.infrastructure.observability.metrics import segment_edit_counter

router = APIRouter()


def _apply(model: SegmentModel, body: SegmentEditRequest) -> None:
    if body.action == "set":
        model.set_segments(body.segments)
    elif body.action == "add":
        model.add_segment()
    elif body.action == "update":
        model.update_field(body.index, body.field or "", body.value)
    elif body.action == "delete":
        model.delete_segment(body.index)
    elif body.action == "move_up":
        model.move_up(body.index)
    elif body.action == "move_down":
        model.move_down(body.index)


@router.post("/segments/edit", response_model=SegmentEditResponse)
def edit_segments(body: SegmentEditRequest):
    """
    Apply one action to the submitted segments.

    Returns the resulting list, every change notification the action
    emitted, and any rule violations left in the result. A rejected action
    returns 422 and nothing is applied.
    """
    notifications: List[List[Dict[str, Any]]] = []
    model = SegmentModel([] if body.action == "set" else body.segments, on_change=notifications.append)

    try:
        _apply(model, body)
    except ValidationError as e:
        segment_edit_counter.labels(action=body.action, outcome="rejected").inc()
        logging.warning(f"Segment edit rejected: {e}", extra={"action": body.action, "index": body.index})
        raise HTTPException(status_code=422, detail=str(e))

    segment_edit_counter.labels(action=body.action, outcome="applied").inc()
    return SegmentEditResponse(
        segments=[SegmentSchema(**seg) for seg in model.serialize()],
        notifications=[[SegmentSchema(**seg) for seg in payload] for payload in notifications],
        issues=[SegmentIssueSchema.from_issue(issue) for issue in model.validate()],
    )
