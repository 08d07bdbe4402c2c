"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Any, Dict, List
from fastapi.testclient import TestClient
from settlement_plans.api.main import create_app
from settlement_plans.domain.models import FeeRecord, PlanSchedule


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def persisted_items() -> List[Dict[str, Any]]:
    """Schedule items as stored by the plan store, deliberately out of date order"""
    return [
        {
            "id": "si-2",
            "rowNumber": 2,
            "paymentDate": "2025-02-01",
            "draftAmount": 100,
            "setupFee": 0,
            "programFee": 40,
            "bankingFee": 10,
            "savingsBalance": 50,
            "status": "NSF",
        },
        {
            "id": "si-1",
            "rowNumber": 1,
            "paymentDate": "2025-01-01",
            "draftAmount": 150,
            "setupFee": 50,
            "programFee": 40,
            "bankingFee": 10,
            "savingsBalance": 50,
            "status": "Cleared",
        },
        {
            "id": "si-3",
            "rowNumber": 3,
            "paymentDate": "2025-03-01",
            "draftAmount": 100,
            "setupFee": 0,
            "programFee": 40,
            "bankingFee": 10,
            "savingsBalance": 50,
            "status": "Scheduled",
        },
    ]


@pytest.fixture
def sample_fee_map() -> Dict[str, List[FeeRecord]]:
    """Two wires covering the cleared draft, one short wire against the NSF draft"""
    return {
        "si-1": [
            FeeRecord(id="wf-1", parent_schedule_item_id="si-1", fee_type="Wire", amount=Decimal("100")),
            FeeRecord(id="wf-2", parent_schedule_item_id="si-1", fee_type="Wire", amount=Decimal("50")),
        ],
        "si-2": [
            FeeRecord(id="wf-3", parent_schedule_item_id="si-2", fee_type="Wire", amount=Decimal("50")),
        ],
    }


@pytest.fixture
def sample_schedule(persisted_items) -> PlanSchedule:
    return PlanSchedule(
        plan_header={"id": "plan-1", "name": "Plan A", "version_number": 2},
        schedule_items=persisted_items,
    )
