"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from settlement_plans.infrastructure.clients.plan_store import PlanStoreClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_plan_store_client() -> PlanStoreClient:
    """Provide plan store client instance"""
    return PlanStoreClient()
