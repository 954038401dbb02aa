"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from credit_optimizer.config import settings
from credit_optimizer.domain.policy import OptimizerPolicy


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_policy() -> OptimizerPolicy:
    """Provide the payment policy built from current settings"""
    return settings.policy()
