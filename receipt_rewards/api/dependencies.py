"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from receipt_rewards.domain.engine import RewardEngine
from receipt_rewards.infrastructure.repositories import AccountRepository


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_engine(request: Request) -> RewardEngine:
    """Provide the application's reward engine"""
    return request.app.state.engine


def get_repository(request: Request) -> AccountRepository:
    """Provide the application's account store"""
    return request.app.state.accounts
