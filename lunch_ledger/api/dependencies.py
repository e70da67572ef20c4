"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from lunch_ledger.config import Settings, settings
from lunch_ledger.engine.facade import InvestmentEngine
from lunch_ledger.infrastructure.clients.experience_api import HttpExperienceSource
from lunch_ledger.infrastructure.database.repositories import SqlExperienceSource
from lunch_ledger.infrastructure.database.session import SessionLocal


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_engine(request: Request) -> InvestmentEngine:
    """Provide the engine instance owned by the running application"""
    return request.app.state.engine


def build_engine(config: Settings = settings) -> InvestmentEngine:
    """Wire an engine to the source backend selected in configuration"""
    if config.source_backend == "database":
        source = SqlExperienceSource(SessionLocal)
    else:
        source = HttpExperienceSource(
            base_url=config.experience_api_base,
            timeout=config.http_timeout_seconds,
        )

    return InvestmentEngine(
        transaction_source=source,
        preference_source=source,
        user_id=config.active_user_id,
        refresh_interval_seconds=config.refresh_interval_seconds,
    )
