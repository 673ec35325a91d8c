"""
FastAPI dependencies (DB session, clock, AI service)
"""
from datetime import datetime

from app.application.insights import InsightService
from app.infrastructure.db.session import get_db as _get_db


# Re-exported so routers import every dependency from one place
get_db = _get_db


def get_now() -> datetime:
    """
    Reference instant for renewal projection (local time)

    Overridden in tests to pin the clock.
    """
    return datetime.now()


def get_insight_service() -> InsightService:
    return InsightService()
