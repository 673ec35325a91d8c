"""
Dashboard, renewal calendar and simulator API endpoints
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_now
from app.application.dashboard import DashboardService
from app.domain.simulator import SimulationSession


router = APIRouter(prefix="/api/v1", tags=["dashboard"])


class SimulationRequest(BaseModel):
    removed: list[int] = Field(default_factory=list)
    cost_override: dict[int, Annotated[Decimal, Field(ge=0)]] = Field(default_factory=dict)  # monthly cost
    split_override: dict[int, Annotated[int, Field(ge=1, le=10)]] = Field(default_factory=dict)

    def to_session(self) -> SimulationSession:
        return SimulationSession(
            removed=frozenset(self.removed),
            cost_override=dict(self.cost_override),
            split_override=dict(self.split_override),
        )


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """Totals, category breakdown, upcoming renewals and budget usage"""
    return DashboardService(db).get_overview(now)


@router.get("/calendar")
def calendar(
    year: int | None = Query(default=None, ge=1900, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Renewal calendar for one month (defaults to the current month)"""
    return DashboardService(db).get_calendar(year or now.year, month or now.month, now.date())


@router.post("/simulator")
def simulator(req: SimulationRequest, db: Session = Depends(get_db)):
    """What-if totals for a set of removals / cost overrides / split overrides"""
    return DashboardService(db).run_simulation(req.to_session())
