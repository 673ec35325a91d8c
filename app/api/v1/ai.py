"""
AI categorization / insight API endpoints

Responses always carry content: the service substitutes static fallbacks when
the model is unavailable.
"""
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.api.deps import get_insight_service
from app.application.insights import InsightService, InsightValidationError
from app.domain.subscription import Subscription


router = APIRouter(prefix="/api/v1/ai", tags=["ai"])


# === Request models ===

class SubscriptionPayload(BaseModel):
    id: int | str | None = None
    name: str | None = None
    cost: Decimal = Decimal("0")
    billing_cycle: str = "monthly"
    first_payment_date: date | None = None
    category: str = "other"
    status: str = "active"
    is_shared: bool = False
    shared_with: int = 1

    def to_value(self) -> Subscription:
        return Subscription.from_record(self.model_dump())


class CategorizeRequest(BaseModel):
    serviceName: str | None = None


class AnalyzeRequest(BaseModel):
    subscriptions: list[SubscriptionPayload] | None = None


class AlternativesRequest(BaseModel):
    subscription: SubscriptionPayload | None = None


# === Endpoints ===

@router.post("/categorize")
def categorize(req: CategorizeRequest, service: InsightService = Depends(get_insight_service)):
    """Suggest a category for a service name"""
    try:
        return service.categorize(req.serviceName or "")
    except InsightValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/analyze")
def analyze(req: AnalyzeRequest, service: InsightService = Depends(get_insight_service)):
    """Spending summary and three recommendations"""
    if req.subscriptions is None:
        raise HTTPException(status_code=400, detail="Subscriptions array is required")
    return service.analyze([s.to_value() for s in req.subscriptions])


@router.post("/alternatives")
def alternatives(req: AlternativesRequest, service: InsightService = Depends(get_insight_service)):
    """Cheaper alternatives and annual-plan savings for one subscription"""
    if req.subscription is None or not req.subscription.name:
        raise HTTPException(status_code=400, detail="Subscription data is required")
    try:
        return service.alternatives(req.subscription.to_value())
    except InsightValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
