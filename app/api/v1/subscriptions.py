"""
Subscription API endpoints
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_now
from app.application.subscriptions import (
    CreateSubscriptionUseCase, GetSubscriptionUseCase, ListSubscriptions,
    UpdateSubscriptionUseCase, DeleteSubscriptionUseCase,
    SubscriptionValidationError, SubscriptionNotFoundError,
)
from app.domain import billing
from app.domain.category import category_meta
from app.domain.subscription import Subscription
from app.infrastructure.db.models import SubscriptionModel
from app.utils.money import money_str


router = APIRouter(prefix="/api/v1/subscriptions", tags=["subscriptions"])


# === Request/Response models ===

class CreateSubscriptionRequest(BaseModel):
    # name/cost are checked by the use case so a missing value is a 400, not a 422
    name: str | None = None
    cost: str | float | int | None = None
    billing_cycle: str | None = None  # monthly, yearly
    first_payment_date: date | None = None
    category: str | None = None
    status: str | None = None  # active, canceled
    is_shared: bool | None = None
    shared_with: int | None = None

    @field_validator("billing_cycle", "category", "status")
    @classmethod
    def lower_enum(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class UpdateSubscriptionRequest(BaseModel):
    name: str | None = None
    cost: str | float | int | None = None
    billing_cycle: str | None = None
    first_payment_date: date | None = None
    category: str | None = None
    status: str | None = None
    is_shared: bool | None = None
    shared_with: int | None = None

    @field_validator("billing_cycle", "category", "status")
    @classmethod
    def lower_enum(cls, v: str | None) -> str | None:
        return v.strip().lower() if v else v


class SubscriptionResponse(BaseModel):
    id: int
    name: str
    cost: str  # Decimal as string
    billing_cycle: str
    first_payment_date: date | None
    category: str
    category_label: str
    status: str
    is_shared: bool
    shared_with: int
    monthly_cost: str | None
    payer_share: str | None
    next_renewal: date | None
    days_until_renewal: int | None
    created_at: datetime | None


# === Helper functions ===

def _to_response(row: SubscriptionModel, now: datetime) -> SubscriptionResponse:
    sub = Subscription.from_record(row)
    renewal = billing.next_renewal_date(sub, now)
    return SubscriptionResponse(
        id=row.id,
        name=row.name,
        cost=money_str(row.cost),
        billing_cycle=row.billing_cycle,
        first_payment_date=row.first_payment_date,
        category=row.category,
        category_label=category_meta(row.category).label,
        status=row.status,
        is_shared=row.is_shared,
        shared_with=row.shared_with,
        monthly_cost=money_str(billing.normalized_monthly_cost(sub)),
        payer_share=money_str(billing.payer_share_cost(sub)),
        next_renewal=renewal,
        days_until_renewal=billing.days_until(renewal, now),
        created_at=row.created_at,
    )


# === Endpoints ===

@router.get("/", response_model=list[SubscriptionResponse])
def list_subscriptions(db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    """All subscriptions, newest first"""
    return [_to_response(row, now) for row in ListSubscriptions(db).execute()]


@router.get("/{sub_id}", response_model=SubscriptionResponse)
def get_subscription(sub_id: int, db: Session = Depends(get_db), now: datetime = Depends(get_now)):
    try:
        row = GetSubscriptionUseCase(db).execute(sub_id)
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return _to_response(row, now)


@router.post("/", response_model=SubscriptionResponse, status_code=201)
def create_subscription(
    req: CreateSubscriptionRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Create a subscription"""
    try:
        sub_id = CreateSubscriptionUseCase(db).execute(**req.model_dump())
    except SubscriptionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    row = GetSubscriptionUseCase(db).execute(sub_id)
    return _to_response(row, now)


@router.put("/{sub_id}", response_model=SubscriptionResponse)
def update_subscription(
    sub_id: int,
    req: UpdateSubscriptionRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Partial update: only fields present in the body are changed"""
    try:
        row = UpdateSubscriptionUseCase(db).execute(sub_id, **req.model_dump(exclude_unset=True))
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Subscription not found")
    except SubscriptionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_response(row, now)


@router.delete("/{sub_id}")
def delete_subscription(sub_id: int, db: Session = Depends(get_db)):
    try:
        DeleteSubscriptionUseCase(db).execute(sub_id)
    except SubscriptionNotFoundError:
        raise HTTPException(status_code=404, detail="Subscription not found")
    return {"message": "Subscription deleted successfully"}
