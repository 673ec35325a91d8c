"""
Subscription use cases — CRUD over the subscriptions table.

Works directly with the ORM. Field validation happens here, before any record
reaches the billing core.
"""
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from app.domain.category import DEFAULT_CATEGORY, VALID_CATEGORIES
from app.domain.subscription import (
    BILLING_MONTHLY, MAX_SHARED_WITH, STATUS_ACTIVE, VALID_BILLING_CYCLES, VALID_STATUSES,
    Subscription, to_date,
)
from app.infrastructure.db.models import SubscriptionModel
from app.utils.validation import validate_and_normalize_amount

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "name", "cost", "billing_cycle", "first_payment_date",
    "category", "status", "is_shared", "shared_with",
)


class SubscriptionValidationError(ValueError):
    pass


class SubscriptionNotFoundError(LookupError):
    pass


# ============================================================================
# Field validation
# ============================================================================


def _clean_name(value: Any) -> str:
    name = (value or "").strip()
    if not name:
        raise SubscriptionValidationError("Name is required")
    return name


def _clean_cost(value: Any) -> Decimal:
    if value is None or value == "":
        raise SubscriptionValidationError("Cost is required")
    try:
        return validate_and_normalize_amount(value)
    except ValueError as e:
        raise SubscriptionValidationError(f"Invalid cost: {e}") from e


def _clean_choice(value: Any, allowed: frozenset, field: str) -> str:
    if value not in allowed:
        raise SubscriptionValidationError(
            f"{field} must be one of {', '.join(sorted(allowed))}, got: {value!r}"
        )
    return value


def _clean_date(value: Any) -> date | None:
    try:
        return to_date(value)
    except ValueError as e:
        raise SubscriptionValidationError(f"Invalid first_payment_date: {value!r}") from e


def _clean_shared_with(value: Any) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError) as e:
        raise SubscriptionValidationError(f"shared_with must be an integer, got: {value!r}") from e
    if not 1 <= n <= MAX_SHARED_WITH:
        raise SubscriptionValidationError(f"shared_with must be between 1 and {MAX_SHARED_WITH}")
    return n


_CLEANERS = {
    "name": _clean_name,
    "cost": _clean_cost,
    "billing_cycle": lambda v: _clean_choice(v, VALID_BILLING_CYCLES, "billing_cycle"),
    "first_payment_date": _clean_date,
    "category": lambda v: _clean_choice(v, VALID_CATEGORIES, "category"),
    "status": lambda v: _clean_choice(v, VALID_STATUSES, "status"),
    "is_shared": bool,
    "shared_with": _clean_shared_with,
}


def _get_or_raise(db: Session, sub_id: int) -> SubscriptionModel:
    sub = db.get(SubscriptionModel, sub_id)
    if sub is None:
        raise SubscriptionNotFoundError(f"Subscription {sub_id} not found")
    return sub


# ============================================================================
# Subscriptions CRUD
# ============================================================================


class CreateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(
        self,
        name: str,
        cost: Any,
        billing_cycle: str | None = None,
        first_payment_date: Any = None,
        category: str | None = None,
        status: str | None = None,
        is_shared: bool | None = None,
        shared_with: int | None = None,
    ) -> int:
        sub = SubscriptionModel(
            name=_clean_name(name),
            cost=_clean_cost(cost),
            billing_cycle=_CLEANERS["billing_cycle"](billing_cycle or BILLING_MONTHLY),
            first_payment_date=_clean_date(first_payment_date),
            category=_CLEANERS["category"](category or DEFAULT_CATEGORY),
            status=_CLEANERS["status"](status or STATUS_ACTIVE),
            is_shared=bool(is_shared),
            shared_with=_clean_shared_with(shared_with or 1),
        )
        self.db.add(sub)
        self.db.flush()
        self.db.commit()
        logger.info("Created subscription id=%s name=%s", sub.id, sub.name)
        return sub.id


class GetSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: int) -> SubscriptionModel:
        return _get_or_raise(self.db, sub_id)


class ListSubscriptions:
    """All subscriptions, newest first."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self) -> list[SubscriptionModel]:
        return (
            self.db.query(SubscriptionModel)
            .order_by(SubscriptionModel.created_at.desc(), SubscriptionModel.id.desc())
            .all()
        )

    def as_values(self) -> list[Subscription]:
        """Same list converted to billing-core values."""
        return [Subscription.from_record(row) for row in self.execute()]


class UpdateSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: int, **changes) -> SubscriptionModel:
        """Partial update: only keys present in changes are touched."""
        sub = _get_or_raise(self.db, sub_id)

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise SubscriptionValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        for field, value in changes.items():
            if value is None and field != "first_payment_date":
                continue
            setattr(sub, field, _CLEANERS[field](value))

        sub.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        return sub


class DeleteSubscriptionUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, sub_id: int) -> None:
        sub = _get_or_raise(self.db, sub_id)
        self.db.delete(sub)
        self.db.commit()
        logger.info("Deleted subscription id=%s", sub_id)
