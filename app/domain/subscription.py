"""
Subscription and budget-settings value objects read by the billing core.

Records come from the persistence layer (ORM rows) or from request bodies
(plain mappings); from_record accepts either. No validation happens here:
billing functions raise InvalidInput on malformed values.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping

from app.domain.category import DEFAULT_CATEGORY


BILLING_MONTHLY = "monthly"
BILLING_YEARLY = "yearly"
VALID_BILLING_CYCLES = frozenset({BILLING_MONTHLY, BILLING_YEARLY})

STATUS_ACTIVE = "active"
STATUS_CANCELED = "canceled"
VALID_STATUSES = frozenset({STATUS_ACTIVE, STATUS_CANCELED})

MAX_SHARED_WITH = 10
DEFAULT_ALERT_THRESHOLD = 80


class InvalidInput(ValueError):
    """A subscription record violates a billing precondition."""


def _get(record: Any, key: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(key, default)
    return getattr(record, key, default)


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except ArithmeticError as e:
        raise InvalidInput(f"cost is not numeric: {value!r}") from e


def to_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


@dataclass(frozen=True)
class Subscription:
    id: Any
    name: str
    cost: Decimal
    billing_cycle: str = BILLING_MONTHLY
    first_payment_date: date | None = None
    category: str = DEFAULT_CATEGORY
    status: str = STATUS_ACTIVE
    is_shared: bool = False
    shared_with: int = 1

    @classmethod
    def from_record(cls, record: Any) -> "Subscription":
        """Build from an ORM row or a mapping (request body)."""
        shared_with = _get(record, "shared_with")
        return cls(
            id=_get(record, "id"),
            name=_get(record, "name") or "",
            cost=to_decimal(_get(record, "cost", 0)),
            billing_cycle=_get(record, "billing_cycle") or BILLING_MONTHLY,
            first_payment_date=to_date(_get(record, "first_payment_date")),
            category=_get(record, "category") or DEFAULT_CATEGORY,
            status=_get(record, "status") or STATUS_ACTIVE,
            is_shared=bool(_get(record, "is_shared", False)),
            shared_with=1 if shared_with is None else int(shared_with),
        )


@dataclass(frozen=True)
class BudgetSettings:
    monthly_budget: Decimal | None = None
    alert_threshold: int = DEFAULT_ALERT_THRESHOLD

    @classmethod
    def from_record(cls, record: Any) -> "BudgetSettings":
        if record is None:
            return cls()
        budget = _get(record, "monthly_budget")
        threshold = _get(record, "alert_threshold")
        return cls(
            monthly_budget=None if budget is None else to_decimal(budget),
            alert_threshold=DEFAULT_ALERT_THRESHOLD if threshold is None else int(threshold),
        )
