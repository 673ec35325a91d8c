"""
Billing projection and cost normalization.

Pure read layer over Subscription values: no I/O, no mutation, no caching.
Every function is safe to call with the current record set and the current
instant on each request.

Cost terms:
  normalized monthly cost  cost per month, sharing ignored (yearly / 12)
  payer share              normalized cost divided among shared_with people

Rollups skip records that raise InvalidInput (logged) so one malformed row
never corrupts a portfolio total. Missing first_payment_date is not an error:
the subscription has no renewal date and only shows up in cost totals.
"""
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Iterator

from app.domain.category import normalize_category
from app.domain.recurrence import add_months, add_years, last_day_of_month, months_between, with_year
from app.domain.subscription import (
    BILLING_MONTHLY, BILLING_YEARLY, VALID_BILLING_CYCLES,
    DEFAULT_ALERT_THRESHOLD, BudgetSettings, InvalidInput, Subscription,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
MONTHS_PER_YEAR = 12

# Heatmap buckets (sum of payer shares renewing on one day)
INTENSITY_HIGH_ABOVE = Decimal("500")
INTENSITY_MEDIUM_ABOVE = Decimal("100")

BUDGET_PERCENT_CAP = Decimal("150")
UPCOMING_RENEWALS_LIMIT = 3


# ---------------------------------------------------------------------------
# Per-subscription figures
# ---------------------------------------------------------------------------

def _check_cycle(sub: Subscription) -> None:
    if sub.billing_cycle not in VALID_BILLING_CYCLES:
        raise InvalidInput(f"unknown billing_cycle: {sub.billing_cycle!r}")


def normalized_monthly_cost(sub: Subscription) -> Decimal:
    """Monthly-equivalent cost, ignoring sharing. No rounding."""
    _check_cycle(sub)
    if sub.cost < 0:
        raise InvalidInput(f"cost must be >= 0, got {sub.cost}")
    if sub.billing_cycle == BILLING_YEARLY:
        return sub.cost / MONTHS_PER_YEAR
    return sub.cost


def _split(amount: Decimal, shared_with: int, is_shared: bool = True) -> Decimal:
    if shared_with < 1:
        raise InvalidInput(f"shared_with must be >= 1, got {shared_with}")
    if is_shared and shared_with > 1:
        return amount / shared_with
    return amount


def payer_share_cost(sub: Subscription) -> Decimal:
    """Monthly cost attributed to one payer of a (possibly) shared subscription."""
    return _split(normalized_monthly_cost(sub), sub.shared_with, sub.is_shared)


def _as_date(now: date | datetime) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


def next_renewal_date(sub: Subscription, now: date | datetime) -> date | None:
    """
    First renewal on or after now's calendar date, or None without an anchor.

    The result is first_payment_date plus k whole billing periods; k is the
    number of elapsed periods (plus one when the in-period date has already
    passed), computed directly rather than stepping period by period.

    Only now's date is compared, not the full instant: at 09:30 on a renewal
    day the result is today (due, days_until 0), not the next period.
    """
    anchor = sub.first_payment_date
    if anchor is None:
        return None
    _check_cycle(sub)

    today = _as_date(now)
    if anchor >= today:
        return anchor

    if sub.billing_cycle == BILLING_YEARLY:
        elapsed = today.year - anchor.year
        renewal = add_years(anchor, elapsed)
        if renewal < today:
            renewal = add_years(anchor, elapsed + 1)
    else:
        elapsed = months_between(anchor, today)
        renewal = add_months(anchor, elapsed)
        if renewal < today:
            renewal = add_months(anchor, elapsed + 1)
    return renewal


def days_until(target: date | None, now: date | datetime) -> int | None:
    """Whole days (rounded up) from now until midnight of target."""
    if target is None:
        return None
    if isinstance(now, datetime):
        start = datetime.combine(target, time.min, tzinfo=now.tzinfo)
        return math.ceil((start - now).total_seconds() / 86400)
    return (target - now).days


# ---------------------------------------------------------------------------
# Rollups
# ---------------------------------------------------------------------------

def _priced(subscriptions: Iterable[Subscription]) -> Iterator[tuple[Subscription, Decimal, Decimal]]:
    """Yield (subscription, normalized monthly, payer share), skipping bad records."""
    for sub in subscriptions:
        try:
            monthly = normalized_monthly_cost(sub)
            share = _split(monthly, sub.shared_with, sub.is_shared)
        except InvalidInput as e:
            logger.warning("Skipping subscription id=%s (%s): %s", sub.id, sub.name, e)
            continue
        yield sub, monthly, share


def total_monthly(subscriptions: Iterable[Subscription]) -> Decimal:
    """Portfolio total per month, using payer shares."""
    return sum((share for _, _, share in _priced(subscriptions)), ZERO)


def total_monthly_normalized(subscriptions: Iterable[Subscription]) -> Decimal:
    """Portfolio total per month, sharing ignored."""
    return sum((monthly for _, monthly, _ in _priced(subscriptions)), ZERO)


def category_breakdown(subscriptions: Iterable[Subscription]) -> dict[str, Decimal]:
    """
    Normalized monthly cost per category.

    Sharing is deliberately not applied here, unlike total_monthly.
    """
    out: dict[str, Decimal] = {}
    for sub, monthly, _ in _priced(subscriptions):
        cat = normalize_category(sub.category)
        out[cat] = out.get(cat, ZERO) + monthly
    return out


def monthly_spending_by_anchor_month(subscriptions: Iterable[Subscription], year: int) -> list[Decimal]:
    """
    Twelve payer-share totals for January..December of year.

    Monthly subscriptions count in every month; a yearly subscription counts
    only in the month its charge lands (its anchor month).
    """
    totals = [ZERO] * MONTHS_PER_YEAR
    for sub, _, share in _priced(subscriptions):
        if sub.billing_cycle == BILLING_MONTHLY:
            totals = [t + share for t in totals]
        elif sub.first_payment_date is not None:
            idx = with_year(sub.first_payment_date, year).month - 1
            totals[idx] += share
    return totals


def renewal_calendar(subscriptions: Iterable[Subscription], year: int, month: int) -> dict[int, list[Subscription]]:
    """
    Day of month -> subscriptions renewing that day, for one calendar month.

    A monthly anchor on a day the month does not have (e.g. the 31st in a
    30-day month) produces no entry for that month.
    """
    days_in_month = last_day_of_month(year, month)
    out: dict[int, list[Subscription]] = {}
    for sub, _, _ in _priced(subscriptions):
        anchor = sub.first_payment_date
        if anchor is None:
            continue
        if sub.billing_cycle == BILLING_YEARLY:
            renewal = with_year(anchor, year)
            if renewal.month != month:
                continue
            day = renewal.day
        else:
            day = anchor.day
            if day > days_in_month:
                continue
        out.setdefault(day, []).append(sub)
    return out


def renewals_on_day(subscriptions: Iterable[Subscription], year: int, month: int, day: int) -> list[Subscription]:
    return renewal_calendar(subscriptions, year, month).get(day, [])


def spending_intensity(day_subscriptions: Iterable[Subscription]) -> int:
    """Heatmap bucket 0..3 for the subscriptions renewing on one day."""
    priced = list(_priced(day_subscriptions))
    if not priced:
        return 0
    total = sum((share for _, _, share in priced), ZERO)
    if total > INTENSITY_HIGH_ABOVE:
        return 3
    if total > INTENSITY_MEDIUM_ABOVE:
        return 2
    if total > 0:
        return 1
    return 0


@dataclass(frozen=True)
class UpcomingRenewal:
    subscription: Subscription
    renewal_date: date
    days_until: int


def upcoming_renewals(
    subscriptions: Iterable[Subscription],
    now: date | datetime,
    limit: int | None = UPCOMING_RENEWALS_LIMIT,
) -> list[UpcomingRenewal]:
    """Anchored subscriptions ordered by next renewal date (soonest first)."""
    items: list[UpcomingRenewal] = []
    for sub, _, _ in _priced(subscriptions):
        renewal = next_renewal_date(sub, now)
        if renewal is None:
            continue
        items.append(UpcomingRenewal(sub, renewal, days_until(renewal, now)))
    items.sort(key=lambda item: item.renewal_date)
    if limit is not None:
        return items[:limit]
    return items


# ---------------------------------------------------------------------------
# Budget
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BudgetStatus:
    monthly_budget: Decimal | None
    total_spending: Decimal
    percentage: Decimal
    over_budget: bool
    near_limit: bool

    @property
    def remaining(self) -> Decimal | None:
        if self.monthly_budget is None:
            return None
        return self.monthly_budget - self.total_spending


def budget_status(total_spending: Decimal, settings: BudgetSettings) -> BudgetStatus:
    """
    Budget usage. percentage is capped at 150; near_limit fires at
    alert_threshold percent and is cleared once the budget is exceeded.
    """
    budget = settings.monthly_budget
    if not budget:
        return BudgetStatus(budget, total_spending, ZERO, False, False)

    threshold = settings.alert_threshold or DEFAULT_ALERT_THRESHOLD
    percentage = min(total_spending / budget * 100, BUDGET_PERCENT_CAP)
    over = total_spending > budget
    near = percentage >= threshold and not over
    return BudgetStatus(budget, total_spending, percentage, over, near)
