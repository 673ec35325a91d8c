"""
Dashboard, calendar and simulator views.

Pure read-layer: loads the current subscription list and settings, runs the
billing core, and shapes JSON-ready dicts. Money leaves as 2-place strings.
"""
from datetime import date, datetime
from typing import Any

from sqlalchemy.orm import Session

from app.application.settings import GetBudgetSettings
from app.application.subscriptions import ListSubscriptions
from app.domain import billing
from app.domain.category import CATEGORIES, category_meta
from app.domain.recurrence import last_day_of_month
from app.domain.simulator import SimulationSession, simulate
from app.domain.subscription import InvalidInput, Subscription
from app.utils.money import money_str, percent_str

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def subscription_brief(sub: Subscription) -> dict[str, Any]:
    meta = category_meta(sub.category)
    try:
        share = money_str(billing.payer_share_cost(sub))
    except InvalidInput:
        share = None
    return {
        "id": sub.id,
        "name": sub.name,
        "cost": money_str(sub.cost),
        "billing_cycle": sub.billing_cycle,
        "category": meta.code,
        "category_label": meta.label,
        "color": meta.color,
        "is_shared": sub.is_shared,
        "shared_with": sub.shared_with,
        "payer_share": share,
    }


class DashboardService:
    def __init__(self, db: Session):
        self.db = db

    def _subscriptions(self) -> list[Subscription]:
        return ListSubscriptions(self.db).as_values()

    # ------------------------------------------------------------------
    # Overview
    # ------------------------------------------------------------------

    def get_overview(self, now: datetime) -> dict[str, Any]:
        """
        Returns:
            total_monthly:  payer-share total per month
            total_yearly:   total_monthly x 12
            count:          number of subscriptions
            categories:     [{category, label, color, amount}] largest first
            upcoming:       next 3 renewals
            budget:         budget usage (percentage, over_budget, near_limit)
        """
        subs = self._subscriptions()
        total = billing.total_monthly(subs)
        breakdown = billing.category_breakdown(subs)
        settings = GetBudgetSettings(self.db).execute()
        status = billing.budget_status(total, settings)

        categories = [
            {
                "category": code,
                "label": CATEGORIES[code].label,
                "color": CATEGORIES[code].color,
                "amount": money_str(amount),
            }
            for code, amount in sorted(breakdown.items(), key=lambda kv: kv[1], reverse=True)
        ]
        upcoming = [
            {
                **subscription_brief(item.subscription),
                "renewal_date": item.renewal_date.isoformat(),
                "days_until": item.days_until,
            }
            for item in billing.upcoming_renewals(subs, now)
        ]
        return {
            "total_monthly": money_str(total),
            "total_yearly": money_str(total * billing.MONTHS_PER_YEAR),
            "count": len(subs),
            "next_renewal_days": upcoming[0]["days_until"] if upcoming else None,
            "categories": categories,
            "upcoming": upcoming,
            "budget": {
                "monthly_budget": money_str(status.monthly_budget),
                "alert_threshold": settings.alert_threshold,
                "percentage": money_str(status.percentage),
                "remaining": money_str(status.remaining),
                "over_budget": status.over_budget,
                "near_limit": status.near_limit,
            },
        }

    # ------------------------------------------------------------------
    # Renewal calendar
    # ------------------------------------------------------------------

    def get_calendar(self, year: int, month: int, today: date) -> dict[str, Any]:
        """
        One month grid of renewals with heatmap intensities, plus the
        twelve-bar yearly overview with the viewed month marked active.
        """
        subs = self._subscriptions()
        renewals = billing.renewal_calendar(subs, year, month)

        days = [
            {
                "day": day,
                "is_today": date(year, month, day) == today,
                "intensity": billing.spending_intensity(renewals.get(day, [])),
                "subscriptions": [subscription_brief(s) for s in renewals.get(day, [])],
            }
            for day in range(1, last_day_of_month(year, month) + 1)
        ]
        totals = billing.monthly_spending_by_anchor_month(subs, year)
        months = [
            {"month": MONTH_ABBR[i], "total": money_str(total), "is_active": i == month - 1}
            for i, total in enumerate(totals)
        ]
        return {
            "year": year,
            "month": month,
            "first_weekday": date(year, month, 1).isoweekday() % 7,  # Sunday = 0
            "days": days,
            "monthly_totals": months,
        }

    # ------------------------------------------------------------------
    # Simulator
    # ------------------------------------------------------------------

    def run_simulation(self, session: SimulationSession) -> dict[str, Any]:
        result = simulate(self._subscriptions(), session)
        return {
            "current_monthly": money_str(result.current_monthly),
            "simulated_monthly": money_str(result.simulated_monthly),
            "savings": money_str(result.savings),
            "savings_percent": percent_str(result.savings_percent),
            "yearly_savings": money_str(result.yearly_savings),
            "session": session.to_dict(),
            "lines": [
                {
                    **subscription_brief(line.subscription),
                    "removed": line.removed,
                    "effective_split": line.effective_split,
                    "monthly_cost": money_str(line.monthly_cost),
                }
                for line in result.lines
            ],
        }
