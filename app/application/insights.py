"""
AI categorization and spending insights.

Every public method returns usable content: when the model is not configured,
unreachable, or answers with something unparseable, deterministic fallback
content is returned instead. Billing rollups never depend on this module.
"""
import logging
import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from app.domain import billing
from app.domain.category import VALID_CATEGORIES, normalize_category
from app.domain.subscription import BILLING_MONTHLY, BILLING_YEARLY, Subscription
from app.infrastructure.llm import LLMClient, LLMUnavailableError
from app.utils.money import format_money

logger = logging.getLogger(__name__)

# Annual plans typically give ~2 months free (2/12). Fixed policy, not derived.
ANNUAL_PLAN_SAVINGS_RATE = Decimal("0.1667")

# Fallback alternative pricing: a generic cheaper option at 70% of the cost
GENERIC_ALTERNATIVE_RATE = Decimal("0.7")

# Substring match on the lower-cased service name, checked in this order
SERVICE_CATEGORIES: dict[str, str] = {
    "netflix": "entertainment",
    "spotify": "entertainment",
    "disney+": "entertainment",
    "disney plus": "entertainment",
    "hulu": "entertainment",
    "hbo max": "entertainment",
    "prime video": "entertainment",
    "amazon prime": "entertainment",
    "youtube": "entertainment",
    "twitch": "entertainment",
    "crunchyroll": "entertainment",
    "apple tv": "entertainment",
    "apple music": "entertainment",

    "notion": "productivity",
    "slack": "productivity",
    "asana": "productivity",
    "trello": "productivity",
    "monday": "productivity",
    "todoist": "productivity",
    "evernote": "productivity",
    "dropbox": "productivity",
    "google one": "productivity",
    "icloud": "productivity",
    "1password": "productivity",
    "lastpass": "productivity",
    "zoom": "productivity",

    "aws": "utilities",
    "google cloud": "utilities",
    "azure": "utilities",
    "digitalocean": "utilities",
    "vercel": "utilities",
    "netlify": "utilities",
    "heroku": "utilities",
    "cloudflare": "utilities",

    "peloton": "health",
    "headspace": "health",
    "calm": "health",
    "fitbit": "health",
    "apple fitness": "health",
    "strava": "health",

    "coursera": "education",
    "udemy": "education",
    "skillshare": "education",
    "masterclass": "education",
    "duolingo": "education",
    "linkedin": "education",
    "pluralsight": "education",
}

FALLBACK_RECOMMENDATIONS = [
    {
        "type": "savings",
        "title": "Consider Annual Plans",
        "description": "Switching to yearly billing often saves 15-20% on subscription costs.",
    },
    {
        "type": "overlap",
        "title": "Review Similar Services",
        "description": "Check if any of your subscriptions offer overlapping features.",
    },
    {
        "type": "unused",
        "title": "Track Your Usage",
        "description": "Cancel subscriptions you haven't used in the last 30 days.",
    },
]

CATEGORIZE_PROMPT = """You are a subscription categorization assistant. Given a service name, respond with ONLY a JSON object containing:
1. "category": one of these exact values: "entertainment", "productivity", "utilities", "health", "education", "other"
2. "tip": a brief helpful tip about this service (max 100 chars)

Example response:
{"category": "entertainment", "tip": "Consider the annual plan to save 2 months."}"""

ANALYZE_PROMPT = """You are a financial advisor specializing in subscription management. Analyze the user's subscriptions and provide actionable insights. Respond with ONLY a JSON object containing:
1. "summary": A 1-2 sentence summary of their spending
2. "recommendations": An array of 3 objects, each with:
   - "type": one of "savings", "overlap", or "unused"
   - "title": Short title (max 50 chars)
   - "description": Actionable advice (max 150 chars)

Be specific and reference their actual subscriptions when possible."""

ALTERNATIVES_PROMPT = """You are a subscription advisor helping users save money. Given a subscription service, suggest alternatives and savings opportunities. Respond with ONLY a JSON object containing:
1. "alternatives": An array of 2-3 objects with:
   - "name": Alternative service name
   - "estimated_cost": Monthly cost in INR (number)
   - "savings": Monthly savings vs current service (number)
   - "reason": Why this is a good alternative (max 80 chars)
2. "bundle_tip": A tip about bundling opportunities (max 100 chars, or null)
3. "annual_savings": Estimated yearly savings if switching to annual plan (number, or null)
4. "annual_tip": Advice about annual billing (max 80 chars, or null)

Focus on real, practical alternatives available in India."""


class InsightValidationError(ValueError):
    pass


def local_category(service_name: str) -> str | None:
    lower = service_name.lower()
    for keyword, category in SERVICE_CATEGORIES.items():
        if keyword in lower:
            return category
    return None


def annual_plan_savings(sub: Subscription) -> int | None:
    """Estimated yearly saving from switching a monthly plan to annual billing."""
    if sub.billing_cycle != BILLING_MONTHLY:
        return None
    estimate = sub.cost * 12 * ANNUAL_PLAN_SAVINGS_RATE
    return int(estimate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


RECOMMENDATION_KEYS = ("type", "title", "description")


def _valid_recommendations(items: Any) -> list[dict[str, Any]]:
    """Keep only {type, title, description} objects from a model answer."""
    if not isinstance(items, list):
        return []
    return [
        {key: item[key] for key in RECOMMENDATION_KEYS}
        for item in items
        if isinstance(item, dict) and all(item.get(key) for key in RECOMMENDATION_KEYS)
    ]


def _cycle_unit(sub: Subscription) -> str:
    return "year" if sub.billing_cycle == BILLING_YEARLY else "month"


class InsightService:
    def __init__(self, client: LLMClient | None = None):
        self.client = client or LLMClient()

    # ------------------------------------------------------------------
    # Categorize
    # ------------------------------------------------------------------

    def categorize(self, service_name: str) -> dict[str, Any]:
        """Returns {category, tip, source}; source is local / fallback / ai / error."""
        service_name = (service_name or "").strip()
        if not service_name:
            raise InsightValidationError("Service name is required")

        category = local_category(service_name)
        if category:
            return {"category": category, "tip": f"Recognized as a {category} service.", "source": "local"}

        if not self.client.enabled:
            return {
                "category": "other",
                "tip": "AI categorization unavailable. Please select a category manually.",
                "source": "fallback",
            }

        try:
            parsed = self.client.chat_json(
                CATEGORIZE_PROMPT, f'Categorize this subscription service: "{service_name}"',
                max_tokens=100, temperature=0.3,
            )
        except LLMUnavailableError as e:
            logger.warning("AI categorization failed for %r: %s", service_name, e)
            return {
                "category": "other",
                "tip": "Could not reach AI service. Please select manually.",
                "source": "error",
            }

        if parsed and parsed.get("category"):
            raw = parsed["category"]
            if raw not in VALID_CATEGORIES:
                logger.info("AI returned unknown category %r for %r", raw, service_name)
            return {
                "category": normalize_category(raw),
                "tip": parsed.get("tip") or "",
                "source": "ai",
            }
        return {"category": "other", "tip": "Unable to categorize. Please select manually.", "source": "ai"}

    # ------------------------------------------------------------------
    # Analyze
    # ------------------------------------------------------------------

    def _fallback_analysis(self, subscriptions: list[Subscription]) -> dict[str, Any]:
        total = billing.total_monthly_normalized(subscriptions)
        return {
            "summary": f"You're spending {format_money(total)}/month across {len(subscriptions)} subscriptions.",
            "recommendations": [dict(r) for r in FALLBACK_RECOMMENDATIONS],
        }

    def analyze(self, subscriptions: list[Subscription]) -> dict[str, Any]:
        """Returns {summary, recommendations[{type, title, description}]}."""
        if not self.client.enabled:
            return self._fallback_analysis(subscriptions)

        total = billing.total_monthly_normalized(subscriptions)
        lines = "\n".join(
            f"{s.name}: {format_money(s.cost)}/{_cycle_unit(s)} ({s.category})" for s in subscriptions
        )
        user_prompt = f"Analyze these subscriptions:\n{lines}\n\nTotal monthly: {format_money(total)}"

        try:
            parsed = self.client.chat_json(ANALYZE_PROMPT, user_prompt, max_tokens=500, temperature=0.5)
        except LLMUnavailableError as e:
            logger.warning("AI analysis failed: %s", e)
            return self._fallback_analysis(subscriptions)

        recommendations = _valid_recommendations(parsed.get("recommendations")) if parsed else []
        if not recommendations:
            logger.warning("AI analysis answer unparseable, using fallback")
            return self._fallback_analysis(subscriptions)

        fallback = self._fallback_analysis(subscriptions)
        return {
            "summary": parsed.get("summary") or fallback["summary"],
            "recommendations": recommendations,
        }

    # ------------------------------------------------------------------
    # Alternatives
    # ------------------------------------------------------------------

    def _annual_fields(self, sub: Subscription, short: bool = False) -> dict[str, Any]:
        savings = annual_plan_savings(sub)
        if savings is None:
            return {"annual_savings": None, "annual_tip": None}
        prefix = "Annual billing could save" if short else "Switching to annual billing could save you"
        return {"annual_savings": savings, "annual_tip": f"{prefix} ~{format_money(savings)}/year"}

    def _fallback_alternatives(self, sub: Subscription) -> dict[str, Any]:
        return {
            "alternatives": [
                {
                    "name": "Free tier options",
                    "estimated_cost": 0,
                    "savings": float(sub.cost),
                    "reason": "Many services offer free tiers with limited features.",
                }
            ],
            "bundle_tip": "Check for bundle deals that include this service.",
            **self._annual_fields(sub, short=True),
        }

    def alternatives(self, sub: Subscription) -> dict[str, Any]:
        """Returns {alternatives[{name, estimated_cost, savings, reason}], bundle_tip, annual_savings, annual_tip}."""
        if not sub.name:
            raise InsightValidationError("Subscription data is required")

        if not self.client.enabled:
            cheaper = math.floor(sub.cost * GENERIC_ALTERNATIVE_RATE)
            return {
                "alternatives": [
                    {
                        "name": "Generic Alternative",
                        "estimated_cost": cheaper,
                        "savings": math.floor(sub.cost - sub.cost * GENERIC_ALTERNATIVE_RATE),
                        "reason": "Consider exploring free or lower-cost alternatives in this category.",
                    }
                ],
                "bundle_tip": "Check if any of your other subscriptions offer bundled access to similar services.",
                **self._annual_fields(sub),
            }

        user_prompt = (
            f"Find alternatives for: {sub.name} "
            f"({format_money(sub.cost)}/{sub.billing_cycle}, Category: {sub.category})"
        )
        try:
            parsed = self.client.chat_json(ALTERNATIVES_PROMPT, user_prompt, max_tokens=500, temperature=0.5)
        except LLMUnavailableError as e:
            logger.warning("AI alternatives failed for %r: %s", sub.name, e)
            return self._fallback_alternatives(sub)

        if not parsed or not isinstance(parsed.get("alternatives"), list):
            logger.warning("AI alternatives answer unparseable for %r, using fallback", sub.name)
            return self._fallback_alternatives(sub)

        result = {
            "alternatives": parsed["alternatives"],
            "bundle_tip": parsed.get("bundle_tip"),
            "annual_savings": parsed.get("annual_savings"),
            "annual_tip": parsed.get("annual_tip"),
        }
        if not result["annual_savings"]:
            annual = self._annual_fields(sub)
            if annual["annual_savings"] is not None:
                result.update(annual)
        return result
