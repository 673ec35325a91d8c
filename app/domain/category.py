"""
Subscription categories.

Single enumeration with display metadata, shared by rollups and the API.
"""
from dataclasses import dataclass


CATEGORY_ENTERTAINMENT = "entertainment"
CATEGORY_PRODUCTIVITY = "productivity"
CATEGORY_UTILITIES = "utilities"
CATEGORY_HEALTH = "health"
CATEGORY_EDUCATION = "education"
CATEGORY_OTHER = "other"

DEFAULT_CATEGORY = CATEGORY_OTHER


@dataclass(frozen=True)
class CategoryMeta:
    code: str
    label: str
    color: str


CATEGORIES: dict[str, CategoryMeta] = {
    CATEGORY_ENTERTAINMENT: CategoryMeta(CATEGORY_ENTERTAINMENT, "Entertainment", "#8b5cf6"),
    CATEGORY_PRODUCTIVITY: CategoryMeta(CATEGORY_PRODUCTIVITY, "Productivity", "#10b981"),
    CATEGORY_UTILITIES: CategoryMeta(CATEGORY_UTILITIES, "Utilities", "#f59e0b"),
    CATEGORY_HEALTH: CategoryMeta(CATEGORY_HEALTH, "Health & Fitness", "#ef4444"),
    CATEGORY_EDUCATION: CategoryMeta(CATEGORY_EDUCATION, "Education", "#3b82f6"),
    CATEGORY_OTHER: CategoryMeta(CATEGORY_OTHER, "Other", "#6b7280"),
}

VALID_CATEGORIES = frozenset(CATEGORIES)


def normalize_category(value: str | None) -> str:
    """Missing or unknown categories fold into 'other'."""
    if value in VALID_CATEGORIES:
        return value
    return DEFAULT_CATEGORY


def category_meta(value: str | None) -> CategoryMeta:
    return CATEGORIES[normalize_category(value)]
