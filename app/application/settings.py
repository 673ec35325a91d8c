"""
Budget settings use cases (single settings row, upsert semantics).
"""
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.domain.subscription import DEFAULT_ALERT_THRESHOLD, BudgetSettings
from app.infrastructure.db.models import UserSettingsModel
from app.utils.validation import validate_and_normalize_amount

logger = logging.getLogger(__name__)


class SettingsValidationError(ValueError):
    pass


def _load_row(db: Session) -> UserSettingsModel | None:
    return db.query(UserSettingsModel).order_by(UserSettingsModel.id).first()


class GetBudgetSettings:
    """Stored settings, or defaults when nothing has been saved yet."""

    def __init__(self, db: Session):
        self.db = db

    def execute(self) -> BudgetSettings:
        return BudgetSettings.from_record(_load_row(self.db))


class UpdateBudgetSettingsUseCase:
    def __init__(self, db: Session):
        self.db = db

    def execute(self, monthly_budget: Any = None, alert_threshold: Any = None) -> BudgetSettings:
        """
        Upsert the settings row.

        Omitted values reset to defaults: monthly_budget -> None (no budget),
        alert_threshold -> 80.
        """
        if monthly_budget is None or monthly_budget == "":
            budget = None
        else:
            try:
                budget = validate_and_normalize_amount(monthly_budget)
            except ValueError as e:
                raise SettingsValidationError(f"Invalid monthly_budget: {e}") from e

        if alert_threshold is None:
            threshold = DEFAULT_ALERT_THRESHOLD
        else:
            try:
                threshold = int(alert_threshold)
            except (TypeError, ValueError) as e:
                raise SettingsValidationError(f"alert_threshold must be an integer, got: {alert_threshold!r}") from e
            if not 0 <= threshold <= 100:
                raise SettingsValidationError("alert_threshold must be between 0 and 100")

        row = _load_row(self.db)
        if row is None:
            row = UserSettingsModel(monthly_budget=budget, alert_threshold=threshold)
            self.db.add(row)
        else:
            row.monthly_budget = budget
            row.alert_threshold = threshold
            row.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        logger.info("Budget settings saved: budget=%s threshold=%s", budget, threshold)
        return BudgetSettings.from_record(row)
