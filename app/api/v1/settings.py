"""
Budget settings API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.application.settings import GetBudgetSettings, UpdateBudgetSettingsUseCase, SettingsValidationError
from app.domain.subscription import BudgetSettings
from app.utils.money import money_str


router = APIRouter(prefix="/api/v1/settings", tags=["settings"])


class UpdateSettingsRequest(BaseModel):
    monthly_budget: str | float | int | None = None
    alert_threshold: int | None = None


class SettingsResponse(BaseModel):
    monthly_budget: str | None
    alert_threshold: int


def _to_response(settings: BudgetSettings) -> SettingsResponse:
    return SettingsResponse(
        monthly_budget=money_str(settings.monthly_budget),
        alert_threshold=settings.alert_threshold,
    )


@router.get("/", response_model=SettingsResponse)
def get_settings_endpoint(db: Session = Depends(get_db)):
    """Stored settings or defaults (no budget, threshold 80)"""
    return _to_response(GetBudgetSettings(db).execute())


@router.put("/", response_model=SettingsResponse)
def update_settings(req: UpdateSettingsRequest, db: Session = Depends(get_db)):
    try:
        settings = UpdateBudgetSettingsUseCase(db).execute(
            monthly_budget=req.monthly_budget,
            alert_threshold=req.alert_threshold,
        )
    except SettingsValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_response(settings)
