from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Field, SQLModel

from ..dependencies import get_budget_service
from ..services.budgets import BudgetService, WeeklySummary


router = APIRouter(
    prefix="/budget",
    tags=["budget"],
)


class BudgetIn(SQLModel):
    week: int = Field(ge=1, le=53)
    year: int = Field(ge=1)
    amount: float


class BudgetRead(SQLModel):
    id: int
    week: int
    year: int
    amount: float
    created_at: datetime
    updated_at: datetime


@router.post(
    "",
    response_model=BudgetRead,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": BudgetRead, "description": "Existing budget updated"}},
)
def set_weekly_budget(
    payload: BudgetIn,
    response: Response,
    service: BudgetService = Depends(get_budget_service),
):
    budget, created = service.set_budget(payload.week, payload.year, payload.amount)
    if not created:
        response.status_code = status.HTTP_200_OK
    return budget


@router.get(
    "",
    response_model=List[BudgetRead],
)
def list_budgets(
    year: Optional[int] = None,
    service: BudgetService = Depends(get_budget_service),
):
    return service.list_budgets(year)


@router.get(
    "/{year}/{week}",
    response_model=WeeklySummary,
)
def get_weekly_summary(
    year: int,
    week: int,
    service: BudgetService = Depends(get_budget_service),
):
    """Spent vs. budget for a week; `no_budget` is set when none was registered."""
    return service.get_summary(week, year)


@router.delete(
    "/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_budget(
    budget_id: int,
    service: BudgetService = Depends(get_budget_service),
):
    service.delete_budget(budget_id)
    return None
