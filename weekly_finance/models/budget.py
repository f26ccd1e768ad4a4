from datetime import datetime
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from ..core.dates import utcnow


class WeeklyBudget(SQLModel, table=True):
    __tablename__ = "weekly_budgets"
    __table_args__ = (
        UniqueConstraint("week", "year", name="uq_weekly_budgets_week_year"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    week: int = Field(index=True)
    year: int = Field(index=True)

    # Spending ceiling for the (week, year) pair
    amount: float

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
