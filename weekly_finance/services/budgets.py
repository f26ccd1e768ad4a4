from typing import List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy import extract, func
from sqlmodel import select

from ..core.dates import utcnow, validate_week
from ..core.errors import DuplicateRecord, NotFound, ValidationError
from ..core.logging import get_logger
from ..models.budget import WeeklyBudget
from ..models.expense import Expense
from ..store import Store


logger = get_logger(__name__)


class WeeklySummary(BaseModel):
    week: int
    year: int
    budget: float = 0.0
    spent: float = 0.0
    remaining: float = 0.0
    over_budget: bool = False
    no_budget: bool = False
    message: Optional[str] = None


class BudgetService:
    def __init__(self, store: Store):
        self.store = store

    def _find(self, week: int, year: int) -> Optional[WeeklyBudget]:
        return self.store.first(
            select(WeeklyBudget).where(
                WeeklyBudget.week == week,
                WeeklyBudget.year == year,
            )
        )

    def _overwrite(self, budget: WeeklyBudget, amount: float) -> WeeklyBudget:
        budget.amount = amount
        budget.updated_at = utcnow()
        self.store.save(budget)
        logger.info("budget_updated", budget_id=budget.id, week=budget.week, year=budget.year)
        return budget

    def set_budget(self, week: int, year: int, amount: float) -> Tuple[WeeklyBudget, bool]:
        """Create or overwrite the budget for ``(week, year)``.

        Returns the stored row and whether it was newly created. The table
        has a unique key on (week, year): if a concurrent request inserts the
        same pair first, the insert fails and that row is overwritten instead.
        """
        validate_week(week)
        if year < 1:
            raise ValidationError("Invalid year")
        if not amount:
            raise ValidationError("amount is required")

        existing = self._find(week, year)
        if existing is not None:
            return self._overwrite(existing, amount), False

        now = utcnow()
        budget = WeeklyBudget(week=week, year=year, amount=amount, created_at=now, updated_at=now)
        try:
            self.store.save(budget)
        except DuplicateRecord:
            winner = self._find(week, year)
            if winner is None:
                raise
            return self._overwrite(winner, amount), False

        logger.info("budget_created", budget_id=budget.id, week=week, year=year)
        return budget, True

    def spent(self, week: int, year: int) -> float:
        """Sum of active expenses in ``week`` whose date falls in calendar ``year``."""
        total = self.store.scalar(
            select(func.coalesce(func.sum(Expense.amount), 0.0)).where(
                Expense.deleted_at.is_(None),
                Expense.week == week,
                extract("year", Expense.expense_date) == year,
            )
        )
        return float(total or 0.0)

    def get_summary(self, week: int, year: int) -> WeeklySummary:
        validate_week(week)

        budget = self._find(week, year)
        if budget is None:
            return WeeklySummary(
                week=week,
                year=year,
                no_budget=True,
                message="No budget registered for this week",
            )

        spent = self.spent(week, year)
        remaining = budget.amount - spent
        return WeeklySummary(
            week=week,
            year=year,
            budget=budget.amount,
            spent=spent,
            remaining=remaining,
            over_budget=remaining < 0,
        )

    def list_budgets(self, year: Optional[int] = None) -> List[WeeklyBudget]:
        statement = select(WeeklyBudget)
        if year is not None:
            statement = statement.where(WeeklyBudget.year == year)
        statement = statement.order_by(WeeklyBudget.year.desc(), WeeklyBudget.week.desc())
        return self.store.all(statement)

    def delete_budget(self, budget_id: int) -> None:
        budget = self.store.get(WeeklyBudget, budget_id)
        if budget is None:
            raise NotFound("Budget not found")
        week, year = budget.week, budget.year
        self.store.delete(budget)
        logger.info("budget_deleted", budget_id=budget_id, week=week, year=year)
