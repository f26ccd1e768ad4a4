from typing import Any, List, Mapping, Optional

from sqlalchemy import extract
from sqlmodel import select

from ..core.dates import calculate_week, parse_input, utcnow, validate_week
from ..core.errors import NotFound, ValidationError
from ..core.logging import get_logger
from ..models.expense import Expense
from ..store import Store


logger = get_logger(__name__)


def active_expenses():
    return select(Expense).where(Expense.deleted_at.is_(None))


def newest_first(statement):
    return statement.order_by(Expense.expense_date.desc(), Expense.id.desc())


def week_statement(week: int, year: Optional[int] = None):
    """Expenses stamped with ``week``; without ``year`` every year is included."""
    statement = active_expenses().where(Expense.week == week)
    if year is not None:
        statement = statement.where(extract("year", Expense.expense_date) == year)
    return newest_first(statement)


def parse_expense_id(raw: Any) -> int:
    try:
        expense_id = int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid expense id")
    if expense_id < 1:
        raise ValidationError("Invalid expense id")
    return expense_id


class ExpenseService:
    def __init__(self, store: Store):
        self.store = store

    def create(
        self,
        *,
        title: Optional[str],
        amount: Optional[float],
        date: Optional[str],
        description: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Expense:
        """Store a new expense stamped with the ISO week of its date.

        ``title`` and ``amount`` are required; an amount of zero counts as
        missing. The date is accepted as ``YYYY-MM-DD``.
        """
        if not title or not title.strip():
            raise ValidationError("title is required")
        if not amount:
            raise ValidationError("amount is required")
        if date is None:
            raise ValidationError("date is required")
        expense_date = parse_input(date)

        now = utcnow()
        expense = Expense(
            title=title.strip(),
            description=description,
            amount=amount,
            category=category,
            expense_date=expense_date,
            week=calculate_week(expense_date),
            created_at=now,
            updated_at=now,
        )
        self.store.save(expense)
        logger.info("expense_created", expense_id=expense.id, week=expense.week)
        return expense

    def get(self, expense_id: int) -> Expense:
        expense = self.store.get(Expense, expense_id)
        if expense is None or expense.deleted_at is not None:
            raise NotFound("Expense not found")
        return expense

    def list(self) -> List[Expense]:
        return self.store.all(newest_first(active_expenses()))

    def list_by_week(self, week: int, year: Optional[int] = None) -> List[Expense]:
        validate_week(week)
        return self.store.all(week_statement(week, year))

    def update(self, expense_id: int, changes: Mapping[str, Any]) -> Expense:
        """Apply the fields present in ``changes``.

        ``None`` values are ignored, and so is an amount of exactly zero: older
        clients send 0 for "unchanged". A new date re-stamps the week.
        """
        title = changes.get("title")
        if title is not None and not title.strip():
            raise ValidationError("title must not be empty")
        new_date = changes.get("date")
        parsed_date = parse_input(new_date) if new_date is not None else None

        expense = self.get(expense_id)

        updated = False
        if title is not None:
            expense.title = title.strip()
            updated = True
        for field in ("description", "category"):
            value = changes.get(field)
            if value is not None:
                setattr(expense, field, value or None)
                updated = True
        amount = changes.get("amount")
        if amount:
            expense.amount = amount
            updated = True
        if parsed_date is not None:
            expense.expense_date = parsed_date
            expense.week = calculate_week(parsed_date)
            updated = True

        if not updated:
            return expense

        expense.updated_at = utcnow()
        self.store.save(expense)
        logger.info("expense_updated", expense_id=expense.id, week=expense.week)
        return expense

    def delete(self, raw_id: Any) -> None:
        """Soft-delete an expense. Unknown ids are not reported."""
        expense_id = parse_expense_id(raw_id)

        expense = self.store.get(Expense, expense_id)
        if expense is None or expense.deleted_at is not None:
            logger.info("expense_delete_noop", expense_id=expense_id)
            return

        now = utcnow()
        expense.deleted_at = now
        expense.updated_at = now
        self.store.save(expense)
        logger.info("expense_deleted", expense_id=expense_id)
