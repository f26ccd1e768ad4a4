from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlmodel import SQLModel, Field

from ..core.dates import format_for_display
from ..dependencies import get_expense_service, get_export_service
from ..models.expense import Expense
from ..services.expenses import ExpenseService
from ..services.export import ExportService

router = APIRouter(
    prefix="/expenses",
    tags=["expenses"],
)

# ─────────────────────────────
#   SCHEMAS (Pydantic/SQLModel)
# ─────────────────────────────

class ExpenseCreate(SQLModel):
    title: str = Field(max_length=255)
    description: Optional[str] = None
    amount: float
    category: Optional[str] = Field(default=None, max_length=50)
    # YYYY-MM-DD
    date: str


class ExpenseUpdate(SQLModel):
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    amount: Optional[float] = None
    category: Optional[str] = Field(default=None, max_length=50)
    date: Optional[str] = None


class ExpenseRead(SQLModel):
    id: int
    title: str
    description: Optional[str] = None
    amount: float
    category: Optional[str] = None
    # DD-MM-YYYY
    date: str
    week: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_expense(cls, expense: Expense) -> "ExpenseRead":
        return cls(
            id=expense.id,
            title=expense.title,
            description=expense.description,
            amount=expense.amount,
            category=expense.category,
            date=format_for_display(expense.expense_date),
            week=expense.week,
            created_at=expense.created_at,
            updated_at=expense.updated_at,
        )


class MessageRead(SQLModel):
    message: str


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.get(
    "",
    response_model=List[ExpenseRead],
)
def list_expenses(service: ExpenseService = Depends(get_expense_service)):
    """All expenses, most recent date first."""
    return [ExpenseRead.from_expense(e) for e in service.list()]


@router.get(
    "/week/{week}",
    response_model=List[ExpenseRead],
)
def list_expenses_by_week(
    week: int,
    year: Optional[int] = None,
    service: ExpenseService = Depends(get_expense_service),
):
    """
    Expenses of an ISO week (1-53), most recent first.

    - Without `year`, the same week number of every year is returned.
    """
    return [ExpenseRead.from_expense(e) for e in service.list_by_week(week, year)]


@router.get(
    "/week/{week}/export",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
def export_week_csv(
    week: int,
    year: Optional[int] = None,
    exporter: ExportService = Depends(get_export_service),
):
    """Download the week's expenses as CSV; 404 when the week has none."""
    body = exporter.week_csv(week, year)
    return Response(
        content=body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename=expenses_week_{week}.csv",
            "Cache-Control": "no-cache",
        },
    )


@router.get(
    "/{expense_id}",
    response_model=ExpenseRead,
)
def get_expense(
    expense_id: int,
    service: ExpenseService = Depends(get_expense_service),
):
    return ExpenseRead.from_expense(service.get(expense_id))


@router.post(
    "",
    response_model=ExpenseRead,
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    expense_in: ExpenseCreate,
    service: ExpenseService = Depends(get_expense_service),
):
    """
    Create an expense.

    - `date` is expected as YYYY-MM-DD; the ISO week is derived from it.
    """
    expense = service.create(
        title=expense_in.title,
        description=expense_in.description,
        amount=expense_in.amount,
        category=expense_in.category,
        date=expense_in.date,
    )
    return ExpenseRead.from_expense(expense)


@router.put(
    "/{expense_id}",
    response_model=ExpenseRead,
)
def update_expense(
    expense_id: int,
    expense_in: ExpenseUpdate,
    service: ExpenseService = Depends(get_expense_service),
):
    """Partially update an expense; omitted fields keep their value."""
    expense = service.update(expense_id, expense_in.model_dump(exclude_unset=True))
    return ExpenseRead.from_expense(expense)


@router.delete(
    "/{expense_id}",
    response_model=MessageRead,
    status_code=status.HTTP_200_OK,
)
def delete_expense(
    expense_id: str,
    service: ExpenseService = Depends(get_expense_service),
):
    """
    Soft delete: the row is kept with deleted_at set.

    - Deleting an unknown id is not an error.
    """
    service.delete(expense_id)
    return MessageRead(message="Expense deleted")
