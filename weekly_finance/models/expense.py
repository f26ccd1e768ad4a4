from datetime import datetime, date
from typing import Optional
from sqlmodel import SQLModel, Field

from ..core.dates import utcnow


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: Optional[int] = Field(default=None, primary_key=True)

    title: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    # Sign is not constrained; refunds can be recorded as negative amounts.
    amount: float
    category: Optional[str] = Field(default=None, max_length=50)
    expense_date: date = Field(index=True)
    # ISO week of expense_date, stamped on every write that sets the date
    week: int = Field(index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None, index=True)
