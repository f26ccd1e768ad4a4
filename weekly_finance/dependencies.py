from fastapi import Depends
from sqlmodel import Session

from .database import get_session
from .services.budgets import BudgetService
from .services.expenses import ExpenseService
from .services.export import ExportService
from .store import Store


def get_store(session: Session = Depends(get_session)) -> Store:
    return Store(session)


def get_expense_service(store: Store = Depends(get_store)) -> ExpenseService:
    return ExpenseService(store)


def get_budget_service(store: Store = Depends(get_store)) -> BudgetService:
    return BudgetService(store)


def get_export_service(store: Store = Depends(get_store)) -> ExportService:
    return ExportService(store)
