import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from weekly_finance.config import Settings
from weekly_finance.database import build_engine, init_db
from weekly_finance.main import create_app
from weekly_finance.services.budgets import BudgetService
from weekly_finance.services.expenses import ExpenseService
from weekly_finance.services.export import ExportService
from weekly_finance.store import Store


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        environment="test",
        database_url=f"sqlite:///{tmp_path / 'expenses.db'}",
        log_level="WARNING",
    )


@pytest.fixture
def engine(test_settings):
    engine = build_engine(test_settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(session):
    return Store(session)


@pytest.fixture
def expenses(store):
    return ExpenseService(store)


@pytest.fixture
def budgets(store):
    return BudgetService(store)


@pytest.fixture
def exporter(store):
    return ExportService(store)


@pytest.fixture
def client(test_settings):
    with TestClient(create_app(test_settings)) as client:
        yield client
