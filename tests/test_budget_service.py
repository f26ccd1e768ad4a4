import pytest
from sqlmodel import select

from weekly_finance.core.errors import NotFound, ValidationError
from weekly_finance.models.budget import WeeklyBudget


class TestSetBudget:
    def test_creates_then_overwrites(self, budgets, session):
        first, created = budgets.set_budget(10, 2024, 100.0)
        assert created is True

        second, created = budgets.set_budget(10, 2024, 250.0)
        assert created is False
        assert second.id == first.id

        rows = session.exec(select(WeeklyBudget)).all()
        assert len(rows) == 1
        assert rows[0].amount == 250.0

    def test_same_week_other_year_is_separate(self, budgets):
        budgets.set_budget(10, 2024, 100.0)
        _, created = budgets.set_budget(10, 2025, 100.0)
        assert created is True
        assert len(budgets.list_budgets()) == 2

    @pytest.mark.parametrize("week, year, amount", [(0, 2024, 10), (54, 2024, 10), (5, 0, 10), (5, 2024, 0)])
    def test_rejects_invalid_input(self, budgets, week, year, amount):
        with pytest.raises(ValidationError):
            budgets.set_budget(week, year, amount)

    def test_lost_insert_race_overwrites_winner(self, budgets, store, monkeypatch):
        # Another request inserts the pair between our lookup and our insert.
        store.save(WeeklyBudget(week=3, year=2024, amount=50.0))
        real_first = store.first
        calls = {"n": 0}

        def first_misses_once(statement):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return real_first(statement)

        monkeypatch.setattr(store, "first", first_misses_once)

        budget, created = budgets.set_budget(3, 2024, 80.0)

        assert created is False
        assert budget.amount == 80.0
        assert len(budgets.list_budgets(2024)) == 1


class TestSummary:
    def _expense(self, expenses, amount, day):
        return expenses.create(title="item", amount=amount, date=day)

    def test_no_budget(self, budgets):
        summary = budgets.get_summary(10, 2024)
        assert summary.no_budget is True
        assert summary.budget == 0
        assert summary.spent == 0
        assert summary.remaining == 0
        assert summary.over_budget is False

    def test_over_budget(self, budgets, expenses):
        budgets.set_budget(10, 2024, 100.0)
        self._expense(expenses, 60.0, "2024-03-05")
        self._expense(expenses, 90.0, "2024-03-07")

        summary = budgets.get_summary(10, 2024)

        assert summary.no_budget is False
        assert summary.budget == 100.0
        assert summary.spent == 150.0
        assert summary.remaining == -50.0
        assert summary.over_budget is True

    def test_under_budget(self, budgets, expenses):
        budgets.set_budget(10, 2024, 100.0)
        self._expense(expenses, 40.0, "2024-03-05")
        summary = budgets.get_summary(10, 2024)
        assert summary.remaining == 60.0
        assert summary.over_budget is False

    def test_no_expenses_means_zero_spent(self, budgets):
        budgets.set_budget(10, 2024, 100.0)
        summary = budgets.get_summary(10, 2024)
        assert summary.spent == 0
        assert summary.remaining == 100.0

    def test_only_counts_the_requested_year(self, budgets, expenses):
        budgets.set_budget(10, 2024, 100.0)
        self._expense(expenses, 30.0, "2024-03-07")
        self._expense(expenses, 500.0, "2023-03-07")  # also ISO week 10
        assert budgets.get_summary(10, 2024).spent == 30.0

    def test_year_filter_uses_calendar_year_of_date(self, budgets, expenses):
        # 2023-01-01 is ISO week 52 but falls in calendar year 2023
        budgets.set_budget(52, 2023, 10.0)
        self._expense(expenses, 7.0, "2023-01-01")
        self._expense(expenses, 3.0, "2023-12-28")
        assert budgets.get_summary(52, 2023).spent == 10.0

    def test_deleted_expenses_are_excluded(self, budgets, expenses):
        budgets.set_budget(10, 2024, 100.0)
        keep = self._expense(expenses, 30.0, "2024-03-07")
        gone = self._expense(expenses, 70.0, "2024-03-07")
        expenses.delete(gone.id)
        assert keep.id != gone.id
        assert budgets.get_summary(10, 2024).spent == 30.0

    def test_invalid_week(self, budgets):
        with pytest.raises(ValidationError):
            budgets.get_summary(60, 2024)


class TestListAndDelete:
    def test_list_orders_newest_first(self, budgets):
        budgets.set_budget(2, 2024, 1.0)
        budgets.set_budget(40, 2023, 1.0)
        budgets.set_budget(9, 2024, 1.0)
        assert [(b.year, b.week) for b in budgets.list_budgets()] == [(2024, 9), (2024, 2), (2023, 40)]

    def test_list_filters_by_year(self, budgets):
        budgets.set_budget(2, 2024, 1.0)
        budgets.set_budget(40, 2023, 1.0)
        assert [b.week for b in budgets.list_budgets(2023)] == [40]

    def test_delete(self, budgets):
        budget, _ = budgets.set_budget(2, 2024, 1.0)
        budgets.delete_budget(budget.id)
        assert budgets.list_budgets() == []
        assert budgets.get_summary(2, 2024).no_budget is True

    def test_delete_missing(self, budgets):
        with pytest.raises(NotFound):
            budgets.delete_budget(42)
