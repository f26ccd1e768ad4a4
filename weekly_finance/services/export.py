from typing import Optional

import pandas as pd

from ..core.dates import format_for_display, validate_week
from ..core.errors import NotFound
from ..core.logging import get_logger
from ..store import Store
from .expenses import week_statement


logger = get_logger(__name__)

CSV_COLUMNS = ["ID", "Title", "Description", "Amount", "Category", "Date", "Week"]


class ExportService:
    def __init__(self, store: Store):
        self.store = store

    def week_csv(self, week: int, year: Optional[int] = None) -> bytes:
        """Render the week's expenses, newest first, as UTF-8 CSV.

        Unlike the list endpoints, an empty week is reported as ``NotFound``
        rather than producing a header-only file.
        """
        validate_week(week)
        expenses = self.store.all(week_statement(week, year))
        if not expenses:
            raise NotFound("No expenses to export for this week")

        rows = [
            {
                "ID": e.id,
                "Title": e.title,
                "Description": e.description or "",
                "Amount": f"{e.amount:.2f}",
                "Category": e.category or "",
                "Date": format_for_display(e.expense_date),
                "Week": e.week,
            }
            for e in expenses
        ]
        df = pd.DataFrame(rows, columns=CSV_COLUMNS)
        logger.info("weekly_csv_exported", week=week, year=year, rows=len(rows))
        return df.to_csv(index=False, lineterminator="\n").encode("utf-8")
