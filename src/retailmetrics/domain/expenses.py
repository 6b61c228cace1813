"""Operating expense domain service and aggregation."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from retailmetrics.database.base import Database
from retailmetrics.domain.entities import Category, DateRange, Expense, ZERO
from retailmetrics.domain.errors import (
    NotFoundError,
    ValidationError,
    category_not_found,
)
from retailmetrics.domain.reports import OperatingExpensesReport

UNCATEGORIZED = "Uncategorized"


def compute_operating_expenses(
    expenses: Sequence[Expense],
    date_range: DateRange,
    categories: Sequence[Category] = (),
) -> OperatingExpensesReport:
    """Total operating expenses of a date range by category and by day."""
    category_names = {c.id: c.name for c in categories}
    by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    by_day: dict[date, Decimal] = defaultdict(lambda: ZERO)
    total = ZERO
    included = []

    for expense in expenses:
        if not date_range.contains(expense.payment_date):
            continue
        included.append(expense)
        total += expense.amount
        by_day[expense.payment_date] += expense.amount
        name = category_names.get(expense.category_id, UNCATEGORIZED)
        by_category[name] += expense.amount

    return OperatingExpensesReport(
        date_range=date_range,
        total_expenses=total,
        expenses_by_category=dict(by_category),
        expenses_by_day=dict(sorted(by_day.items())),
        expenses=tuple(included),
    )


class ExpenseService:
    """Service for recording and summarizing operating expenses."""

    def __init__(self, db: Database):
        """Initialize expense service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_expense(
        self,
        amount: Decimal,
        description: str,
        payment_date: date,
        category_name: Optional[str] = None,
    ) -> int:
        """Record an operating expense.

        Args:
            amount: Expense amount, must be positive
            description: What the expense was for
            payment_date: Date the expense was paid
            category_name: Optional category name

        Returns:
            Expense ID

        Raises:
            ValidationError: If the amount is not positive
            NotFoundError: If the category doesn't exist
        """
        if amount <= 0:
            raise ValidationError("Expense amount must be positive")
        if not description or not description.strip():
            raise ValidationError("Expense description is required")

        category_id = None
        if category_name is not None:
            category = self.db.get_category_by_name(category_name)
            if category is None:
                raise NotFoundError(category_not_found(category_name))
            category_id = category.id

        return self.db.create_expense(
            amount=amount,
            description=description.strip(),
            payment_date=payment_date,
            category_id=category_id,
        )

    def list_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Expense]:
        return self.db.list_expenses(start_date=start_date, end_date=end_date)

    def get_report(self, date_range: DateRange) -> OperatingExpensesReport:
        expenses = self.db.list_expenses(date_range.start, date_range.end)
        return compute_operating_expenses(expenses, date_range, self.db.list_categories())

