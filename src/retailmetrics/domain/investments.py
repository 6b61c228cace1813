"""Initial investment domain service."""

from datetime import date
from decimal import Decimal
from typing import Optional

from retailmetrics.database.base import Database
from retailmetrics.domain.entities import InitialInvestment
from retailmetrics.domain.errors import ValidationError


class InvestmentService:
    """Service for recording the capital put into the business."""

    def __init__(self, db: Database):
        """Initialize investment service.

        Args:
            db: Database instance
        """
        self.db = db

    def add_investment(
        self,
        amount: Decimal,
        description: Optional[str] = None,
        investment_date: Optional[date] = None,
    ) -> int:
        """Record an initial investment.

        Undated investments count toward total investment but are left out
        of the monthly ROI series.

        Raises:
            ValidationError: If the amount is not positive
        """
        if amount <= 0:
            raise ValidationError("Investment amount must be positive")
        if description is not None:
            description = description.strip() or None
        return self.db.create_investment(
            amount=amount, description=description, investment_date=investment_date
        )

    def list_investments(self) -> list[InitialInvestment]:
        return self.db.list_investments()
