"""Read-only data source over a JSON export of the hosted database."""

import json
import logging
from collections import defaultdict
from datetime import date, timedelta, tzinfo as TZInfo
from pathlib import Path
from typing import Any, Optional

from dateutil import tz

from retailmetrics.database.base import DataSource
from retailmetrics.database.mappers import (
    category_from_record,
    expense_from_record,
    investment_from_record,
    product_from_record,
    related_list,
    sale_from_record,
    unwrap_related,
)
from retailmetrics.domain.calculations import utc_bound
from retailmetrics.domain.entities import (
    Category,
    Expense,
    InitialInvestment,
    Product,
    ProductStock,
    RecordId,
    Sale,
    Settings,
)
from retailmetrics.domain.errors import DataSourceError

logger = logging.getLogger(__name__)


class SnapshotDataSource(DataSource):
    """Data source answering queries from exported table rows.

    The export is a JSON object keyed by table name (``sales``,
    ``categories``, ``expenses``, ``initial_investments``, ``products``,
    ``settings``). Sales embed their ``sale_items`` and each item may embed
    its product under ``products``, exactly as the hosted query API returns
    them. A plain table dump with ``sale_items`` as its own table works too.
    """

    def __init__(self, path: Optional[str] = None, tables: Optional[dict[str, Any]] = None):
        """Initialize snapshot data source.

        Args:
            path: Path to a JSON export file, read on connect
            tables: Already-loaded tables, used instead of a file
        """
        if path is None and tables is None:
            raise ValueError("Either a snapshot path or tables must be provided")
        self.path = path
        self._tables: Optional[dict[str, Any]] = tables

    def connect(self) -> None:
        """Load the export file."""
        if self._tables is not None:
            return
        try:
            with open(Path(self.path), encoding="utf-8") as f:
                tables = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error reading snapshot %s: %s", self.path, e)
            raise DataSourceError(f"Could not read snapshot '{self.path}': {e}") from e
        if not isinstance(tables, dict):
            raise DataSourceError(f"Snapshot '{self.path}' must contain a JSON object")
        self._tables = tables

    def disconnect(self) -> None:
        """Forget loaded rows when they came from a file."""
        if self.path is not None:
            self._tables = None

    def _rows(self, *names: str) -> list[dict[str, Any]]:
        if self._tables is None:
            self.connect()
        for name in names:
            if name in self._tables:
                return related_list(self._tables[name])
        return []

    def _sale_records(self) -> list[dict[str, Any]]:
        items_by_sale = defaultdict(list)
        for item in self._rows("sale_items"):
            items_by_sale[item.get("sale_id")].append(item)
        if not items_by_sale:
            return self._rows("sales")

        products = {row.get("id"): row for row in self._rows("products")}
        records = []
        for sale in self._rows("sales"):
            if not related_list(sale.get("sale_items", sale.get("items"))):
                items = []
                for item in items_by_sale.get(sale.get("id"), []):
                    if "products" not in item and "product" not in item:
                        item = {**item, "products": products.get(item.get("product_id"))}
                    items.append(item)
                sale = {**sale, "sale_items": items}
            records.append(sale)
        return records

    def list_sales(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tzinfo: Optional[TZInfo] = None,
    ) -> list[Sale]:
        """List sales with their items and product references.

        Sales that do not embed their items pick them up from a separate
        ``sale_items`` table, joined to ``products`` by ``product_id``.
        """
        sales = [sale_from_record(row) for row in self._sale_records()]
        lower = utc_bound(start_date, tzinfo) if start_date is not None else None
        upper = utc_bound(end_date + timedelta(days=1), tzinfo) if end_date is not None else None

        def in_range(sale: Sale) -> bool:
            moment = sale.created_at.astimezone(tz.UTC).replace(tzinfo=None)
            if lower is not None and moment < lower:
                return False
            if upper is not None and moment >= upper:
                return False
            return True

        result = sorted((s for s in sales if in_range(s)), key=lambda s: s.created_at)
        logger.debug("Snapshot returned %d of %d sales", len(result), len(sales))
        return result

    def list_categories(self) -> list[Category]:
        """List all categories."""
        categories = [category_from_record(row) for row in self._rows("categories")]
        return sorted(categories, key=lambda c: c.name)

    def list_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[Expense]:
        """List operating expenses by payment date (inclusive bounds)."""
        expenses = [
            expense_from_record(row)
            for row in self._rows("expenses", "operating_expenses")
        ]
        return sorted(
            (
                e
                for e in expenses
                if (start_date is None or e.payment_date >= start_date)
                and (end_date is None or e.payment_date <= end_date)
            ),
            key=lambda e: e.payment_date,
        )

    def list_investments(self) -> list[InitialInvestment]:
        """List all initial investments ordered by investment date."""
        investments = [investment_from_record(row) for row in self._rows("initial_investments")]
        return sorted(investments, key=lambda i: (i.investment_date is None, i.investment_date or date.min))

    def list_products(self) -> list[Product]:
        """List all products ordered by name."""
        products = [product_from_record(row) for row in self._rows("products")]
        return sorted(products, key=lambda p: p.name)

    def get_product(self, product_id: RecordId) -> Optional[Product]:
        """Get product by ID."""
        for row in self._rows("products"):
            if row.get("id") == product_id:
                return product_from_record(row)
        return None

    def list_products_with_sales(self) -> list[ProductStock]:
        """List all products flagged with whether they were ever sold."""
        sold_ids = set()
        for sale in self._rows("sales"):
            for item in related_list(sale.get("sale_items", sale.get("items"))):
                if item.get("product_id") is not None:
                    sold_ids.add(item["product_id"])
        for item in self._rows("sale_items"):
            if item.get("product_id") is not None:
                sold_ids.add(item["product_id"])

        category_names = {c.id: c.name for c in self.list_categories()}
        result = []
        for row in self._rows("products"):
            product = product_from_record(row)
            embedded = unwrap_related(row.get("categories"))
            if embedded is not None and embedded.get("name"):
                category_name = embedded["name"]
            else:
                category_name = category_names.get(product.category_id, "Uncategorized")
            result.append(
                ProductStock(
                    product=product,
                    category_name=category_name,
                    has_sales=product.id in sold_ids,
                )
            )
        return sorted(result, key=lambda p: p.product.name)

    def get_settings(self) -> Settings:
        """Get the global settings, falling back to defaults."""
        rows = self._rows("settings")
        for row in rows:
            if row.get("type", "global") == "global" and row.get("currency"):
                return Settings(currency=str(row["currency"]))
        return Settings()
