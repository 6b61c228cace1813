"""Domain layer for retailmetrics application."""

__all__ = [
    "CategoryService",
    "ProductService",
    "SaleService",
    "ExpenseService",
    "InvestmentService",
    "COGSService",
    "NetProfitService",
    "BreakEvenService",
    "ROIService",
    "StockValueService",
    "ReportSession",
]

_SERVICE_MODULES = {
    "CategoryService": "retailmetrics.domain.category",
    "ProductService": "retailmetrics.domain.products",
    "SaleService": "retailmetrics.domain.sales",
    "ExpenseService": "retailmetrics.domain.expenses",
    "InvestmentService": "retailmetrics.domain.investments",
    "COGSService": "retailmetrics.domain.cogs",
    "NetProfitService": "retailmetrics.domain.net_profit",
    "BreakEvenService": "retailmetrics.domain.break_even",
    "ROIService": "retailmetrics.domain.roi",
    "StockValueService": "retailmetrics.domain.stock_value",
    "ReportSession": "retailmetrics.domain.session",
}


# Services import the database interface, which imports the entities in this
# package, so they are resolved lazily
def __getattr__(name):
    if name in _SERVICE_MODULES:
        import importlib

        return getattr(importlib.import_module(_SERVICE_MODULES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
