"""Domain layer for shopledger application."""

_SERVICES = {
    "ConsignmentService": "shopledger.domain.consignment",
    "ExpenseService": "shopledger.domain.expense",
    "ExpenseTemplateService": "shopledger.domain.expense_template",
    "ProductService": "shopledger.domain.product",
    "ReportService": "shopledger.domain.report",
    "SaleService": "shopledger.domain.sale",
    "SupplierService": "shopledger.domain.supplier",
}

__all__ = sorted(_SERVICES)


# Services import the database layer, which imports domain entities, so
# they are resolved lazily to keep package import order free.
def __getattr__(name):
    if name in _SERVICES:
        import importlib

        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
