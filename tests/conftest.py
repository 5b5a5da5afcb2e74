"""Shared pytest fixtures for shopledger tests."""

import tempfile
import os
import time
from datetime import date, datetime
from decimal import Decimal

import pytest

from shopledger.database.cache import QueryCache
from shopledger.database.factories import create_sqlite_database
from shopledger.domain.consignment import ConsignmentService
from shopledger.domain.entities import SupplierType
from shopledger.domain.expense import ExpenseService
from shopledger.domain.expense_template import ExpenseTemplateService
from shopledger.domain.product import ProductService
from shopledger.domain.report import ReportService
from shopledger.domain.sale import SaleService
from shopledger.domain.supplier import SupplierService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def cache():
    return QueryCache()


@pytest.fixture
def supplier_service(temp_db, cache):
    return SupplierService(temp_db, cache)


@pytest.fixture
def product_service(temp_db, cache):
    return ProductService(temp_db, cache)


@pytest.fixture
def expense_service(temp_db, cache):
    return ExpenseService(temp_db, cache)


@pytest.fixture
def template_service(temp_db, cache):
    return ExpenseTemplateService(temp_db, cache)


@pytest.fixture
def consignment_service(temp_db, cache):
    return ConsignmentService(temp_db, cache)


@pytest.fixture
def sale_service(temp_db, cache):
    return SaleService(temp_db, cache)


@pytest.fixture
def report_service(temp_db, cache):
    return ReportService(temp_db, cache)


@pytest.fixture
def sample_supplier(supplier_service):
    """Registered trade supplier."""
    supplier_id = supplier_service.create_supplier("Hatton Garden Wholesale")
    return supplier_service.get_supplier(supplier_id)


@pytest.fixture
def consignor(supplier_service):
    """Supplier whose stock is held on consignment."""
    supplier_id = supplier_service.create_supplier("Estate of M. Price")
    return supplier_service.get_supplier(supplier_id)


@pytest.fixture
def walk_in_customer(supplier_service):
    """Customer who trades items in."""
    supplier_id = supplier_service.create_supplier(
        "Jo Bloggs", supplier_type=SupplierType.CUSTOMER
    )
    return supplier_service.get_supplier(supplier_id)


@pytest.fixture
def owned_product(product_service, sample_supplier):
    """Owned stock: cost 100, price 250."""
    product_id = product_service.create_product(
        name="Silver bangle",
        unit_cost=Decimal("100.00"),
        unit_price=Decimal("250.00"),
        sku="SB-001",
        category="bracelets",
        supplier_id=sample_supplier.id,
    )
    return product_service.get_product(product_id)


@pytest.fixture
def consignment_product(product_service, consignor):
    """Consignment stock: agreed cost 600, price 1000."""
    product_id = product_service.create_product(
        name="Vintage Omega",
        unit_cost=Decimal("600.00"),
        unit_price=Decimal("1000.00"),
        category="watches",
        is_consignment=True,
        consignment_supplier_id=consignor.id,
        consignment_start_date=date(2024, 1, 1),
        consignment_end_date=date(2024, 12, 31),
    )
    return product_service.get_product(product_id)


@pytest.fixture
def sold_at():
    return datetime(2024, 3, 15, 11, 30)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def shop_in_tokyo():
    """Run with a local clock nine hours ahead of UTC."""
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Asia/Tokyo"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()
