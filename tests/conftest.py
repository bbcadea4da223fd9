"""Shared test fixtures for all tests."""
import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from shopledger.audit import audit_recorder
from shopledger.core.database import build_engine, build_session_factory, get_db, init_db
from shopledger.core.locks import product_locks
from shopledger.main import app
from shopledger.models import Product


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Fresh SQLite database file for each test.

    A file (not :memory:) so the audit writer thread gets its own connection.
    """
    test_engine = build_engine(f"sqlite:///{tmp_path / 'shopledger_test.db'}")
    init_db(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture(scope="function")
def test_db(session_factory):
    """Database session for one test."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()
        product_locks.clear()


@pytest.fixture(scope="function")
def client(test_db, session_factory):
    """Create a test client with dependency override."""
    def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    audit_recorder.configure(session_factory)

    yield TestClient(app)

    audit_recorder.flush()
    audit_recorder.configure(None)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_products(test_db):
    """One product per tracking type."""
    products = [
        Product(
            id=1,
            name="Basmati Rice 5kg",
            product_code="RICE-5KG",
            hsn="1006",
            quantity=10,
            average_purchase_price=Decimal("20"),
            tracking_type="none",
            low_stock_threshold=5,
            mrp=Decimal("450.00"),
        ),
        Product(
            id=2,
            name="Paracetamol 500mg Strip",
            product_code="PCM-500",
            hsn="3004",
            quantity=50,
            average_purchase_price=Decimal("12.5"),
            tracking_type="batch",
            low_stock_threshold=10,
            mrp=Decimal("30.00"),
        ),
        Product(
            id=3,
            name="Redmi Note 13 128GB",
            product_code="RN13-128",
            hsn="8517",
            quantity=3,
            average_purchase_price=Decimal("15000"),
            tracking_type="serial",
            low_stock_threshold=1,
            mrp=Decimal("18999.00"),
        ),
    ]
    for p in products:
        test_db.add(p)
    test_db.commit()
    return products


@pytest.fixture
def rice(sample_products):
    return sample_products[0]


@pytest.fixture
def paracetamol(sample_products):
    return sample_products[1]


@pytest.fixture
def phone(sample_products):
    return sample_products[2]
