"""
Pytest configuration and shared fixtures for the invoicing backend test suite.

The application reads its settings from the environment at import time, so the
database and log locations are pointed at a temporary directory before any
project module is imported.
"""
import os
import shutil
import tempfile
from datetime import date
from decimal import Decimal
from typing import Dict, Generator

import pytest

_TEST_DIR = tempfile.mkdtemp(prefix="invoicing_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_TEST_DIR, "logs")
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ.pop("RBAC_UNDECLARED_ROUTES", None)

from fastapi.testclient import TestClient  # noqa: E402

from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from models.contacts import Contact, ContactType  # noqa: E402
from models.invoices import Invoice, InvoiceStatus, InvoiceType  # noqa: E402
from models.products import Product  # noqa: E402
from utils.auth_utils import create_access_token  # noqa: E402

TENANT = "tenant-a"


def pytest_sessionfinish(session, exitstatus):
    engine.dispose()
    shutil.rmtree(_TEST_DIR, ignore_errors=True)


@pytest.fixture(autouse=True)
def fresh_schema() -> Generator[None, None, None]:
    """Give every test an empty database."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    """A session for arranging data and calling crud functions directly."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def auth_headers(role: str, tenant_id: str = TENANT, **claims) -> Dict[str, str]:
    payload = {"sub": f"{role.lower()}@example.com", "email": f"{role.lower()}@example.com", "role": role}
    payload.update(claims)
    return {
        "Authorization": f"Bearer {create_access_token(payload)}",
        "X-Tenant-ID": tenant_id,
    }


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return auth_headers("ADMIN")


@pytest.fixture
def accountant_headers() -> Dict[str, str]:
    return auth_headers("ACCOUNTANT")


@pytest.fixture
def vendor(db) -> Contact:
    contact = Contact(type=ContactType.VENDOR, name="Acme Supplies", email="accounts@acme.example", tenant_id=TENANT)
    db.add(contact)
    db.commit()
    return contact


@pytest.fixture
def customer(db) -> Contact:
    contact = Contact(type=ContactType.CUSTOMER, name="Globex Retail", tenant_id=TENANT)
    db.add(contact)
    db.commit()
    return contact


@pytest.fixture
def product(db) -> Product:
    item = Product(name="Widget", sales_price=Decimal("150.00"), purchase_price=Decimal("100.00"), tenant_id=TENANT)
    db.add(item)
    db.commit()
    return item


@pytest.fixture
def make_invoice(db, customer):
    """Factory for a bare invoice with the given total; balance columns start consistent."""
    counter = {"n": 0}

    def _make(total="1000.00", due_date=None, status=InvoiceStatus.UNPAID, contact=None):
        counter["n"] += 1
        total = Decimal(total)
        invoice = Invoice(
            invoice_number=f"INV-202601-{counter['n']:04d}",
            type=InvoiceType.SALES,
            contact_id=(contact or customer).id,
            invoice_date=date(2026, 1, 10),
            due_date=due_date,
            status=status,
            sub_total=total,
            tax_amount=Decimal("0"),
            discount_amount=Decimal("0"),
            total_amount=total,
            paid_amount=Decimal("0"),
            balance_amount=total,
            tenant_id=TENANT,
        )
        db.add(invoice)
        db.commit()
        return invoice

    return _make


@pytest.fixture
def headers_for():
    """Build request headers for any role, tenant and extra token claims."""
    return auth_headers


@pytest.fixture
def tenant_id() -> str:
    return TENANT
