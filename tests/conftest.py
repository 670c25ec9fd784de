from __future__ import annotations

import datetime as dt
import os
import tempfile
from decimal import Decimal
from types import SimpleNamespace

import pytest

# Settings are read at import time; point them at test values first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("RECEIPTS_DIR", tempfile.mkdtemp(prefix="receipts-"))
os.environ.setdefault("PUBLIC_BASE_URL", "https://receipts.example.org")

from fastapi.testclient import TestClient  # noqa: E402

from app.api import dependencies  # noqa: E402
from app.api.main import create_app  # noqa: E402
from app.core.exceptions import DispatchError  # noqa: E402
from app.db.base_class import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.models.payment_models import Payment  # noqa: E402
from app.services.payment_lookup import SqlPaymentLookup  # noqa: E402
from app.storage.receipt_store import ReceiptStore  # noqa: E402


class RecordingDispatcher:
    """Test double for the WhatsApp transport.

    Records every send; ``fail_on`` makes the n-th call (1-based) raise, and
    ``fail_all`` makes every call raise.
    """

    def __init__(self, fail_on: set[int] | None = None, fail_all: bool = False) -> None:
        self.calls: list[SimpleNamespace] = []
        self.fail_on = fail_on or set()
        self.fail_all = fail_all

    def send(self, to, body, media_urls=None):
        self.calls.append(SimpleNamespace(to=to, body=body, media_urls=list(media_urls or [])))
        if self.fail_all or len(self.calls) in self.fail_on:
            raise DispatchError("Twilio unavailable")


@pytest.fixture(autouse=True)
def _reset_payments_table():
    """Fresh ``payments`` table for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture
def make_payment(db_session):
    def _make(transaction_id: str = "T1", done: bool = True, **fields):
        payment = Payment(
            transaction_id=transaction_id,
            done=done,
            name=fields.pop("name", "Asha Devi"),
            amount=fields.pop("amount", Decimal("500")),
            updated_at=fields.pop("updated_at", dt.datetime(2024, 3, 1, 10, 30, tzinfo=dt.timezone.utc)),
            **fields,
        )
        db_session.add(payment)
        db_session.commit()
        return payment

    return _make


@pytest.fixture
def receipts_dir(tmp_path):
    return tmp_path / "receipts"


@pytest.fixture
def store(receipts_dir):
    return ReceiptStore(receipts_dir)


@pytest.fixture
def make_dispatcher():
    return RecordingDispatcher


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def lookup():
    return SqlPaymentLookup(SessionLocal)


@pytest.fixture
def app(receipts_dir, dispatcher, lookup):
    application = create_app(receipts_dir=receipts_dir)
    application.dependency_overrides[dependencies.get_dispatcher] = lambda: dispatcher
    application.dependency_overrides[dependencies.get_payment_lookup] = lambda: lookup
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """FastAPI TestClient bound to an app wired with test collaborators."""
    return TestClient(app)
