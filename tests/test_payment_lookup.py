from decimal import Decimal

import pytest

from app.core.exceptions import PaymentNotFoundError
from app.models.payment_schemas import PaymentRecord


def test_returns_completed_payment(lookup, make_payment):
    make_payment("T1", amount=Decimal("500"), upi_id="donor@upi", to_user="Temple Trust")

    record = lookup.find_completed("T1")

    assert isinstance(record, PaymentRecord)
    assert record.transaction_id == "T1"
    assert record.done is True
    assert record.amount == Decimal("500")
    assert record.upi_id == "donor@upi"
    assert record.to_user == "Temple Trust"


def test_incomplete_payment_is_reported_as_missing(lookup, make_payment):
    make_payment("T2", done=False)

    with pytest.raises(PaymentNotFoundError) as pending:
        lookup.find_completed("T2")
    with pytest.raises(PaymentNotFoundError) as missing:
        lookup.find_completed("T-unknown")

    assert pending.value.status_code == missing.value.status_code == 404
    assert pending.value.message == missing.value.message


def test_lookup_matches_identifier_exactly(lookup, make_payment):
    make_payment("T10")

    with pytest.raises(PaymentNotFoundError):
        lookup.find_completed("T1")
