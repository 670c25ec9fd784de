from __future__ import annotations

import logging
from typing import Callable, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import PaymentNotFoundError
from app.models.payment_models import Payment
from app.models.payment_schemas import PaymentRecord

logger = logging.getLogger(__name__)


class PaymentLookup(Protocol):
    def find_completed(self, transaction_id: str) -> PaymentRecord:
        """Return the completed payment or raise ``PaymentNotFoundError``."""
        ...


class SqlPaymentLookup:
    """Reads completed payments from the donation platform's ``payments`` table.

    A payment that exists but is not ``done`` is reported exactly like a
    missing one.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def find_completed(self, transaction_id: str) -> PaymentRecord:
        session = self._session_factory()
        try:
            payment = session.scalar(
                select(Payment).where(
                    Payment.transaction_id == transaction_id,
                    Payment.done.is_(True),
                )
            )
            if payment is None:
                logger.info("No completed payment for transaction %s", transaction_id)
                raise PaymentNotFoundError(transaction_id)
            return PaymentRecord.model_validate(payment)
        finally:
            session.close()
