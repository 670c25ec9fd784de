#!/usr/bin/env python3
"""Create the payments table in a dev database and add a completed demo payment.

Usage: python scripts/seed_demo_payment.py [TRANSACTION_ID]
"""

import datetime as dt
import sys
from decimal import Decimal

from sqlalchemy import select

from app.db.base_class import Base
from app.db.session import engine, session_scope
from app.models.payment_models import Payment


def main():
    transaction_id = sys.argv[1] if len(sys.argv) > 1 else "DEMO-001"
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        existing = db.scalar(select(Payment).where(Payment.transaction_id == transaction_id))
        if existing:
            print(f'Payment {transaction_id} already exists (done={existing.done}).')
            return
        db.add(Payment(
            transaction_id=transaction_id,
            done=True,
            name="Demo Donor",
            message="Hare Krishna",
            upi_id="demo@upi",
            razorpay_payment_id="pay_demo",
            to_user="Temple Trust",
            amount=Decimal("501"),
            updated_at=dt.datetime.now(dt.timezone.utc),
        ))
    print(f'Seeded completed payment {transaction_id}.')
    print(f'Send "Transaction ID: {transaction_id}" to the WhatsApp sandbox to get a receipt.')


if __name__ == '__main__':
    main()
