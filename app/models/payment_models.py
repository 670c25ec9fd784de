"""Donation payment records.

The ``payments`` table is written by the donation checkout flow (Razorpay/UPI).
This service maps it read-only to verify that a transaction completed before a
receipt is issued; column names follow the checkout schema.
"""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)

    transaction_id: Mapped[str] = mapped_column("transactionId", String(100), unique=True, nullable=False, index=True)
    """Identifier the donor quotes back in the chat message"""

    done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    """Set once the gateway confirms the payment; only done payments get receipts"""

    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    upi_id: Mapped[Optional[str]] = mapped_column("upiId", String(100), nullable=True)
    razorpay_payment_id: Mapped[Optional[str]] = mapped_column("razorpayPaymentId", String(100), nullable=True)
    to_user: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)

    updated_at: Mapped[Optional[dt.datetime]] = mapped_column("updatedAt", DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Payment {self.transaction_id} done={self.done} amount={self.amount}>"
