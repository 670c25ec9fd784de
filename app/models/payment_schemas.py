from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PaymentRecord(BaseModel):
    """Read-only snapshot of a completed payment, detached from the DB session."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    transaction_id: str | None = None
    done: bool = False
    name: str | None = None
    message: str | None = None
    upi_id: str | None = None
    razorpay_payment_id: str | None = None
    to_user: str | None = None
    amount: Decimal = Field(default=Decimal("0"), ge=0)
    updated_at: dt.datetime | None = None


class WebhookOut(BaseModel):
    success: bool
    message: str | None = None
    pdfUrl: str | None = None


class HealthOut(BaseModel):
    status: str
    timestamp: str
