from __future__ import annotations

import datetime as dt
import logging
from decimal import Decimal
from io import BytesIO
from pathlib import Path
from zoneinfo import ZoneInfo

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.core.exceptions import RenderError
from app.models.payment_schemas import PaymentRecord

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not available"

_LEFT_MARGIN = 72
_TOP = 770
_LINE_HEIGHT = 18
_BODY_SIZE = 12
_TITLE_SIZE = 20
# Built-in Type 1 fonts only cover WinAnsi (cp1252)
_BUILTIN_BODY_FONT = "Helvetica"
_BUILTIN_TITLE_FONT = "Helvetica-Bold"


def _zone(name: str) -> dt.tzinfo:
    # UTC needs no tz database
    if name.upper() == "UTC":
        return dt.timezone.utc
    return ZoneInfo(name)


def builtin_font_can_draw(text: str) -> bool:
    try:
        text.encode("cp1252")
    except UnicodeEncodeError:
        return False
    return True


def register_receipt_font(font_path: str) -> str:
    """Register a TrueType font with ReportLab once and return its name."""
    font_name = f"Receipt-{Path(font_path).stem}"
    if font_name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(font_name, font_path))
        logger.info("Registered receipt font %s from %s", font_name, font_path)
    return font_name


class ReceiptRenderer:
    """Draws a single-page donation receipt with ReportLab.

    The canvas runs in invariant mode so the creation date and document ID are
    fixed; identical payment records always produce identical bytes.

    With a TrueType ``font_path`` (one covering the rupee sign and Indic
    scripts) the whole page uses that font. Without one, the page falls back
    to Helvetica and a currency symbol Helvetica cannot draw is printed as
    ``currency_fallback`` instead.
    """

    def __init__(
        self,
        title: str | None = None,
        currency_symbol: str | None = None,
        timezone: str | None = None,
        datetime_format: str | None = None,
        recipient_default: str | None = None,
        font_path: str | None = None,
        currency_fallback: str | None = None,
    ) -> None:
        self.title = title or settings.RECEIPT_TITLE
        self.currency_symbol = currency_symbol or settings.CURRENCY_SYMBOL
        self.tz = _zone(timezone or settings.RECEIPT_TIMEZONE)
        self.datetime_format = datetime_format or settings.RECEIPT_DATETIME_FORMAT
        self.recipient_default = recipient_default or settings.RECEIPT_RECIPIENT_DEFAULT
        self.font_path = font_path if font_path is not None else settings.RECEIPT_FONT_PATH
        self.currency_fallback = currency_fallback or settings.CURRENCY_FALLBACK_TEXT

    @property
    def pdf_currency_symbol(self) -> str:
        """Currency prefix as printed on the page."""
        if self.font_path or builtin_font_can_draw(self.currency_symbol):
            return self.currency_symbol
        return self.currency_fallback

    def render(self, record: PaymentRecord) -> bytes:
        try:
            return self._draw(self.receipt_lines(record))
        except RenderError:
            raise
        except Exception as exc:  # noqa: BLE001 - reportlab raises assorted errors
            logger.exception("Receipt rendering failed for %s", record.transaction_id)
            raise RenderError() from exc

    def receipt_lines(self, record: PaymentRecord) -> list[str]:
        """Body lines in print order, defaults applied."""
        return [
            f"Name: {record.name or 'Unknown'}",
            f"Amount: {self.format_amount(record.amount, self.pdf_currency_symbol)}",
            f"Message: {record.message or 'No message'}",
            f"UPI ID: {record.upi_id or NOT_AVAILABLE}",
            f"Transaction ID: {record.transaction_id or NOT_AVAILABLE}",
            f"Razorpay Payment ID: {record.razorpay_payment_id or NOT_AVAILABLE}",
            f"Date: {self.format_timestamp(record.updated_at)}",
            f"Recipient: {record.to_user or self.recipient_default}",
        ]

    def format_amount(self, amount: Decimal | int | float | None, symbol: str | None = None) -> str:
        if symbol is None:
            symbol = self.currency_symbol
        return f"{symbol}{Decimal(amount or 0):,.2f}"

    def format_timestamp(self, value: dt.datetime | None) -> str:
        if value is None:
            return "N/A"
        if value.tzinfo is None:
            # SQLite drops tzinfo; stored values are UTC
            value = value.replace(tzinfo=dt.timezone.utc)
        return value.astimezone(self.tz).strftime(self.datetime_format)

    def _fonts(self) -> tuple[str, str]:
        if self.font_path:
            font_name = register_receipt_font(self.font_path)
            return font_name, font_name
        return _BUILTIN_TITLE_FONT, _BUILTIN_BODY_FONT

    def _draw(self, lines: list[str]) -> bytes:
        title_font, body_font = self._fonts()
        buffer = BytesIO()
        page_width, _ = A4
        c = canvas.Canvas(buffer, pagesize=A4, invariant=1)
        c.setTitle(self.title)
        c.setAuthor(settings.APP_NAME)

        c.setFont(title_font, _TITLE_SIZE)
        c.drawCentredString(page_width / 2, _TOP, self.title)

        c.setFont(body_font, _BODY_SIZE)
        y = _TOP - 2 * _LINE_HEIGHT
        max_width = page_width - 2 * _LEFT_MARGIN
        for line in lines:
            # Long donor messages wrap instead of running off the page
            for chunk in simpleSplit(line, body_font, _BODY_SIZE, max_width) or [""]:
                c.drawString(_LEFT_MARGIN, y, chunk)
                y -= _LINE_HEIGHT
        c.showPage()
        c.save()
        return buffer.getvalue()
