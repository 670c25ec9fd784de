from __future__ import annotations

import logging

from app.core.exceptions import InvalidFormatError, PaymentNotFoundError, PipelineError
from app.services.notification.channels.whatsapp import NotificationDispatcher

logger = logging.getLogger(__name__)

INVALID_FORMAT_TEXT = 'Invalid format. Please include "Transaction ID: YOUR_ID".'
NOT_FOUND_TEXT = "Payment not found or not completed. Please check your Transaction ID."
GENERIC_ERROR_TEXT = "An error occurred while processing your request."


class NotificationService:
    """Receipt-specific wording on top of a ``NotificationDispatcher``."""

    def __init__(self, dispatcher: NotificationDispatcher) -> None:
        self.dispatcher = dispatcher

    def send_receipt_ready(self, to: str, amount_text: str, pdf_url: str) -> None:
        body = f"Thank you for your donation of {amount_text}. Your receipt is ready."
        self.dispatcher.send(to, body, media_urls=[pdf_url])
        logger.info("Receipt sent to WhatsApp: %s", to)

    def send_failure_notice(self, to: str, error: PipelineError) -> None:
        self.dispatcher.send(to, failure_text(error))


def failure_text(error: PipelineError) -> str:
    if isinstance(error, InvalidFormatError):
        return INVALID_FORMAT_TEXT
    if isinstance(error, PaymentNotFoundError):
        return NOT_FOUND_TEXT
    return GENERIC_ERROR_TEXT
