from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from app.core.exceptions import InvalidFormatError

logger = logging.getLogger(__name__)

TRANSACTION_MARKER = "Transaction ID:"
_TRANSACTION_RE = re.compile(re.escape(TRANSACTION_MARKER) + r"([^\n]*)")


def extract_message(payload: Mapping[str, Any] | None) -> dict[str, str | None]:
    """Pull sender and text out of a Twilio WhatsApp webhook payload.

    Twilio posts form fields (``From``, ``Body``); JSON bodies with the same
    keys are accepted too. Missing fields come back as ``None``.
    """
    if not payload:
        return {"from": None, "text": None}
    sender = payload.get("From")
    body = payload.get("Body")
    return {
        "from": str(sender) if sender else None,
        "text": str(body) if body is not None else None,
    }


def extract_transaction_id(text: str | None) -> str:
    """Return the identifier quoted after ``Transaction ID:`` on its line.

    Only the marker is required here; the identifier's character set is checked
    by the receipt store before it becomes part of a file name.

    Raises:
        InvalidFormatError: the marker is missing or nothing follows it.
    """
    match = _TRANSACTION_RE.search(text or "")
    if not match:
        raise InvalidFormatError()
    transaction_id = match.group(1).strip()
    if not transaction_id:
        logger.info("Transaction marker present but identifier empty")
        raise InvalidFormatError()
    return transaction_id
