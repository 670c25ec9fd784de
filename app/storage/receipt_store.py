from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from app.core.config import settings
from app.core.exceptions import ReceiptNotFoundError, StorageError

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]+$")
RECEIPT_FILE_RE = re.compile(r"^receipt-[A-Za-z0-9_-]+\.pdf$")


def is_safe_token(token: str | None) -> bool:
    return bool(token) and TOKEN_RE.fullmatch(token) is not None


def is_receipt_file_name(file_name: str | None) -> bool:
    return bool(file_name) and RECEIPT_FILE_RE.fullmatch(file_name) is not None


def receipt_file_name(token: str) -> str:
    """``receipt-<token>.pdf``; raises ``StorageError`` for unsafe tokens."""
    if not is_safe_token(token):
        raise StorageError("Transaction identifier is not a safe file name token")
    return f"receipt-{token}.pdf"


class ReceiptStore:
    """Keeps rendered receipts on the local filesystem under ``RECEIPTS_DIR``.

    Saving the same token twice overwrites the earlier artifact. Writes are
    fsynced before ``save`` returns, so a URL handed out right after is
    immediately servable.
    """

    def __init__(self, root: str | os.PathLike[str] | None = None) -> None:
        self.root = Path(root or settings.RECEIPTS_DIR)

    def path_for(self, file_name: str) -> Path:
        if not is_receipt_file_name(file_name):
            raise StorageError("Refusing to build a path from an invalid receipt name")
        return self.root / file_name

    def save(self, token: str, data: bytes) -> str:
        """Persist ``data`` as ``receipt-<token>.pdf`` and return the file name."""
        file_name = receipt_file_name(token)
        target = self.path_for(file_name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(target, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as exc:
            logger.exception("Failed writing receipt %s: %s", target, exc)
            raise StorageError() from exc
        logger.debug("Stored %s (%d bytes)", target, len(data))
        return file_name

    def load(self, file_name: str) -> tuple[bytes, int]:
        """Return the artifact bytes and their length."""
        target = self.path_for(file_name)
        try:
            data = target.read_bytes()
        except FileNotFoundError as exc:
            raise ReceiptNotFoundError(file_name) from exc
        except OSError as exc:
            logger.error("Failed reading receipt %s: %s", target, exc)
            raise StorageError("Failed to read receipt") from exc
        return data, len(data)
