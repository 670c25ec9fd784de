from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from app.core.config import settings
from app.core.exceptions import (
    InvalidFileNameError,
    InvalidRangeError,
    RangeNotSatisfiableError,
)
from app.storage.receipt_store import ReceiptStore, is_receipt_file_name

logger = logging.getLogger(__name__)

_RANGE_SPEC_RE = re.compile(r"^(\d*)-(\d*)$")


def pdf_headers(file_name: str, max_age: int | None = None) -> dict[str, str]:
    """Headers every receipt response carries, ranged or not."""
    if max_age is None:
        max_age = settings.RECEIPT_CACHE_MAX_AGE
    return {
        "Content-Type": "application/pdf",
        "Content-Disposition": f'inline; filename="{file_name}"',
        "Cache-Control": f"public, max-age={max_age}",
        "Accept-Ranges": "bytes",
    }


def parse_range(header: str, total_length: int) -> tuple[int, int]:
    """Resolve a single ``bytes=`` range to inclusive ``(start, end)`` offsets.

    Supports ``start-end``, ``start-`` and the suffix form ``-count``. An end
    past the last byte is clamped to it. Multi-range headers are rejected.
    """
    unit, _, spec = header.strip().partition("=")
    if unit.strip().lower() != "bytes" or not spec:
        raise InvalidRangeError("Only byte ranges are supported")
    if "," in spec:
        raise InvalidRangeError("Multiple ranges are not supported")

    match = _RANGE_SPEC_RE.match(spec.strip())
    if not match or match.group(1) == match.group(2) == "":
        raise InvalidRangeError()
    start_str, end_str = match.groups()

    if start_str == "":
        suffix = int(end_str)
        if suffix == 0 or total_length == 0:
            raise RangeNotSatisfiableError(total_length)
        return max(total_length - suffix, 0), total_length - 1

    start = int(start_str)
    if start >= total_length:
        raise RangeNotSatisfiableError(total_length)
    end = int(end_str) if end_str else total_length - 1
    if end < start:
        raise InvalidRangeError()
    return start, min(end, total_length - 1)


@dataclass
class ReceiptFile:
    status_code: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)


class ReceiptFileServer:
    """Serves stored receipts by name, honouring single byte-range requests."""

    def __init__(self, store: ReceiptStore, max_age: int | None = None) -> None:
        self.store = store
        self.max_age = max_age

    def serve(self, requested_name: str, range_header: str | None = None) -> ReceiptFile:
        if not is_receipt_file_name(requested_name):
            logger.warning("Rejected receipt request for %r", requested_name)
            raise InvalidFileNameError()

        data, total_length = self.store.load(requested_name)
        headers = pdf_headers(requested_name, self.max_age)

        if not range_header:
            headers["Content-Length"] = str(total_length)
            return ReceiptFile(status_code=200, body=data, headers=headers)

        start, end = parse_range(range_header, total_length)
        chunk = data[start:end + 1]
        headers["Content-Range"] = f"bytes {start}-{end}/{total_length}"
        headers["Content-Length"] = str(len(chunk))
        return ReceiptFile(status_code=206, body=chunk, headers=headers)
