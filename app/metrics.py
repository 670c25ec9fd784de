"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change freely.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter

logger = logging.getLogger("metrics")

_RECEIPTS_ISSUED = Counter("receipts_issued_total", "Receipts rendered, stored and delivered")
_PIPELINE_FAILURES = Counter(
    "receipt_pipeline_failures_total", "Receipt pipeline runs ending in failure", ["kind"]
)
_FALLBACK_FAILURES = Counter(
    "receipt_fallback_failures_total", "Fallback notifications that could not be delivered"
)
_RECEIPT_DOWNLOADS = Counter(
    "receipt_downloads_total", "Receipt file requests by response status", ["status"]
)


def receipt_issued():
    _RECEIPTS_ISSUED.inc()


def pipeline_failed(kind: str):
    _PIPELINE_FAILURES.labels(kind=kind).inc()


def fallback_failed():
    _FALLBACK_FAILURES.inc()


def receipt_served(status: int):
    _RECEIPT_DOWNLOADS.labels(status=str(status)).inc()
