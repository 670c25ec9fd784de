"""Exception hierarchy for the receipt service.

Every error carries a user-facing message, a stable code and the HTTP status
the API layer maps it to.

Error codes follow pattern: [CATEGORY][NUMBER]
- RCP: Receipt pipeline errors (001-099)
- FIL: Receipt file serving errors (001-099)
- WHK: Webhook intake errors (001-099)
"""

from __future__ import annotations

from typing import Any


class ReceiptServiceError(Exception):
    """Base exception for all receipt service errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        payload: dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


# ============================================================================
# PIPELINE ERRORS (RCP001-099)
# ============================================================================

class PipelineError(ReceiptServiceError):
    """Base class for failures inside the receipt pipeline.

    ``kind`` names the failure category for logging and metrics.
    """

    kind = "UnknownError"


class InvalidFormatError(PipelineError):
    """Inbound message does not carry a transaction identifier."""

    kind = "InvalidFormat"

    def __init__(self) -> None:
        super().__init__(message="Invalid format", code="RCP001", status_code=400)


class PaymentNotFoundError(PipelineError):
    """No completed payment exists for the transaction identifier."""

    kind = "NotFound"

    def __init__(self, transaction_id: str | None = None):
        super().__init__(
            message="Payment not found",
            code="RCP002",
            status_code=404,
            details={"transaction_id": transaction_id} if transaction_id else {},
        )


class RenderError(PipelineError):
    kind = "RenderFailure"

    def __init__(self, reason: str = "Receipt rendering failed"):
        super().__init__(message=reason, code="RCP003", status_code=500)


class StorageError(PipelineError):
    """Receipt artifact could not be written or read (IO failure)."""

    kind = "IOFailure"

    def __init__(self, reason: str = "Receipt storage failed"):
        super().__init__(message=reason, code="RCP004", status_code=500)


class DispatchError(PipelineError):
    kind = "DispatchFailure"

    def __init__(self, reason: str = "Notification dispatch failed", details: dict[str, Any] | None = None):
        super().__init__(message=reason, code="RCP005", status_code=500, details=details)


class UnknownPipelineError(PipelineError):
    kind = "UnknownError"

    def __init__(self) -> None:
        super().__init__(message="Server error", code="RCP099", status_code=500)


# ============================================================================
# FILE SERVING ERRORS (FIL001-099)
# ============================================================================

class InvalidFileNameError(ReceiptServiceError):
    """Requested file name is not a receipt name (path traversal guard)."""

    def __init__(self) -> None:
        super().__init__(message="Invalid filename", code="FIL001", status_code=400)


class InvalidRangeError(ReceiptServiceError):
    """Range header is malformed or asks for more than one range."""

    def __init__(self, reason: str = "Invalid Range header"):
        super().__init__(message=reason, code="FIL002", status_code=400)


class RangeNotSatisfiableError(ReceiptServiceError):
    def __init__(self, total_length: int):
        super().__init__(
            message="Requested range not satisfiable",
            code="FIL003",
            status_code=416,
            details={"total_length": total_length},
        )
        self.total_length = total_length


class ReceiptNotFoundError(ReceiptServiceError):
    def __init__(self, file_name: str | None = None):
        super().__init__(
            message="PDF not found",
            code="FIL004",
            status_code=404,
            details={"file_name": file_name} if file_name else {},
        )


# ============================================================================
# WEBHOOK INTAKE ERRORS (WHK001-099)
# ============================================================================

class InvalidPayloadError(ReceiptServiceError):
    """Webhook body could not be decoded."""

    def __init__(self) -> None:
        super().__init__(message="Invalid payload", code="WHK001", status_code=400)
