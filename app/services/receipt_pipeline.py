"""Receipt generation and delivery for inbound WhatsApp messages.

One webhook call runs one pipeline, strictly in order:

    Received -> Parsed -> Verified -> Rendered -> Stored -> Notified -> Done

Any failed transition moves the run to ``Failed``. A failed run sends exactly one
best-effort apology to the sender; if that send fails too it is logged and
dropped, and the caller still gets the original failure.

Nothing here locks or times out. Duplicate deliveries for one transaction race
on the same file and the last write wins, which is harmless because rendering
is deterministic. A stalled payment store or messaging API stalls the request.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any

from app import metrics
from app.bot.message_extractor import extract_transaction_id
from app.core.config import settings
from app.core.exceptions import (
    DispatchError,
    PipelineError,
    RenderError,
    StorageError,
    UnknownPipelineError,
)
from app.models.payment_schemas import PaymentRecord
from app.services.notification.service import NotificationService
from app.services.payment_lookup import PaymentLookup
from app.services.pdf_service import ReceiptRenderer
from app.storage.receipt_store import ReceiptStore

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    RECEIVED = "Received"
    PARSED = "Parsed"
    VERIFIED = "Verified"
    RENDERED = "Rendered"
    STORED = "Stored"
    NOTIFIED = "Notified"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class PipelineResult:
    state: PipelineState
    status_code: int
    body: dict[str, Any]
    error: PipelineError | None = None
    transaction_id: str | None = None
    pdf_url: str | None = None
    history: list[PipelineState] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state is PipelineState.DONE


class ReceiptPipeline:
    def __init__(
        self,
        lookup: PaymentLookup,
        renderer: ReceiptRenderer,
        store: ReceiptStore,
        notifier: NotificationService,
        public_base_url: str | None = None,
        fallback_recipient: str | None = None,
    ) -> None:
        self.lookup = lookup
        self.renderer = renderer
        self.store = store
        self.notifier = notifier
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        self.fallback_recipient = fallback_recipient or settings.FALLBACK_RECIPIENT

    def receipt_url(self, file_name: str) -> str:
        return f"{self.public_base_url}/api/receipts/{file_name}"

    def run(self, sender: str | None, text: str | None) -> PipelineResult:
        logger.info("Webhook message from %s: %r", sender, text)
        history = [PipelineState.RECEIVED]
        transaction_id: str | None = None
        try:
            transaction_id = extract_transaction_id(text)
            history.append(PipelineState.PARSED)

            record = self.lookup.find_completed(transaction_id)
            history.append(PipelineState.VERIFIED)

            pdf_bytes = self._render(record)
            history.append(PipelineState.RENDERED)

            file_name = self._store(transaction_id, pdf_bytes)
            history.append(PipelineState.STORED)

            pdf_url = self.receipt_url(file_name)
            if not sender:
                raise DispatchError("Sender address missing")
            self._notify(sender, self.renderer.format_amount(record.amount), pdf_url)
            history.append(PipelineState.NOTIFIED)
        except PipelineError as exc:
            return self._fail(exc, sender, transaction_id, history)
        except Exception:  # noqa: BLE001 - classified as UnknownError
            logger.exception("Unexpected receipt pipeline error after %s", history[-1].value)
            return self._fail(UnknownPipelineError(), sender, transaction_id, history)

        history.append(PipelineState.DONE)
        logger.info(
            "Receipt issued: %s",
            pdf_url,
            extra={"transaction_id": transaction_id, "pipeline_state": PipelineState.DONE.value},
        )
        metrics.receipt_issued()
        return PipelineResult(
            state=PipelineState.DONE,
            status_code=200,
            body={"success": True, "pdfUrl": pdf_url},
            transaction_id=transaction_id,
            pdf_url=pdf_url,
            history=history,
        )

    def _render(self, record: PaymentRecord) -> bytes:
        try:
            return self.renderer.render(record)
        except RenderError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise RenderError() from exc

    def _store(self, transaction_id: str, pdf_bytes: bytes) -> str:
        try:
            return self.store.save(transaction_id, pdf_bytes)
        except StorageError:
            raise
        except OSError as exc:
            raise StorageError() from exc

    def _notify(self, to: str, amount_text: str, pdf_url: str) -> None:
        try:
            self.notifier.send_receipt_ready(to, amount_text, pdf_url)
        except DispatchError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise DispatchError() from exc

    def _fail(
        self,
        error: PipelineError,
        sender: str | None,
        transaction_id: str | None,
        history: list[PipelineState],
    ) -> PipelineResult:
        logger.warning(
            "Receipt pipeline failed after %s: %s (%s) transaction=%s",
            history[-1].value,
            error.kind,
            error.message,
            transaction_id,
            extra={
                "transaction_id": transaction_id,
                "pipeline_state": history[-1].value,
                "failure_kind": error.kind,
            },
        )
        metrics.pipeline_failed(error.kind)
        self._send_fallback(sender or self.fallback_recipient, error)
        history.append(PipelineState.FAILED)
        return PipelineResult(
            state=PipelineState.FAILED,
            status_code=error.status_code,
            body={"success": False, "message": error.message},
            error=error,
            transaction_id=transaction_id,
            history=history,
        )

    def _send_fallback(self, to: str, error: PipelineError) -> None:
        try:
            self.notifier.send_failure_notice(to, error)
        except Exception as exc:  # noqa: BLE001 - secondary failure must not mask the primary one
            metrics.fallback_failed()
            logger.error("Failed to send error message to %s: %s", to, exc)
