"""Collaborators for the receipt routes.

Each piece is built here and injected, so tests can swap the payment store or
the messaging transport through ``app.dependency_overrides``.
"""
from typing import Annotated, TypeAlias

from fastapi import Depends, Request

from app.core.config import settings
from app.db.session import SessionLocal
from app.services.notification.channels.whatsapp import NotificationDispatcher, TwilioWhatsAppDispatcher
from app.services.notification.service import NotificationService
from app.services.payment_lookup import PaymentLookup, SqlPaymentLookup
from app.services.pdf_service import ReceiptRenderer
from app.services.receipt_file_server import ReceiptFileServer
from app.services.receipt_pipeline import ReceiptPipeline
from app.storage.receipt_store import ReceiptStore


def get_receipt_store(request: Request) -> ReceiptStore:
    root = getattr(request.app.state, "receipts_dir", None) or settings.RECEIPTS_DIR
    return ReceiptStore(root)


def get_payment_lookup() -> PaymentLookup:
    return SqlPaymentLookup(SessionLocal)


def get_dispatcher() -> NotificationDispatcher:
    return TwilioWhatsAppDispatcher()


def get_renderer() -> ReceiptRenderer:
    return ReceiptRenderer()


StoreDep: TypeAlias = Annotated[ReceiptStore, Depends(get_receipt_store)]
LookupDep: TypeAlias = Annotated[PaymentLookup, Depends(get_payment_lookup)]
DispatcherDep: TypeAlias = Annotated[NotificationDispatcher, Depends(get_dispatcher)]
RendererDep: TypeAlias = Annotated[ReceiptRenderer, Depends(get_renderer)]


def get_receipt_pipeline(
    lookup: LookupDep,
    renderer: RendererDep,
    store: StoreDep,
    dispatcher: DispatcherDep,
) -> ReceiptPipeline:
    return ReceiptPipeline(
        lookup=lookup,
        renderer=renderer,
        store=store,
        notifier=NotificationService(dispatcher),
    )


def get_file_server(store: StoreDep) -> ReceiptFileServer:
    return ReceiptFileServer(store)


PipelineDep: TypeAlias = Annotated[ReceiptPipeline, Depends(get_receipt_pipeline)]
FileServerDep: TypeAlias = Annotated[ReceiptFileServer, Depends(get_file_server)]
