from __future__ import annotations

import logging
import os

from fastapi import APIRouter, Header, Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from app import metrics
from app.api.dependencies import FileServerDep
from app.core.exceptions import ReceiptServiceError
from app.services.receipt_file_server import pdf_headers

logger = logging.getLogger(__name__)
router = APIRouter(tags=["receipts"])


@router.get("/{filename}")
def get_receipt(
    filename: str,
    file_server: FileServerDep,
    range_header: str | None = Header(default=None, alias="Range"),
) -> Response:
    try:
        receipt = file_server.serve(filename, range_header)
    except ReceiptServiceError as exc:
        logger.info("Error serving PDF %s: %s", filename, exc.message)
        metrics.receipt_served(exc.status_code)
        raise
    metrics.receipt_served(receipt.status_code)
    return Response(content=receipt.body, status_code=receipt.status_code, headers=receipt.headers)


class ReceiptStaticFiles(StaticFiles):
    """Static mount of the receipts directory with the same PDF headers."""

    def file_response(
        self,
        full_path: str | os.PathLike[str],
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        response = super().file_response(full_path, stat_result, scope, status_code)
        name = os.path.basename(full_path)
        if name.endswith(".pdf"):
            for key, value in pdf_headers(name).items():
                response.headers[key] = value
        return response
