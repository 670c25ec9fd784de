import logging
import uuid

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.exceptions import RangeNotSatisfiableError, ReceiptServiceError

logger = logging.getLogger("app.errors")


def register_error_handlers(app):
    @app.exception_handler(ReceiptServiceError)
    async def receipt_service_error(request: Request, exc: ReceiptServiceError):
        headers = None
        if isinstance(exc, RangeNotSatisfiableError):
            headers = {"Content-Range": f"bytes */{exc.total_length}"}
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error cid=%s path=%s method=%s", correlation_id, request.url.path, request.method)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error", "cid": correlation_id},
        )

    return app
