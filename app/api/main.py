from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.api.rate_limit import limiter
from app.api.routes_health import router as health_router
from app.api.routes_metrics import router as metrics_router
from app.api.routes_receipts import ReceiptStaticFiles
from app.api.routes_receipts import router as receipts_router
from app.api.routes_webhooks import router as webhook_router
from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logger import init_logging
from app.core.monitoring import init_monitoring


async def _rate_limit_handler(request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"success": False, "message": "Too many requests"})


def create_app(receipts_dir: str | Path | None = None) -> FastAPI:
    init_logging()
    init_monitoring()

    is_production = settings.ENV.lower() == "prod"
    app = FastAPI(
        title=settings.APP_NAME,
        debug=False,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )
    receipts_root = Path(receipts_dir or settings.RECEIPTS_DIR)
    app.state.receipts_dir = receipts_root
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_handler)
    register_error_handlers(app)

    app.include_router(webhook_router, prefix="/api", tags=["webhooks"])
    app.include_router(receipts_router, prefix="/api/receipts")
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(health_router)

    if settings.STATIC_RECEIPTS_MOUNT:
        # StaticFiles refuses to start on a missing directory
        receipts_root.mkdir(parents=True, exist_ok=True)
        app.mount(
            settings.STATIC_RECEIPTS_MOUNT,
            ReceiptStaticFiles(directory=receipts_root),
            name="receipts-static",
        )

    return app


app = create_app()
