from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

RATE_LIMITS = {
    "webhook_whatsapp_inbound": settings.WEBHOOK_RATE_LIMIT,
}

# In-memory counters unless RATE_LIMIT_STORAGE_URI points at a shared backend
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
