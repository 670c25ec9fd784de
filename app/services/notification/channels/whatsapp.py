from __future__ import annotations

import logging
from typing import Protocol, Sequence

import requests

from app.core.config import settings
from app.core.exceptions import DispatchError

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    def send(self, to: str, body: str, media_urls: Sequence[str] | None = None) -> None:
        """Deliver ``body`` to ``to``; raise ``DispatchError`` when delivery fails."""
        ...


class TwilioWhatsAppDispatcher:
    """Sends WhatsApp messages through the Twilio Messages REST API."""

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_address: str | None = None,
        api_base: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.from_address = from_address or settings.TWILIO_WHATSAPP_FROM
        self.api_base = (api_base or settings.TWILIO_API_BASE).rstrip("/")
        self.timeout = timeout or settings.TWILIO_TIMEOUT_SECONDS
        self._session = session or requests.Session()

    @property
    def messages_url(self) -> str:
        return f"{self.api_base}/Accounts/{self.account_sid}/Messages.json"

    def build_payload(self, to: str, body: str, media_urls: Sequence[str] | None = None) -> list[tuple[str, str]]:
        # Repeated MediaUrl fields, one per attachment
        payload = [("From", self.from_address), ("To", to), ("Body", body)]
        payload.extend(("MediaUrl", url) for url in media_urls or ())
        return payload

    def send(self, to: str, body: str, media_urls: Sequence[str] | None = None) -> None:
        if not self.account_sid or not self.auth_token:
            raise DispatchError("Twilio credentials not configured")

        try:
            response = self._session.post(
                self.messages_url,
                data=self.build_payload(to, body, media_urls),
                auth=(self.account_sid, self.auth_token),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("[WHATSAPP] Failed to send to %s: %s", to, exc)
            raise DispatchError(details={"to": to}) from exc

        sid = None
        try:
            sid = response.json().get("sid")
        except ValueError:
            pass
        logger.info("[WHATSAPP] ✓ Sent to %s (sid=%s): %s", to, sid, body[:50])
