# priceboard/services/price_client.py

"""Blocking HTTP client for the price list API.

Callers on the event loop run these methods through ``asyncio.to_thread``.
"""

import json
import logging
from collections.abc import Sequence

from curl_cffi import requests as curl_requests

from priceboard.config.settings import Settings
from priceboard.models.errors import TransportError, ValidationError
from priceboard.models.price_snapshot import PriceSnapshot
from priceboard.models.priced_item import PricedItem

logger = logging.getLogger("priceboard.client")


class PriceClient:
    """Reads and replaces the canonical list over HTTP."""

    def __init__(
        self,
        api_url: str | None = None,
        session: curl_requests.Session | None = None,
    ) -> None:
        self.settings = Settings()
        self.api_url: str = api_url or self.settings.API_URL
        self.session = session or curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def fetch(self) -> PriceSnapshot:
        """GET the current list."""
        try:
            resp = self.session.get(
                self.api_url, timeout=self._request_timeout,
            )
        except Exception as exc:
            logger.warning("GET %s failed: %s", self.api_url, exc)
            raise TransportError(f"Connection failed: {exc}") from exc
        return self._decode(resp, expect_envelope=False)

    def replace_all(self, items: Sequence[PricedItem]) -> PriceSnapshot:
        """PUT the whole list and return the authoritative snapshot."""
        body = {"data": [item.to_dict() for item in items]}
        try:
            resp = self.session.put(
                self.api_url,
                json=body,
                timeout=self._request_timeout,
            )
        except Exception as exc:
            logger.warning("PUT %s failed: %s", self.api_url, exc)
            raise TransportError(f"Connection failed: {exc}") from exc
        return self._decode(resp, expect_envelope=True)

    def _decode(
        self, resp: curl_requests.Response, expect_envelope: bool,
    ) -> PriceSnapshot:
        """Map an API response to a snapshot or a typed error."""
        try:
            payload = json.loads(resp.text)
        except json.JSONDecodeError as exc:
            raise TransportError(
                f"HTTP {resp.status_code}: response is not JSON"
            ) from exc

        if resp.status_code == 400:
            message = (
                payload.get("error", "Invalid data format")
                if isinstance(payload, dict)
                else "Invalid data format"
            )
            raise ValidationError(str(message))
        if resp.status_code != 200:
            message = (
                payload.get("error", "")
                if isinstance(payload, dict)
                else ""
            )
            logger.warning(
                "%s returned HTTP %d: %s",
                self.api_url,
                resp.status_code,
                message,
            )
            raise TransportError(
                f"HTTP {resp.status_code}: {message}".rstrip(": ")
            )

        if expect_envelope:
            if not isinstance(payload, dict) or not payload.get("success"):
                raise TransportError("Write was not acknowledged")
            payload = payload.get("data")
        try:
            return PriceSnapshot.from_payload(payload)
        except ValidationError as exc:
            raise TransportError(f"Malformed snapshot: {exc}") from exc
