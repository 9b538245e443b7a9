# backend/storefront/client.py
import logging
import time
from typing import Callable, Optional

import requests

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10
ORDER_POLL_TIMEOUT_SECONDS = 30
ORDER_POLL_INTERVAL_SECONDS = 1.2


class StorefrontError(Exception):
    def __init__(self, detail: str, status_code: Optional[int] = None, payload=None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.payload = payload

    @property
    def retryable(self) -> bool:
        return self.status_code is None or self.status_code >= 500


class StorefrontClient:
    """
    Thin client for the public API. Pass ``session`` to share connection
    pooling or to stub the transport in tests.
    """

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout=DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, *, allow_404: bool = False, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOGGER.warning("Storefront request failed: %s %s (%s)", method, url, exc)
            raise StorefrontError(str(exc)) from exc

        if allow_404 and resp.status_code == 404:
            return None

        try:
            payload = resp.json()
        except ValueError:
            payload = None

        if resp.status_code >= 400:
            detail = payload.get("detail") if isinstance(payload, dict) else None
            raise StorefrontError(detail or f"HTTP {resp.status_code}", status_code=resp.status_code, payload=payload)
        return payload

    # --- menus / delivery ---

    def menu_for_day(self, weekday: int, date: Optional[str] = None, week_of: Optional[str] = None) -> dict:
        params = {"weekday": weekday}
        if date:
            params["date"] = date
        if week_of:
            params["week_of"] = week_of
        return self._request("GET", "/api/menus/by-day/", params=params)

    def suggestions(self, item_id: int) -> list:
        return self._request("GET", "/api/suggestions/", params={"item_id": item_id})

    def availability(self, date: str) -> dict:
        return self._request("GET", "/api/availability/", params={"date": date})

    def delivery_config(self) -> dict:
        return self._request("GET", "/api/delivery/config/")

    def delivery_quote(self, *, lat=None, lng=None, miles=None) -> dict:
        body = {k: v for k, v in {"lat": lat, "lng": lng, "miles": miles}.items() if v is not None}
        return self._request("POST", "/api/delivery/quote/", json=body)

    # --- checkout ---

    def create_payment_intent(self, payment_request: dict) -> str:
        data = self._request("POST", "/api/create-payment-intent/", json=payment_request)
        return data["client_secret"]

    def order_by_intent(self, payment_intent_id: str) -> Optional[dict]:
        """The order, or None while the payment webhook hasn't landed yet."""
        return self._request("GET", f"/api/orders/by-intent/{payment_intent_id}/", allow_404=True)

    def wait_for_order(
        self,
        payment_intent_id: str,
        timeout: float = ORDER_POLL_TIMEOUT_SECONDS,
        interval: float = ORDER_POLL_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> Optional[dict]:
        """
        Poll until the order exists. Returns None after ``timeout`` seconds:
        the payment went through but the order is still being finalized.
        """
        deadline = clock() + timeout
        while True:
            try:
                order = self.order_by_intent(payment_intent_id)
            except StorefrontError as exc:
                if not exc.retryable:
                    raise
                LOGGER.info("Order lookup for %s failed, retrying: %s", payment_intent_id, exc)
                order = None
            if order is not None:
                return order
            if clock() + interval > deadline:
                LOGGER.info("Order for %s not ready after %ss; still finalizing", payment_intent_id, timeout)
                return None
            sleep(interval)

    # --- catering ---

    def submit_catering(self, inquiry: dict) -> dict:
        return self._request("POST", "/api/catering/orders/", json=inquiry)
