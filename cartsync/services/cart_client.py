# cartsync/services/cart_client.py
from typing import Any

import requests
from pydantic import ValidationError

from cartsync.domain.errors import CartApiError
from cartsync.domain.schemas import AddCartItemIn, RemoteCart, UpdateCartItemIn
from cartsync.services.auth_session import AuthSession
from cartsync.utils.retry import http_retry
from cartsync.utils.settings import API_URL, API_TIMEOUT_SECONDS, REMOTE_RETRY_ATTEMPTS
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)


def _error_detail(resp) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("message") or body)
    return str(body)


class RemoteCartClient:
    """
    HTTP client of the remote cart service.
    Token is read from the auth session on every request, 401 logs the session out.
    `http` is anything with a requests style request(method, url, json=, headers=, timeout=).
    """

    def __init__(
        self,
        auth_session: AuthSession,
        base_url: str | None = None,
        timeout: float | None = None,
        retry_attempts: int | None = None,
        http=None,
    ):
        self.auth_session = auth_session
        self.base_url = (base_url or API_URL).rstrip("/")
        self.timeout = timeout or API_TIMEOUT_SECONDS
        self._owns_http = http is None
        self.http = http if http is not None else requests.Session()
        self._send = http_retry(retry_attempts or REMOTE_RETRY_ATTEMPTS)(self._send_once)

    def _send_once(self, method: str, url: str, payload: dict | None):
        headers = {"Content-Type": "application/json"}
        token = self.auth_session.token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.info(f"RemoteCartClient {method} {url}")
        return self.http.request(method, url, json=payload, headers=headers, timeout=self.timeout)

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._send(method, url, payload)
        except requests.RequestException as e:
            raise CartApiError(f"{method} {url} failed: {e}") from e

        if resp.status_code == 401:
            logger.warning("Remote cart service rejected the token, ending session")
            self.auth_session.logout()

        if resp.status_code >= 400:
            raise CartApiError(
                f"{method} {url} returned {resp.status_code}: {_error_detail(resp)}",
                status_code=resp.status_code,
            )

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise CartApiError(f"{method} {url} returned invalid JSON") from e

    def get_cart(self) -> RemoteCart:
        data = self._request("GET", "/cart")
        try:
            return RemoteCart.model_validate(data or {})
        except ValidationError as e:
            raise CartApiError(f"Unexpected cart payload: {e}") from e

    def add_item(self, product_id: str, variant_id: str | None, quantity: int) -> None:
        body = AddCartItemIn(product_id=product_id, variant_id=variant_id, quantity=quantity)
        self._request("POST", "/cart/items", body.model_dump(by_alias=True, exclude_none=True))

    def update_item(self, line_id: str, quantity: int) -> None:
        body = UpdateCartItemIn(quantity=quantity)
        self._request("PATCH", f"/cart/items/{line_id}", body.model_dump())

    def remove_item(self, line_id: str) -> None:
        self._request("DELETE", f"/cart/items/{line_id}")

    def clear_cart(self) -> None:
        self._request("DELETE", "/cart")

    def close(self) -> None:
        if self._owns_http:
            self.http.close()
