"""HTTP client for the attendance and payroll API.

Thin on purpose: it knows the envelope and the error mapping, the feature
repositories know the endpoints.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..core.constants import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT_SECONDS
from ..core.exceptions import RemoteRejectionError, TransientNetworkError
from .schemas import ApiEnvelope

logger = logging.getLogger(__name__)


class ApiClient:
    """Sends JSON requests and unwraps ``{"success", "data", ...}`` envelopes.

    Connection failures, timeouts and 5xx answers raise
    ``TransientNetworkError``; any other non-success answer raises
    ``RemoteRejectionError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        *,
        timeout: float = DEFAULT_API_TIMEOUT_SECONDS,
        token: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)
        if token:
            self.set_auth_token(token)

    def set_auth_token(self, token: str) -> None:
        self._client.headers["Authorization"] = f"Bearer {token}"

    def remove_auth_token(self) -> None:
        self._client.headers.pop("Authorization", None)

    @property
    def base_url(self) -> str:
        return str(self._client.base_url)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _detail(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or resp.reason_phrase
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or body.get("message") or resp.text)
        return resp.text

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return
        detail = self._detail(resp)
        if resp.status_code >= 500:
            raise TransientNetworkError(f"Server unavailable [{resp.status_code}]: {detail}")
        raise RemoteRejectionError(resp.status_code, detail)

    def _request(self, method: str, url: str, **kwargs: Any) -> ApiEnvelope:
        logger.debug("%s %s", method, url)
        try:
            resp = self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransientNetworkError(f"Request timed out: {method} {url}") from exc
        except httpx.TransportError as exc:
            raise TransientNetworkError(f"Network error: {exc}") from exc

        self._raise_for_status(resp)
        if not resp.content:
            return ApiEnvelope()

        try:
            body = resp.json()
        except ValueError as exc:
            raise RemoteRejectionError(resp.status_code, "Response is not valid JSON") from exc

        envelope = ApiEnvelope.model_validate(body) if isinstance(body, dict) else ApiEnvelope(data=body)
        if not envelope.success:
            raise RemoteRejectionError(resp.status_code, envelope.error or envelope.message or "Request failed")
        return envelope

    # ------------------------------------------------------------------
    # HTTP methods
    # ------------------------------------------------------------------

    def get(self, url: str, params: Optional[dict[str, Any]] = None) -> ApiEnvelope:
        return self._request("GET", url, params=params)

    def post(self, url: str, json: Optional[dict[str, Any]] = None) -> ApiEnvelope:
        return self._request("POST", url, json=json)

    def put(self, url: str, json: Optional[dict[str, Any]] = None) -> ApiEnvelope:
        return self._request("PUT", url, json=json)

    def delete(self, url: str) -> ApiEnvelope:
        return self._request("DELETE", url)

    def is_reachable(self) -> bool:
        """True when the API answers at all, even with a rejection."""
        try:
            self.get("/health")
        except TransientNetworkError:
            return False
        except RemoteRejectionError:
            return True
        return True
