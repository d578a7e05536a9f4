"""
REST client for the listing platform API.

All requests carry ``Authorization: Bearer <token>`` when the injected token
provider returns a token, and every call has a timeout. GET failures raise a
generic FetchError; POST failures are classified into NetworkError (no
response) and ServerError (4xx/5xx with the server message kept verbatim).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import requests

from .exceptions import FetchError, NetworkError, ServerError
from .serialization import JsonPayload, MultipartPayload, TransportPayload

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]

DEFAULT_TIMEOUT = 15.0


@dataclass
class ApiResponse:
    """Successful (2xx) response of a collection POST."""

    status_code: int
    data: Any = None

    @property
    def created(self) -> bool:
        return self.status_code == 201


class ApiClient:
    """Thin requests.Session wrapper bound to one API base URL."""

    def __init__(
        self,
        base_url: str,
        token_provider: Optional[TokenProvider] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider or (lambda: None)
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def url(self, path: str) -> str:
        """Absolute URL for an API path; absolute URLs pass through unchanged."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _auth_headers(self) -> Dict[str, str]:
        token = self._token_provider()
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    # ------------------------------------------------------------------
    def fetch_with_token(self, path: str) -> Any:
        """
        GET a JSON document.

        Args:
            path: API path or absolute URL

        Returns:
            Decoded JSON body

        Raises:
            FetchError: On transport failure, non-2xx status or invalid JSON
        """
        url = self.url(path)
        headers = {"Content-Type": "application/json", **self._auth_headers()}

        try:
            response = self._session.get(url, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.error("GET %s failed: %s", url, exc)
            raise FetchError(url, original_error=exc) from exc

        if not response.ok:
            logger.error("GET %s returned HTTP %s", url, response.status_code)
            raise FetchError(url, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("GET %s returned a non-JSON body", url)
            raise FetchError(url, status_code=response.status_code, original_error=exc) from exc

    def post(self, path: str, payload: TransportPayload) -> ApiResponse:
        """
        POST a serialized form payload to a collection endpoint.

        Args:
            path: Collection path (e.g. /api/properties)
            payload: JsonPayload or MultipartPayload

        Returns:
            ApiResponse for a 2xx status

        Raises:
            NetworkError: When no response was received (connection error, timeout)
            ServerError: On a 4xx/5xx response
        """
        url = self.url(path)
        headers = self._auth_headers()
        kwargs: Dict[str, Any] = {"headers": headers, "timeout": self._timeout}

        if isinstance(payload, MultipartPayload):
            # Text entries go through ``files`` too so the body is always
            # multipart/form-data and the pair order is preserved.
            parts: List[Tuple[str, Tuple[Optional[str], Any]]] = []
            for key, value in payload.pairs:
                if isinstance(value, str):
                    parts.append((key, (None, value)))
                else:
                    parts.append((key, value.as_requests_tuple()))
            kwargs["files"] = parts
        elif isinstance(payload, JsonPayload):
            headers["Content-Type"] = "application/json"
            kwargs["json"] = payload.data
        else:
            raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

        try:
            response = self._session.post(url, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as exc:
            logger.error("POST %s got no response: %s", url, exc)
            raise NetworkError(url, exc) from exc

        body = self._decode_body(response)

        if not response.ok:
            message = self._server_message(body)
            logger.error("POST %s returned HTTP %s: %s", url, response.status_code, message)
            raise ServerError(url, response.status_code, message, body)

        logger.info("POST %s succeeded with HTTP %s", url, response.status_code)
        return ApiResponse(response.status_code, body)

    # ------------------------------------------------------------------
    @staticmethod
    def _decode_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None

    @staticmethod
    def _server_message(body: Any) -> Optional[str]:
        if isinstance(body, Mapping):
            message = body.get("message")
            if isinstance(message, str) and message.strip():
                return message
        return None
