"""Thin HTTP helper shared by the index and account clients.

Wraps a synchronous httpx client: one client per request, opened and closed
in a ``with`` block so the connection is released on every exit path.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from tanksearch.exceptions import (
    BadRequest,
    ConnectionFailure,
    IndexNotFound,
    MalformedResponse,
    ServerError,
)
from tanksearch.version import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"tanksearch/{__version__}"


def is_ok(status: int) -> bool:
    return status // 100 == 2


def raise_for_index_status(resp: httpx.Response) -> None:
    """Map a non-2xx response to the matching tanksearch error.

    404 means the index does not exist, 400 carries the server's error text,
    anything else becomes a `ServerError` with status and reason.
    """
    status = resp.status_code
    if is_ok(status):
        return
    if status == 404:
        raise IndexNotFound(f"Index does not exist: {resp.request.url.path}")
    if status == 400:
        detail = resp.text.strip()
        if detail:
            raise BadRequest(detail)
    logger.warning("Unexpected HTTP %d from %s %s", status, resp.request.method, resp.request.url)
    raise ServerError(status, resp.reason_phrase or resp.text.strip())


def parse_json(resp: httpx.Response) -> Any:
    """Decode a JSON body, raising `MalformedResponse` on invalid JSON."""
    try:
        return resp.json()
    except ValueError as exc:
        raise MalformedResponse(
            f"Expected JSON from {resp.request.method} {resp.request.url}, got: {resp.text[:200]!r}"
        ) from exc


class HttpTransport:
    """Send JSON requests to the search service.

    Parameters
    ----------
    timeout:
        Seconds before connect/read gives up; passed straight to httpx.
    verify_ssl:
        Whether to verify TLS certificates.
    user_agent:
        Value of the User-Agent header.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.timeout,
            verify=self.verify_ssl,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        )

    def request(
        self,
        method: str,
        url: str,
        payload: Any = None,
        *,
        params: Optional[Mapping[str, str]] = None,
    ) -> httpx.Response:
        """Issue one request and return the fully read response.

        When `payload` is not None it is sent as a JSON body; httpx sets
        Content-Type and Content-Length. Status codes are left to the caller.
        """
        method = method.upper()
        logger.debug("%s %s", method, url)
        try:
            with self._client() as client:
                if payload is None:
                    resp = client.request(method, url, params=params)
                else:
                    resp = client.request(method, url, params=params, json=payload)
        except httpx.TransportError as exc:
            raise ConnectionFailure(f"{method} {url} failed: {exc}") from exc
        logger.debug("%s %s -> %d", method, url, resp.status_code)
        return resp

    def request_json(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Issue a body-less request and decode a JSON object response.

        Returns None for an empty body. Raises `IndexNotFound` on 404 and
        `ServerError` (or `BadRequest`) for other error statuses.
        """
        resp = self.request(method, url, params=params)
        raise_for_index_status(resp)
        if not resp.content:
            return None
        data = parse_json(resp)
        if not isinstance(data, dict):
            raise MalformedResponse(f"Expected a JSON object from {method} {url}, got {type(data).__name__}")
        return data
