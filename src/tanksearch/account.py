"""Account-level client: find, create, configure, delete and list indexes.

Example::

    api = ApiClient("https://:secret@xyz.api.searchify.com")
    index = api.get_index("products")
    index.add_document("sku-1", {"text": "red running shoes"}, variables={0: 4.5})
    results = index.search("shoes")
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import httpx

from tanksearch.config import Settings
from tanksearch.exceptions import ConfigError, MalformedResponse
from tanksearch.index import IndexClient
from tanksearch.models import IndexMetadata, parse_model
from tanksearch.transport import HttpTransport

logger = logging.getLogger(__name__)


def make_index_url(api_url: str, name: str) -> str:
    return f"{api_url}/v1/indexes/{quote(name, safe='')}"


class ApiClient:
    """Entry point for one search service account.

    Parameters
    ----------
    api_url:
        Private API URL of the account, credentials included, e.g.
        ``https://:password@xyz.api.searchify.com``. Must be http or https.
    timeout:
        Per-request timeout in seconds.
    verify_ssl:
        Whether to verify TLS certificates.
    transport:
        Pre-built HTTP helper to share; overrides `timeout` and `verify_ssl`.
    """

    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        try:
            parsed = httpx.URL(api_url)
        except (httpx.InvalidURL, TypeError) as exc:
            raise ConfigError(f"Invalid API URL: {api_url!r}") from exc
        if parsed.scheme not in ("http", "https"):
            raise ConfigError("URL scheme must be http or https")
        if not parsed.host:
            raise ConfigError(f"API URL has no host: {api_url!r}")
        self.api_url = api_url.rstrip("/")
        self._transport = transport or HttpTransport(timeout=timeout, verify_ssl=verify_ssl)

    @classmethod
    def from_settings(cls, settings: Settings) -> ApiClient:
        """Build a client from `Settings.api`; raises `ConfigError` if no URL is set."""
        cfg = settings.api
        if not cfg.url:
            raise ConfigError("Search API URL is not configured. Set TANKSEARCH_API__URL.")
        return cls(cfg.url, timeout=cfg.timeout, verify_ssl=cfg.verify_ssl)

    def __repr__(self) -> str:
        # Never echo credentials embedded in the URL
        url = httpx.URL(self.api_url)
        return f"ApiClient(host={url.scheme}://{url.host})"

    def get_index(self, name: str) -> IndexClient:
        """Return a handle for index `name`. No request is made."""
        return IndexClient(make_index_url(self.api_url, name), transport=self._transport)

    def create_index(self, name: str, options: Optional[Mapping[str, Any]] = None) -> IndexClient:
        """Create index `name` and return its handle (metadata already loaded)."""
        index = self.get_index(name)
        index.create_index(options)
        return index

    def update_index(self, name: str, options: Mapping[str, Any]) -> None:
        self.get_index(name).update_index(options)

    def delete_index(self, name: str) -> None:
        """Permanently delete index `name` and all its documents."""
        self.get_index(name).delete_index()

    def list_indexes(self) -> Dict[str, IndexClient]:
        """Return all indexes of the account, keyed by name, in one request.

        Each handle comes with the metadata from the listing, so reading it
        does not trigger another request.
        """
        data = self._transport.request_json("GET", make_index_url(self.api_url, "")) or {}
        indexes: Dict[str, IndexClient] = {}
        for name, raw in data.items():
            if not isinstance(raw, dict):
                raise MalformedResponse(f"Unexpected metadata for index {name!r}: {raw!r}")
            indexes[name] = IndexClient(
                make_index_url(self.api_url, name),
                transport=self._transport,
                metadata=parse_model(IndexMetadata, raw, what="index metadata"),
            )
        logger.debug("Listed %d indexes", len(indexes))
        return indexes
