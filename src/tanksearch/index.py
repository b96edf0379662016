"""Client for a single hosted search index.

`IndexClient` wraps ``<api>/v1/indexes/<name>``: index lifecycle, document
and scoring-function management, and search. Calls are synchronous and are
never retried.

Index metadata is cached on the handle. `get_metadata()` fetches it once and
then serves the cached copy; creating or updating the index refreshes it,
deleting the index clears it. `exists()`, `has_started()` and
`refresh_metadata()` always go to the server. A handle is not thread-safe;
use one per thread or guard it externally.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from tanksearch.batch import BatchAddResults, BulkDeleteResults
from tanksearch.exceptions import (
    IndexAlreadyExists,
    IndexLimitExceeded,
    IndexNotFound,
    MalformedResponse,
    ServerError,
    TankSearchError,
    ValidationError,
)
from tanksearch.models import (
    AddOutcome,
    DeleteOutcome,
    Document,
    IndexMetadata,
    SearchResultSet,
    encode_variables,
    parse_model,
    validate_docid,
)
from tanksearch.query import SearchQuery, check_index
from tanksearch.transport import HttpTransport, is_ok, parse_json, raise_for_index_status

logger = logging.getLogger(__name__)


class IndexClient:
    """Handle on one search index.

    Parameters
    ----------
    url:
        Full index URL, e.g. ``https://api.example.com/v1/indexes/products``.
    transport:
        HTTP helper; a default `HttpTransport` is created when omitted.
    metadata:
        Metadata already known for this index (e.g. from a listing). Saves
        the first fetch.
    """

    def __init__(
        self,
        url: str,
        *,
        transport: Optional[HttpTransport] = None,
        metadata: Optional[IndexMetadata] = None,
    ) -> None:
        self.url = url.rstrip("/")
        self._transport = transport or HttpTransport()
        self._metadata = metadata

    def __repr__(self) -> str:
        return f"IndexClient(url={self.url!r})"

    @property
    def name(self) -> str:
        return httpx.URL(self.url).path.rsplit("/", 1)[-1]

    # ----- Metadata -----

    def get_metadata(self) -> IndexMetadata:
        """Return cached metadata, fetching it on first use."""
        if self._metadata is None:
            return self.refresh_metadata()
        return self._metadata

    def refresh_metadata(self) -> IndexMetadata:
        """Fetch metadata from the server and replace the cached copy."""
        data = self._transport.request_json("GET", self.url)
        if data is None:
            raise MalformedResponse(f"Empty metadata response for {self.url}")
        self._metadata = parse_model(IndexMetadata, data, what="index metadata")
        return self._metadata

    def exists(self) -> bool:
        """Return True if the index exists on the server (always asks the server)."""
        try:
            self.refresh_metadata()
        except IndexNotFound:
            self._metadata = None
            return False
        return True

    def has_started(self) -> bool:
        """Return True once the index is ready to receive requests (always asks the server)."""
        return self.refresh_metadata().started

    def status(self) -> str:
        return self.get_metadata().status

    def code(self) -> Optional[str]:
        return self.get_metadata().code

    def size(self) -> Optional[int]:
        """Return the number of documents in the index."""
        return self.get_metadata().size

    def creation_time(self) -> Optional[datetime]:
        return self.get_metadata().creation_time

    def is_public_search_enabled(self) -> bool:
        return self.get_metadata().public_search

    # ----- Index lifecycle -----

    def create_index(self, options: Optional[Mapping[str, Any]] = None) -> None:
        """Create the index on the server.

        `options` currently accepts ``{"public_search": bool}``.

        Raises
        ------
        IndexAlreadyExists
            The server answered 204: an index with this name already exists.
        IndexLimitExceeded
            The server answered 409: the account has no free index slots.
        ServerError
            Any other non-2xx response.
        """
        resp = self._transport.request("PUT", self.url, dict(options or {}))
        status = resp.status_code
        if status == 204:
            raise IndexAlreadyExists(f"Index already exists: {self.name}")
        if status == 409:
            raise IndexLimitExceeded("Maximum indexes limit reached for this account")
        if not is_ok(status):
            raise ServerError(status, resp.reason_phrase)
        logger.info("Created index %s", self.name)
        try:
            self.refresh_metadata()
        except TankSearchError as exc:
            # The index exists; metadata is fetched lazily on next access
            self._metadata = None
            logger.warning("Created index %s but could not load its metadata: %s", self.name, exc)

    def update_index(self, options: Mapping[str, Any]) -> None:
        """Change index options and refresh the cached metadata."""
        resp = self._transport.request("PUT", self.url, dict(options))
        raise_for_index_status(resp)
        self.refresh_metadata()

    def delete_index(self) -> None:
        """Delete the index and all its documents."""
        resp = self._transport.request("DELETE", self.url)
        raise_for_index_status(resp)
        self._metadata = None
        logger.info("Deleted index %s", self.name)

    # ----- Documents -----

    def add_document(
        self,
        docid: str,
        fields: Mapping[str, str],
        variables: Optional[Mapping[int, float]] = None,
        categories: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Add or replace one document."""
        doc = Document(
            docid=docid,
            fields=dict(fields),
            variables=dict(variables or {}),
            categories=dict(categories or {}),
        )
        resp = self._transport.request("PUT", f"{self.url}/docs", doc.to_payload())
        raise_for_index_status(resp)

    def add_documents(self, documents: Sequence[Document]) -> BatchAddResults:
        """Add a batch of documents in a single request.

        Items can fail individually; check `BatchAddResults.has_errors()`.
        A response with a different number of outcomes than documents raises
        `BatchConsistencyError`.
        """
        docs = list(documents)
        for doc in docs:
            validate_docid(doc.docid)
        resp = self._transport.request("PUT", f"{self.url}/docs", [d.to_payload() for d in docs])
        raise_for_index_status(resp)
        outcomes = parse_model(List[AddOutcome], parse_json(resp), what="batch add")
        return BatchAddResults(docs, outcomes)

    def update_variables(self, docid: str, variables: Mapping[int, float]) -> None:
        """Replace the variables of an existing document without touching its fields."""
        payload = {"docid": validate_docid(docid), "variables": encode_variables(dict(variables))}
        resp = self._transport.request("PUT", f"{self.url}/docs/variables", payload)
        raise_for_index_status(resp)

    def update_categories(self, docid: str, categories: Mapping[str, str]) -> None:
        """Replace the categories of an existing document."""
        payload = {"docid": validate_docid(docid), "categories": dict(categories)}
        resp = self._transport.request("PUT", f"{self.url}/docs/categories", payload)
        raise_for_index_status(resp)

    def delete_document(self, docid: str) -> None:
        resp = self._transport.request(
            "DELETE", f"{self.url}/docs", params={"docid": validate_docid(docid)}
        )
        raise_for_index_status(resp)

    def delete_documents(self, docids: Sequence[str]) -> BulkDeleteResults:
        """Delete a batch of documents by id in a single request."""
        ids = [validate_docid(d) for d in docids]
        resp = self._transport.request("DELETE", f"{self.url}/docs", [{"docid": d} for d in ids])
        raise_for_index_status(resp)
        outcomes = parse_model(List[DeleteOutcome], parse_json(resp), what="batch delete")
        return BulkDeleteResults(ids, outcomes)

    # ----- Scoring functions -----

    def add_function(self, function_id: int, definition: str) -> None:
        """Define (or redefine) scoring function `function_id`, e.g. ``"-age"``."""
        check_index("function_id", function_id)
        resp = self._transport.request(
            "PUT", f"{self.url}/functions/{function_id}", {"definition": definition}
        )
        raise_for_index_status(resp)

    def delete_function(self, function_id: int) -> None:
        check_index("function_id", function_id)
        resp = self._transport.request("DELETE", f"{self.url}/functions/{function_id}")
        raise_for_index_status(resp)

    def list_functions(self) -> Dict[int, str]:
        """Return scoring function definitions keyed by function id."""
        data = self._transport.request_json("GET", f"{self.url}/functions") or {}
        functions: Dict[int, str] = {}
        for key, definition in data.items():
            try:
                functions[int(key)] = str(definition)
            except ValueError as exc:
                raise MalformedResponse(f"Non-numeric scoring function id: {key!r}") from exc
        return functions

    # ----- Search -----

    def search(self, query: Union[str, SearchQuery]) -> SearchResultSet:
        """Run a search.

        `query` is either a `SearchQuery` or plain query text, which is
        searched with default options (first 10 matches).
        """
        if isinstance(query, str):
            query = SearchQuery(query)
        elif not isinstance(query, SearchQuery):
            raise ValidationError(f"Expected str or SearchQuery, got {type(query).__name__}")
        resp = self._transport.request("GET", f"{self.url}/search?{query.to_query_params()}")
        raise_for_index_status(resp)
        return parse_model(SearchResultSet, parse_json(resp), what="search")
