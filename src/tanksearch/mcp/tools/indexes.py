"""Search index tools for FastMCP.

List indexes, inspect metadata, search, and add/delete single documents.
The client is synchronous, so each call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from tanksearch.account import ApiClient
from tanksearch.exceptions import ValidationError
from tanksearch.models import IndexMetadata
from tanksearch.query import SearchQuery


def parse_variable_keys(variables: Dict[str, float]) -> Dict[int, float]:
    """Turn JSON string keys such as "0" into variable indexes."""
    out: Dict[int, float] = {}
    for key, value in variables.items():
        try:
            index = int(key)
        except ValueError as exc:
            raise ValidationError(f"Variable index must be an integer, got {key!r}") from exc
        out[index] = float(value)
    return out


def _serialize_metadata(name: str, meta: IndexMetadata) -> Dict[str, Any]:
    return {
        "name": name,
        "status": meta.status,
        "started": meta.started,
        "code": meta.code,
        "size": meta.size,
        "creation_time": meta.creation_time.isoformat() if meta.creation_time else None,
        "public_search": meta.public_search,
    }


def register_index_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register index tools on the given FastMCP instance.

    Uses state.api when present, else builds a client from state.settings.api.
    """

    def _api(state_obj: Any) -> ApiClient:
        api = getattr(state_obj, "api", None)
        if api is not None:
            return api
        return ApiClient.from_settings(state_obj.settings)

    @mcp.tool
    async def tank_list_indexes() -> List[Dict[str, Any]]:
        """List all indexes of the account with their status and size."""
        api = _api(get_state())
        indexes = await asyncio.to_thread(api.list_indexes)
        return [_serialize_metadata(name, idx.get_metadata()) for name, idx in indexes.items()]

    @mcp.tool
    async def tank_index_metadata(index: str) -> Dict[str, Any]:
        """Return fresh metadata (status, size, creation time) for one index."""
        handle = _api(get_state()).get_index(index)
        meta = await asyncio.to_thread(handle.refresh_metadata)
        return _serialize_metadata(index, meta)

    @mcp.tool
    async def tank_search(
        index: str,
        query: str,
        *,
        start: int = 0,
        length: int = 10,
        function: Optional[int] = None,
        fetch_fields: Optional[List[str]] = None,
        snippet_fields: Optional[List[str]] = None,
        category_filters: Optional[Dict[str, List[str]]] = None,
    ) -> Dict[str, Any]:
        """Search an index.

        Parameters
        ----------
        index: str
            Index name.
        query: str
            Query text, e.g. "title:shoes OR running".
        start: int
            Offset of the first match to return (default 0).
        length: int
            Number of matches to return (default 10).
        function: int | None
            Scoring function id to rank with.
        fetch_fields: list[str] | None
            Stored fields to return with each match, e.g. ["title", "url"].
        snippet_fields: list[str] | None
            Fields to return as highlighted snippets.
        category_filters: dict[str, list[str]] | None
            Category name -> allowed values.
        """
        q = SearchQuery(query).start(int(start or 0)).num_results(int(length or 10))
        if function:
            q.scoring_function(int(function))
        if fetch_fields:
            q.fetch_fields(*fetch_fields)
        if snippet_fields:
            q.snippet_fields(*snippet_fields)
        if category_filters:
            q.category_filter(category_filters)
        handle = _api(get_state()).get_index(index)
        results = await asyncio.to_thread(handle.search, q)
        return results.model_dump(mode="json")

    @mcp.tool
    async def tank_add_document(
        index: str,
        docid: str,
        fields: Dict[str, str],
        *,
        variables: Optional[Dict[str, float]] = None,
        categories: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """Add or replace one document.

        `variables` keys are variable indexes given as strings, e.g. {"0": 4.5}.
        """
        handle = _api(get_state()).get_index(index)
        int_vars = parse_variable_keys(variables or {})
        await asyncio.to_thread(handle.add_document, docid, fields, int_vars, categories)
        return {"ok": True, "index": index, "docid": docid}

    @mcp.tool
    async def tank_delete_document(index: str, docid: str) -> Dict[str, Any]:
        """Delete one document by id."""
        handle = _api(get_state()).get_index(index)
        await asyncio.to_thread(handle.delete_document, docid)
        return {"ok": True, "index": index, "docid": docid}
