"""Data structures sent to and received from the search service.

`Document` is built by callers and validated locally; the pydantic models
describe server responses and are populated with ``model_validate``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from tanksearch.exceptions import MalformedResponse, ValidationError
from tanksearch.query import check_index, format_number

MAX_DOCID_BYTES = 1024

T = TypeVar("T")


def validate_docid(docid: str) -> str:
    """Return `docid` if it is a non-empty string of at most 1024 UTF-8 bytes."""
    if not isinstance(docid, str) or not docid:
        raise ValidationError(f"Document id must be a non-empty string, got {docid!r}")
    size = len(docid.encode("utf-8"))
    if size > MAX_DOCID_BYTES:
        raise ValidationError(
            f"Document id is {size} bytes in UTF-8; the limit is {MAX_DOCID_BYTES}"
        )
    return docid


def encode_variables(variables: Dict[int, float]) -> Dict[str, float]:
    """Validate an index->value map and convert it to the wire's string keys."""
    out: Dict[str, float] = {}
    for index, value in variables.items():
        check_index("variable index", index)
        format_number(value)
        out[str(index)] = float(value)
    return out


@dataclass(slots=True)
class Document:
    """A document to index.

    Attributes
    ----------
    docid: str
        Unique id within the index, at most 1024 bytes in UTF-8.
    fields: dict[str, str]
        Text fields; the service searches the "text" field by default.
    variables: dict[int, float]
        Numeric per-document variables, addressable from scoring functions.
    categories: dict[str, str]
        Facet name -> value assignments.
    """

    docid: str
    fields: Dict[str, str] = field(default_factory=dict)
    variables: Dict[int, float] = field(default_factory=dict)
    categories: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_docid(self.docid)
        # Validates keys and values early, before the document reaches a batch
        encode_variables(self.variables)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"docid": self.docid, "fields": dict(self.fields)}
        if self.variables:
            payload["variables"] = encode_variables(self.variables)
        if self.categories:
            payload["categories"] = dict(self.categories)
        return payload


class IndexMetadata(BaseModel):
    """Snapshot of an index as reported by the server."""

    model_config = ConfigDict(extra="allow")

    status: str = ""
    started: bool = False
    code: Optional[str] = None
    size: Optional[int] = None
    creation_time: Optional[datetime] = None
    public_search: bool = False

    @field_validator("code", mode="before")
    @classmethod
    def _code_as_text(cls, value: Any) -> Any:
        # The service reports a numeric code
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("creation_time", mode="before")
    @classmethod
    def _unparseable_time_to_none(cls, value: Any) -> Any:
        if value is None or isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            return None


class SearchResultSet(BaseModel):
    """Parsed response of a search call.

    ``search_time`` arrives as a decimal string ("0.004") and is coerced to a
    float. ``did_you_mean`` is always a string, empty when the server sends
    null or omits it.
    """

    model_config = ConfigDict(populate_by_name=True)

    matches: int = 0
    query: str = ""
    search_time: float = 0.0
    did_you_mean: str = Field(default="", alias="didyoumean")
    results: List[Dict[str, Any]] = Field(default_factory=list)
    facets: Dict[str, Dict[str, int]] = Field(default_factory=dict)

    @field_validator("did_you_mean", "query", mode="before")
    @classmethod
    def _null_to_empty_string(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("results", "facets", "search_time", "matches", mode="before")
    @classmethod
    def _null_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is not None:
            return value
        return {"results": [], "facets": {}, "search_time": 0.0, "matches": 0}[info.field_name]


class AddOutcome(BaseModel):
    """Per-document outcome of a batch add: ``{"added": bool, "error": str?}``."""

    added: bool
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.added


class DeleteOutcome(BaseModel):
    """Per-docid outcome of a batch delete: ``{"deleted": bool, "error": str?}``."""

    deleted: bool
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.deleted


def parse_model(model: Type[T], data: Any, *, what: str) -> T:
    """Validate `data` as `model`, raising `MalformedResponse` on mismatch.

    `model` may be a pydantic model or any type ``TypeAdapter`` accepts,
    e.g. ``List[AddOutcome]``.
    """
    try:
        return TypeAdapter(model).validate_python(data)
    except PydanticValidationError as exc:
        raise MalformedResponse(f"Unexpected {what} payload: {exc}") from exc
