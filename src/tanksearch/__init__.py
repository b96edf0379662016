"""Client library for an IndexTank-style hosted full-text search service."""

from .account import ApiClient
from .batch import BatchAddResults, BatchResults, BulkDeleteResults
from .exceptions import (
    BadRequest,
    BatchConsistencyError,
    ConfigError,
    ConnectionFailure,
    IndexAlreadyExists,
    IndexLimitExceeded,
    IndexNotFound,
    MalformedResponse,
    ServerError,
    TankSearchError,
    ValidationError,
)
from .index import IndexClient
from .models import AddOutcome, DeleteOutcome, Document, IndexMetadata, SearchResultSet
from .query import SearchQuery
from .version import __version__

__all__ = [
    "ApiClient",
    "IndexClient",
    "SearchQuery",
    "Document",
    "IndexMetadata",
    "SearchResultSet",
    "AddOutcome",
    "DeleteOutcome",
    "BatchResults",
    "BatchAddResults",
    "BulkDeleteResults",
    "TankSearchError",
    "ConfigError",
    "ValidationError",
    "ConnectionFailure",
    "MalformedResponse",
    "IndexNotFound",
    "IndexAlreadyExists",
    "IndexLimitExceeded",
    "ServerError",
    "BadRequest",
    "BatchConsistencyError",
    "__version__",
]
