"""Correlate batch requests with the per-item outcomes the server returns.

Position ``i`` of the outcome list describes position ``i`` of the submitted
list. A response of the wrong length cannot be matched up safely, so it
raises `BatchConsistencyError` instead of producing a partial result.
"""

from __future__ import annotations

import logging
from typing import Generic, Iterator, List, Optional, Protocol, Sequence, Tuple, TypeVar

from tanksearch.exceptions import BatchConsistencyError
from tanksearch.models import AddOutcome, DeleteOutcome, Document

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")


class Outcome(Protocol):
    """Minimal protocol for a per-item outcome record."""

    error: Optional[str]

    @property
    def ok(self) -> bool: ...


class BatchResults(Generic[ItemT]):
    """Indexed view over a batch: one success flag and optional error per item."""

    def __init__(self, items: Sequence[ItemT], outcomes: Sequence[Outcome]) -> None:
        if len(items) != len(outcomes):
            raise BatchConsistencyError(
                f"Batch response has {len(outcomes)} outcomes for {len(items)} submitted items"
            )
        self._items: List[ItemT] = list(items)
        self._results: List[bool] = [bool(o.ok) for o in outcomes]
        self._errors: List[Optional[str]] = [None if o.ok else o.error for o in outcomes]
        self._failed: List[ItemT] = [
            item for item, ok in zip(self._items, self._results) if not ok
        ]
        if self._failed:
            logger.warning("Batch of %d items had %d failures", len(self._items), len(self._failed))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Tuple[ItemT, bool, Optional[str]]]:
        """Yield ``(item, ok, error)`` for every position, in order."""
        for i, item in enumerate(self._items):
            yield item, self._results[i], self._errors[i]

    def has_errors(self) -> bool:
        return bool(self._failed)

    def get_result(self, position: int) -> bool:
        """Return True if the item at `position` succeeded."""
        return self._results[position]

    def get_item(self, position: int) -> ItemT:
        return self._items[position]

    def get_error_message(self, position: int) -> Optional[str]:
        """Return the server's error text for a failed position, else None."""
        return self._errors[position]

    def get_failed_items(self) -> List[ItemT]:
        """Return the submitted items that failed, in submission order."""
        return list(self._failed)


class BatchAddResults(BatchResults[Document]):
    """Result of `IndexClient.add_documents`."""

    def __init__(self, documents: Sequence[Document], outcomes: Sequence[AddOutcome]) -> None:
        super().__init__(documents, outcomes)

    def get_document(self, position: int) -> Document:
        return self.get_item(position)

    def get_failed_documents(self) -> List[Document]:
        return self.get_failed_items()


class BulkDeleteResults(BatchResults[str]):
    """Result of `IndexClient.delete_documents`."""

    def __init__(self, docids: Sequence[str], outcomes: Sequence[DeleteOutcome]) -> None:
        super().__init__(docids, outcomes)

    def get_docid(self, position: int) -> str:
        return self.get_item(position)

    def get_failed_docids(self) -> List[str]:
        return self.get_failed_items()
