"""Search query builder.

`SearchQuery` accumulates everything the ``/search`` endpoint understands and
renders it into a canonical query string. Parameters are always emitted in
the same order, so identical builder state produces identical output:

    q, start, len, function, snippet, fetch, var<N>, fetch_variables,
    fetch_categories, category_filters, filter_docvar<N>, filter_function<N>

Example::

    query = (
        SearchQuery("golang")
        .scoring_function(1)
        .query_variable(0, 30.4)
        .document_variable_filter(1, 0, float("inf"))
        .fetch_fields("title", "url")
    )
    index.search(query)
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple, Union
from urllib.parse import quote_plus

from tanksearch.exceptions import ValidationError

DEFAULT_LENGTH = 10

# Wire token for an open range bound (-inf floor or +inf ceiling)
UNBOUNDED = "*"

Number = Union[int, float]


@dataclass(frozen=True, slots=True)
class VariableRange:
    """Inclusive [floor, ceil] filter over one variable index."""

    index: int
    floor: float
    ceil: float


def format_number(value: Number) -> str:
    """Render a float in its shortest round-trip decimal form.

    Integral values drop the trailing ``.0`` (``3.0`` -> ``"3"``); large and
    tiny magnitudes keep exponent notation (``1e+16``).
    """
    v = float(value)
    if math.isnan(v) or math.isinf(v):
        raise ValidationError(f"Expected a finite number, got {value!r}")
    text = repr(v)
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_bound(value: Number) -> str:
    """Render a range bound; infinities become the open-bound token ``*``."""
    v = float(value)
    if math.isinf(v):
        return UNBOUNDED
    return format_number(v)


def check_index(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _range_params(prefix: str, ranges: Iterable[VariableRange]) -> List[Tuple[str, str]]:
    # One parameter per variable index; several ranges on the same index are comma-joined
    grouped: Dict[int, List[str]] = {}
    for r in ranges:
        grouped.setdefault(r.index, []).append(f"{format_bound(r.floor)}:{format_bound(r.ceil)}")
    return [(f"{prefix}{idx}", ",".join(values)) for idx, values in grouped.items()]


class SearchQuery:
    """Mutable builder for a search request. Every setter returns ``self``."""

    def __init__(self, text: str) -> None:
        if not isinstance(text, str):
            raise ValidationError(f"Query text must be a string, got {type(text).__name__}")
        self._text = text
        self._start = 0
        self._length = DEFAULT_LENGTH
        self._function = 0
        self._fetch_fields: List[str] = []
        self._snippet_fields: List[str] = []
        self._fetch_variables = False
        self._fetch_categories = False
        self._variables: Dict[int, float] = {}
        self._docvar_filters: List[VariableRange] = []
        self._function_filters: List[VariableRange] = []
        self._category_filters: Dict[str, List[str]] = {}

    @property
    def text(self) -> str:
        return self._text

    def start(self, offset: int) -> SearchQuery:
        """Skip the first `offset` matches (pagination)."""
        self._start = check_index("start", offset)
        return self

    def num_results(self, length: int) -> SearchQuery:
        """Return at most `length` matches (default 10)."""
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise ValidationError(f"num_results must be a positive integer, got {length!r}")
        self._length = length
        return self

    def fetch_fields(self, *fields: str) -> SearchQuery:
        """Replace the list of stored fields returned verbatim with each match."""
        self._fetch_fields = list(fields)
        return self

    def snippet_fields(self, *fields: str) -> SearchQuery:
        """Replace the list of fields returned as highlighted snippets."""
        self._snippet_fields = list(fields)
        return self

    def fetch_variables(self) -> SearchQuery:
        self._fetch_variables = True
        return self

    def fetch_categories(self) -> SearchQuery:
        self._fetch_categories = True
        return self

    def scoring_function(self, function_id: int) -> SearchQuery:
        """Rank with scoring function `function_id`; 0 keeps the server default."""
        self._function = check_index("function_id", function_id)
        return self

    def query_variable(self, index: int, value: Number) -> SearchQuery:
        """Set query-time variable `index`, overwriting any earlier value."""
        check_index("variable index", index)
        format_number(value)
        self._variables[index] = float(value)
        return self

    def query_variables(self, variables: Mapping[int, Number]) -> SearchQuery:
        """Upsert several query-time variables at once."""
        for index, value in variables.items():
            self.query_variable(index, value)
        return self

    def document_variable_filter(self, index: int, floor: Number, ceil: Number) -> SearchQuery:
        """Keep only documents whose variable `index` lies in [floor, ceil].

        Use ``float("-inf")`` / ``float("inf")`` for an open bound. Repeated
        calls on the same index OR the ranges together.
        """
        self._docvar_filters.append(self._make_range(index, floor, ceil))
        return self

    def function_filter(self, index: int, floor: Number, ceil: Number) -> SearchQuery:
        """Keep only documents whose scoring function `index` evaluates into [floor, ceil]."""
        self._function_filters.append(self._make_range(index, floor, ceil))
        return self

    def category_filter(self, filters: Mapping[str, Union[str, Iterable[str]]]) -> SearchQuery:
        """Restrict matches by category.

        Names are ANDed, values within one name are ORed. A name given again
        replaces its earlier values.
        """
        parsed: Dict[str, List[str]] = {}
        for name, values in filters.items():
            if isinstance(values, str):
                values = [values]
            try:
                parsed[name] = [str(v) for v in values]
            except TypeError as exc:
                raise ValidationError(
                    f"Category filter {name!r} needs a string or a list of strings, got {values!r}"
                ) from exc
        self._category_filters.update(parsed)
        return self

    @staticmethod
    def _make_range(index: int, floor: Number, ceil: Number) -> VariableRange:
        check_index("variable index", index)
        if math.isnan(float(floor)) or math.isnan(float(ceil)):
            raise ValidationError("Range bounds must not be NaN")
        return VariableRange(index, float(floor), float(ceil))

    def to_params(self) -> List[Tuple[str, str]]:
        """Return the ordered (name, value) pairs before percent-encoding."""
        params: List[Tuple[str, str]] = [("q", self._text)]
        if self._start > 0:
            params.append(("start", str(self._start)))
        params.append(("len", str(self._length)))
        if self._function > 0:
            params.append(("function", str(self._function)))
        if self._snippet_fields:
            params.append(("snippet", ",".join(self._snippet_fields)))
        if self._fetch_fields:
            params.append(("fetch", ",".join(self._fetch_fields)))
        for index, value in self._variables.items():
            params.append((f"var{index}", format_number(value)))
        if self._fetch_variables:
            params.append(("fetch_variables", "*"))
        if self._fetch_categories:
            params.append(("fetch_categories", "*"))
        if self._category_filters:
            params.append(
                (
                    "category_filters",
                    json.dumps(self._category_filters, sort_keys=True, separators=(",", ":")),
                )
            )
        params.extend(_range_params("filter_docvar", self._docvar_filters))
        params.extend(_range_params("filter_function", self._function_filters))
        return params

    def to_query_params(self) -> str:
        """Render the canonical, percent-encoded query string (no leading ``?``)."""
        return "&".join(f"{name}={quote_plus(value, safe='')}" for name, value in self.to_params())

    def __str__(self) -> str:
        return self.to_query_params()

    def __repr__(self) -> str:
        return f"SearchQuery({self.to_query_params()!r})"
