from datetime import datetime

import pytest

from tanksearch.exceptions import MalformedResponse, ValidationError
from tanksearch.models import (
    AddOutcome,
    Document,
    IndexMetadata,
    SearchResultSet,
    parse_model,
    validate_docid,
)

# ---------- Document ----------


def test_docid_limit_is_measured_in_utf8_bytes() -> None:
    assert validate_docid("a" * 1024) == "a" * 1024
    with pytest.raises(ValidationError):
        validate_docid("a" * 1025)
    # 513 characters but 1026 bytes
    with pytest.raises(ValidationError):
        validate_docid("é" * 513)


@pytest.mark.parametrize("docid", ["", None, 42])
def test_docid_must_be_non_empty_string(docid) -> None:
    with pytest.raises(ValidationError):
        validate_docid(docid)


def test_document_rejects_oversized_id_at_construction() -> None:
    with pytest.raises(ValidationError):
        Document("x" * 2000, {"text": "hi"})


def test_document_payload_uses_string_variable_keys() -> None:
    doc = Document(
        "doc1",
        {"text": "This is a testing Go golang document!"},
        variables={0: -97.744444, 1: 30},
        categories={"lang": "go"},
    )
    assert doc.to_payload() == {
        "docid": "doc1",
        "fields": {"text": "This is a testing Go golang document!"},
        "variables": {"0": -97.744444, "1": 30.0},
        "categories": {"lang": "go"},
    }
    # In-memory model stays integer-keyed
    assert list(doc.variables) == [0, 1]


def test_document_payload_omits_empty_variables_and_categories() -> None:
    assert Document("d", {"text": "t"}).to_payload() == {"docid": "d", "fields": {"text": "t"}}


def test_document_rejects_bad_variable_index() -> None:
    with pytest.raises(ValidationError):
        Document("d", {"text": "t"}, variables={-1: 1.0})


# ---------- Responses ----------


def test_search_result_set_parses_server_payload() -> None:
    payload = {
        "matches": 2,
        "facets": {"lang": {"go": 1, "python": 1}},
        "results": [{"docid": "a", "text": "golang"}, {"docid": "b", "query_relevance_score": 1.5}],
        "didyoumean": None,
        "query": "golang",
        "search_time": "0.004",
    }
    res = SearchResultSet.model_validate(payload)

    assert res.matches == 2
    assert res.query == "golang"
    assert res.search_time == pytest.approx(0.004)
    assert res.did_you_mean == ""
    assert res.results[1]["query_relevance_score"] == 1.5
    assert res.facets["lang"]["python"] == 1


def test_search_result_set_keeps_suggestion_and_defaults() -> None:
    res = SearchResultSet.model_validate({"didyoumean": "golang", "results": None, "facets": None})
    assert res.did_you_mean == "golang"
    assert res.results == []
    assert res.facets == {}
    assert res.matches == 0


def test_index_metadata_parses_creation_time_and_keeps_extras() -> None:
    meta = IndexMetadata.model_validate(
        {
            "started": True,
            "code": "dfxtj",
            "creation_time": "2011-06-03T21:03:10",
            "size": 12,
            "status": "LIVE",
            "public_search": False,
            "function_count": 2,
        }
    )
    assert meta.started is True
    assert meta.creation_time == datetime(2011, 6, 3, 21, 3, 10)
    assert meta.size == 12
    assert meta.model_extra == {"function_count": 2}


def test_index_metadata_accepts_numeric_code() -> None:
    meta = IndexMetadata.model_validate({"status": "LIVE", "started": True, "code": 12345, "size": 3})
    assert meta.code == "12345"
    assert meta.size == 3


@pytest.mark.parametrize("raw", ["not-a-date", "", 1307135000])
def test_index_metadata_unparseable_creation_time_is_none(raw: object) -> None:
    meta = IndexMetadata.model_validate({"status": "LIVE", "creation_time": raw})
    assert meta.creation_time is None
    assert meta.status == "LIVE"


def test_parse_model_wraps_validation_errors() -> None:
    with pytest.raises(MalformedResponse):
        parse_model(AddOutcome, {"error": "missing flag"}, what="batch add")
