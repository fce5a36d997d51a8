"""Tests for SPARQL JSON result parsing."""

from __future__ import annotations

import json

import pytest

from sparqlcache.exceptions import ParseError
from sparqlcache.models import BlankNodeTerm, IRITerm, LiteralTerm
from sparqlcache.results import parse_results

from tests.conftest import ASK_RESULTS, SELECT_RESULTS


def _dumps(data) -> bytes:
    return json.dumps(data).encode("utf-8")


class TestSelect:
    def test_head_and_rows(self) -> None:
        results = parse_results(_dumps(SELECT_RESULTS))
        assert results.head.vars == ["x", "label"]
        rows = results.solutions()
        assert len(rows) == 3
        assert isinstance(rows[0]["x"], IRITerm)
        assert isinstance(rows[0]["label"], LiteralTerm)
        assert isinstance(rows[2]["x"], BlankNodeTerm)

    def test_literal_details(self) -> None:
        rows = parse_results(_dumps(SELECT_RESULTS)).solutions()
        assert rows[0]["label"].lang == "en"
        assert rows[1]["label"].datatype == "http://www.w3.org/2001/XMLSchema#integer"
        assert rows[1]["label"].value == "2"

    def test_typed_literal_is_accepted(self) -> None:
        doc = {
            "head": {"vars": ["n"]},
            "results": {"bindings": [{"n": {
                "type": "typed-literal",
                "value": "1.5",
                "datatype": "http://www.w3.org/2001/XMLSchema#decimal",
            }}]},
        }
        row = parse_results(_dumps(doc)).solutions()[0]
        assert isinstance(row["n"], LiteralTerm)
        assert row["n"].n3() == '"1.5"^^<http://www.w3.org/2001/XMLSchema#decimal>'

    def test_empty_bindings(self) -> None:
        doc = {"head": {"vars": ["x"]}, "results": {"bindings": []}}
        assert parse_results(_dumps(doc)).solutions() == []

    def test_extra_members_are_tolerated(self) -> None:
        doc = {
            "head": {"vars": ["x"], "link": ["http://example.org/meta"]},
            "results": {"distinct": False, "ordered": True, "bindings": []},
        }
        assert parse_results(_dumps(doc)).head.link == ["http://example.org/meta"]


class TestAsk:
    def test_boolean(self) -> None:
        results = parse_results(_dumps(ASK_RESULTS))
        assert results.boolean is True
        assert results.solutions() == []


class TestN3:
    def test_iri(self) -> None:
        assert IRITerm(value="http://example.org/a").n3() == "<http://example.org/a>"

    def test_language_literal(self) -> None:
        assert LiteralTerm(value='say "hi"', lang="en").n3() == '"say \\"hi\\""@en'

    def test_blank_node(self) -> None:
        assert BlankNodeTerm(value="b0").n3() == "_:b0"


class TestInvalid:
    @pytest.mark.parametrize(
        "data",
        [
            b"",
            b"not json",
            b'{"head": {"vars": ["x"]}, "resu',
            b"[]",
            b'{"head": {"vars": []}}',
            b'{"results": {"bindings": [{"x": {"type": "triple", "value": "?"}}]}}',
            b'{"results": {"bindings": [{"x": {"type": "uri"}}]}}',
        ],
    )
    def test_raises_parse_error(self, data: bytes) -> None:
        with pytest.raises(ParseError):
            parse_results(data)
