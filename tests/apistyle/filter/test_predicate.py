"""
Tests for compiled filter predicates.
"""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from apistyle.filter import (
    ExpressionLimits,
    LimitExceededError,
    ParseError,
    Predicate,
    SyntaxError,
    compile_filter,
)

DOGS = [
    {"id": 1, "name": "Rex", "continent": "Europe", "price": 50, "owner": {"id": 1}},
    {"id": 2, "name": "Fido", "continent": "Asia", "price": 300, "owner": {"id": 2}},
    {"id": 3, "name": "Bello", "continent": "Europe", "price": 1, "owner": None},
    {"id": 4, "name": "Laika", "price": 120},
]


class TestCompileFilter:
    """Tests for compile_filter."""

    def test_returns_predicate(self):
        predicate = compile_filter('continent eq "Europe"')
        assert isinstance(predicate, Predicate)
        assert predicate.source == 'continent eq "Europe"'
        assert predicate.ast.type == "Comparison"

    def test_predicate_is_callable(self):
        predicate = compile_filter('continent eq "Europe"')
        assert predicate({"continent": "Europe"}) is True
        assert predicate({"continent": "Asia"}) is False

    def test_malformed_filter_raises_syntax_error(self):
        with pytest.raises(ParseError):
            compile_filter("price le")

    def test_empty_filter_raises_syntax_error(self):
        with pytest.raises(SyntaxError):
            compile_filter("")

    def test_limits_are_applied(self):
        with pytest.raises(LimitExceededError):
            compile_filter("(a eq 1)", ExpressionLimits(max_depth=0))

    def test_logs_compilation(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="apistyle.filter.predicate"):
            compile_filter("a eq 1 and b eq 2")
        records = [r for r in caplog.records if r.getMessage() == "filter_compiled"]
        assert len(records) == 1
        assert records[0].node_count == 7

    def test_logs_rejection(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="apistyle.filter.predicate"):
            with pytest.raises(SyntaxError):
                compile_filter("price gt cost")
        records = [r for r in caplog.records if r.getMessage() == "filter_rejected"]
        assert len(records) == 1
        assert records[0].token == "cost"


class TestPredicateFilter:
    """Tests for applying predicates to collections."""

    def test_filters_collection(self):
        predicate = compile_filter("price le 200 and price gt 3.5")
        assert [dog["id"] for dog in predicate.filter(DOGS)] == [1, 4]

    def test_filter_is_lazy(self):
        predicate = compile_filter("price gt 100")
        seen = []

        def records():
            for dog in DOGS:
                seen.append(dog["id"])
                yield dog

        iterator = predicate.filter(records())
        assert seen == []
        assert next(iterator)["id"] == 2
        assert seen == [1, 2]

    def test_heterogeneous_records(self):
        predicate = compile_filter("owner.id eq 1")
        assert [dog["id"] for dog in predicate.filter(DOGS)] == [1]

    def test_absent_fields_with_ne(self):
        predicate = compile_filter('continent ne "Europe"')
        assert [dog["id"] for dog in predicate.filter(DOGS)] == [2, 4]

    def test_to_filter_string(self):
        predicate = compile_filter('((continent eq "Europe")) and (price lt 100)')
        assert predicate.to_filter_string() == 'continent eq "Europe" and price lt 100'

    def test_predicate_is_immutable(self):
        predicate = compile_filter("a eq 1")
        with pytest.raises(AttributeError):
            predicate.source = "b eq 2"  # type: ignore[misc]

    def test_shared_predicate_across_threads(self):
        predicate = compile_filter('(continent eq "Europe" or price gt 200) and not id eq 3')
        expected = [predicate(dog) for dog in DOGS]

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: [predicate(dog) for dog in DOGS], range(32)))

        assert expected == [True, True, False, False]
        assert all(result == expected for result in results)
