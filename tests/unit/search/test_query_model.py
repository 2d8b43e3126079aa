"""Unit tests for the immutable query value and its executor."""

from unittest.mock import Mock

import pytest

from setsearch.search.analyzers import Normalizer
from setsearch.search.keys import KeyScheme
from setsearch.search.phonetic import PhoneticKeyer
from setsearch.search.query import Mode, Query, QueryExecutor
from setsearch.search.schema import FacetExtractor


pytestmark = pytest.mark.unit


def _executor(store=None):
    return QueryExecutor(
        store or Mock(),
        KeyScheme("posts"),
        normalizer=Normalizer(),
        keyer=PhoneticKeyer(encoder=str.upper),
        facets=FacetExtractor(),
    )


class TestMode:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("and", Mode.AND), ("AND", Mode.AND), ("intersect", Mode.AND), ("or", Mode.OR), (" Union ", Mode.OR)],
    )
    def test_aliases(self, value, expected):
        assert Mode.parse(value) is expected

    def test_enum_passthrough(self):
        assert Mode.parse(Mode.OR) is Mode.OR

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown query mode"):
            Mode.parse("xor")


class TestQuery:
    def test_default_mode_is_and(self):
        assert Query("alpha").match_mode is Mode.AND

    def test_mode_returns_new_query(self):
        base = Query("alpha")
        widened = base.mode("or")
        assert base.match_mode is Mode.AND
        assert widened.match_mode is Mode.OR
        assert widened.text == "alpha"

    def test_where_returns_new_query(self):
        base = Query("alpha")
        filtered = base.where("city", "Oslo")
        assert base.facets == ()
        assert filtered.facets == (("city", "Oslo"),)

    def test_unbound_query_cannot_execute(self):
        with pytest.raises(RuntimeError, match="not bound"):
            Query("alpha").execute()


class TestQueryExecutor:
    def test_keys_for_text(self):
        assert _executor().keys_for(Query("dogs dog")) == ["posts:word:DOG"]

    def test_keys_for_facets_follow_words(self):
        keys = _executor().keys_for(Query("alpha").where("tag", ["a", "b"]).where("tag", "a"))
        assert keys == ["posts:word:ALPHA", "posts:tag:a", "posts:tag:b"]

    def test_intersection_for_and(self):
        store = Mock()
        store.sinter.return_value = {"1"}
        assert _executor(store).execute(Query("alpha beta")) == {"1"}
        store.sinter.assert_called_once_with(["posts:word:ALPHA", "posts:word:BETA"])

    def test_union_for_or(self):
        store = Mock()
        store.sunion.return_value = {"1", "2"}
        assert _executor(store).execute(Query("alpha beta", Mode.OR)) == {"1", "2"}
        store.sunion.assert_called_once_with(["posts:word:ALPHA", "posts:word:BETA"])

    def test_empty_keys_short_circuit(self):
        store = Mock()
        assert _executor(store).execute(Query("the")) == set()
        assert store.method_calls == []
