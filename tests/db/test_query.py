"""Tests for filter evaluation and building."""

import pytest

from crudkit.db.query import QueryBuilder, QueryEngine, like_to_regex


class TestLikeToRegex:
    def test_wildcards(self):
        assert like_to_regex("%oa_") == "^.*oa.$"

    def test_escapes_regex_characters(self):
        assert like_to_regex("a.b") == "^a\\.b$"


class TestQueryEngine:
    """Test QueryEngine.match()."""

    def setup_method(self):
        self.doc = {
            "name": "Foam",
            "size": 3,
            "tags": ["soft", "light"],
            "meta": {"origin": "DK"},
        }

    def test_empty_filter(self):
        assert QueryEngine.match(self.doc, None)
        assert QueryEngine.match(self.doc, {})

    def test_equality(self):
        assert QueryEngine.match(self.doc, {"name": "Foam"})
        assert not QueryEngine.match(self.doc, {"name": "Wood"})

    def test_number_against_text(self):
        """Test that decoded query-string values match numeric fields."""
        assert QueryEngine.match(self.doc, {"size": "3"})

    def test_text_against_boolean(self):
        """Test that decoded true/false text matches boolean fields."""
        assert QueryEngine.match({"active": True}, {"active": "true"})
        assert QueryEngine.match({"active": False}, {"active": "False"})
        assert not QueryEngine.match({"active": True}, {"active": "false"})
        assert not QueryEngine.match({"active": False}, {"active": "0"})

    def test_nested_field(self):
        assert QueryEngine.match(self.doc, {"meta.origin": "DK"})

    @pytest.mark.parametrize(
        "condition,expected",
        [
            ({"$gt": 2}, True),
            ({"$gte": 3}, True),
            ({"$lt": 3}, False),
            ({"$lte": 3}, True),
            ({"$ne": 3}, False),
            ({"$in": [1, 3]}, True),
            ({"$nin": [1, 3]}, False),
        ],
    )
    def test_comparison_operators(self, condition, expected):
        assert QueryEngine.match(self.doc, {"size": condition}) is expected

    def test_like(self):
        assert QueryEngine.match(self.doc, {"name": {"$like": "%oa%"}})
        assert not QueryEngine.match(self.doc, {"name": {"$like": "%OA%"}})
        assert QueryEngine.match(self.doc, {"name": {"$iLike": "%OA%"}})

    def test_like_on_missing_field(self):
        assert not QueryEngine.match(self.doc, {"color": {"$like": "%"}})

    def test_or(self):
        assert QueryEngine.match(
            self.doc, {"$or": [{"name": "Wood"}, {"size": {"$gt": 1}}]}
        )
        assert not QueryEngine.match(self.doc, {"$or": [{"name": "Wood"}]})

    def test_and(self):
        assert QueryEngine.match(self.doc, {"$and": [{"name": "Foam"}, {"size": 3}]})

    def test_unknown_operator(self):
        assert not QueryEngine.match(self.doc, {"size": {"$near": 3}})


class TestQueryBuilder:
    """Test QueryBuilder."""

    def test_or_and_merge(self):
        built = (
            QueryBuilder()
            .or_({"name": {"$like": "%oa%"}})
            .merge({"kind": "soft"})
            .build()
        )
        assert built == {"$or": [{"name": {"$like": "%oa%"}}], "kind": "soft"}

    def test_conflicting_plain_conditions(self):
        """Test that a second plain condition on a field is AND-ed."""
        builder = QueryBuilder().merge({"kind": "soft"}).merge({"kind": "hard"})
        built = builder.build()

        assert built == {"kind": "soft", "$and": [{"kind": "hard"}]}
        assert not QueryEngine.match({"kind": "soft"}, built)

    def test_empty_or_dropped(self):
        assert QueryBuilder().or_().build() == {}
