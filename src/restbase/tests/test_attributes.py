import json

import pytest

from ..types import ABSENT


class TestAttributeStore:
    @pytest.fixture
    def target(self):
        from ..attributes import AttributeStore

        return AttributeStore

    def test_wraps_without_copying(self, target):
        data = {"a": 1}
        store = target(data)
        store["b"] = 2
        assert data == {"a": 1, "b": 2}

    def test_get_tells_absent_from_null(self, target):
        store = target({"a": None})
        assert store.get("a") is None
        assert store.get("b") is ABSENT
        assert store.has("a")
        assert not store.has("b")
        assert not store.get("b")

    def test_merge_clobber(self, target):
        store = target({"a": 1, "b": {"c": 1, "d": 2}, "e": [1, 2]})
        store.merge({"b": {"c": 3}, "e": "x", "f": None}, clobber=True)
        assert store.data == {"a": 1, "b": {"c": 3}, "e": "x", "f": None}

    def test_merge_deep(self, target):
        store = target({"a": 1, "b": {"c": 1, "d": {"e": 2, "f": 3}}, "g": [1]})
        store.merge({"a": 2, "b": {"c": 3, "d": {"e": 4}}, "g": [2, 3]}, clobber=False)
        assert store.data == {"a": 2, "b": {"c": 3, "d": {"e": 4, "f": 3}}, "g": [2, 3]}

    def test_merge_deep_overwrites_scalar_with_scalar_of_other_type(self, target):
        store = target({"a": {"b": 1}})
        store.merge({"a": None}, clobber=False)
        assert store.data == {"a": None}

    def test_merge_deep_inserts_mapping_when_target_has_none(self, target):
        incoming = {"b": {"c": {"d": 1}}, "e": {"f": 2}}
        store = target({"e": "scalar"})
        store.merge(incoming, clobber=False)
        assert store.data == {"b": {"c": {"d": 1}}, "e": {"f": 2}}
        store["b"]["c"]["d"] = 5
        assert incoming["b"]["c"]["d"] == 1

    @pytest.mark.parametrize(
        "nested_under, expected",
        [
            (None, 1),
            ("b", 2),
            (["c", "d"], 3),
            (("c", "x"), ABSENT),
            ("missing", ABSENT),
            ("e", ABSENT),
        ],
    )
    def test_lookup(self, target, nested_under, expected):
        store = target({"a": 1, "b": {"a": 2}, "c": {"d": {"a": 3}}, "e": "scalar"})
        assert store.lookup("a", nested_under) == expected

    def test_mapping_protocol(self, target):
        store = target({"a": 1})
        store["b"] = 2
        del store["a"]
        assert list(store) == ["b"]
        assert len(store) == 1
        assert store == {"b": 2}

    def test_to_json(self, target):
        store = target({"a": [1, {"b": None}]})
        assert json.loads(store.to_json()) == {"a": [1, {"b": None}]}
