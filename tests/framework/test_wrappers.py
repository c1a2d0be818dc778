"""Tests for ``bulkops.framework.wrappers`` — subject wrapping."""

from __future__ import annotations

import pytest

from bulkops.framework.wrappers import EntityWrapper, is_batch, wrap_subject


class TestWrapSubject:
    def test_sequence_of_three_records_is_a_list_wrapper(self):
        wrapper = wrap_subject([{"nid": 1}, {"nid": 2}, {"nid": 3}], "node")
        assert wrapper.kind == "list"
        assert wrapper.type == "list<node>"
        assert len(wrapper) == 3

    def test_single_record_is_a_scalar_wrapper(self):
        wrapper = wrap_subject({"nid": 1}, "node")
        assert wrapper.kind == "single"
        assert wrapper.type == "node"
        assert wrapper.items() == ({"nid": 1},)

    def test_tuple_is_a_batch(self):
        assert wrap_subject((1, 2), "node").kind == "list"

    def test_empty_list_is_still_a_list(self):
        assert wrap_subject([], "node").kind == "list"

    @pytest.mark.parametrize("data", ["node-1", b"bytes", 5, None, {"nid": 1}])
    def test_scalars(self, data):
        assert wrap_subject(data, "node").kind == "single"

    def test_list_value_is_copied_to_a_tuple(self):
        records = [1, 2]
        wrapper = wrap_subject(records, "node")
        records.append(3)
        assert wrapper.value == (1, 2)


class TestIsBatch:
    def test_list(self):
        assert is_batch([1])

    def test_string_is_not_a_batch(self):
        assert not is_batch("abc")

    def test_none_is_not_a_batch(self):
        assert not is_batch(None)


def test_wrappers_compare_by_value():
    assert EntityWrapper("node", 1) == EntityWrapper("node", 1)
