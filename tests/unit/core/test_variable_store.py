"""Tests for VariableStore."""

import pytest

from chatflow.core.variables import VariableStore


def test_entries_are_created_on_first_write():
    store = VariableStore()

    store["name"] = "Ana"

    assert store["name"] == "Ana"
    assert len(store) == 1
    assert "name" in store


def test_get_missing_returns_default():
    assert VariableStore().get("missing") is None


def test_snapshot_is_read_only_copy():
    store = VariableStore({"a": 1})

    snapshot = store.snapshot()
    store["a"] = 2

    assert snapshot["a"] == 1
    with pytest.raises(TypeError):
        snapshot["a"] = 3  # type: ignore[index]


def test_clear_removes_everything():
    store = VariableStore({"a": 1, "b": 2})

    store.clear()

    assert list(store) == []
