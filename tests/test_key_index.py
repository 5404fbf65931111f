"""Tests for KeyIndex, the segment tree built from a flat keyspace."""

from __future__ import annotations

import logging

import pytest

from keyscope.index import (
    HierarchyNode,
    KeyDecodeError,
    KeyIndex,
    StaleCursorError,
)
from keyscope.store import StoreError


def _paths(node: HierarchyNode, prefix: tuple[str, ...] = ()) -> list[tuple[str, ...]]:
    """Every value-bearing path below *node*."""
    out = []
    for seg in node.ordered_segments():
        child = node.children[seg]
        path = (*prefix, seg)
        if child.has_value:
            out.append(path)
        out.extend(_paths(child, path))
    return out


# ── Build ────────────────────────────────────────────────────────────


def test_build_scenario_tree(scenario_store):
    index = KeyIndex.build(scenario_store, "default", "/")
    assert list(index.root.children) == ["a"]
    a = index.root.children["a"]
    assert a.ordered_segments() == ["b", "x"]
    assert not a.has_value
    assert a.children["b"].ordered_segments() == ["c", "d"]
    assert a.children["x"].has_value
    assert index.key_count == 3
    # a, a/b, a/b/c, a/b/d, a/x
    assert index.node_count == 5


def test_shared_prefixes_collapse(store):
    for i in range(50):
        store.put("t", f"common/prefix/k{i}".encode(), b"")
    index = KeyIndex.build(store, "t", "/")
    assert index.key_count == 50
    assert index.node_count == 52


def test_directory_with_value(mixed_store):
    index = KeyIndex.build(mixed_store, "mixed", "/")
    a = index.root.children["a"]
    assert a.has_value
    assert a.has_children
    assert a.children["b"].has_value


def test_trailing_delimiter_keeps_empty_segment(mixed_store):
    index = KeyIndex.build(mixed_store, "mixed", "/")
    trailing = index.root.children["trailing"]
    assert trailing.has_children
    assert not trailing.has_value
    assert trailing.children[""].has_value


def test_leading_delimiter_gives_empty_top_level(mixed_store):
    index = KeyIndex.build(mixed_store, "mixed", "/")
    assert index.root.children[""].children["leading"].has_value


def test_children_sorted_by_segment_not_key_bytes(mixed_store):
    """'a-b/x' sorts before 'a/...' as bytes, but segment 'a' < 'a-b'."""
    index = KeyIndex.build(mixed_store, "mixed", "/")
    assert index.root.ordered_segments() == ["", "a", "a-b", "trailing"]


def test_multichar_delimiter(store):
    store.put("t", b"x::y::z", b"1")
    store.put("t", b"x::w", b"2")
    index = KeyIndex.build(store, "t", "::")
    assert index.root.children["x"].ordered_segments() == ["w", "y"]


def test_round_trip_every_key(mixed_store, scenario_store):
    """Each stored key is reachable by exactly one path that rejoins to it."""
    for keyspace in ("default", "mixed"):
        index = KeyIndex.build(mixed_store, keyspace, "/")
        rebuilt = sorted(index.join(p).encode() for p in _paths(index.root))
        assert rebuilt == sorted(mixed_store.iter_keys(keyspace))


def test_empty_keyspace(store):
    index = KeyIndex.build(store, "default", "/")
    assert index.key_count == 0
    assert index.root.children == {}


def test_build_unknown_keyspace_raises(store):
    with pytest.raises(StoreError):
        KeyIndex.build(store, "missing", "/")


def test_empty_delimiter_rejected(store):
    with pytest.raises(ValueError):
        KeyIndex.build(store, "default", "")


# ── Decode failures ──────────────────────────────────────────────────


def test_undecodable_key_is_skipped(store, caplog):
    store.put("t", b"good/key", b"1")
    store.put("t", b"bad/\xff\xfe", b"2")
    with caplog.at_level(logging.WARNING):
        index = KeyIndex.build(store, "t", "/")

    assert index.key_count == 1
    assert len(index.decode_failures) == 1
    err = index.decode_failures[0]
    assert isinstance(err, KeyDecodeError)
    assert err.raw_key == b"bad/\xff\xfe"
    assert isinstance(err.__cause__, UnicodeDecodeError)
    assert "bad" not in index.root.children
    assert "Skipping key" in caplog.text


# ── Flat mode ────────────────────────────────────────────────────────


def test_flat_index_materializes_nothing(flat_store):
    index = KeyIndex.build(flat_store, "numbers", None)
    assert index.flat
    assert index.key_count == 120
    assert index.root.children == {}


def test_flat_join_single_segment(flat_store):
    index = KeyIndex.build(flat_store, "numbers", None)
    assert index.join(["k001"]) == "k001"
    with pytest.raises(ValueError):
        index.join(["a", "b"])


# ── Resolve ──────────────────────────────────────────────────────────


def test_resolve_walks_segments(scenario_store):
    index = KeyIndex.build(scenario_store, "default", "/")
    assert index.resolve([]) is index.root
    assert index.resolve(["a", "b"]).ordered_segments() == ["c", "d"]


def test_resolve_missing_segment_raises(scenario_store):
    index = KeyIndex.build(scenario_store, "default", "/")
    with pytest.raises(StaleCursorError) as exc_info:
        index.resolve(["a", "gone", "c"])
    assert exc_info.value.missing == "gone"
    assert exc_info.value.cursor == ("a", "gone", "c")
    assert index.resolve(["a", "x"]).has_value


def test_flat_resolve_rejects_nonempty_cursor(flat_store):
    index = KeyIndex.build(flat_store, "numbers", None)
    with pytest.raises(StaleCursorError):
        index.resolve(["k001"])
