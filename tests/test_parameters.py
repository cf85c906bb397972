"""Unit tests for ParameterRegistry."""

from __future__ import annotations

import hashlib

import pytest

from fluentql.compile.parameters import ParameterRegistry, normalize_key
from fluentql.errors import QueryBuilderInvalidArgumentError
from fluentql.schema.raw import Raw


def test_add_returns_placeholder_and_binds():
    params = ParameterRegistry()
    assert params.add("status", 1) == ":status"
    assert params.all() == {":status": 1}


def test_add_suffixes_on_collision():
    params = ParameterRegistry()
    assert params.add("status", 1) == ":status"
    assert params.add("status", 2) == ":status_1"
    assert params.add("status", 3) == ":status_2"
    assert params.all() == {":status": 1, ":status_1": 2, ":status_2": 3}


def test_add_never_overwrites_explicit_binding():
    params = ParameterRegistry()
    params.set("id", 10)
    assert params.add("id", 20) == ":id_1"
    assert params.get("id") == 10


def test_add_none_returns_null_without_binding():
    params = ParameterRegistry()
    assert params.add("deleted_at", None) == "NULL"
    assert len(params) == 0


def test_add_raw_key_uses_content_hash():
    params = ParameterRegistry()
    name = params.add(Raw("COUNT(id)"), 5)
    digest = hashlib.md5(b"COUNT(id)").hexdigest()
    assert name == f":raw_{digest}"


def test_normalize_key_strips_colons_and_dots():
    assert normalize_key("::status") == ":status"
    assert normalize_key("post.id") == ":postid"
    assert normalize_key("COUNT(id)") == ":COUNT_id"
    assert normalize_key("1st") == ":p1st"


def test_set_overwrites():
    params = ParameterRegistry()
    params.set(":name", "a").set("name", "b")
    assert params.all() == {":name": "b"}


def test_merge_later_sources_win():
    first = ParameterRegistry({"a": 1})
    params = ParameterRegistry().merge(first, {"a": 2, ":b": 3})
    assert params.all() == {":a": 2, ":b": 3}


def test_get_full_mapping_and_defaults():
    params = ParameterRegistry({"a": 1})
    assert params.get() == {":a": 1}
    assert params.get(":a") == 1
    assert params.get("missing", "fallback") == "fallback"


def test_get_default_supplier_is_lazy():
    calls = []

    def supplier():
        calls.append(1)
        return 42

    params = ParameterRegistry({"a": 1})
    assert params.get("a", supplier) == 1
    assert calls == []
    assert params.get("b", supplier) == 42
    assert calls == [1]


def test_reset_clears_and_chains():
    params = ParameterRegistry({"a": 1})
    assert params.reset() is params
    assert params.all() == {}


def test_copy_is_independent():
    params = ParameterRegistry({"a": 1})
    copied = params.copy()
    copied.add("a", 2)
    assert params.all() == {":a": 1}
    assert copied.all() == {":a": 1, ":a_1": 2}


def test_contains_normalizes_key():
    params = ParameterRegistry({"a": 1})
    assert "a" in params
    assert ":a" in params
    assert "b" not in params


def test_non_scalar_value_is_rejected():
    params = ParameterRegistry()
    with pytest.raises(QueryBuilderInvalidArgumentError):
        params.add("ids", [1, 2])
    with pytest.raises(QueryBuilderInvalidArgumentError):
        params.set("meta", {"a": 1})


def test_add_once_reuses_equal_binding():
    params = ParameterRegistry()
    assert params.add_once("id", 5) == ":id"
    assert params.add_once("id", 10) == ":id_1"
    assert params.add_once("id", 10) == ":id_1"
    assert params.add_once("id", 5.0) == ":id_2"
    assert params.add_once("id", None) == "NULL"
    assert params.all() == {":id": 5, ":id_1": 10, ":id_2": 5.0}


def test_adopt_binds_and_renames_colliding_placeholders():
    params = ParameterRegistry({"status": 0})
    raw = Raw(lambda qb: qb.from_("post").where("status", 1).where("type", "news"))
    adopted = params.adopt(raw)
    assert adopted.get() == "SELECT * FROM post WHERE status = :status_1 AND type = :type"
    assert adopted.parameters == {}
    assert params.all() == {":status": 0, ":status_1": 1, ":type": "news"}


def test_adopt_without_bindings_returns_same_fragment():
    raw = Raw("created::date = :day")
    assert ParameterRegistry().adopt(raw) is raw
