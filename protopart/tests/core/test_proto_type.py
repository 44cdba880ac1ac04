# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from protopart.core.proto_type import INT32, STRING, ProtoType


def test_scalars_are_canonical() -> None:
	assert ProtoType.get("int32") is INT32
	assert ProtoType.get("string").is_scalar
	assert not ProtoType.get("squareup.Foo").is_scalar


def test_named_types_compare_by_name() -> None:
	a = ProtoType.get("squareup.geology.Period")
	b = ProtoType.get("squareup.geology.Period")
	assert a == b
	assert hash(a) == hash(b)
	assert str(a) == "squareup.geology.Period"
	assert {a: 1}[b] == 1


def test_simple_name_and_enclosing_scope() -> None:
	t = ProtoType.get("squareup.geology.Period.Epoch")
	assert t.simple_name == "Epoch"
	assert t.enclosing_type_or_package == "squareup.geology.Period"
	assert ProtoType.get("Unqualified").enclosing_type_or_package is None
	assert INT32.enclosing_type_or_package is None


def test_nested_type() -> None:
	outer = ProtoType.get("squareup.Outer")
	assert outer.nested_type("Inner") == ProtoType.get("squareup.Outer.Inner")
	with pytest.raises(ValueError):
		outer.nested_type("a.b")
	with pytest.raises(ValueError):
		STRING.nested_type("Inner")


def test_map_types() -> None:
	m = ProtoType.get("map<string, squareup.Foo>")
	assert m.is_map
	assert m.key_type is STRING
	assert m.value_type == ProtoType.get("squareup.Foo")
	assert str(m) == "map<string, squareup.Foo>"
	assert m == ProtoType.get_map(STRING, ProtoType.get("squareup.Foo"))


def test_rejects_malformed_names() -> None:
	with pytest.raises(ValueError):
		ProtoType.get("")
	with pytest.raises(ValueError):
		ProtoType.get("map<string>")


def test_ordering_uses_names() -> None:
	names = ["b.B", "a.Z", "a.A"]
	assert [str(t) for t in sorted(ProtoType.get(n) for n in names)] == ["a.A", "a.Z", "b.B"]
