# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Fully-qualified identities for schema types.

A ProtoType is an opaque, hashable name such as `squareup.geology.Period` or
`squareup.geology.Period.Epoch`. Scalars (`int32`, `string`, ...) and map
types (`map<string, Foo>`) share the same representation so field element
types can be stored uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass


SCALAR_NAMES = (
	"bool",
	"bytes",
	"double",
	"float",
	"fixed32",
	"fixed64",
	"int32",
	"int64",
	"sfixed32",
	"sfixed64",
	"sint32",
	"sint64",
	"string",
	"uint32",
	"uint64",
)


@dataclass(frozen=True)
class ProtoType:
	"""Identity of a message, enum, enclosing type, service, scalar or map."""

	name: str
	is_scalar: bool = False
	key_type: ProtoType | None = None
	value_type: ProtoType | None = None

	def __str__(self) -> str:
		return self.name

	def __lt__(self, other: ProtoType) -> bool:
		return self.name < other.name

	@classmethod
	def get(cls, name: str) -> ProtoType:
		"""
		Return the ProtoType for `name`.

		Scalar names return the canonical scalar instance; `map<K, V>` is split
		into its key and value types. Anything else is taken as a fully-qualified
		type name and must not be empty.
		"""
		name = name.strip()
		if not name:
			raise ValueError("empty type name")
		scalar = _SCALARS.get(name)
		if scalar is not None:
			return scalar
		if name.startswith("map<") and name.endswith(">"):
			inner = name[len("map<"):-1]
			key_name, sep, value_name = inner.partition(",")
			if not sep:
				raise ValueError(f"expected ',' in map type '{name}'")
			return cls.get_map(cls.get(key_name), cls.get(value_name))
		return cls(name=name)

	@classmethod
	def get_map(cls, key_type: ProtoType, value_type: ProtoType) -> ProtoType:
		return cls(name=f"map<{key_type}, {value_type}>", key_type=key_type, value_type=value_type)

	@property
	def is_map(self) -> bool:
		return self.key_type is not None

	@property
	def simple_name(self) -> str:
		if self.is_scalar or self.is_map:
			return self.name
		return self.name.rsplit(".", 1)[-1]

	@property
	def enclosing_type_or_package(self) -> str | None:
		"""Everything before the last dot, or None for unqualified names."""
		if self.is_scalar or self.is_map or "." not in self.name:
			return None
		return self.name.rsplit(".", 1)[0]

	def nested_type(self, simple_name: str) -> ProtoType:
		if self.is_scalar or self.is_map:
			raise ValueError(f"{self} cannot have nested types")
		if not simple_name or "." in simple_name:
			raise ValueError(f"unexpected nested type name '{simple_name}'")
		return ProtoType(name=f"{self.name}.{simple_name}")


_SCALARS: dict[str, ProtoType] = {n: ProtoType(name=n, is_scalar=True) for n in SCALAR_NAMES}

BOOL = _SCALARS["bool"]
BYTES = _SCALARS["bytes"]
INT32 = _SCALARS["int32"]
INT64 = _SCALARS["int64"]
STRING = _SCALARS["string"]


__all__ = ["ProtoType", "SCALAR_NAMES", "BOOL", "BYTES", "INT32", "INT64", "STRING"]
