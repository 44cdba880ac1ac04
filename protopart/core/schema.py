# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Immutable in-memory schema model.

The type universe is a closed set of variants:

  - MessageType: fields, extension fields, nested types and options
  - EnumType: constants and options
  - EnclosingType: a namespace holder that only carries nested types

Services sit next to types in each ProtoFile. Every value is a frozen
dataclass; derived schemas are built with `dataclasses.replace` and a fresh
`Schema.from_files`, never by mutating a published value. Earlier schema
snapshots stay valid for as long as someone holds them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional, Sequence, Union

from protopart.core.location import Location
from protopart.core.options import Options
from protopart.core.proto_type import ProtoType


def _options_of(kind: ProtoType):
	return lambda: Options.empty(kind)


@dataclass(frozen=True)
class Field:
	"""
	A message field or extension field.

	`element_type` is the type name as written in the source; `type` is filled
	in by the linker once the name has been resolved against the schema.
	"""

	name: str
	tag: int
	element_type: str
	label: Optional[str] = None  # "optional" | "required" | "repeated"
	type: Optional[ProtoType] = None
	options: Options = field(default_factory=_options_of(Options.FIELD_OPTIONS))
	is_extension: bool = False
	location: Location = field(default_factory=Location)

	@property
	def is_repeated(self) -> bool:
		return self.label == "repeated"


@dataclass(frozen=True)
class EnumConstant:
	name: str
	tag: int
	options: Options = field(default_factory=_options_of(Options.ENUM_VALUE_OPTIONS))
	location: Location = field(default_factory=Location)


@dataclass(frozen=True)
class MessageType:
	type: ProtoType
	declared_fields: tuple[Field, ...] = ()
	extension_fields: tuple[Field, ...] = ()
	nested_types: tuple[Type, ...] = ()
	options: Options = field(default_factory=_options_of(Options.MESSAGE_OPTIONS))
	location: Location = field(default_factory=Location)

	@property
	def fields(self) -> tuple[Field, ...]:
		return self.declared_fields + self.extension_fields

	def get_field(self, name: str) -> Optional[Field]:
		for f in self.fields:
			if f.name == name:
				return f
		return None


@dataclass(frozen=True)
class EnumType:
	type: ProtoType
	constants: tuple[EnumConstant, ...] = ()
	options: Options = field(default_factory=_options_of(Options.ENUM_OPTIONS))
	location: Location = field(default_factory=Location)

	@property
	def nested_types(self) -> tuple[Type, ...]:
		return ()


@dataclass(frozen=True)
class EnclosingType:
	"""Retains nested types whose enclosing message was itself pruned."""

	type: ProtoType
	nested_types: tuple[Type, ...] = ()
	location: Location = field(default_factory=Location)


Type = Union[MessageType, EnumType, EnclosingType]


@dataclass(frozen=True)
class Rpc:
	name: str
	request_type_name: str
	response_type_name: str
	request_type: Optional[ProtoType] = None
	response_type: Optional[ProtoType] = None
	request_streaming: bool = False
	response_streaming: bool = False
	options: Options = field(default_factory=_options_of(Options.METHOD_OPTIONS))
	location: Location = field(default_factory=Location)


@dataclass(frozen=True)
class Service:
	type: ProtoType
	rpcs: tuple[Rpc, ...] = ()
	options: Options = field(default_factory=_options_of(Options.SERVICE_OPTIONS))
	location: Location = field(default_factory=Location)

	def get_rpc(self, name: str) -> Optional[Rpc]:
		for r in self.rpcs:
			if r.name == name:
				return r
		return None


@dataclass(frozen=True)
class Extend:
	"""A top-level `extend Foo { ... }` block."""

	name: str
	fields: tuple[Field, ...] = ()
	type: Optional[ProtoType] = None
	# Enclosing message for blocks declared inside a message, else None.
	scope: Optional[str] = None
	location: Location = field(default_factory=Location)


@dataclass(frozen=True)
class ProtoFile:
	location: Location
	package_name: Optional[str] = None
	imports: tuple[str, ...] = ()
	types: tuple[Type, ...] = ()
	services: tuple[Service, ...] = ()
	extends: tuple[Extend, ...] = ()
	options: Options = field(default_factory=_options_of(Options.FILE_OPTIONS))

	def types_and_nested_types(self) -> list[Type]:
		return list(types_and_nested_types(self.types))


def types_and_nested_types(types: Iterable[Type]) -> Iterator[Type]:
	"""Yield `types` and everything nested inside them, parents first."""
	for t in types:
		yield t
		yield from types_and_nested_types(t.nested_types)


class Schema:
	"""
	An indexed, immutable collection of proto files.

	Construction only indexes what the files already contain; it does not
	resolve names. That keeps rebuilding a derived schema from a modified file
	list cheap.
	"""

	def __init__(self, proto_files: Sequence[ProtoFile]) -> None:
		self._proto_files: tuple[ProtoFile, ...] = tuple(proto_files)
		self._types: dict[ProtoType, Type] = {}
		self._parents: dict[ProtoType, Optional[ProtoType]] = {}
		self._files: dict[ProtoType, ProtoFile] = {}
		self._services: dict[ProtoType, Service] = {}
		for proto_file in self._proto_files:
			for t in proto_file.types:
				self._index_type(t, None, proto_file)
			for service in proto_file.services:
				if service.type in self._services or service.type in self._types:
					raise ValueError(f"{service.type} is already defined")
				self._services[service.type] = service
				self._files[service.type] = proto_file

	@classmethod
	def from_files(cls, proto_files: Iterable[ProtoFile]) -> Schema:
		return cls(list(proto_files))

	def _index_type(self, t: Type, parent: Optional[ProtoType], proto_file: ProtoFile) -> None:
		if t.type in self._types:
			raise ValueError(f"{t.type} is already defined")
		self._types[t.type] = t
		self._parents[t.type] = parent
		self._files[t.type] = proto_file
		for nested in t.nested_types:
			self._index_type(nested, t.type, proto_file)

	@property
	def proto_files(self) -> tuple[ProtoFile, ...]:
		return self._proto_files

	@property
	def types(self) -> tuple[ProtoType, ...]:
		"""Every type identity, nested ones included, in declaration order."""
		return tuple(self._types)

	@property
	def services(self) -> tuple[Service, ...]:
		return tuple(self._services.values())

	def get_type(self, name: Union[ProtoType, str]) -> Optional[Type]:
		key = name if isinstance(name, ProtoType) else ProtoType.get(name)
		return self._types.get(key)

	def get_service(self, name: Union[ProtoType, str]) -> Optional[Service]:
		key = name if isinstance(name, ProtoType) else ProtoType.get(name)
		return self._services.get(key)

	def parent_of(self, proto_type: ProtoType) -> Optional[ProtoType]:
		"""Return the enclosing type of a nested type, None for top-level types."""
		if proto_type not in self._parents:
			raise KeyError(str(proto_type))
		return self._parents[proto_type]

	def proto_file_for(self, proto_type: ProtoType) -> Optional[ProtoFile]:
		return self._files.get(proto_type)

	def __contains__(self, proto_type: object) -> bool:
		return proto_type in self._types or proto_type in self._services

	def __repr__(self) -> str:
		return f"Schema(files={len(self._proto_files)}, types={len(self._types)}, services={len(self._services)})"


__all__ = [
	"EnclosingType",
	"EnumConstant",
	"EnumType",
	"Extend",
	"Field",
	"MessageType",
	"ProtoFile",
	"Rpc",
	"Schema",
	"Service",
	"Type",
	"types_and_nested_types",
]
