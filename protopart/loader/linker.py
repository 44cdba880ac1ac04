# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Resolve type names across a set of parsed files.

Names are resolved the way protoc does it: a leading `.` makes a name
absolute, otherwise the enclosing scopes are searched from the innermost
outward. Scalars and `map<K, V>` are recognized directly. Fields of `extend`
blocks are attached to the extended message as extension fields.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, assert_never

from protopart.core.location import Location
from protopart.core.proto_type import SCALAR_NAMES, ProtoType
from protopart.core.schema import (
	EnclosingType,
	EnumType,
	Field,
	MessageType,
	ProtoFile,
	Schema,
	Service,
	Type,
)
from protopart.errors import SchemaError
from protopart.loader.parser import parse_proto

logger = logging.getLogger(__name__)


def _error(reason_code: str, message: str, location: Location) -> SchemaError:
	return SchemaError(
		reason_code=reason_code,
		message=message,
		location=location.path or None,
		line=location.line,
		column=location.column,
	)


def _split_map(name: str) -> Optional[tuple[str, str]]:
	if not (name.startswith("map<") and name.endswith(">")):
		return None
	key, sep, value = name[len("map<"):-1].partition(",")
	if not sep:
		return None
	return key.strip(), value.strip()


class Linker:
	def __init__(self, files: Sequence[ProtoFile]) -> None:
		self._files = list(files)
		try:
			self._index = Schema.from_files(self._files)
		except ValueError as err:
			raise SchemaError(reason_code="duplicate-type", message=str(err)) from err
		# Extension fields to attach, keyed by the extended message.
		self._extensions: Dict[ProtoType, List[Field]] = {}

	def resolve(self, name: str, scope: Optional[str], location: Location) -> ProtoType:
		if name in SCALAR_NAMES:
			return ProtoType.get(name)
		parts = _split_map(name)
		if parts is not None:
			return ProtoType.get_map(self.resolve(parts[0], scope, location), self.resolve(parts[1], scope, location))
		if name.startswith("."):
			candidate = ProtoType.get(name[1:])
			if self._index.get_type(candidate) is not None:
				return candidate
			raise _error("unresolved-type", f"unable to resolve {name}", location)
		scope_parts = scope.split(".") if scope else []
		for i in range(len(scope_parts), -1, -1):
			candidate = ProtoType.get(".".join(scope_parts[:i] + [name]))
			if self._index.get_type(candidate) is not None:
				return candidate
		raise _error("unresolved-type", f"unable to resolve {name}", location)

	def _link_field(self, f: Field, scope: Optional[str]) -> Field:
		return replace(f, type=self.resolve(f.element_type, scope, f.location))

	def _collect_extensions(self, proto_file: ProtoFile) -> None:
		for extend in proto_file.extends:
			scope = extend.scope or proto_file.package_name
			target = self.resolve(extend.name, scope, extend.location)
			target_decl = self._index.get_type(target)
			if not isinstance(target_decl, MessageType):
				raise _error("invalid-extend", f"{target} is not a message and cannot be extended", extend.location)
			linked = [replace(self._link_field(f, scope), is_extension=True) for f in extend.fields]
			self._extensions.setdefault(target, []).extend(linked)

	def _link_type(self, t: Type) -> Type:
		nested = tuple(self._link_type(n) for n in t.nested_types)
		if isinstance(t, MessageType):
			return replace(
				t,
				declared_fields=tuple(self._link_field(f, t.type.name) for f in t.declared_fields),
				extension_fields=tuple(t.extension_fields) + tuple(self._extensions.get(t.type, ())),
				nested_types=nested,
			)
		if isinstance(t, EnclosingType):
			return replace(t, nested_types=nested)
		if isinstance(t, EnumType):
			return t
		assert_never(t)

	def _link_service(self, service: Service, scope: Optional[str]) -> Service:
		return replace(
			service,
			rpcs=tuple(
				replace(
					rpc,
					request_type=self.resolve(rpc.request_type_name, scope, rpc.location),
					response_type=self.resolve(rpc.response_type_name, scope, rpc.location),
				)
				for rpc in service.rpcs
			),
		)

	def _link_file(self, proto_file: ProtoFile) -> ProtoFile:
		scope = proto_file.package_name
		extends = tuple(
			replace(
				e,
				type=self.resolve(e.name, e.scope or scope, e.location),
				fields=tuple(replace(self._link_field(f, e.scope or scope), is_extension=True) for f in e.fields),
			)
			for e in proto_file.extends
		)
		return replace(
			proto_file,
			types=tuple(self._link_type(t) for t in proto_file.types),
			services=tuple(self._link_service(s, scope) for s in proto_file.services),
			extends=extends,
		)

	def link(self) -> Schema:
		for proto_file in self._files:
			self._collect_extensions(proto_file)
		linked = [self._link_file(f) for f in self._files]
		schema = Schema.from_files(linked)
		logger.debug("linked %d files: %r", len(linked), schema)
		return schema


def link_files(files: Iterable[ProtoFile]) -> Schema:
	"""Resolve every type reference in `files` and return the linked Schema."""
	return Linker(list(files)).link()


def load_schema(paths: Iterable[Path]) -> Schema:
	"""Parse and link the `.proto` files at `paths`."""
	files: List[ProtoFile] = []
	for path in paths:
		try:
			source = path.read_text(encoding="utf-8")
		except OSError as err:
			raise SchemaError(reason_code="unreadable-file", message=str(err), location=str(path)) from err
		files.append(parse_proto(source, location=str(path)))
	return link_files(files)


__all__ = ["Linker", "link_files", "load_schema"]
