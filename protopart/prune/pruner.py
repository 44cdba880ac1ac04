# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reachability-based schema pruning.

`prune(schema, rules)` keeps the roots named by `rules` plus everything they
reference, and drops the rest:

- a reached message keeps the fields that are not pruned and whose type is
  not pruned, and reaches those field types;
- a reached enum keeps its non-pruned constants;
- a reached service keeps its non-pruned rpcs and reaches their request and
  response types;
- a member root (`pkg.Type#member`) reaches its type with only that member;
- a nested type that is kept forces its enclosing scopes to be kept, as an
  EnclosingType when the enclosing type was not reached itself.

The input schema is never modified; a new Schema is built from the retained
files.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import replace
from typing import Deque, Dict, Optional, Union, assert_never

from protopart.core.proto_type import ProtoType
from protopart.core.schema import (
	EnclosingType,
	EnumType,
	Extend,
	Field,
	MessageType,
	ProtoFile,
	Schema,
	Service,
	Type,
)
from protopart.prune.pruning_rules import PruningRules

logger = logging.getLogger(__name__)


def _member_names(decl: Union[Type, Service]) -> list[str]:
	if isinstance(decl, MessageType):
		return [f.name for f in decl.fields]
	if isinstance(decl, EnumType):
		return [c.name for c in decl.constants]
	if isinstance(decl, Service):
		return [r.name for r in decl.rpcs]
	return []


class Pruner:
	def __init__(self, schema: Schema, rules: PruningRules) -> None:
		self._schema = schema
		self._rules = rules
		# Types and services reached as a whole.
		self._full: Dict[ProtoType, None] = {}
		# Types and services reached only through member roots.
		self._members: Dict[ProtoType, Dict[str, None]] = {}
		self._queue: Deque[ProtoType] = deque()

	def prune(self) -> Schema:
		self._mark_roots()
		while self._queue:
			self._visit(self._queue.popleft())
		files = [self._retain_file(f) for f in self._schema.proto_files]
		pruned = Schema.from_files(files)
		logger.debug(
			"pruning kept %d of %d types and %d of %d services",
			len(pruned.types),
			len(self._schema.types),
			len(pruned.services),
			len(self._schema.services),
		)
		return pruned

	def _decl(self, proto_type: ProtoType) -> Union[Type, Service, None]:
		t = self._schema.get_type(proto_type)
		if t is not None:
			return t
		return self._schema.get_service(proto_type)

	def _mark_roots(self) -> None:
		identities = list(self._schema.types) + [s.type for s in self._schema.services]
		for proto_type in identities:
			if self._rules.is_root(str(proto_type)):
				self._mark(proto_type)
				continue
			decl = self._decl(proto_type)
			for member in _member_names(decl):
				if self._rules.is_root(f"{proto_type}#{member}"):
					self._mark_member(proto_type, member)

	def _is_type_pruned(self, proto_type: ProtoType) -> bool:
		if proto_type.is_map:
			return self._is_type_pruned(proto_type.key_type) or self._is_type_pruned(proto_type.value_type)
		if proto_type.is_scalar:
			return False
		return self._rules.prunes_identifier(str(proto_type))

	def _is_member_pruned(self, proto_type: ProtoType, member: str) -> bool:
		return self._rules.prunes_identifier(f"{proto_type}#{member}")

	def _mark(self, proto_type: Optional[ProtoType]) -> None:
		if proto_type is None:
			return
		if proto_type.is_map:
			self._mark(proto_type.key_type)
			self._mark(proto_type.value_type)
			return
		if proto_type.is_scalar or proto_type in self._full:
			return
		if self._is_type_pruned(proto_type):
			return
		self._full[proto_type] = None
		self._queue.append(proto_type)

	def _mark_member(self, proto_type: ProtoType, member: str) -> None:
		if self._is_member_pruned(proto_type, member):
			return
		self._members.setdefault(proto_type, {})[member] = None
		decl = self._decl(proto_type)
		if isinstance(decl, MessageType):
			f = decl.get_field(member)
			if f is not None and self._keeps_field(decl.type, f):
				self._mark(f.type)
		elif isinstance(decl, Service):
			rpc = decl.get_rpc(member)
			if rpc is not None:
				self._mark(rpc.request_type)
				self._mark(rpc.response_type)

	def _keeps_field(self, owner: ProtoType, f: Field) -> bool:
		if self._is_member_pruned(owner, f.name):
			return False
		return f.type is None or not self._is_type_pruned(f.type)

	def _visit(self, proto_type: ProtoType) -> None:
		decl = self._decl(proto_type)
		if isinstance(decl, MessageType):
			for f in decl.fields:
				if self._keeps_field(proto_type, f):
					self._mark(f.type)
		elif isinstance(decl, Service):
			for rpc in decl.rpcs:
				if not self._is_member_pruned(proto_type, rpc.name):
					self._mark(rpc.request_type)
					self._mark(rpc.response_type)

	def _keeps_member(self, proto_type: ProtoType, member: str) -> bool:
		if proto_type in self._full:
			return not self._is_member_pruned(proto_type, member)
		return member in self._members.get(proto_type, {})

	def _retain_type(self, t: Type) -> Optional[Type]:
		nested = tuple(r for r in (self._retain_type(n) for n in t.nested_types) if r is not None)
		if t.type not in self._full and t.type not in self._members:
			if not nested:
				return None
			return EnclosingType(type=t.type, nested_types=nested, location=t.location)
		if isinstance(t, MessageType):
			return replace(
				t,
				declared_fields=tuple(f for f in t.declared_fields if self._keeps_member(t.type, f.name) and self._keeps_field(t.type, f)),
				extension_fields=tuple(f for f in t.extension_fields if self._keeps_member(t.type, f.name) and self._keeps_field(t.type, f)),
				nested_types=nested,
			)
		if isinstance(t, EnumType):
			return replace(t, constants=tuple(c for c in t.constants if self._keeps_member(t.type, c.name)))
		if isinstance(t, EnclosingType):
			return replace(t, nested_types=nested)
		assert_never(t)

	def _retain_service(self, service: Service) -> Optional[Service]:
		if service.type not in self._full and service.type not in self._members:
			return None
		return replace(service, rpcs=tuple(r for r in service.rpcs if self._keeps_member(service.type, r.name)))

	def _retain_extend(self, extend: Extend) -> Optional[Extend]:
		if extend.type is None:
			return None
		target = extend.type
		if target not in self._full and target not in self._members:
			return None
		fields = tuple(f for f in extend.fields if self._keeps_member(target, f.name) and self._keeps_field(target, f))
		if not fields:
			return None
		return replace(extend, fields=fields)

	def _retain_file(self, proto_file: ProtoFile) -> ProtoFile:
		types = tuple(r for r in (self._retain_type(t) for t in proto_file.types) if r is not None)
		services = tuple(r for r in (self._retain_service(s) for s in proto_file.services) if r is not None)
		extends = tuple(r for r in (self._retain_extend(e) for e in proto_file.extends) if r is not None)
		return replace(proto_file, types=types, services=services, extends=extends)


def prune(schema: Schema, rules: PruningRules) -> Schema:
	"""Return the part of `schema` reachable from the roots in `rules`."""
	return Pruner(schema, rules).prune()


__all__ = ["Pruner", "prune"]
