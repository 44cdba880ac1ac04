# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Stub types and services.

A stub keeps the identity and nesting of a declaration but drops everything
that could reference another type: fields, extension fields, enum constants,
rpcs and options. Downstream modules see stubs for types generated upstream,
so references to them still resolve while their contents are not pulled in
again.
"""

from __future__ import annotations

from dataclasses import replace
from typing import assert_never

from protopart.core.options import Options
from protopart.core.schema import EnclosingType, EnumType, MessageType, Service, Type

# Built-in types model options themselves and must keep their structure.
BUILTIN_PREFIX = "google.protobuf."


def is_builtin(t: Type) -> bool:
	return t.type.name.startswith(BUILTIN_PREFIX)


def stub_type(t: Type) -> Type:
	"""Return a copy of `t` with all possible type references removed."""
	if is_builtin(t):
		return t
	if isinstance(t, MessageType):
		return replace(
			t,
			declared_fields=(),
			extension_fields=(),
			nested_types=tuple(stub_type(n) for n in t.nested_types),
			options=Options.empty(Options.MESSAGE_OPTIONS),
		)
	if isinstance(t, EnumType):
		return replace(t, constants=(), options=Options.empty(Options.ENUM_OPTIONS))
	if isinstance(t, EnclosingType):
		return replace(t, nested_types=tuple(stub_type(n) for n in t.nested_types))
	assert_never(t)


def stub_service(service: Service) -> Service:
	"""Return a copy of `service` with all possible type references removed."""
	return replace(service, rpcs=(), options=Options.empty(Options.SERVICE_OPTIONS))


__all__ = ["BUILTIN_PREFIX", "is_builtin", "stub_service", "stub_type"]
