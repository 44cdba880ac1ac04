# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declared options attached to files, types, members and services.

Options are kept as an ordered list of name/value pairs. The option kind is
the ProtoType of the `google.protobuf.*Options` message that models them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from protopart.core.proto_type import ProtoType


@dataclass(frozen=True)
class OptionElement:
	name: str
	value: Any
	# `(my.custom_option)` style names are extensions of the options message.
	is_parenthesized: bool = False


@dataclass(frozen=True)
class Options:
	option_type: ProtoType
	elements: tuple[OptionElement, ...] = ()

	FILE_OPTIONS = ProtoType.get("google.protobuf.FileOptions")
	MESSAGE_OPTIONS = ProtoType.get("google.protobuf.MessageOptions")
	FIELD_OPTIONS = ProtoType.get("google.protobuf.FieldOptions")
	ENUM_OPTIONS = ProtoType.get("google.protobuf.EnumOptions")
	ENUM_VALUE_OPTIONS = ProtoType.get("google.protobuf.EnumValueOptions")
	SERVICE_OPTIONS = ProtoType.get("google.protobuf.ServiceOptions")
	METHOD_OPTIONS = ProtoType.get("google.protobuf.MethodOptions")

	@classmethod
	def empty(cls, option_type: ProtoType) -> Options:
		return cls(option_type=option_type, elements=())

	def get(self, name: str) -> Any:
		"""Return the value of the last element named `name`, or None."""
		found = None
		for element in self.elements:
			if element.name == name:
				found = element.value
		return found


__all__ = ["OptionElement", "Options"]
