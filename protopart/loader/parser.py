# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parse `.proto` source text into an unlinked ProtoFile.

The grammar lives next to this module in `grammar.lark`. Parsing only builds
the declarations; names used as field, rpc and extend types are recorded as
written and resolved later by the linker.
"""

from __future__ import annotations

import re
from dataclasses import replace
from pathlib import Path
from typing import Any, List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from protopart.core.location import Location
from protopart.core.options import OptionElement, Options
from protopart.core.proto_type import ProtoType
from protopart.core.schema import (
	EnumConstant,
	EnumType,
	Extend,
	Field,
	MessageType,
	ProtoFile,
	Rpc,
	Service,
	Type,
)
from protopart.errors import SchemaError

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)


def _name(node: Any) -> str:
	return node.data if isinstance(node, Tree) else ""


_SIMPLE_ESCAPES = {
	"a": b"\a",
	"b": b"\b",
	"f": b"\f",
	"n": b"\n",
	"r": b"\r",
	"t": b"\t",
	"v": b"\v",
	"\\": b"\\",
	"'": b"'",
	'"': b'"',
	"?": b"?",
}

_ESCAPE = re.compile(r"\\(u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|[xX][0-9a-fA-F]{1,2}|[0-7]{1,3}|.)", re.DOTALL)


def _string_error(tok: Token, message: str) -> SchemaError:
	# The path is filled in by parse_proto.
	return SchemaError(
		reason_code="invalid-string",
		message=message,
		line=getattr(tok, "line", None),
		column=getattr(tok, "column", None),
	)


def _decode_string_token(tok: Token) -> str:
	"""
	Decode a quoted STRING token into text.

	The literal is assembled as bytes: source characters as UTF-8, `\\xHH`
	and octal escapes as single bytes, `\\u`/`\\U` escapes as the UTF-8 of the
	code point. The result must be valid UTF-8.
	"""
	content = tok.value[1:-1]
	out = bytearray()
	pos = 0
	for m in _ESCAPE.finditer(content):
		out += content[pos:m.start()].encode("utf-8")
		pos = m.end()
		esc = m.group(1)
		if esc[0] in "uU" and len(esc) > 1:
			try:
				out += chr(int(esc[1:], 16)).encode("utf-8")
			except (ValueError, UnicodeEncodeError) as err:
				raise _string_error(tok, f"invalid escape '\\{esc}'") from err
		elif esc[0] in "xX" and len(esc) > 1:
			out.append(int(esc[1:], 16))
		elif esc[0] in "01234567":
			value = int(esc, 8)
			if value > 0xFF:
				raise _string_error(tok, f"octal escape '\\{esc}' is out of range")
			out.append(value)
		elif esc in _SIMPLE_ESCAPES:
			out += _SIMPLE_ESCAPES[esc]
		else:
			raise _string_error(tok, f"invalid escape '\\{esc}'")
	out += content[pos:].encode("utf-8")
	try:
		return out.decode("utf-8")
	except UnicodeDecodeError as err:
		raise _string_error(tok, f"string literal is not valid UTF-8: {err.reason}") from err


def _ident(node: Tree) -> str:
	tok = next((c for c in node.children if isinstance(c, Token)), None)
	if tok is None:
		raise TypeError("ident node missing token child")
	return str(tok)


def _full_ident(node: Tree) -> str:
	return ".".join(_ident(c) for c in node.children if _name(c) == "ident")


def _type_ref(node: Tree) -> str:
	leading_dot = any(isinstance(c, Token) and c.type == "DOT" for c in node.children)
	full = next(c for c in node.children if _name(c) == "full_ident")
	return ("." if leading_dot else "") + _full_ident(full)


def _option_name(node: Tree) -> Tuple[str, bool]:
	parts: List[str] = []
	parenthesized = False
	leading_dot = False
	for child in node.children:
		if isinstance(child, Token):
			if child.type == "DOT" and not parts:
				leading_dot = True
			continue
		if _name(child) == "ident":
			parts.append(_ident(child))
		elif _name(child) == "full_ident":
			parenthesized = True
			parts.append("(" + ("." if leading_dot else "") + _full_ident(child) + ")")
	return ".".join(parts), parenthesized


def _constant(node: Tree) -> Any:
	kind = _name(node)
	child = node.children[0]
	if kind == "string_constant":
		return _decode_string_token(child)
	if kind == "int_constant":
		return int(str(child))
	if kind == "float_constant":
		return float(str(child))
	if kind == "ident_constant":
		text = _full_ident(child)
		if text == "true":
			return True
		if text == "false":
			return False
		return text
	raise AssertionError(f"unknown constant kind {kind}")


def _option_element(node: Tree) -> OptionElement:
	name_node = next(c for c in node.children if _name(c) == "option_name")
	value_node = next(c for c in node.children if _name(c).endswith("_constant"))
	name, parenthesized = _option_name(name_node)
	return OptionElement(name=name, value=_constant(value_node), is_parenthesized=parenthesized)


def _options(kind: ProtoType, nodes: List[Any]) -> Options:
	elements: List[OptionElement] = []
	for node in nodes:
		if _name(node) == "option_stmt":
			elements.append(_option_element(node))
		elif _name(node) == "field_options":
			elements.extend(_option_element(c) for c in node.children if _name(c) == "field_option")
	return Options(option_type=kind, elements=tuple(elements))


class _FileBuilder:
	def __init__(self, location: Location) -> None:
		self.location = location
		self.package_name: Optional[str] = None
		self.extends: List[Extend] = []

	def loc(self, node: Tree) -> Location:
		meta = getattr(node, "meta", None)
		if meta is None or getattr(meta, "empty", True):
			return self.location
		return self.location.at(meta.line, meta.column)

	def qualify(self, scope: Optional[str], simple_name: str) -> ProtoType:
		if scope:
			return ProtoType.get(f"{scope}.{simple_name}")
		return ProtoType.get(simple_name)

	def field(self, node: Tree, *, is_extension: bool = False) -> Field:
		kind = _name(node)
		label: Optional[str] = None
		for child in node.children:
			if isinstance(child, Token) and child.type == "LABEL":
				label = str(child)
		refs = [_type_ref(c) for c in node.children if _name(c) == "type_ref"]
		name = _ident(next(c for c in node.children if _name(c) == "ident"))
		tag_tok = next(c for c in node.children if isinstance(c, Token) and c.type == "INT")
		if kind == "map_field":
			element_type = f"map<{refs[0]}, {refs[1]}>"
		else:
			element_type = refs[0]
		return Field(
			name=name,
			tag=int(str(tag_tok)),
			element_type=element_type,
			label=label,
			options=_options(Options.FIELD_OPTIONS, node.children),
			is_extension=is_extension,
			location=self.loc(node),
		)

	def message(self, node: Tree, scope: Optional[str]) -> MessageType:
		children = node.children
		proto_type = self.qualify(scope, _ident(children[0]))
		fields: List[Field] = []
		nested: List[Type] = []
		for child in children[1:]:
			kind = _name(child)
			if kind in ("field", "map_field"):
				fields.append(self.field(child))
			elif kind == "oneof":
				fields.extend(self.field(c) for c in child.children if _name(c) == "oneof_field")
			elif kind == "message":
				nested.append(self.message(child, proto_type.name))
			elif kind == "enum":
				nested.append(self.enum(child, proto_type.name))
			elif kind == "extend":
				self.extend(child, proto_type.name)
		return MessageType(
			type=proto_type,
			declared_fields=tuple(fields),
			nested_types=tuple(nested),
			options=_options(Options.MESSAGE_OPTIONS, children[1:]),
			location=self.loc(node),
		)

	def enum(self, node: Tree, scope: Optional[str]) -> EnumType:
		children = node.children
		constants: List[EnumConstant] = []
		for child in children[1:]:
			if _name(child) != "enum_constant":
				continue
			value_tok = next(c for c in child.children if isinstance(c, Token))
			constants.append(
				EnumConstant(
					name=_ident(child.children[0]),
					tag=int(str(value_tok)),
					options=_options(Options.ENUM_VALUE_OPTIONS, child.children),
					location=self.loc(child),
				)
			)
		return EnumType(
			type=self.qualify(scope, _ident(children[0])),
			constants=tuple(constants),
			options=_options(Options.ENUM_OPTIONS, children[1:]),
			location=self.loc(node),
		)

	def rpc(self, node: Tree) -> Rpc:
		name = _ident(node.children[0])
		refs: List[str] = []
		streaming: List[bool] = []
		pending_stream = False
		body: Optional[Tree] = None
		for child in node.children[1:]:
			if isinstance(child, Token) and child.type == "STREAM":
				pending_stream = True
			elif _name(child) == "type_ref":
				refs.append(_type_ref(child))
				streaming.append(pending_stream)
				pending_stream = False
			elif _name(child) == "rpc_body":
				body = child
		return Rpc(
			name=name,
			request_type_name=refs[0],
			response_type_name=refs[1],
			request_streaming=streaming[0],
			response_streaming=streaming[1],
			options=_options(Options.METHOD_OPTIONS, body.children if body is not None else []),
			location=self.loc(node),
		)

	def service(self, node: Tree) -> Service:
		children = node.children
		return Service(
			type=self.qualify(self.package_name, _ident(children[0])),
			rpcs=tuple(self.rpc(c) for c in children[1:] if _name(c) == "rpc"),
			options=_options(Options.SERVICE_OPTIONS, children[1:]),
			location=self.loc(node),
		)

	def extend(self, node: Tree, scope: Optional[str]) -> None:
		target = _type_ref(node.children[0])
		fields = tuple(self.field(c, is_extension=True) for c in node.children[1:] if _name(c) == "field")
		self.extends.append(Extend(name=target, fields=fields, scope=scope, location=self.loc(node)))

	def build(self, tree: Tree) -> ProtoFile:
		imports: List[str] = []
		types: List[Type] = []
		services: List[Service] = []
		options: List[Tree] = []
		for item in tree.children:
			kind = _name(item)
			if kind == "package":
				if self.package_name is not None:
					raise SchemaError(
						reason_code="duplicate-package",
						message="file declares more than one package",
						location=self.location.path,
						line=self.loc(item).line,
						column=self.loc(item).column,
					)
				self.package_name = _full_ident(item.children[0])
			elif kind == "import_":
				path_tok = next(c for c in item.children if isinstance(c, Token) and c.type == "STRING")
				imports.append(_decode_string_token(path_tok))
			elif kind == "option_stmt":
				options.append(item)
			elif kind == "message":
				types.append(self.message(item, self.package_name))
			elif kind == "enum":
				types.append(self.enum(item, self.package_name))
			elif kind == "service":
				services.append(self.service(item))
			elif kind == "extend":
				self.extend(item, None)
		return ProtoFile(
			location=self.location,
			package_name=self.package_name,
			imports=tuple(imports),
			types=tuple(types),
			services=tuple(services),
			extends=tuple(self.extends),
			options=_options(Options.FILE_OPTIONS, options),
		)


def _syntax_error(err: UnexpectedInput, location: Location) -> SchemaError:
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			message = "unexpected end of file"
		else:
			message = f"unexpected '{err.token}'"
	elif isinstance(err, UnexpectedCharacters):
		message = f"unexpected character '{err.char}'"
	elif isinstance(err, UnexpectedEOF):
		message = "unexpected end of file"
	else:
		message = str(err).splitlines()[0]
	return SchemaError(
		reason_code="syntax-error",
		message=message,
		location=location.path,
		line=getattr(err, "line", None),
		column=getattr(err, "column", None),
	)


def parse_proto(source: str, *, location: str | Location = "") -> ProtoFile:
	"""
	Parse `.proto` source into a ProtoFile.

	Raises SchemaError on syntax errors and malformed string literals; the
	error carries the path and the line/column of the offending token.
	"""
	loc = location if isinstance(location, Location) else Location(path=location)
	try:
		tree = _PARSER.parse(source)
	except UnexpectedInput as err:
		raise _syntax_error(err, loc) from err
	try:
		return _FileBuilder(loc).build(tree)
	except SchemaError as err:
		if err.location is not None or not loc.path:
			raise
		raise replace(err, location=loc.path) from err


__all__ = ["parse_proto"]
