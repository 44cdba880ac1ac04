# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need schemas and module graphs.

Schemas are built from `.proto` source snippets so test data reads like the
files a build would feed in; module graphs are spelled as plain mappings.
"""

from __future__ import annotations

import textwrap
from typing import Iterable, Mapping, Optional, Sequence

from protopart.core.proto_type import ProtoType
from protopart.core.schema import Schema
from protopart.loader.linker import link_files
from protopart.loader.parser import parse_proto
from protopart.partition.module import Module
from protopart.prune.pruning_rules import PruningRules


def schema_from_sources(sources: Mapping[str, str]) -> Schema:
	"""
	Parse and link `path -> source` snippets into a Schema.

	Leading indentation is stripped so snippets can be written inline.
	"""
	files = [parse_proto(textwrap.dedent(text).strip() + "\n", location=path) for path, text in sources.items()]
	return link_files(files)


def module(
	dependencies: Sequence[str] = (),
	*,
	roots: Optional[Iterable[str]] = None,
	prunes: Optional[Iterable[str]] = None,
) -> Module:
	"""Build a Module; pruning rules are attached only when roots or prunes are given."""
	rules = None
	if roots is not None or prunes is not None:
		rules = PruningRules.of(roots=roots or (), prunes=prunes or ())
	return Module(dependencies=tuple(dependencies), pruning_rules=rules)


def types(*names: str) -> tuple[ProtoType, ...]:
	return tuple(ProtoType.get(n) for n in names)


__all__ = ["module", "schema_from_sources", "types"]
