# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Root and prune rules for a module.

Rules are identifiers of one of these shapes:

  squareup.geology.Period            a type or service
  squareup.geology.Period#name       a member (field, constant or rpc)
  squareup.geology.*                 everything in a package or type
  *                                  everything

When both a root and a prune match an identifier, the more specific rule
wins. A member falls back to the rules of its type, a type to the rules of
its enclosing scopes. With no roots at all, everything is a root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

MATCH_ALL = "*"


def _candidates(identifier: str) -> Iterator[str]:
	"""Yield the rules that could match `identifier`, most specific first."""
	yield identifier
	type_name, sep, _member = identifier.partition("#")
	if sep:
		yield type_name
	parts = type_name.split(".")
	for i in range(len(parts) - 1, 0, -1):
		yield ".".join(parts[:i]) + ".*"
	yield MATCH_ALL


@dataclass(frozen=True)
class PruningRules:
	roots: tuple[str, ...] = ()
	prunes: tuple[str, ...] = ()

	@classmethod
	def of(cls, roots: Iterable[str] = (), prunes: Iterable[str] = ()) -> PruningRules:
		return cls(roots=tuple(dict.fromkeys(roots)), prunes=tuple(dict.fromkeys(prunes)))

	@property
	def is_empty(self) -> bool:
		return not self.roots and not self.prunes

	def _decide(self, identifier: str) -> Optional[bool]:
		roots = set(self.roots) if self.roots else {MATCH_ALL}
		prunes = set(self.prunes)
		for candidate in _candidates(identifier):
			if candidate in prunes:
				return False
			if candidate in roots:
				return True
		return None

	def is_root(self, identifier: str) -> bool:
		"""True if `identifier` is matched by a root more specific than any prune."""
		return self._decide(identifier) is True

	def prunes_identifier(self, identifier: str) -> bool:
		"""True if `identifier` is matched by a prune more specific than any root."""
		return self._decide(identifier) is False


__all__ = ["MATCH_ALL", "PruningRules"]
