# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source location of a schema element.

Locations are best-effort: the path is always known for parsed files, the
line/column only when the element came straight out of the parser.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
	"""A file path plus optional 1-based line/column."""

	path: str = ""
	line: Optional[int] = None
	column: Optional[int] = None

	def at(self, line: Optional[int], column: Optional[int] = None) -> "Location":
		"""Return a location in the same file at another position."""
		return Location(path=self.path, line=line, column=column)

	def __str__(self) -> str:
		path = self.path or "<unknown>"
		if self.line is None:
			return path
		if self.column is None:
			return f"{path}:{self.line}"
		return f"{path}:{self.line}:{self.column}"


__all__ = ["Location"]
