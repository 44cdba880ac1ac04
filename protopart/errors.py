# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structured errors raised while loading schemas and module configuration.

Partition diagnostics are not exceptions: they are returned as strings on the
PartitionedSchema. These errors cover input that could not be loaded at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ProtopartError(Exception):
	"""A serializable error with a stable reason code."""

	reason_code: str
	message: str
	location: str | None = None
	line: int | None = None
	column: int | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"location": self.location,
			"line": self.line,
			"column": self.column,
		}

	def format_human(self) -> str:
		if self.location is None:
			return f"[{self.reason_code}] {self.message}"
		line = "?" if self.line is None else str(self.line)
		column = "?" if self.column is None else str(self.column)
		return f"{self.location}:{line}:{column}: [{self.reason_code}] {self.message}"


@dataclass(frozen=True)
class SchemaError(ProtopartError):
	"""Schema source could not be parsed or linked."""


@dataclass(frozen=True)
class ConfigError(ProtopartError):
	"""Module configuration is malformed or inconsistent."""


__all__ = ["ConfigError", "ProtopartError", "SchemaError"]
