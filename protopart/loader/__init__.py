# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Inputs for the partitioner.

  - parser: `.proto` text -> unlinked ProtoFile (lark grammar in grammar.lark)
  - linker: ProtoFiles -> linked Schema
  - modules_v0: JSON module graph configuration
"""

from __future__ import annotations

__all__ = [
	"linker",
	"modules_v0",
	"parser",
]
