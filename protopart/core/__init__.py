# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
protopart.core: the schema model shared by the loader, pruner and partitioner.

Modules:
  - proto_type: fully-qualified type identities
  - options: declared option lists
  - location: best-effort source locations
  - schema: immutable type/service/file model and the Schema index
  - stub: reference-free stand-ins for upstream types and services
  - dag: module dependency graph queries
"""

__all__ = [
	"dag",
	"location",
	"options",
	"proto_type",
	"schema",
	"stub",
]
