# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Split one schema across a graph of modules.

Each module generates a slice of the schema: the types it owns. Types owned
by a module it depends on are not generated again; the module sees them as
stubs and records which upstream module owns them.

The pass runs once over the modules in topological order:

1) Collect the types owned by every transitive dependency. A type owned by
   more than one of them is an error: the current module cannot tell which
   generated class to link against.
2) Replace those upstream types (and services) with stubs so that pruning
   only follows references this module is responsible for.
3) Prune with the module's rules, if any.
4) Everything left that is not upstream is owned by this module.

A second pass looks at modules that share a connected component of the graph
and warns when two of them generate the same type independently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import cached_property
from itertools import combinations
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from protopart.core.dag import DirectedAcyclicGraph
from protopart.core.proto_type import ProtoType
from protopart.core.schema import Schema
from protopart.core.stub import stub_service, stub_type
from protopart.partition.module import Module
from protopart.prune.pruner import prune

logger = logging.getLogger(__name__)

ANCESTOR_COLLISION_MESSAGE = (
	"{module} sees {type} in {sources}.\n"
	"  In order to avoid confusion and incompatibility, either make one of these modules\n"
	"  depend on the other or move this type up into a common dependency."
)

PEER_COLLISION_MESSAGE = (
	"{type} is generated twice in peer modules {current} and {other}.\n"
	"  Consider moving this type into a common dependency of both modules.\n"
	"  To suppress this warning, explicitly add the type to the roots of both modules."
)


def declared_types(schema: Schema) -> tuple[ProtoType, ...]:
	"""Every type (nested ones included) and service declared in `schema`, file by file."""
	out: Dict[ProtoType, None] = {}
	for proto_file in schema.proto_files:
		for t in proto_file.types_and_nested_types():
			out[t.type] = None
		for service in proto_file.services:
			out[service.type] = None
	return tuple(out)


@dataclass(frozen=True)
class Partition:
	schema: Schema
	# The types that this partition will generate.
	types: tuple[ProtoType, ...]
	# Types referenced by `types` but generated upstream, mapped to their module.
	transitive_upstream_types: Mapping[ProtoType, str] = field(default_factory=lambda: MappingProxyType({}))

	@classmethod
	def of(cls, schema: Schema) -> Partition:
		"""A partition that owns everything in `schema`."""
		return cls(schema=schema, types=declared_types(schema))

	@cached_property
	def type_set(self) -> frozenset[ProtoType]:
		return frozenset(self.types)

	def owns(self, proto_type: ProtoType) -> bool:
		return proto_type in self.type_set

	def owner_of(self, proto_type: ProtoType) -> Optional[str]:
		"""Name of the upstream module that generates `proto_type`, if any."""
		return self.transitive_upstream_types.get(proto_type)


@dataclass(frozen=True)
class PartitionedSchema:
	# Module name to partition. The iteration order is the generation order.
	partitions: Mapping[str, Partition]
	warnings: tuple[str, ...] = ()
	errors: tuple[str, ...] = ()


def _upstream_types(
	module_name: str,
	graph: DirectedAcyclicGraph[str],
	partitions: Mapping[str, Partition],
	errors: List[str],
) -> Dict[ProtoType, str]:
	upstream: Dict[ProtoType, str] = {}
	duplicates: Dict[ProtoType, Dict[str, None]] = {}
	for dependency_name in graph.transitive_nodes(module_name):
		for t in partitions[dependency_name].types:
			replaced = upstream.get(t)
			upstream[t] = dependency_name
			if replaced is not None:
				duplicates.setdefault(t, {replaced: None})[dependency_name] = None
	for duplicate, source_modules in duplicates.items():
		errors.append(
			ANCESTOR_COLLISION_MESSAGE.format(
				module=module_name,
				type=duplicate,
				sources=", ".join(source_modules),
			)
		)
	return upstream


def _stub_upstream(schema: Schema, upstream: Mapping[ProtoType, str]) -> Schema:
	if not upstream:
		return schema
	# Types generated upstream are replaced with stubs that have no external
	# references. They still link, and types that were pruned upstream are only
	# generated here if they are reachable from this module's own types.
	stubbed_files = [
		replace(
			proto_file,
			types=tuple(stub_type(t) if t.type in upstream else t for t in proto_file.types),
			services=tuple(stub_service(s) if s.type in upstream else s for s in proto_file.services),
		)
		for proto_file in schema.proto_files
	]
	return Schema.from_files(stubbed_files)


def _peer_warnings(
	graph: DirectedAcyclicGraph[str],
	modules: Mapping[str, Module],
	partitions: Mapping[str, Partition],
) -> List[str]:
	warnings: List[str] = []
	for subgraph in graph.disjoint_graphs():
		for other_name, current_name in combinations(subgraph, 2):
			current = partitions[current_name]
			other = partitions[other_name]
			current_roots = modules[current_name].roots
			other_roots = modules[other_name].roots
			for duplicate in current.types:
				if not other.owns(duplicate):
					continue
				duplicate_name = str(duplicate)
				if duplicate_name in current_roots and duplicate_name in other_roots:
					continue
				warnings.append(
					PEER_COLLISION_MESSAGE.format(type=duplicate, current=current_name, other=other_name)
				)
	return warnings


def partition(schema: Schema, modules: Mapping[str, Module]) -> PartitionedSchema:
	"""
	Compute the slice of `schema` each module generates.

	`modules` must describe an acyclic graph whose dependency names are all
	keys of `modules`. Problems with the graph's ownership are returned as
	`errors` (ancestors that both generate a type) and `warnings` (peers that
	both generate a type); nothing is raised for them.
	"""
	graph: DirectedAcyclicGraph[str] = DirectedAcyclicGraph(modules.keys(), lambda name: modules[name].dependencies)

	errors: List[str] = []
	partitions: Dict[str, Partition] = {}
	for module_name in graph.topological_order():
		module = modules[module_name]

		upstream = _upstream_types(module_name, graph, partitions, errors)
		stubbed_schema = _stub_upstream(schema, upstream)

		if module.pruning_rules is not None:
			pruned_schema = prune(stubbed_schema, module.pruning_rules)
		else:
			pruned_schema = stubbed_schema

		owned = tuple(t for t in declared_types(pruned_schema) if t not in upstream)
		logger.debug("module %s owns %d types and borrows %d", module_name, len(owned), len(upstream))

		partitions[module_name] = Partition(
			schema=pruned_schema,
			types=owned,
			transitive_upstream_types=MappingProxyType(upstream),
		)

	warnings = _peer_warnings(graph, modules, partitions)
	return PartitionedSchema(
		partitions=MappingProxyType(partitions),
		warnings=tuple(warnings),
		errors=tuple(errors),
	)


__all__ = [
	"ANCESTOR_COLLISION_MESSAGE",
	"PEER_COLLISION_MESSAGE",
	"Partition",
	"PartitionedSchema",
	"declared_types",
	"partition",
]
