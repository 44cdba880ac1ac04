# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Directed acyclic graph over hashable nodes.

Edges point from a node to the nodes it depends on. Every query returns
lists in a stable order derived from the order nodes and edges were supplied
in, so callers that build diagnostics from them get identical output for
identical input.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Optional, TypeVar

N = TypeVar("N", bound=Hashable)


class DirectedAcyclicGraph(Generic[N]):
	def __init__(self, nodes: Iterable[N], edges: Callable[[N], Iterable[N]]) -> None:
		self._nodes: List[N] = list(dict.fromkeys(nodes))
		self._edges: Dict[N, List[N]] = {n: list(dict.fromkeys(edges(n))) for n in self._nodes}
		for node, targets in self._edges.items():
			for target in targets:
				if target not in self._edges:
					raise ValueError(f"'{node}' has an edge to unknown node '{target}'")
		cycle = self._find_cycle()
		if cycle is not None:
			raise ValueError("dependency cycle: " + " -> ".join(str(n) for n in cycle))

	@property
	def nodes(self) -> List[N]:
		return list(self._nodes)

	def edges(self, node: N) -> List[N]:
		return list(self._edges[node])

	def _find_cycle(self) -> Optional[List[N]]:
		# 0 = unvisited, 1 = on the current path, 2 = done
		state: Dict[N, int] = {n: 0 for n in self._nodes}
		path: List[N] = []

		def visit(node: N) -> Optional[List[N]]:
			state[node] = 1
			path.append(node)
			for target in self._edges[node]:
				if state[target] == 1:
					return path[path.index(target):] + [target]
				if state[target] == 0:
					found = visit(target)
					if found is not None:
						return found
			path.pop()
			state[node] = 2
			return None

		for node in self._nodes:
			if state[node] == 0:
				found = visit(node)
				if found is not None:
					return found
		return None

	def topological_order(self) -> List[N]:
		"""Return every node, each one after all of the nodes it depends on."""
		order: Dict[N, None] = {}

		def visit(node: N) -> None:
			if node in order:
				return
			for target in self._edges[node]:
				visit(target)
			order[node] = None

		for node in self._nodes:
			visit(node)
		return list(order)

	def transitive_nodes(self, node: N) -> List[N]:
		"""
		Return the nodes reachable from `node` by following edges, nearest first.

		`node` itself is never included.
		"""
		seen: Dict[N, None] = {}
		queue = deque(self._edges[node])
		while queue:
			current = queue.popleft()
			if current in seen or current == node:
				continue
			seen[current] = None
			queue.extend(self._edges[current])
		return list(seen)

	def disjoint_graphs(self) -> List[List[N]]:
		"""
		Return the weakly-connected components of the graph.

		Edges are treated as undirected. Each component lists its nodes in node
		order; components are ordered by their first node.
		"""
		parent: Dict[N, N] = {n: n for n in self._nodes}

		def find(n: N) -> N:
			while parent[n] != n:
				parent[n] = parent[parent[n]]
				n = parent[n]
			return n

		for node, targets in self._edges.items():
			for target in targets:
				a, b = find(node), find(target)
				if a != b:
					parent[b] = a

		components: Dict[N, List[N]] = {}
		for node in self._nodes:
			components.setdefault(find(node), []).append(node)
		return list(components.values())


__all__ = ["DirectedAcyclicGraph"]
