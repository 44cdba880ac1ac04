# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from protopart.prune.pruning_rules import PruningRules


@dataclass(frozen=True)
class Module:
	"""
	A build unit that generates one slice of the schema.

	`dependencies` names other modules; its order is kept so diagnostics that
	list upstream modules are reproducible.
	"""

	dependencies: tuple[str, ...] = ()
	pruning_rules: Optional[PruningRules] = None

	@property
	def roots(self) -> tuple[str, ...]:
		if self.pruning_rules is None:
			return ()
		return self.pruning_rules.roots


__all__ = ["Module"]
