# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Schema pruning.

`pruning_rules` holds the root/prune identifier matching; `pruner` walks the
schema from the roots and rebuilds the reachable part.
"""

from protopart.prune.pruner import prune
from protopart.prune.pruning_rules import PruningRules

__all__ = ["PruningRules", "prune"]
