# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
protopart: split one protobuf schema across a graph of build modules.

Packages:
  core: schema model, stubbing, dependency graph
  prune: root/prune rules and reachability pruning
  partition: the per-module ownership pass and its diagnostics
  loader: `.proto` parsing, linking, module configuration

The CLI entrypoint is `protopart.cli:main`.
"""

__all__ = ["core", "loader", "partition", "prune"]
