# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Schema partitioning across a module graph.

`partitioned_schema.partition(schema, modules)` is the entry point; `module`
holds the per-module inputs it consumes.
"""

from protopart.partition.module import Module
from protopart.partition.partitioned_schema import Partition, PartitionedSchema, partition

__all__ = ["Module", "Partition", "PartitionedSchema", "partition"]
