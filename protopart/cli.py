# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from protopart.core.dag import DirectedAcyclicGraph
from protopart.errors import ProtopartError
from protopart.loader.linker import load_schema
from protopart.loader.modules_v0 import load_modules_v0
from protopart.partition.partitioned_schema import PartitionedSchema, partition


def setup_logging(verbose: bool = False) -> None:
	level = logging.DEBUG if verbose else logging.INFO
	logging.basicConfig(
		level=level,
		format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
		datefmt="%Y-%m-%d %H:%M:%S",
	)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="protopart", description="Split a protobuf schema across build modules")
	p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
	# The subcommand copy must not reset a top-level --verbose.
	common = argparse.ArgumentParser(add_help=False)
	common.add_argument("--verbose", "-v", action="store_true", default=argparse.SUPPRESS, help="Enable debug logging")
	sub = p.add_subparsers(dest="cmd", required=True)

	part = sub.add_parser("partition", parents=[common], help="Compute the types each module generates")
	part.add_argument("--modules", type=Path, required=True, help="Path to the modules JSON file")
	part.add_argument("protos", nargs="+", type=Path, help="One or more .proto files forming the schema")
	part.add_argument("--json", action="store_true", help="Emit a machine-readable JSON report")
	part.add_argument(
		"--fail-on",
		choices=["error", "warning"],
		default="error",
		help="Exit non-zero on this severity (errors always exit 2; warnings exit 1 when selected)",
	)

	order = sub.add_parser("order", parents=[common], help="Print the module generation order")
	order.add_argument("--modules", type=Path, required=True, help="Path to the modules JSON file")
	return p


def canonical_json_bytes(obj: Any) -> bytes:
	"""Render JSON deterministically: UTF-8, no insignificant whitespace, sorted keys."""
	return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def report_to_dict(result: PartitionedSchema) -> dict[str, Any]:
	return {
		"ok": not result.errors,
		"order": list(result.partitions),
		"partitions": {
			name: {
				"types": [str(t) for t in p.types],
				"upstream": {str(t): owner for t, owner in p.transitive_upstream_types.items()},
			}
			for name, p in result.partitions.items()
		},
		"warnings": list(result.warnings),
		"errors": list(result.errors),
	}


def exit_code(result: PartitionedSchema, *, fail_on: str) -> int:
	if result.errors:
		return 2
	if result.warnings and fail_on == "warning":
		return 1
	return 0


def _print_human(result: PartitionedSchema) -> None:
	for name, p in result.partitions.items():
		print(f"{name}: {len(p.types)} generated, {len(p.transitive_upstream_types)} upstream")
		for t in p.types:
			print(f"  {t}")
	for warning in result.warnings:
		print(f"warning: {warning}", file=sys.stderr)
	for error in result.errors:
		print(f"error: {error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	setup_logging(bool(args.verbose))

	if args.cmd == "order":
		try:
			modules = load_modules_v0(args.modules)
		except ProtopartError as err:
			print(err.format_human(), file=sys.stderr)
			return 2
		graph = DirectedAcyclicGraph(modules.keys(), lambda n: modules[n].dependencies)
		for name in graph.topological_order():
			print(name)
		return 0

	if args.cmd == "partition":
		try:
			modules = load_modules_v0(args.modules)
			schema = load_schema(args.protos)
		except ProtopartError as err:
			print(err.format_human(), file=sys.stderr)
			return 2
		result = partition(schema, modules)
		code = exit_code(result, fail_on=args.fail_on)
		if args.json:
			print(canonical_json_bytes(report_to_dict(result)).decode("utf-8"))
			return code
		_print_human(result)
		return code

	raise AssertionError("unreachable")
