# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module graph configuration (v0).

A strict JSON document naming the modules, their dependencies and their
pruning rules:

  {
    "format": "protopart-modules",
    "version": 0,
    "modules": {
      "common": {},
      "app": {"dependencies": ["common"], "roots": ["squareup.app.*"], "prunes": []}
    }
  }

Module order in the document is kept; it breaks ties in the generation order.
Unknown fields, unknown dependency names and dependency cycles are rejected
here so the partitioner only ever sees a valid acyclic graph.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from protopart.core.dag import DirectedAcyclicGraph
from protopart.errors import ConfigError
from protopart.partition.module import Module
from protopart.prune.pruning_rules import PruningRules

FORMAT = "protopart-modules"
VERSION = 0

_ALLOWED_TOP = {"format", "version", "modules", "x"}
_ALLOWED_MODULE = {"dependencies", "roots", "prunes", "x"}


def _string_list(raw: Any, *, what: str, location: str | None) -> List[str]:
	if raw is None:
		return []
	if not isinstance(raw, list) or not all(isinstance(x, str) and x for x in raw):
		raise ConfigError(reason_code="invalid-field", message=f"{what} must be a list of non-empty strings", location=location)
	return list(raw)


def parse_modules_obj(data: Any, *, location: str | None = None) -> Dict[str, Module]:
	"""Validate a decoded modules document and return name -> Module in document order."""
	if not isinstance(data, dict):
		raise ConfigError(reason_code="invalid-document", message="modules file must be a JSON object", location=location)
	if data.get("format") != FORMAT or data.get("version") != VERSION:
		raise ConfigError(
			reason_code="unsupported-format",
			message=f"unsupported modules format/version (expected {FORMAT} v{VERSION})",
			location=location,
		)
	unknown_top = sorted(set(data.keys()) - _ALLOWED_TOP)
	if unknown_top:
		raise ConfigError(
			reason_code="unknown-field",
			message=f"modules file has unknown top-level fields: {', '.join(unknown_top)}",
			location=location,
		)
	raw_modules = data.get("modules")
	if not isinstance(raw_modules, dict) or not raw_modules:
		raise ConfigError(reason_code="invalid-field", message="modules must be a non-empty object", location=location)

	modules: Dict[str, Module] = {}
	for name, raw in raw_modules.items():
		if not isinstance(name, str) or not name:
			raise ConfigError(reason_code="invalid-field", message="module names must be non-empty strings", location=location)
		if not isinstance(raw, dict):
			raise ConfigError(reason_code="invalid-field", message=f"module '{name}' must be an object", location=location)
		unknown = sorted(set(raw.keys()) - _ALLOWED_MODULE)
		if unknown:
			raise ConfigError(
				reason_code="unknown-field",
				message=f"module '{name}' has unknown fields: {', '.join(unknown)}",
				location=location,
			)
		dependencies = _string_list(raw.get("dependencies"), what=f"module '{name}' dependencies", location=location)
		if name in dependencies:
			raise ConfigError(reason_code="self-dependency", message=f"module '{name}' depends on itself", location=location)
		roots = _string_list(raw.get("roots"), what=f"module '{name}' roots", location=location)
		prunes = _string_list(raw.get("prunes"), what=f"module '{name}' prunes", location=location)
		rules = PruningRules.of(roots=roots, prunes=prunes) if ("roots" in raw or "prunes" in raw) else None
		modules[name] = Module(dependencies=tuple(dict.fromkeys(dependencies)), pruning_rules=rules)

	for name, module in modules.items():
		for dependency in module.dependencies:
			if dependency not in modules:
				raise ConfigError(
					reason_code="unknown-dependency",
					message=f"module '{name}' depends on unknown module '{dependency}'",
					location=location,
				)
	try:
		DirectedAcyclicGraph(modules.keys(), lambda n: modules[n].dependencies)
	except ValueError as err:
		raise ConfigError(reason_code="dependency-cycle", message=str(err), location=location) from err
	return modules


def load_modules_v0(path: Path) -> Dict[str, Module]:
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except OSError as err:
		raise ConfigError(reason_code="unreadable-file", message=str(err), location=str(path)) from err
	except json.JSONDecodeError as err:
		raise ConfigError(
			reason_code="invalid-json",
			message=err.msg,
			location=str(path),
			line=err.lineno,
			column=err.colno,
		) from err
	return parse_modules_obj(data, location=str(path))


def modules_to_obj(modules: Mapping[str, Module]) -> Dict[str, Any]:
	"""Render `modules` back into the v0 document shape."""
	out: Dict[str, Any] = {}
	for name, module in modules.items():
		entry: Dict[str, Any] = {"dependencies": list(module.dependencies)}
		if module.pruning_rules is not None:
			entry["roots"] = list(module.pruning_rules.roots)
			entry["prunes"] = list(module.pruning_rules.prunes)
		out[name] = entry
	return {"format": FORMAT, "version": VERSION, "modules": out}


__all__ = ["FORMAT", "VERSION", "load_modules_v0", "modules_to_obj", "parse_modules_obj"]
