# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from protopart.errors import ConfigError
from protopart.loader.modules_v0 import load_modules_v0, modules_to_obj, parse_modules_obj


def _doc(modules: dict, **extra) -> dict:
	return {"format": "protopart-modules", "version": 0, "modules": modules, **extra}


def test_parse_keeps_document_order_and_rules() -> None:
	modules = parse_modules_obj(
		_doc(
			{
				"app": {"dependencies": ["common", "common"], "roots": ["squareup.app.*"]},
				"common": {},
				"empty_rules": {"prunes": []},
			}
		)
	)
	assert list(modules) == ["app", "common", "empty_rules"]
	assert modules["app"].dependencies == ("common",)
	assert modules["app"].roots == ("squareup.app.*",)
	assert modules["common"].pruning_rules is None
	assert modules["common"].roots == ()
	assert modules["empty_rules"].pruning_rules is not None
	assert modules["empty_rules"].pruning_rules.is_empty


def test_modules_to_obj_round_trips() -> None:
	doc = _doc({"common": {"dependencies": []}, "app": {"dependencies": ["common"], "roots": ["a.B"], "prunes": ["a.C"]}})
	modules = parse_modules_obj(doc)
	assert modules_to_obj(modules) == doc
	assert parse_modules_obj(modules_to_obj(modules)) == modules


@pytest.mark.parametrize(
	("data", "reason_code"),
	[
		([], "invalid-document"),
		({"format": "protopart-modules", "version": 1, "modules": {"a": {}}}, "unsupported-format"),
		(_doc({"a": {}}, extra=1), "unknown-field"),
		(_doc({}), "invalid-field"),
		(_doc({"a": {"depends": []}}), "unknown-field"),
		(_doc({"a": {"dependencies": "b"}}), "invalid-field"),
		(_doc({"a": {"roots": [""]}}), "invalid-field"),
		(_doc({"a": []}), "invalid-field"),
		(_doc({"a": {"dependencies": ["a"]}}), "self-dependency"),
		(_doc({"a": {"dependencies": ["missing"]}}), "unknown-dependency"),
	],
)
def test_invalid_documents_are_rejected(data: object, reason_code: str) -> None:
	with pytest.raises(ConfigError) as exc:
		parse_modules_obj(data, location="modules.json")
	assert exc.value.reason_code == reason_code
	assert exc.value.location == "modules.json"


def test_dependency_cycles_are_rejected() -> None:
	with pytest.raises(ConfigError) as exc:
		parse_modules_obj(_doc({"a": {"dependencies": ["b"]}, "b": {"dependencies": ["a"]}}))
	assert exc.value.reason_code == "dependency-cycle"
	assert "a -> b -> a" in exc.value.message


def test_extension_field_is_allowed() -> None:
	modules = parse_modules_obj(_doc({"a": {"x": {"owner": "team"}}}, x={"note": 1}))
	assert list(modules) == ["a"]


def test_load_modules_v0(tmp_path: Path) -> None:
	path = tmp_path / "modules.json"
	path.write_text(json.dumps(_doc({"common": {}, "app": {"dependencies": ["common"]}})), encoding="utf-8")
	modules = load_modules_v0(path)
	assert modules["app"].dependencies == ("common",)


def test_load_modules_v0_reports_json_position(tmp_path: Path) -> None:
	path = tmp_path / "modules.json"
	path.write_text('{\n  "format": "protopart-modules",\n  oops\n}\n', encoding="utf-8")
	with pytest.raises(ConfigError) as exc:
		load_modules_v0(path)
	err = exc.value
	assert err.reason_code == "invalid-json"
	assert err.location == str(path)
	assert err.line == 3


def test_load_modules_v0_reports_missing_file(tmp_path: Path) -> None:
	with pytest.raises(ConfigError) as exc:
		load_modules_v0(tmp_path / "missing.json")
	assert exc.value.reason_code == "unreadable-file"
