# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

from protopart.cli import main


def _write_schema(tmp_path: Path) -> Path:
	proto = tmp_path / "dinosaur.proto"
	proto.write_text(
		"package squareup;\n"
		"\n"
		"message Base {}\n"
		"message Shared {}\n"
		"message Left { optional Shared shared = 1; }\n"
		"message Right { optional Shared shared = 1; }\n",
		encoding="utf-8",
	)
	return proto


def _write_modules(tmp_path: Path, modules: dict) -> Path:
	path = tmp_path / "modules.json"
	path.write_text(json.dumps({"format": "protopart-modules", "version": 0, "modules": modules}), encoding="utf-8")
	return path


PEERS = {
	"base": {"roots": ["squareup.Base"]},
	"left": {"dependencies": ["base"], "roots": ["squareup.Left"]},
	"right": {"dependencies": ["base"], "roots": ["squareup.Right"]},
}


def test_partition_prints_summary(tmp_path: Path, capsys) -> None:
	proto = _write_schema(tmp_path)
	modules = _write_modules(tmp_path, {"common": {}, "app": {"dependencies": ["common"]}})
	rc = main(["partition", "--modules", str(modules), str(proto)])
	captured = capsys.readouterr()
	assert rc == 0
	assert captured.out.splitlines() == [
		"common: 4 generated, 0 upstream",
		"  squareup.Base",
		"  squareup.Shared",
		"  squareup.Left",
		"  squareup.Right",
		"app: 0 generated, 4 upstream",
	]
	assert captured.err == ""


def test_partition_json_report(tmp_path: Path, capsys) -> None:
	proto = _write_schema(tmp_path)
	modules = _write_modules(tmp_path, PEERS)
	rc = main(["partition", "--modules", str(modules), str(proto), "--json"])
	assert rc == 0
	payload = json.loads(capsys.readouterr().out)
	assert payload["ok"] is True
	assert payload["order"] == ["base", "left", "right"]
	assert payload["partitions"]["left"] == {
		"types": ["squareup.Shared", "squareup.Left"],
		"upstream": {"squareup.Base": "base"},
	}
	assert len(payload["warnings"]) == 1
	assert payload["errors"] == []


def test_warnings_go_to_stderr_and_can_fail_the_run(tmp_path: Path, capsys) -> None:
	proto = _write_schema(tmp_path)
	modules = _write_modules(tmp_path, PEERS)
	assert main(["partition", "--modules", str(modules), str(proto)]) == 0
	err = capsys.readouterr().err
	assert err.startswith("warning: squareup.Shared is generated twice in peer modules right and left.")

	assert main(["partition", "--modules", str(modules), str(proto), "--fail-on", "warning"]) == 1


def test_errors_exit_two(tmp_path: Path, capsys) -> None:
	proto = _write_schema(tmp_path)
	modules = _write_modules(tmp_path, {"app": {"dependencies": ["b", "c"]}, "b": {}, "c": {}})
	rc = main(["partition", "--modules", str(modules), str(proto), "--json"])
	assert rc == 2
	payload = json.loads(capsys.readouterr().out)
	assert payload["ok"] is False
	assert len(payload["errors"]) == 4
	assert payload["errors"][0].startswith("app sees squareup.Base in b, c.\n")


def test_load_failures_are_reported(tmp_path: Path, capsys) -> None:
	proto = tmp_path / "broken.proto"
	proto.write_text("message {\n", encoding="utf-8")
	modules = _write_modules(tmp_path, {"common": {}})
	rc = main(["partition", "--modules", str(modules), str(proto)])
	assert rc == 2
	err = capsys.readouterr().err
	assert f"{proto}:1:" in err
	assert "[syntax-error]" in err


def test_config_failures_are_reported(tmp_path: Path, capsys) -> None:
	proto = _write_schema(tmp_path)
	modules = _write_modules(tmp_path, {"app": {"dependencies": ["missing"]}})
	rc = main(["partition", "--modules", str(modules), str(proto)])
	assert rc == 2
	assert "[unknown-dependency]" in capsys.readouterr().err


def test_order_prints_generation_order(tmp_path: Path, capsys) -> None:
	modules = _write_modules(tmp_path, {"app": {"dependencies": ["feature", "common"]}, "feature": {"dependencies": ["common"]}, "common": {}})
	assert main(["order", "--modules", str(modules)]) == 0
	assert capsys.readouterr().out.splitlines() == ["common", "feature", "app"]


def test_verbose_is_accepted_before_and_after_the_subcommand(tmp_path: Path, capsys) -> None:
	proto = _write_schema(tmp_path)
	modules = _write_modules(tmp_path, {"common": {}})
	assert main(["partition", "--modules", str(modules), "--verbose", str(proto)]) == 0
	assert main(["-v", "partition", "--modules", str(modules), str(proto)]) == 0
	assert main(["order", "--modules", str(modules), "-v"]) == 0
	assert capsys.readouterr().out.splitlines()[-1] == "common"


def test_invalid_string_literal_exits_two(tmp_path: Path, capsys) -> None:
	proto = tmp_path / "bytes.proto"
	proto.write_text('option java_package = "\\xff";\n', encoding="utf-8")
	modules = _write_modules(tmp_path, {"common": {}})
	rc = main(["partition", "--modules", str(modules), str(proto)])
	assert rc == 2
	assert "[invalid-string]" in capsys.readouterr().err
