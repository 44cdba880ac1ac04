# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from protopart.partition.partitioned_schema import partition
from protopart.test_support import module, schema_from_sources, types

SHARED = {
	"shared.proto": """
		package squareup;

		message Base {}

		message Shared {}

		message Left {
			optional Shared shared = 1;
		}

		message Right {
			optional Shared shared = 1;
		}
	""",
}


def test_diamond_conflict_is_one_error() -> None:
	schema = schema_from_sources({"z.proto": "package squareup;\nmessage Z {}"})
	modules = {
		"a": module(["b", "c"]),
		"b": module(),
		"c": module(),
	}
	result = partition(schema, modules)
	assert result.errors == (
		"a sees squareup.Z in b, c.\n"
		"  In order to avoid confusion and incompatibility, either make one of these modules\n"
		"  depend on the other or move this type up into a common dependency.",
	)
	# The error does not stop the pass; "a" still records one owner for Z.
	assert result.partitions["a"].types == ()
	assert result.partitions["a"].owner_of(types("squareup.Z")[0]) in ("b", "c")


def test_ancestor_conflict_lists_every_source_once() -> None:
	schema = schema_from_sources({"z.proto": "package squareup;\nmessage Z {}"})
	modules = {
		"app": module(["left", "middle", "right"]),
		"left": module(),
		"middle": module(),
		"right": module(),
	}
	(error,) = partition(schema, modules).errors
	assert error.startswith("app sees squareup.Z in left, middle, right.\n")


def test_peer_modules_generating_the_same_type_warn() -> None:
	schema = schema_from_sources(SHARED)
	modules = {
		"base": module(roots=["squareup.Base"]),
		"left": module(["base"], roots=["squareup.Left"]),
		"right": module(["base"], roots=["squareup.Right"]),
	}
	result = partition(schema, modules)
	assert result.errors == ()
	assert result.partitions["left"].types == types("squareup.Shared", "squareup.Left")
	assert result.partitions["right"].types == types("squareup.Shared", "squareup.Right")
	assert result.warnings == (
		"squareup.Shared is generated twice in peer modules right and left.\n"
		"  Consider moving this type into a common dependency of both modules.\n"
		"  To suppress this warning, explicitly add the type to the roots of both modules.",
	)


def test_peer_warning_is_suppressed_when_both_modules_root_the_type() -> None:
	schema = schema_from_sources(SHARED)
	modules = {
		"base": module(roots=["squareup.Base"]),
		"left": module(["base"], roots=["squareup.Left", "squareup.Shared"]),
		"right": module(["base"], roots=["squareup.Right", "squareup.Shared"]),
	}
	assert partition(schema, modules).warnings == ()


def test_peer_warning_needs_both_modules_to_root_the_type() -> None:
	schema = schema_from_sources(SHARED)
	modules = {
		"base": module(roots=["squareup.Base"]),
		"left": module(["base"], roots=["squareup.Left", "squareup.Shared"]),
		"right": module(["base"], roots=["squareup.Right"]),
	}
	warnings = partition(schema, modules).warnings
	assert len(warnings) == 1
	assert warnings[0].startswith("squareup.Shared is generated twice in peer modules right and left.")


def test_modules_in_separate_components_are_not_peers() -> None:
	schema = schema_from_sources(SHARED)
	modules = {
		"left": module(roots=["squareup.Left"]),
		"right": module(roots=["squareup.Right"]),
	}
	result = partition(schema, modules)
	assert result.partitions["left"].owns(types("squareup.Shared")[0])
	assert result.partitions["right"].owns(types("squareup.Shared")[0])
	assert result.warnings == ()


def test_each_peer_pair_is_examined_once() -> None:
	schema = schema_from_sources(SHARED)
	modules = {
		"base": module(roots=["squareup.Base"]),
		"one": module(["base"], roots=["squareup.Shared"]),
		"two": module(["base"], roots=["squareup.Left"]),
		"three": module(["base"], roots=["squareup.Right"]),
	}
	warnings = partition(schema, modules).warnings
	assert [w.split(".\n")[0] for w in warnings] == [
		"squareup.Shared is generated twice in peer modules two and one",
		"squareup.Shared is generated twice in peer modules three and one",
		"squareup.Shared is generated twice in peer modules three and two",
	]
