from __future__ import annotations

import pytest

from pkglock.core.exceptions import FieldCollisionError, MissingPackageError
from pkglock.core.packages import (
    LAYER_CHECKSUMS,
    PACKAGE_SPEC_ID,
    assemble_package,
    build_package_context,
    check_reserved_fields,
    identify_package,
    package_spec_id,
    resolve_effective_defaults,
)


# ---------- effective defaults ----------


def test_environment_overrides_same_named_default() -> None:
    defaults = {"COLOR": "red", "SIZE": 3}
    effective = resolve_effective_defaults(defaults, {"COLOR": "green", "OTHER": "x"})

    assert effective == {"COLOR": "green", "SIZE": 3}


def test_environment_values_are_literal_strings() -> None:
    effective = resolve_effective_defaults({"SIZE": 3, "DEBUG": False}, {"SIZE": "4", "DEBUG": "true"})
    assert effective == {"SIZE": "4", "DEBUG": "true"}


def test_empty_environment_value_still_overrides() -> None:
    assert resolve_effective_defaults({"COLOR": "red"}, {"COLOR": ""}) == {"COLOR": ""}


def test_environment_never_adds_keys() -> None:
    assert resolve_effective_defaults({}, {"COLOR": "green"}) == {}


# ---------- raw context ----------


def test_override_replaces_defaults_shallowly() -> None:
    defaults = {"COLOR": "red", "BUILD": {"opt": True, "jobs": 2}}
    packages = [{"BUILD": {"jobs": 8}, "NAME": "app"}]

    context = build_package_context(defaults, packages, 1)

    assert context == {"COLOR": "red", "BUILD": {"jobs": 8}, "NAME": "app"}


def test_empty_override_yields_defaults() -> None:
    assert build_package_context({"A": 1}, [{}], 1) == {"A": 1}


@pytest.mark.parametrize("index", [0, 2, -1])
def test_context_index_out_of_range(index: int) -> None:
    with pytest.raises(MissingPackageError) as excinfo:
        build_package_context({}, [{}], index)
    assert excinfo.value.context["package_count"] == 1


# ---------- assembly ----------


def test_assemble_adds_rendered_values() -> None:
    record = assemble_package({"COLOR": "blue"}, {"GREETING": "hello blue"}, package_index=1)
    assert record == {"COLOR": "blue", "GREETING": "hello blue"}


def test_template_name_colliding_with_context_is_an_error() -> None:
    with pytest.raises(FieldCollisionError) as excinfo:
        assemble_package({"GREETING": "hi"}, {"GREETING": "hello"}, package_index=2)
    assert excinfo.value.field == "GREETING"
    assert excinfo.value.package_index == 2


@pytest.mark.parametrize("field", [LAYER_CHECKSUMS, PACKAGE_SPEC_ID, "BASE_LAYER_ID", "BASE_LAYER_CHECKSUM"])
def test_reserved_fields_are_rejected(field: str) -> None:
    with pytest.raises(FieldCollisionError, match="reserved"):
        check_reserved_fields({field: "x"}, package_index=1)
    with pytest.raises(FieldCollisionError):
        assemble_package({}, {field: "x"})


# ---------- identity ----------


def test_identify_package_adds_checksums_and_id() -> None:
    record = {"COLOR": "blue"}
    resolved = identify_package(record, ["h1", "h2"])

    assert resolved[LAYER_CHECKSUMS] == ["h1", "h2"]
    assert resolved[PACKAGE_SPEC_ID] == package_spec_id({"COLOR": "blue", LAYER_CHECKSUMS: ["h1", "h2"]})
    assert record == {"COLOR": "blue"}


def test_spec_id_ignores_key_order() -> None:
    a = identify_package({"A": 1, "B": {"x": 1, "y": 2}}, ["h"])
    b = identify_package({"B": {"y": 2, "x": 1}, "A": 1}, ["h"])
    assert a[PACKAGE_SPEC_ID] == b[PACKAGE_SPEC_ID]


def test_spec_id_changes_with_any_field_or_checksum() -> None:
    base = identify_package({"A": 1}, ["h"])[PACKAGE_SPEC_ID]
    assert identify_package({"A": 2}, ["h"])[PACKAGE_SPEC_ID] != base
    assert identify_package({"A": 1, "B": ""}, ["h"])[PACKAGE_SPEC_ID] != base
    assert identify_package({"A": 1}, ["other"])[PACKAGE_SPEC_ID] != base
    assert identify_package({"A": 1}, [])[PACKAGE_SPEC_ID] != base
