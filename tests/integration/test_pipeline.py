"""End-to-end package expansion through :class:`PackagePipeline`."""
from __future__ import annotations

import time
from pathlib import Path

import pytest

from pkglock.core import LayerStore, PackagePipeline, PipelineError, parse_spec
from pkglock.core.exceptions import (
    FieldCollisionError,
    LayerRenderError,
    MissingPackageError,
    StoreWriteError,
    TemplateError,
)
from pkglock.core.lock import render_lock
from pkglock.core.packages import LAYER_CHECKSUMS, PACKAGE_SPEC_ID
from pkglock.core.templates import TemplateRenderer
from pkglock.core.utils.hashing import content_hash


def _pipeline(text: str, environ: dict | None = None, **kwargs) -> PackagePipeline:
    return PackagePipeline(parse_spec(text), environ=environ or {}, **kwargs)


def test_color_greeting_scenario(color_spec_text: str) -> None:
    result = _pipeline(color_spec_text).run()

    assert result.ok
    (package,) = result.packages
    record = package.resolved
    assert record["COLOR"] == "blue"
    assert record["GREETING"] == "hello blue"
    assert record["PACKAGE_NAME"] == "app"

    base, app = package.layers
    assert base.base_layer_id == "none"
    assert app.base_layer_id == base.id
    assert record[LAYER_CHECKSUMS] == [base.content_hash, app.content_hash]
    assert result.store.get("app", app.content_hash).dockerfile == (
        f"FROM {base.id}\nRUN echo hello blue\n"
    )
    assert package.spec_id == record[PACKAGE_SPEC_ID]


def test_precedence_default_environment_override() -> None:
    text = (
        "defaults: {A: a, B: a, C: a}\n"
        "packages:\n"
        "  - {C: c}\n"
    )
    record = _pipeline(text, environ={"B": "b", "C": "b"}).run().records[0]
    assert (record["A"], record["B"], record["C"]) == ("a", "b", "c")


def test_templates_see_environment_overridden_defaults() -> None:
    text = (
        "defaults: {COLOR: red}\n"
        "templates: {GREETING: 'hello {{.COLOR}}'}\n"
        "packages: [{}]\n"
    )
    record = _pipeline(text, environ={"COLOR": "green"}).run().records[0]
    assert record["GREETING"] == "hello green"


def test_resolution_is_deterministic(color_spec_text: str) -> None:
    first = _pipeline(color_spec_text).run()
    second = _pipeline(color_spec_text, max_workers=1).run()

    assert render_lock(first.records) == render_lock(second.records)
    assert [e.artifact for e in first.store.entries()] == [e.artifact for e in second.store.entries()]


def test_key_order_in_spec_does_not_change_ids() -> None:
    a = "defaults: {A: 1, B: 2}\npackages: [{C: 3, D: 4}]\n"
    b = "defaults: {B: 2, A: 1}\npackages: [{D: 4, C: 3}]\n"
    assert _pipeline(a).run().packages[0].spec_id == _pipeline(b).run().packages[0].spec_id


def test_identical_packages_share_layers() -> None:
    text = (
        "defaults: {COLOR: red}\n"
        "layers:\n"
        "  - {name: base, dockerfile: 'FROM debian'}\n"
        "  - {name: paint, dockerfile: 'FROM {{ BASE_LAYER_ID }} {{ COLOR }}'}\n"
        "packages:\n"
        "  - {PACKAGE_NAME: one}\n"
        "  - {PACKAGE_NAME: two}\n"
        "  - {PACKAGE_NAME: three, COLOR: blue}\n"
    )
    result = _pipeline(text).run()

    one, two, three = result.packages
    assert one.layers == two.layers
    assert one.layers[0] == three.layers[0]
    assert one.layers[1] != three.layers[1]
    # base shared by all; paint differs only for blue.
    assert len(result.store) == 3
    # Names differ, so ids differ even with identical layers.
    assert one.spec_id != two.spec_id


def test_spec_id_changes_when_a_layer_changes() -> None:
    template = (
        "layers:\n"
        "  - {{name: base, dockerfile: '{body}'}}\n"
        "packages: [{{PACKAGE_NAME: app}}]\n"
    )
    first = _pipeline(template.format(body="FROM debian")).run().packages[0]
    second = _pipeline(template.format(body="FROM ubuntu")).run().packages[0]
    assert first.record == second.record
    assert first.spec_id != second.spec_id


def test_persisted_run_writes_store(tmp_path: Path, color_spec_text: str) -> None:
    store = LayerStore(tmp_path / "layers.lock")
    result = _pipeline(color_spec_text).run(store)

    for artifact in result.packages[0].layers:
        path = tmp_path / "layers.lock" / artifact.name / f"{artifact.content_hash}.Dockerfile"
        assert content_hash(path.read_text()) == artifact.content_hash
        assert (path.with_suffix(".mk")).exists()


def test_failures_are_isolated_per_package() -> None:
    text = (
        "templates: {GREETING: 'hello {{ COLOR }}'}\n"
        "packages:\n"
        "  - {COLOR: blue}\n"
        "  - {}\n"
        "  - {COLOR: red}\n"
    )
    result = _pipeline(text).run()

    assert not result.ok
    assert sorted(result.results) == [1, 3]
    (failure,) = result.failures
    assert failure.index == 2
    assert isinstance(failure.error, TemplateError)
    assert failure.error.package_index == 2

    with pytest.raises(PipelineError) as excinfo:
        result.raise_for_failures()
    assert excinfo.value.failures == result.failures


def test_layer_failure_is_attributed_to_package_and_layer() -> None:
    text = (
        "layers:\n"
        "  - {name: base, dockerfile: 'FROM debian'}\n"
        "  - {name: app, dockerfile: 'FROM {{ IMAGE }}'}\n"
        "packages:\n"
        "  - {IMAGE: python}\n"
        "  - {}\n"
    )
    result = _pipeline(text).run()

    (failure,) = result.failures
    assert isinstance(failure.error, LayerRenderError)
    assert failure.error.layer_name == "app"
    assert failure.error.package_index == 2
    # base is shared; only the python app layer was published.
    assert len(result.store) == 2


def test_template_colliding_with_override_fails_that_package() -> None:
    text = (
        "templates: {GREETING: hi}\n"
        "packages:\n"
        "  - {}\n"
        "  - {GREETING: custom}\n"
    )
    result = _pipeline(text).run()
    (failure,) = result.failures
    assert isinstance(failure.error, FieldCollisionError)
    assert failure.error.field == "GREETING"


def test_reserved_field_in_defaults_fails_every_package() -> None:
    text = "defaults: {PACKAGE_SPEC_ID: x}\npackages: [{}, {}]\n"
    result = _pipeline(text).run()
    assert [f.index for f in result.failures] == [1, 2]


def test_empty_package_list() -> None:
    result = _pipeline("defaults: {A: 1}\n").run()
    assert result.ok
    assert result.records == []


def test_selected_indexes(color_spec_text: str) -> None:
    pipeline = _pipeline(color_spec_text)
    assert pipeline.run(indexes=[1]).ok

    result = pipeline.run(indexes=[5])
    (failure,) = result.failures
    assert isinstance(failure.error, MissingPackageError)


def test_single_stage_helpers(color_spec_text: str) -> None:
    pipeline = _pipeline(color_spec_text, environ={"COLOR": "green"})

    assert pipeline.effective_defaults == {"COLOR": "green"}
    assert pipeline.raw_context(1) == {"COLOR": "blue", "PACKAGE_NAME": "app"}
    assert pipeline.rendered_templates(1) == {"GREETING": "hello blue"}
    assert pipeline.package_record(1) == {"COLOR": "blue", "PACKAGE_NAME": "app", "GREETING": "hello blue"}
    assert pipeline.build_command(1).startswith("# Build package: app\n")


def test_unexpected_errors_propagate(color_spec_text: str) -> None:
    pipeline = _pipeline(color_spec_text)

    def explode(index: int) -> None:
        raise RuntimeError("bug")

    with pytest.raises(RuntimeError, match="bug"):
        pipeline.map_packages(explode)


def test_two_package_scenario_ids_differ() -> None:
    text = (
        "defaults: {COLOR: blue}\n"
        "templates: {GREETING: 'hello {{.COLOR}}'}\n"
        "packages: [{}, {COLOR: red}]\n"
    )
    first, second = _pipeline(text).run().records

    assert (first["COLOR"], first["GREETING"]) == ("blue", "hello blue")
    assert (second["COLOR"], second["GREETING"]) == ("red", "hello red")
    assert first[PACKAGE_SPEC_ID] != second[PACKAGE_SPEC_ID]


def test_changing_last_layer_leaves_earlier_layers_alone() -> None:
    template = (
        "layers:\n"
        "  - {{name: a, dockerfile: 'FROM debian'}}\n"
        "  - {{name: b, dockerfile: 'FROM {{{{ BASE_LAYER_ID }}}}'}}\n"
        "  - {{name: c, dockerfile: 'FROM {{{{ BASE_LAYER_ID }}}} {body}'}}\n"
        "packages: [{{}}]\n"
    )
    before = _pipeline(template.format(body="RUN one")).run().packages[0].layers
    after = _pipeline(template.format(body="RUN two")).run().packages[0].layers

    assert before[0] == after[0]
    assert before[1] == after[1]
    assert before[1].base_layer_id == before[0].id
    assert before[2].base_layer_id == before[1].id
    assert before[2].content_hash != after[2].content_hash


def test_changing_one_package_leaves_others_ids_alone() -> None:
    base = "packages: [{A: 1}, {A: 2}]\n"
    changed = "packages: [{A: 1}, {A: 3}]\n"
    before = _pipeline(base).run().records
    after = _pipeline(changed).run().records

    assert before[0][PACKAGE_SPEC_ID] == after[0][PACKAGE_SPEC_ID]
    assert before[1][PACKAGE_SPEC_ID] != after[1][PACKAGE_SPEC_ID]


class _SlowRenderer(TemplateRenderer):
    """Stall the base layer of one package so the other finishes first."""

    def __init__(self, slow_value: str) -> None:
        super().__init__()
        self.slow_value = slow_value

    def render(self, name, source, context, *, strip=True):
        if name == "base" and context.get("X") == self.slow_value:
            time.sleep(0.2)
        return super().render(name, source, context, strip=strip)


SHARED_APP_LAYER = (
    "layers:\n"
    "  - {name: base, dockerfile: 'FROM {{ X }}'}\n"
    "  - {name: app, dockerfile: 'RUN echo hi'}\n"
    "packages: [{X: '1'}, {X: '2'}]\n"
)


@pytest.mark.parametrize("slow_value", ["1", "2"])
def test_shared_layer_metadata_follows_package_order(tmp_path: Path, slow_value: str) -> None:
    store = LayerStore(tmp_path / "layers.lock")
    pipeline = _pipeline(SHARED_APP_LAYER, renderer=_SlowRenderer(slow_value), max_workers=2)
    result = pipeline.run(store)

    first, second = result.packages
    assert first.layers[1].key == second.layers[1].key
    app = first.layers[1]
    metadata = (tmp_path / "layers.lock" / "app" / f"{app.content_hash}.mk").read_text()
    assert f"_BASE_LAYER     := {first.layers[0].id}\n" in metadata
    assert store.get("app", app.content_hash).artifact == app


def test_publish_failure_moves_package_to_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    text = "layers:\n  - {name: base, dockerfile: 'FROM {{ X }}'}\npackages: [{X: a}, {X: b}]\n"
    store = LayerStore()
    real_publish = store.publish

    def publish(artifact, dockerfile):
        if dockerfile == "FROM b":
            raise StoreWriteError(artifact.name, artifact.content_hash, "memory", "disk full")
        return real_publish(artifact, dockerfile)

    monkeypatch.setattr(store, "publish", publish)
    result = _pipeline(text).run(store)

    assert sorted(result.results) == [1]
    (failure,) = result.failures
    assert failure.index == 2
    assert isinstance(failure.error, StoreWriteError)
