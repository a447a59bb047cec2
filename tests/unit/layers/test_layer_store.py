from __future__ import annotations

import threading
from pathlib import Path

import pytest

from pkglock.core.exceptions import StoreWriteError
from pkglock.core.layers import LayerArtifact, LayerStore
from pkglock.core.utils.hashing import content_hash

DOCKERFILE = "FROM debian\nLABEL color=blue\n"


def _artifact(name: str = "base", text: str = DOCKERFILE, base: str = "none") -> LayerArtifact:
    return LayerArtifact(name=name, content_hash=content_hash(text), base_layer_id=base)


def test_artifact_identity() -> None:
    artifact = _artifact()
    assert artifact.id == f"base_{content_hash(DOCKERFILE)}"
    assert artifact.key == ("base", content_hash(DOCKERFILE))
    assert artifact.to_dict()["base-layer-id"] == "none"


def test_make_fragment_records_chain() -> None:
    artifact = LayerArtifact(
        name="app",
        content_hash="abc",
        base_layer_id="base_123",
        source_include="src/**",
    )
    fragment = artifact.make_fragment()

    assert "LAYER_app_abc_ID             := app_abc\n" in fragment
    assert "LAYER_app_abc_BASE_LAYER     := base_123\n" in fragment
    assert "LAYER_app_abc_SOURCE_INCLUDE := src/**\n" in fragment
    assert fragment.endswith(
        "$(eval $(call LAYER,$(LAYER_app_abc_ID),$(LAYER_app_abc_BASE_LAYER),"
        "$(LAYER_app_abc_SOURCE_INCLUDE),$(LAYER_app_abc_SOURCE_EXCLUDE)))\n"
    )


def test_in_memory_store_publishes_once() -> None:
    store = LayerStore()
    artifact = _artifact()

    assert store.publish(artifact, DOCKERFILE) is True
    assert store.publish(_artifact(base="other_layer"), DOCKERFILE) is False

    assert len(store) == 1
    assert artifact.key in store
    # First writer wins.
    assert store.get("base", artifact.content_hash).artifact.base_layer_id == "none"
    assert not store.persistent
    with pytest.raises(ValueError):
        store.dockerfile_path("base", artifact.content_hash)


def test_persisted_store_layout(tmp_path: Path) -> None:
    store = LayerStore(tmp_path / "layers.lock")
    artifact = _artifact()

    assert store.publish(artifact, DOCKERFILE)

    dockerfile = tmp_path / "layers.lock" / "base" / f"{artifact.content_hash}.Dockerfile"
    metadata = tmp_path / "layers.lock" / "base" / f"{artifact.content_hash}.mk"
    assert dockerfile.read_text() == DOCKERFILE
    assert metadata.read_text() == artifact.make_fragment()
    assert sorted(p.name for p in dockerfile.parent.iterdir()) == sorted([dockerfile.name, metadata.name])


def test_existing_entry_on_disk_is_not_rewritten(tmp_path: Path) -> None:
    root = tmp_path / "store"
    artifact = _artifact()
    LayerStore(root).publish(artifact, DOCKERFILE)
    dockerfile = root / "base" / f"{artifact.content_hash}.Dockerfile"
    mtime = dockerfile.stat().st_mtime_ns

    # A later run (new store instance) finds the entry already complete.
    second = LayerStore(root)
    assert second.publish(_artifact(base="different"), DOCKERFILE) is False
    assert dockerfile.stat().st_mtime_ns == mtime
    assert "different" not in (root / "base" / f"{artifact.content_hash}.mk").read_text()
    assert len(second) == 1


def test_store_entries_are_sorted() -> None:
    store = LayerStore()
    store.publish(_artifact("zeta", "z"), "z")
    store.publish(_artifact("alpha", "b"), "b")
    store.publish(_artifact("alpha", "a"), "a")

    keys = [e.artifact.key for e in store.entries()]
    assert keys == sorted(keys)
    assert [k[0] for k in keys] == ["alpha", "alpha", "zeta"]


def test_concurrent_publish_of_identical_layer(tmp_path: Path) -> None:
    store = LayerStore(tmp_path / "store")
    results: list[bool] = []
    lock = threading.Lock()

    def work() -> None:
        written = store.publish(_artifact(), DOCKERFILE)
        with lock:
            results.append(written)

    threads = [threading.Thread(target=work) for _ in range(12)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert len(store) == 1
    files = sorted(p.name for p in (tmp_path / "store" / "base").iterdir())
    assert [Path(f).suffix for f in files] == [".Dockerfile", ".mk"]


def test_unwritable_store_raises_store_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "store"
    blocker.write_text("not a directory")

    with pytest.raises(StoreWriteError) as excinfo:
        LayerStore(blocker).publish(_artifact(), DOCKERFILE)
    assert excinfo.value.context["layer"] == "base"
