"""Resolve every package of a spec in parallel.

Stages, per package index::

    effective defaults -> raw context -> rendered templates -> package record
        -> layer chain -> record + LAYER_CHECKSUMS + PACKAGE_SPEC_ID

Packages render independently, each as its own task on a thread pool. Their
layers are then published to the :class:`LayerStore` in package-index order. A
:class:`PkglockError` in one package is recorded as a :class:`PackageFailure`
and the remaining packages still resolve.
"""
from __future__ import annotations

import concurrent.futures
import logging
import os
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from pkglock.core.commands import DEFAULT_BUILD_ACTION, DEFAULT_NAME_FIELD, generate_command
from pkglock.core.exceptions import PipelineError, PkglockError
from pkglock.core.layers import LayerArtifact, LayerBuilder, LayerEntry, LayerStore
from pkglock.core.packages import (
    PACKAGE_SPEC_ID,
    assemble_package,
    build_package_context,
    check_reserved_fields,
    identify_package,
    resolve_effective_defaults,
)
from pkglock.core.spec import Spec
from pkglock.core.templates import TemplateRenderer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ResolvedPackage:
    """One fully resolved package."""

    index: int
    record: Dict[str, Any]
    entries: Tuple[LayerEntry, ...]
    resolved: Dict[str, Any]

    @property
    def layers(self) -> Tuple[LayerArtifact, ...]:
        return tuple(e.artifact for e in self.entries)

    @property
    def spec_id(self) -> str:
        return self.resolved[PACKAGE_SPEC_ID]

    @property
    def layer_checksums(self) -> List[str]:
        return [a.content_hash for a in self.layers]


@dataclass(frozen=True)
class PackageFailure:
    index: int
    error: PkglockError


@dataclass
class StageResult:
    """Per-index results of one stage, in package-index order."""

    results: Dict[int, Any] = field(default_factory=dict)
    failures: List[PackageFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def values(self) -> List[Any]:
        return [self.results[i] for i in sorted(self.results)]

    def raise_for_failures(self) -> None:
        if self.failures:
            raise PipelineError(self.failures)


@dataclass
class PipelineResult(StageResult):
    store: Optional[LayerStore] = None

    @property
    def packages(self) -> List[ResolvedPackage]:
        return self.values()

    @property
    def records(self) -> List[Dict[str, Any]]:
        return [p.resolved for p in self.packages]


class PackagePipeline:
    """Expand a :class:`Spec` into resolved packages.

    Args:
        spec: The parsed spec.
        environ: Environment consulted for default overrides (``os.environ`` when None).
        renderer: Template renderer shared by every package.
        max_workers: Thread pool size; ``0`` or None means one worker per package.
    """

    def __init__(
        self,
        spec: Spec,
        *,
        environ: Optional[Mapping[str, str]] = None,
        renderer: Optional[TemplateRenderer] = None,
        max_workers: Optional[int] = None,
    ) -> None:
        self.spec = spec
        self.environ = os.environ if environ is None else environ
        self.renderer = renderer or TemplateRenderer()
        self.max_workers = max_workers

    @cached_property
    def effective_defaults(self) -> Dict[str, Any]:
        return resolve_effective_defaults(self.spec.defaults, self.environ)

    # ---------- single-package stages ----------

    def raw_context(self, index: int) -> Dict[str, Any]:
        return build_package_context(self.effective_defaults, self.spec.packages, index)

    def rendered_templates(self, index: int) -> Dict[str, str]:
        context = self.raw_context(index)
        return self.renderer.render_all(self.spec.templates, context, package_index=index)

    def package_record(self, index: int) -> Dict[str, Any]:
        context = self.raw_context(index)
        check_reserved_fields(context, package_index=index)
        rendered = self.renderer.render_all(self.spec.templates, context, package_index=index)
        return assemble_package(context, rendered, package_index=index)

    def resolve_package(self, index: int) -> ResolvedPackage:
        """Render one package and its layer chain; nothing is published."""
        record = self.package_record(index)
        builder = LayerBuilder(self.spec.layers, None, self.renderer)
        entries = builder.render(record, package_index=index)
        resolved = identify_package(record, [e.artifact.content_hash for e in entries])
        logger.debug("Package %d resolved to %s", index, resolved[PACKAGE_SPEC_ID])
        return ResolvedPackage(
            index=index,
            record=record,
            entries=tuple(entries),
            resolved=resolved,
        )

    def build_command(
        self,
        index: int,
        *,
        name_field: str = DEFAULT_NAME_FIELD,
        build_action: str = DEFAULT_BUILD_ACTION,
    ) -> str:
        return generate_command(
            self.package_record(index),
            name_field=name_field,
            build_action=build_action,
            package_index=index,
        )

    # ---------- parallel map ----------

    def _worker_count(self, task_count: int) -> int:
        if self.max_workers:
            return max(1, min(self.max_workers, task_count))
        return max(1, task_count)

    def map_packages(
        self,
        fn: Callable[[int], T],
        indexes: Optional[List[int]] = None,
        *,
        result: Optional[StageResult] = None,
    ) -> StageResult:
        """Run ``fn(index)`` for every package index on a thread pool.

        A :class:`PkglockError` fails only its own index; any other exception
        propagates once all tasks have finished.
        """
        targets = list(self.spec.package_indexes if indexes is None else indexes)
        stage = result if result is not None else StageResult()
        if not targets:
            return stage

        unexpected: List[BaseException] = []
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._worker_count(len(targets)),
            thread_name_prefix="pkglock",
        ) as executor:
            futures = {executor.submit(fn, index): index for index in targets}
            for future in concurrent.futures.as_completed(futures):
                index = futures[future]
                try:
                    stage.results[index] = future.result()
                except PkglockError as exc:
                    logger.error("Package %d failed: %s", index, exc)
                    stage.failures.append(PackageFailure(index=index, error=exc))
                except Exception as exc:
                    unexpected.append(exc)

        if unexpected:
            raise unexpected[0]
        stage.failures.sort(key=lambda f: f.index)
        return stage

    def publish(self, result: PipelineResult) -> None:
        """Publish resolved layers into ``result.store`` in package-index order.

        Entries are write-once, so when two packages render the same layer
        text the lowest index decides what is stored, however the workers
        were scheduled. A package whose publish fails moves to the failures.
        """
        builder = LayerBuilder(self.spec.layers, result.store, self.renderer)
        for index in sorted(result.results):
            try:
                builder.publish(result.results[index].entries, package_index=index)
            except PkglockError as exc:
                logger.error("Package %d failed: %s", index, exc)
                del result.results[index]
                result.failures.append(PackageFailure(index=index, error=exc))
        result.failures.sort(key=lambda f: f.index)

    def run(self, store: Optional[LayerStore] = None, indexes: Optional[List[int]] = None) -> PipelineResult:
        """Resolve packages (all by default), publishing layers into ``store``.

        Rendering runs in parallel; publishing happens afterwards, one package
        at a time. An in-memory store is used when ``store`` is None.
        """
        store = store if store is not None else LayerStore()
        result = PipelineResult(store=store)
        self.map_packages(self.resolve_package, indexes, result=result)
        self.publish(result)
        logger.info(
            "Resolved %d package(s), %d failure(s), %d layer(s) in store",
            len(result.results),
            len(result.failures),
            len(store),
        )
        return result


__all__ = [
    "PackageFailure",
    "PackagePipeline",
    "PipelineResult",
    "ResolvedPackage",
    "StageResult",
]
