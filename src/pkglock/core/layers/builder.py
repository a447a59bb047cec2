"""Render a package's layer chain and publish it to the shared store."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pkglock.core.exceptions import FieldCollisionError, LayerRenderError, TemplateError
from pkglock.core.packages.fields import BASE_LAYER_CHECKSUM, BASE_LAYER_ID, NO_BASE_LAYER
from pkglock.core.spec import LayerDef
from pkglock.core.templates import TemplateRenderer
from pkglock.core.utils.hashing import content_hash

from .models import LayerArtifact, LayerEntry
from .store import LayerStore

logger = logging.getLogger(__name__)


class LayerBuilder:
    """Walk the ordered layer definitions for one package record at a time.

    Each layer's Dockerfile template sees the package record plus
    ``BASE_LAYER_ID`` (the previous layer's ``name_hash`` id) and
    ``BASE_LAYER_CHECKSUM`` (its hash); both are ``"none"`` for the first layer.

    ``store`` may be None when chains are only rendered, as the pipeline does
    before publishing them in package order.
    """

    def __init__(
        self,
        layers: Sequence[LayerDef],
        store: Optional[LayerStore],
        renderer: TemplateRenderer,
    ) -> None:
        self.layers = tuple(layers)
        self.store = store
        self.renderer = renderer

    def _layer_context(
        self,
        record: Mapping[str, Any],
        base_layer_id: str,
        base_checksum: str,
        package_index: int | None,
    ) -> Dict[str, Any]:
        for name in (BASE_LAYER_ID, BASE_LAYER_CHECKSUM):
            if name in record:
                raise FieldCollisionError(
                    name,
                    package_index=package_index,
                    reason="name is reserved for the layer chain",
                )
        context = dict(record)
        context[BASE_LAYER_ID] = base_layer_id
        context[BASE_LAYER_CHECKSUM] = base_checksum
        return context

    def render(self, record: Mapping[str, Any], *, package_index: int | None = None) -> List[LayerEntry]:
        """Render and hash every layer in order without touching the store.

        Returns:
            The package's layer entries, in chain order.

        Raises:
            LayerRenderError: If a layer template fails; later layers are not attempted.
        """
        entries: List[LayerEntry] = []
        base_layer_id = NO_BASE_LAYER
        base_checksum = NO_BASE_LAYER

        for layer in self.layers:
            context = self._layer_context(record, base_layer_id, base_checksum, package_index)
            try:
                dockerfile = self.renderer.render(layer.name, layer.dockerfile, context, strip=False)
            except TemplateError as exc:
                raise LayerRenderError(layer.name, package_index, exc) from exc

            artifact = LayerArtifact(
                name=layer.name,
                content_hash=content_hash(dockerfile),
                base_layer_id=base_layer_id,
                source_include=layer.source_include,
                source_exclude=layer.source_exclude,
            )
            entries.append(LayerEntry(artifact=artifact, dockerfile=dockerfile))

            base_layer_id = artifact.id
            base_checksum = artifact.content_hash

        return entries

    def publish(self, entries: Sequence[LayerEntry], *, package_index: int | None = None) -> None:
        """Add rendered entries to the store; entries already present are reused.

        Raises:
            StoreWriteError: If the store cannot publish an entry.
        """
        if self.store is None:
            raise ValueError("LayerBuilder has no store to publish to")
        for entry in entries:
            if not self.store.publish(entry.artifact, entry.dockerfile):
                logger.debug("Package %s reuses layer %s", package_index, entry.artifact.id)

    def build(self, record: Mapping[str, Any], *, package_index: int | None = None) -> List[LayerArtifact]:
        """Render every layer, then publish the whole chain.

        Nothing is published when any layer fails to render.
        """
        entries = self.render(record, package_index=package_index)
        self.publish(entries, package_index=package_index)
        return [entry.artifact for entry in entries]
