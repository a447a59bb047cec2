from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class LayerArtifact:
    """A rendered layer, identified by ``(name, content_hash)``.

    ``base_layer_id`` is the id of the preceding layer in the chain that first
    produced this artifact, or ``"none"`` for a chain's first layer.
    """

    name: str
    content_hash: str
    base_layer_id: str
    source_include: str = ""
    source_exclude: str = ""

    @property
    def id(self) -> str:
        return f"{self.name}_{self.content_hash}"

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.content_hash)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "name": self.name,
            "content-hash": self.content_hash,
            "base-layer-id": self.base_layer_id,
            "source-include": self.source_include,
            "source-exclude": self.source_exclude,
        }

    def make_fragment(self) -> str:
        """Render the chain-of-custody record as a make fragment.

        Image build rules include these fragments and expand the ``LAYER``
        macro once per stored layer.
        """
        var = f"LAYER_{self.id}"
        return (
            f"{var}_ID             := {self.id}\n"
            f"{var}_BASE_LAYER     := {self.base_layer_id}\n"
            f"{var}_SOURCE_INCLUDE := {self.source_include}\n"
            f"{var}_SOURCE_EXCLUDE := {self.source_exclude}\n"
            f"$(eval $(call LAYER,$({var}_ID),$({var}_BASE_LAYER),"
            f"$({var}_SOURCE_INCLUDE),$({var}_SOURCE_EXCLUDE)))\n"
        )


@dataclass(frozen=True)
class LayerEntry:
    """A store entry: the artifact and its rendered Dockerfile text."""

    artifact: LayerArtifact
    dockerfile: str
