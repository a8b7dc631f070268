"""Rendering host interface: per-element visibility, colour and AABB.

The viewer is a black box to this package.  :class:`RenderingHost` is the
seam; :class:`InMemoryHost` is the implementation used by the IFC loader and
by tests.  Element ids in the metadata graph and in the host may disagree on
formatting, so every lookup goes through :func:`resolve_entity_id`.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from typing import Sequence

from ifctakeoff.config import DEFAULT_COLOR, DEFAULT_MODEL_PREFIX
from ifctakeoff.models.element import BoundingBox

logger = logging.getLogger(__name__)

Color = tuple[float, float, float, float]


@dataclass(frozen=True)
class EntityAppearance:
    """The part of an entity's state that highlight modes mutate."""

    visible: bool = True
    colorize: Color = DEFAULT_COLOR


class RenderingHost(abc.ABC):
    """Abstract rendering host."""

    @abc.abstractmethod
    def entity_ids(self) -> list[str]:
        """Return the ids of every entity in the scene, in scene order."""

    @abc.abstractmethod
    def has_entity(self, entity_id: str) -> bool:
        """Return True if *entity_id* exists exactly as given."""

    @abc.abstractmethod
    def get_appearance(self, entity_id: str) -> EntityAppearance:
        """Return the current visibility and colour of an entity."""

    @abc.abstractmethod
    def set_visible(self, entity_id: str, visible: bool) -> None:
        """Show or hide an entity."""

    @abc.abstractmethod
    def set_colorize(self, entity_id: str, color: Sequence[float]) -> None:
        """Tint an entity with an RGBA colour (0-1 floats)."""

    @abc.abstractmethod
    def get_aabb(self, entity_id: str) -> list[float] | None:
        """Return ``[xmin, ymin, zmin, xmax, ymax, zmax]`` or None."""

    def apply_appearance(self, entity_id: str, appearance: EntityAppearance) -> None:
        self.set_colorize(entity_id, appearance.colorize)
        self.set_visible(entity_id, appearance.visible)


def id_variants(element_id: str, model_prefix: str = DEFAULT_MODEL_PREFIX) -> list[str]:
    """Candidate host ids for a metadata id: bare, prefixed, prefix-stripped."""
    prefix = f"{model_prefix}#"
    stripped = element_id[len(prefix):] if element_id.startswith(prefix) else element_id
    variants: list[str] = []
    for candidate in (element_id, f"{prefix}{element_id}", stripped):
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def resolve_entity_id(
    host: RenderingHost,
    element_id: str,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> str | None:
    """Return the host id matching *element_id*, or None if none exists."""
    for candidate in id_variants(element_id, model_prefix):
        if host.has_entity(candidate):
            return candidate
    logger.debug("No scene entity for %s", element_id)
    return None


def lookup_box(
    host: RenderingHost,
    element_id: str,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> BoundingBox | None:
    """Bounding box of the entity behind *element_id*, tolerating id variants."""
    entity_id = resolve_entity_id(host, element_id, model_prefix)
    if entity_id is None:
        return None
    aabb = host.get_aabb(entity_id)
    if not aabb or len(aabb) != 6:
        return None
    return BoundingBox.from_aabb(aabb)


@dataclass
class SceneEntity:
    """One entity of the in-memory scene."""

    id: str
    aabb: list[float] | None = None
    visible: bool = True
    colorize: Color = DEFAULT_COLOR


@dataclass
class InMemoryHost(RenderingHost):
    """Dict-backed rendering host."""

    entities: dict[str, SceneEntity] = field(default_factory=dict)

    def add(
        self,
        entity_id: str,
        aabb: Sequence[float] | None = None,
        *,
        visible: bool = True,
        colorize: Sequence[float] = DEFAULT_COLOR,
    ) -> SceneEntity:
        entity = SceneEntity(
            id=entity_id,
            aabb=list(aabb) if aabb is not None else None,
            visible=visible,
            colorize=_as_color(colorize),
        )
        self.entities[entity_id] = entity
        return entity

    def entity_ids(self) -> list[str]:
        return list(self.entities)

    def has_entity(self, entity_id: str) -> bool:
        return entity_id in self.entities

    def get_appearance(self, entity_id: str) -> EntityAppearance:
        entity = self.entities[entity_id]
        return EntityAppearance(visible=entity.visible, colorize=entity.colorize)

    def set_visible(self, entity_id: str, visible: bool) -> None:
        self.entities[entity_id].visible = visible

    def set_colorize(self, entity_id: str, color: Sequence[float]) -> None:
        self.entities[entity_id].colorize = _as_color(color)

    def get_aabb(self, entity_id: str) -> list[float] | None:
        entity = self.entities.get(entity_id)
        return entity.aabb if entity is not None else None


def _as_color(color: Sequence[float]) -> Color:
    values = [float(c) for c in color]
    if len(values) == 3:
        values.append(1.0)
    if len(values) != 4:
        raise ValueError(f"Colour needs 3 or 4 components, got {len(values)}")
    return (values[0], values[1], values[2], values[3])
