"""Rendering host seam."""

from ifctakeoff.scene.host import (
    EntityAppearance,
    InMemoryHost,
    RenderingHost,
    SceneEntity,
    id_variants,
    lookup_box,
    resolve_entity_id,
)

__all__ = [
    "EntityAppearance",
    "InMemoryHost",
    "RenderingHost",
    "SceneEntity",
    "id_variants",
    "lookup_box",
    "resolve_entity_id",
]
