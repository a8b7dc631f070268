"""Data models."""

from ifctakeoff.models.element import (
    BoundingBox,
    MetadataGraph,
    MetadataObject,
    Property,
    PropertySet,
)
from ifctakeoff.models.override import ClassificationOverride, Scope, UnitKind

__all__ = [
    "BoundingBox",
    "ClassificationOverride",
    "MetadataGraph",
    "MetadataObject",
    "Property",
    "PropertySet",
    "Scope",
    "UnitKind",
]
