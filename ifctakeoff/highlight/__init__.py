"""Viewport highlighting of edited element types."""

from ifctakeoff.highlight.state import (
    EntitySnapshot,
    HighlightMode,
    HighlightState,
    Mutation,
    transition,
)
from ifctakeoff.highlight.synchronizer import (
    AcceptanceLookup,
    DatabaseAcceptanceLookup,
    HighlightSynchronizer,
    QuantityInspection,
    StaticAcceptanceLookup,
)

__all__ = [
    "AcceptanceLookup",
    "DatabaseAcceptanceLookup",
    "EntitySnapshot",
    "HighlightMode",
    "HighlightState",
    "HighlightSynchronizer",
    "Mutation",
    "QuantityInspection",
    "StaticAcceptanceLookup",
    "transition",
]
