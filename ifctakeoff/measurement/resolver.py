"""Per-element quantity for a measurement kind.

Resolution order for every kind except Count:

1. the first strictly positive property whose normalized name is one of the
   kind's synonyms;
2. the element's bounding box in the rendering host, if one is given and
   knows the element (Mass has no geometric estimate);
3. ``1.0``.

Count is always exactly one.  The result is never negative and never
missing, so sums over a type are always defined.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ifctakeoff.config import (
    AREA_KEYS,
    DEFAULT_MODEL_PREFIX,
    LENGTH_KEYS,
    MASS_KEYS,
    VOLUME_KEYS,
)
from ifctakeoff.extraction.properties import find_number
from ifctakeoff.measurement.geometry import (
    area_from_box,
    largest_face,
    length_from_box,
    volume_from_box,
)
from ifctakeoff.models.element import BoundingBox, MetadataGraph, MetadataObject
from ifctakeoff.models.override import UnitKind
from ifctakeoff.scene.host import RenderingHost, lookup_box

logger = logging.getLogger(__name__)

DEFAULT_VALUE = 1.0

SYNONYMS: dict[UnitKind, frozenset[str]] = {
    UnitKind.LENGTH: LENGTH_KEYS,
    UnitKind.AREA: AREA_KEYS,
    UnitKind.VOLUME: VOLUME_KEYS,
    UnitKind.MASS: MASS_KEYS,
}


@dataclass(frozen=True)
class Quantities:
    """All magnitudes of one element, resolved in a single pass.

    ``mass_defaulted`` is True when no mass property was found and ``mass``
    therefore holds the ``1.0`` placeholder rather than a weight.
    """

    count: float = 1.0
    length: float = DEFAULT_VALUE
    area: float = DEFAULT_VALUE
    volume: float = DEFAULT_VALUE
    mass: float = DEFAULT_VALUE
    mass_defaulted: bool = True

    def get(self, unit: UnitKind) -> float:
        return {
            UnitKind.COUNT: self.count,
            UnitKind.LENGTH: self.length,
            UnitKind.AREA: self.area,
            UnitKind.VOLUME: self.volume,
            UnitKind.MASS: self.mass,
        }[UnitKind(unit)]


@dataclass(frozen=True)
class PrincipalQuantity:
    """The quantity picked automatically for an element."""

    unit: UnitKind
    value: float
    approx: bool = False


def _geometric(unit: UnitKind, box: BoundingBox, ifc_type: str) -> float | None:
    if unit == UnitKind.LENGTH:
        return length_from_box(box)
    if unit == UnitKind.AREA:
        return area_from_box(box, ifc_type)
    if unit == UnitKind.VOLUME:
        return volume_from_box(box)
    return None


def _box_for(
    obj: MetadataObject,
    host: RenderingHost | None,
    model_prefix: str,
) -> BoundingBox | None:
    if host is None or not obj.id:
        return None
    return lookup_box(host, obj.id, model_prefix)


def _resolve_with_box(
    obj: MetadataObject,
    unit: UnitKind,
    graph: MetadataGraph | None,
    box: BoundingBox | None,
) -> tuple[float, bool]:
    """Return ``(value, defaulted)``."""
    value = find_number(obj, SYNONYMS[unit], graph)
    if value is not None:
        return value, False

    if box is not None:
        estimate = _geometric(unit, box, obj.type)
        if estimate is not None and estimate > 0:
            return estimate, False

    return DEFAULT_VALUE, True


def resolve_value(
    obj: MetadataObject,
    unit: UnitKind | str,
    graph: MetadataGraph | None = None,
    host: RenderingHost | None = None,
    *,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> float:
    """Return the quantity of *obj* in *unit*; never fails, never below zero."""
    unit = UnitKind(unit)
    if unit == UnitKind.COUNT:
        return 1.0

    value, defaulted = _resolve_with_box(obj, unit, graph, _box_for(obj, host, model_prefix))
    if defaulted:
        logger.debug("No %s signal for %s, defaulting to %s", unit.value, obj.id, value)
    return value


def resolve_all(
    obj: MetadataObject,
    graph: MetadataGraph | None = None,
    host: RenderingHost | None = None,
    *,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> Quantities:
    """Resolve length, area, volume and mass with one host lookup."""
    box = _box_for(obj, host, model_prefix)
    length, _ = _resolve_with_box(obj, UnitKind.LENGTH, graph, box)
    area, _ = _resolve_with_box(obj, UnitKind.AREA, graph, box)
    volume, _ = _resolve_with_box(obj, UnitKind.VOLUME, graph, box)
    mass, mass_defaulted = _resolve_with_box(obj, UnitKind.MASS, graph, box)
    return Quantities(
        count=1.0,
        length=length,
        area=area,
        volume=volume,
        mass=mass,
        mass_defaulted=mass_defaulted,
    )


def pick_unit_and_value(
    obj: MetadataObject,
    graph: MetadataGraph | None = None,
    host: RenderingHost | None = None,
    *,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> PrincipalQuantity:
    """Pick the element's most meaningful quantity.

    Order: area property, bounding-box area (largest face, flagged
    ``approx``), then volume, length and mass properties.  With no signal at
    all the element counts as one unit.
    """
    area = find_number(obj, AREA_KEYS, graph, include_props=True)
    if area is not None:
        return PrincipalQuantity(UnitKind.AREA, area)

    box = _box_for(obj, host, model_prefix)
    if box is not None:
        box_area = largest_face(box)
        if box_area > 0:
            return PrincipalQuantity(UnitKind.AREA, box_area, approx=True)

    for unit, keys in (
        (UnitKind.VOLUME, VOLUME_KEYS),
        (UnitKind.LENGTH, LENGTH_KEYS),
        (UnitKind.MASS, MASS_KEYS),
    ):
        value = find_number(obj, keys, graph, include_props=True)
        if value is not None:
            return PrincipalQuantity(unit, value)

    return PrincipalQuantity(UnitKind.COUNT, 1.0)


def main_value(
    obj: MetadataObject,
    graph: MetadataGraph | None = None,
    host: RenderingHost | None = None,
    *,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> float:
    """Value of the principal quantity (its unit discarded)."""
    return pick_unit_and_value(obj, graph, host, model_prefix=model_prefix).value
