"""Quantities estimated from an axis-aligned bounding box.

Only used when no quantity property exists.  Y is the vertical axis, so a
wall's face is its horizontal run times ``dy`` and a slab's footprint is
``dx * dz``.
"""

from __future__ import annotations

from ifctakeoff.models.element import BoundingBox

_HORIZONTAL_KEYWORDS = ("slab", "floor", "roof", "ceiling")
_OPENING_KEYWORDS = ("window", "door")


def length_from_box(box: BoundingBox) -> float:
    """Longest edge of the box."""
    return max(box.extents())


def largest_face(box: BoundingBox) -> float:
    dx, dy, dz = box.extents()
    return max(dx * dy, dx * dz, dy * dz)


def area_from_box(box: BoundingBox, ifc_type: str) -> float:
    """Area of *box* as seen for an element of class *ifc_type*.

    Parameters
    ----------
    box:
        Element bounds, Y up.
    ifc_type:
        Native type tag; matched case-insensitively by substring
        (``IfcWallStandardCase`` counts as a wall).

    Returns
    -------
    float
        Lateral face for walls, footprint for slabs/floors/roofs/ceilings,
        the larger vertical face for windows and doors, and the largest face
        for anything else.
    """
    dx, dy, dz = box.extents()
    kind = ifc_type.lower()

    if "wall" in kind:
        return max(dx, dz) * dy
    if any(word in kind for word in _HORIZONTAL_KEYWORDS):
        return dx * dz
    if any(word in kind for word in _OPENING_KEYWORDS):
        return max(dx * dy, dz * dy)
    return largest_face(box)


def volume_from_box(box: BoundingBox) -> float:
    dx, dy, dz = box.extents()
    return dx * dy * dz  # bounding-box volume approximation
