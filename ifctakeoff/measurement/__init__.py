"""Quantity resolution: properties first, bounding-box geometry second."""

from ifctakeoff.measurement.geometry import area_from_box, length_from_box, volume_from_box
from ifctakeoff.measurement.resolver import (
    PrincipalQuantity,
    Quantities,
    main_value,
    pick_unit_and_value,
    resolve_all,
    resolve_value,
)

__all__ = [
    "PrincipalQuantity",
    "Quantities",
    "area_from_box",
    "length_from_box",
    "main_value",
    "pick_unit_and_value",
    "resolve_all",
    "resolve_value",
    "volume_from_box",
]
