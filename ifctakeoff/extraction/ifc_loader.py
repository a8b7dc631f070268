"""Build a metadata graph and an in-memory scene straight from an IFC file.

Entry point: ``load_ifc(ifc_path)``

Property and quantity sets go into the graph's shared property-set table and
are referenced by id, the same shape web viewers emit.  The element ``Tag``
becomes a ``Marca`` property so tagging works as it does for exported
metadata.  Bounding boxes are converted from IFC's Z-up axes to the Y-up
convention the measurement code expects.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.util.element

from ifctakeoff.models.element import MetadataGraph, MetadataObject, Property, PropertySet
from ifctakeoff.scene.host import InMemoryHost

logger = logging.getLogger(__name__)

ELEMENT_BASE_CLASS = "IfcElement"
SKIPPED_CLASSES = ("IfcFeatureElement",)
TAG_PSET_NAME = "Identity Data"

# Try to import geometry processing; not every environment has OCC bindings.
try:
    import ifcopenshell.geom

    _HAS_GEOM = True
except ImportError:
    _HAS_GEOM = False


def _settings() -> Any:
    settings = ifcopenshell.geom.settings()
    settings.set("use-world-coords", True)
    return settings


def _json_safe(value: Any) -> Any:
    if isinstance(value, ifcopenshell.entity_instance):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def z_up_to_y_up(aabb: list[float]) -> list[float]:
    """Rotate an IFC box (Z up) into viewer axes (Y up): ``(x, y, z) -> (x, z, -y)``."""
    xmin, ymin, zmin, xmax, ymax, zmax = aabb
    return [xmin, zmin, -ymax, xmax, zmax, -ymin]


def element_aabb(element: ifcopenshell.entity_instance) -> list[float] | None:
    """Return the Y-up AABB of *element*, or None when it has no geometry."""
    if not _HAS_GEOM or getattr(element, "Representation", None) is None:
        return None
    try:
        shape = ifcopenshell.geom.create_shape(_settings(), element)
        verts = shape.geometry.verts
        if not verts:
            return None
        xs = verts[0::3]
        ys = verts[1::3]
        zs = verts[2::3]
        return z_up_to_y_up([min(xs), min(ys), min(zs), max(xs), max(ys), max(zs)])
    except Exception:
        logger.debug("Geometry extraction failed for %s", element.GlobalId, exc_info=True)
        return None


def extract_property_sets(element: ifcopenshell.entity_instance) -> list[PropertySet]:
    """Return the element's property and quantity sets (type sets included)."""
    try:
        raw = ifcopenshell.util.element.get_psets(element)
    except Exception:
        logger.debug("Pset extraction failed for %s", element.GlobalId, exc_info=True)
        return []

    psets: list[PropertySet] = []
    for pset_name, props in raw.items():
        pset_id = str(props.get("id", f"{element.GlobalId}:{pset_name}"))
        psets.append(PropertySet(
            id=pset_id,
            name=pset_name,
            type="IfcPropertySet",
            properties=[
                Property(name=k, value=_json_safe(v))
                for k, v in props.items()
                if k != "id"
            ],
        ))
    return psets


def _element_props(element: ifcopenshell.entity_instance) -> dict[str, Any]:
    props: dict[str, Any] = {"Name": element.Name}
    object_type = getattr(element, "ObjectType", None)
    if object_type:
        props["ObjectType"] = object_type
    element_type = ifcopenshell.util.element.get_type(element)
    if element_type is not None and element_type.Name:
        props["type"] = {"name": element_type.Name}
    return {k: v for k, v in props.items() if v is not None}


def _to_metadata(
    element: ifcopenshell.entity_instance,
    table: dict[str, PropertySet],
) -> MetadataObject:
    pset_ids: list[str] = []
    for pset in extract_property_sets(element):
        # Type-level sets are shared by every occurrence of the type.
        table.setdefault(pset.id, pset)
        pset_ids.append(pset.id)

    embedded: list[PropertySet] = []
    tag = getattr(element, "Tag", None)
    if tag:
        embedded.append(PropertySet(
            id=f"{element.GlobalId}:tag",
            name=TAG_PSET_NAME,
            properties=[Property(name="Marca", value=tag)],
        ))

    return MetadataObject(
        id=element.GlobalId,
        type=element.is_a(),
        name=element.Name,
        props=_element_props(element),
        property_sets=embedded,
        property_set_ids=pset_ids,
    )


def load_model(ifc_file: ifcopenshell.file) -> tuple[MetadataGraph, InMemoryHost]:
    """Build ``(graph, host)`` from an open IFC file."""
    objects: list[MetadataObject] = []
    table: dict[str, PropertySet] = {}
    host = InMemoryHost()

    for element in ifc_file.by_type(ELEMENT_BASE_CLASS):
        if any(element.is_a(cls) for cls in SKIPPED_CLASSES):
            continue
        try:
            obj = _to_metadata(element, table)
        except Exception:
            logger.warning(
                "Skipping element %s (%s) due to error",
                element.GlobalId,
                element.is_a(),
                exc_info=True,
            )
            continue
        objects.append(obj)
        host.add(obj.id, element_aabb(element))

    graph = MetadataGraph.from_objects(objects, table.values())
    logger.info("Loaded %d elements, %d property sets", len(objects), len(table))
    return graph, host


def load_ifc(ifc_path: str | Path) -> tuple[MetadataGraph, InMemoryHost]:
    """Parse an IFC file into a metadata graph and an in-memory scene.

    Parameters
    ----------
    ifc_path:
        Path to an IFC2x3 or IFC4 file.

    Returns
    -------
    tuple[MetadataGraph, InMemoryHost]
        Metadata for every building element, and a host holding one entity
        per element (with a bounding box when geometry could be computed).
    """
    ifc_path = Path(ifc_path)
    logger.info("Opening %s", ifc_path)
    return load_model(ifcopenshell.open(str(ifc_path)))
