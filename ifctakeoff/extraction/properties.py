"""Resolved property iteration over both property-set shapes.

Metadata objects carry their property sets either embedded or as ids into
the model-level table.  Everything downstream reads properties through
:func:`iter_properties` and never branches on the shape.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Collection, Iterator

from ifctakeoff.config import COMMENT_PROPERTY_NAMES, TAG_PROPERTY_NAMES, VALUE_HOLDER_KEYS
from ifctakeoff.extraction.normalize import norm_str, normalize_key, to_number
from ifctakeoff.models.element import MetadataGraph, MetadataObject, Property, PropertySet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedProperty:
    """One property, whatever shape it came from."""

    pset_name: str
    name: str
    key: str
    value: Any


def _property_value(prop: Property) -> Any:
    # Some exporters hold the number under NominalValue or val instead.
    if prop.value is not None:
        return prop.value
    extra = prop.model_extra or {}
    if any(extra.get(key) is not None for key in VALUE_HOLDER_KEYS):
        return prop.model_dump()
    return None


def _iter_pset(pset: PropertySet) -> Iterator[ResolvedProperty]:
    for prop in pset.properties:
        yield ResolvedProperty(
            pset_name=pset.name,
            name=prop.name,
            key=normalize_key(prop.name),
            value=_property_value(prop),
        )


def iter_property_sets(
    obj: MetadataObject,
    graph: MetadataGraph | None = None,
) -> Iterator[PropertySet]:
    """Yield embedded property sets, then those referenced by id."""
    yield from obj.property_sets
    if graph is None:
        return
    for pset_id in obj.property_set_ids:
        pset = graph.property_set(pset_id)
        if pset is None:
            logger.debug("Property set %s of %s not found", pset_id, obj.id)
            continue
        yield pset


def iter_properties(
    obj: MetadataObject,
    graph: MetadataGraph | None = None,
    *,
    include_props: bool = False,
) -> Iterator[ResolvedProperty]:
    """Yield every property of *obj* in lookup-priority order.

    With *include_props*, the free-form ``props`` bag is scanned last: first
    a ``props["properties"]`` list, then its flat keys.
    """
    for pset in iter_property_sets(obj, graph):
        yield from _iter_pset(pset)

    if not include_props:
        return

    nested = obj.props.get("properties")
    if isinstance(nested, list):
        for item in nested:
            if not isinstance(item, dict):
                continue
            name = norm_str(item.get("name", item.get("Name")))
            value = item.get("value", item.get("Value", item))
            yield ResolvedProperty("props", name, normalize_key(name), value)

    for name, value in obj.props.items():
        if name == "properties":
            continue
        yield ResolvedProperty("props", name, normalize_key(name), value)


def find_number(
    obj: MetadataObject,
    keys: Collection[str],
    graph: MetadataGraph | None = None,
    *,
    include_props: bool = False,
) -> float | None:
    """Return the first strictly positive number whose key is in *keys*."""
    for prop in iter_properties(obj, graph, include_props=include_props):
        if prop.key not in keys:
            continue
        value = to_number(prop.value)
        if value is not None and value > 0:
            return value
    return None


def find_text(
    obj: MetadataObject,
    keys: Collection[str],
    graph: MetadataGraph | None = None,
    *,
    include_props: bool = False,
) -> str:
    """Return the first non-empty text value whose key is in *keys*."""
    for prop in iter_properties(obj, graph, include_props=include_props):
        if prop.key in keys:
            text = norm_str(prop.value)
            if text:
                return text
    return ""


def get_tag(obj: MetadataObject, graph: MetadataGraph | None = None) -> str | None:
    """The free-text leaf grouping field ("Marca"), or ``None``."""
    return find_text(obj, TAG_PROPERTY_NAMES, graph) or None


def get_comments(obj: MetadataObject, graph: MetadataGraph | None = None) -> str | None:
    return find_text(obj, COMMENT_PROPERTY_NAMES, graph) or None
