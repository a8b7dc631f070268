"""Group elements into category -> type -> tag with running quantity sums.

The hierarchy is what the quantity-inspector tree shows: one node per IFC
category, one per resolved type name under it, and one leaf per tag
("Marca") under that.  Elements without a tag share the ``__no_tag__`` leaf.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional, Sequence

from ifctakeoff.classification.type_resolver import resolve_type_name
from ifctakeoff.config import DEFAULT_MODEL_PREFIX, NO_TAG, UNKNOWN_TYPE
from ifctakeoff.extraction.normalize import strip_accents
from ifctakeoff.extraction.properties import get_comments, get_tag
from ifctakeoff.measurement.resolver import main_value, resolve_all
from ifctakeoff.models.element import MetadataGraph, MetadataObject
from ifctakeoff.scene.host import RenderingHost

logger = logging.getLogger(__name__)

SORT_COLUMNS = ("tag", "count", "length", "area", "volume", "mass")


def category_of(obj: MetadataObject) -> str:
    return obj.type or UNKNOWN_TYPE


def label_sort_key(label: Optional[str]) -> tuple[str, str]:
    """Case- and accent-insensitive ordering with the raw label as tie-break."""
    raw = label or ""
    return (strip_accents(raw).casefold(), raw)


@dataclass
class Totals:
    count: int = 0
    length: float = 0.0
    area: float = 0.0
    volume: float = 0.0
    mass: float = 0.0
    main_value: float = 0.0

    def add(self, other: Totals) -> None:
        self.count += other.count
        self.length += other.length
        self.area += other.area
        self.volume += other.volume
        self.mass += other.mass
        self.main_value += other.main_value


@dataclass
class ElementGroup:
    """Leaf of the hierarchy: all elements sharing category, type and tag."""

    category: str
    type_name: str
    tag: Optional[str] = None
    comments: Optional[str] = None
    count: int = 0
    length: float = 0.0
    area: float = 0.0
    volume: float = 0.0
    mass: float = 0.0
    main_value: float = 0.0
    mass_defaulted: int = 0
    element_ids: list[str] = field(default_factory=list)

    @property
    def tag_key(self) -> str:
        return self.tag if self.tag is not None else NO_TAG

    def totals(self) -> Totals:
        return Totals(
            count=self.count,
            length=self.length,
            area=self.area,
            volume=self.volume,
            mass=self.mass,
            main_value=self.main_value,
        )


@dataclass
class TypeGroup:
    type_name: str
    elements: list[ElementGroup] = field(default_factory=list)

    def totals(self) -> Totals:
        total = Totals()
        for element in self.elements:
            total.add(element.totals())
        return total


@dataclass
class CategoryGroup:
    category: str
    types: list[TypeGroup] = field(default_factory=list)

    def totals(self) -> Totals:
        total = Totals()
        for group in self.types:
            total.add(group.totals())
        return total

    def type_group(self, type_name: str) -> Optional[TypeGroup]:
        for group in self.types:
            if group.type_name == type_name:
                return group
        return None


def _objects(
    objects: Optional[Iterable[MetadataObject]],
    graph: Optional[MetadataGraph],
) -> Iterable[MetadataObject]:
    if objects is not None:
        return objects
    if graph is not None:
        return graph.iter_objects()
    return ()


def aggregate(
    objects: Optional[Iterable[MetadataObject]] = None,
    graph: Optional[MetadataGraph] = None,
    host: Optional[RenderingHost] = None,
    *,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> list[CategoryGroup]:
    """Build the category -> type -> tag report.

    Parameters
    ----------
    objects:
        Elements to group.  Defaults to every object of *graph*.
    graph:
        Supplies indirect property sets.
    host:
        Optional rendering host for bounding-box quantities.

    Returns
    -------
    list[CategoryGroup]
        Categories and types sorted case- and accent-insensitively; leaves in
        first-appearance order.
    """
    tree: dict[str, dict[str, dict[str, ElementGroup]]] = {}
    processed = 0

    for obj in _objects(objects, graph):
        category = category_of(obj)
        type_name = resolve_type_name(obj, graph)
        tag = get_tag(obj, graph)
        leaf_key = tag if tag is not None else NO_TAG

        leaves = tree.setdefault(category, {}).setdefault(type_name, {})
        leaf = leaves.get(leaf_key)
        if leaf is None:
            leaf = ElementGroup(
                category=category,
                type_name=type_name,
                tag=tag,
                comments=get_comments(obj, graph),
            )
            leaves[leaf_key] = leaf

        quantities = resolve_all(obj, graph, host, model_prefix=model_prefix)
        leaf.count += 1
        leaf.length += quantities.length
        leaf.area += quantities.area
        leaf.volume += quantities.volume
        leaf.mass += quantities.mass
        leaf.main_value += main_value(obj, graph, host, model_prefix=model_prefix)
        if quantities.mass_defaulted:
            leaf.mass_defaulted += 1
        leaf.element_ids.append(obj.id)
        processed += 1

    result: list[CategoryGroup] = []
    for category in sorted(tree, key=label_sort_key):
        types = tree[category]
        result.append(CategoryGroup(
            category=category,
            types=[
                TypeGroup(type_name=name, elements=list(types[name].values()))
                for name in sorted(types, key=label_sort_key)
            ],
        ))

    logger.info("Aggregated %d elements into %d categories", processed, len(result))
    return result


@dataclass(frozen=True)
class SortState:
    """Tri-state column sort: ascending, then descending, then cleared."""

    column: Optional[str] = None
    ascending: bool = True

    @property
    def active(self) -> bool:
        return self.column is not None

    def toggle(self, column: str) -> SortState:
        if column not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort column: {column!r}")
        if column != self.column:
            return SortState(column=column, ascending=True)
        if self.ascending:
            return replace(self, ascending=False)
        return SortState()


def _element_sort_key(column: str):
    if column == "tag":
        return lambda e: strip_accents(e.tag or "").casefold()
    return lambda e: getattr(e, column)


def sort_elements(elements: Sequence[ElementGroup], state: SortState) -> list[ElementGroup]:
    """Return *elements* ordered by *state*; stable, insertion order when cleared."""
    if not state.active:
        return list(elements)
    return sorted(elements, key=_element_sort_key(state.column), reverse=not state.ascending)


def elements_of_type(
    objects: Iterable[MetadataObject],
    category: str,
    type_name: str,
    graph: Optional[MetadataGraph] = None,
) -> Iterator[MetadataObject]:
    """Yield the objects whose (category, resolved type) is the given pair."""
    for obj in objects:
        if category_of(obj) != category:
            continue
        if resolve_type_name(obj, graph) == type_name:
            yield obj
