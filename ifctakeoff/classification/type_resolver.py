"""Resolve a human-meaningful type name for a metadata object.

Exporters disagree on where the type lives, so this is a scored-candidate
heuristic rather than a schema lookup.  Each source contributes candidates
with a fixed weight; longer strings get a small bonus so that, on a weight
tie, the more specific label wins.

The result must be deterministic: grouping and override keys depend on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ifctakeoff.config import (
    GENERIC_PREFIX,
    GENERIC_TYPE_TAGS,
    LENGTH_BONUS_STEP,
    MAX_LENGTH_BONUS,
    MIN_CANDIDATE_LENGTH,
    TYPE_PROPERTY_NAMES,
    UNKNOWN_TYPE,
    WEIGHT_ELEMENT_NAME,
    WEIGHT_NESTED_TYPE_NAME,
    WEIGHT_OBJECT_TYPE,
    WEIGHT_TYPE_FIELD,
    WEIGHT_TYPE_PROPERTY,
)
from ifctakeoff.extraction.normalize import norm_str
from ifctakeoff.extraction.properties import iter_properties
from ifctakeoff.models.element import MetadataGraph, MetadataObject


@dataclass(frozen=True)
class Candidate:
    """A possible type name with its source and final score."""

    text: str
    score: int
    source: str


def is_specific_type_tag(tag: str) -> bool:
    """True when the native tag is already a usable, non-IFC type name."""
    low = tag.lower()
    return bool(low) and low not in GENERIC_TYPE_TAGS and not low.startswith(GENERIC_PREFIX)


def score_candidate(raw: Any, weight: int, source: str = "") -> Candidate | None:
    """Score one raw candidate, or return ``None`` if it is not a real name."""
    text = norm_str(raw)
    if len(text) < MIN_CANDIDATE_LENGTH:
        return None
    if text.lower().startswith(GENERIC_PREFIX):
        return None
    bonus = min(MAX_LENGTH_BONUS, len(text) // LENGTH_BONUS_STEP)
    return Candidate(text=text, score=weight + bonus, source=source)


def _nested_name(props: dict[str, Any], outer: str, inner: str) -> Any:
    holder = props.get(outer)
    if isinstance(holder, dict):
        return holder.get(inner)
    return None


def _is_type_property(key: str) -> bool:
    return "type" in key or key in TYPE_PROPERTY_NAMES


def collect_candidates(
    obj: MetadataObject,
    graph: MetadataGraph | None = None,
) -> list[Candidate]:
    """Return every surviving candidate in collection order."""
    props = obj.props
    raw: list[tuple[Any, int, str]] = []

    for outer in ("type", "Type"):
        for inner in ("name", "Name"):
            raw.append((_nested_name(props, outer, inner), WEIGHT_NESTED_TYPE_NAME, f"{outer}.{inner}"))

    raw.append((props.get("ObjectType"), WEIGHT_OBJECT_TYPE, "ObjectType"))
    raw.append((props.get("TypeName"), WEIGHT_OBJECT_TYPE, "TypeName"))
    # A nested Type holder was already read above; only a scalar counts here.
    type_field = props.get("Type")
    if not isinstance(type_field, dict) or "value" in type_field or "Value" in type_field:
        raw.append((type_field, WEIGHT_TYPE_FIELD, "Type"))

    for prop in iter_properties(obj, graph):
        if _is_type_property(prop.key):
            raw.append((prop.value, WEIGHT_TYPE_PROPERTY, f"{prop.pset_name}.{prop.name}"))

    name = norm_str(props.get("Name")) or norm_str(obj.name)
    raw.append((name, WEIGHT_ELEMENT_NAME, "Name"))

    candidates = []
    for value, weight, source in raw:
        candidate = score_candidate(value, weight, source)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def best_candidate(candidates: list[Candidate]) -> Candidate | None:
    """Highest score, then longest text; earlier candidates win full ties."""
    best: Candidate | None = None
    for candidate in candidates:
        if best is None or (candidate.score, len(candidate.text)) > (best.score, len(best.text)):
            best = candidate
    return best


def resolve_type_name(obj: MetadataObject, graph: MetadataGraph | None = None) -> str:
    """Return the display type name of *obj*.  Never raises, never empty."""
    tag = norm_str(obj.type)
    if is_specific_type_tag(tag):
        return obj.type

    best = best_candidate(collect_candidates(obj, graph))
    if best is not None:
        return best.text
    return tag or UNKNOWN_TYPE
