"""Measurement status report: chapter -> sub-chapter -> (type, unit) rows.

Unlike the inspector tree, this report picks each element's principal
quantity automatically and counts how many rows rely on bounding-box
estimates, so a reviewer can see how much of the take-off is approximate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ifctakeoff.aggregation.engine import label_sort_key
from ifctakeoff.classification.type_resolver import resolve_type_name
from ifctakeoff.config import (
    CHAPTER_KEYS,
    DEFAULT_MODEL_PREFIX,
    EMPTY_SUBCHAPTER,
    FALLBACK_CHAPTERS,
    OTHER_CHAPTER,
    SUBCHAPTER_KEYS,
)
from ifctakeoff.extraction.properties import find_text
from ifctakeoff.measurement.resolver import pick_unit_and_value
from ifctakeoff.models.element import MetadataGraph, MetadataObject
from ifctakeoff.models.override import UnitKind
from ifctakeoff.scene.host import RenderingHost

logger = logging.getLogger(__name__)


@dataclass
class StatusRow:
    type_name: str
    unit: UnitKind
    qty: float = 0.0
    cnt: int = 0
    approx_count: int = 0


@dataclass
class StatusTotals:
    qty: float = 0.0
    cnt: int = 0


@dataclass
class Subchapter:
    name: str
    rows: list[StatusRow] = field(default_factory=list)
    totals: StatusTotals = field(default_factory=StatusTotals)


@dataclass
class Chapter:
    name: str
    subchapters: list[Subchapter] = field(default_factory=list)
    totals: StatusTotals = field(default_factory=StatusTotals)


@dataclass
class StatusReport:
    chapters: list[Chapter] = field(default_factory=list)
    totals: StatusTotals = field(default_factory=StatusTotals)

    def chapter(self, name: str) -> Optional[Chapter]:
        for chapter in self.chapters:
            if chapter.name == name:
                return chapter
        return None


def chapter_of(obj: MetadataObject, graph: Optional[MetadataGraph] = None) -> str:
    """Chapter from a classification property, else by IFC class."""
    explicit = find_text(obj, CHAPTER_KEYS, graph, include_props=True)
    if explicit:
        return explicit
    ifc_type = obj.type.lower()
    for prefix, chapter in FALLBACK_CHAPTERS:
        if ifc_type.startswith(prefix):
            return chapter
    return OTHER_CHAPTER


def subchapter_of(obj: MetadataObject, graph: Optional[MetadataGraph] = None) -> str:
    return find_text(obj, SUBCHAPTER_KEYS, graph, include_props=True) or EMPTY_SUBCHAPTER


def measurement_status(
    objects: Iterable[MetadataObject],
    graph: Optional[MetadataGraph] = None,
    host: Optional[RenderingHost] = None,
    *,
    model_prefix: str = DEFAULT_MODEL_PREFIX,
) -> StatusReport:
    """Summarize principal quantities by chapter and sub-chapter."""
    chapters: dict[str, dict[str, dict[tuple[str, UnitKind], StatusRow]]] = {}

    for obj in objects:
        principal = pick_unit_and_value(obj, graph, host, model_prefix=model_prefix)
        type_name = resolve_type_name(obj, graph)
        rows = chapters.setdefault(chapter_of(obj, graph), {}).setdefault(
            subchapter_of(obj, graph), {}
        )
        row = rows.get((type_name, principal.unit))
        if row is None:
            row = StatusRow(type_name=type_name, unit=principal.unit)
            rows[(type_name, principal.unit)] = row
        row.cnt += 1
        row.qty += principal.value
        if principal.approx:
            row.approx_count += 1

    report = StatusReport()
    for chapter_name in sorted(chapters, key=label_sort_key):
        chapter = Chapter(name=chapter_name)
        subs = chapters[chapter_name]
        for sub_name in sorted(subs, key=label_sort_key):
            rows = list(subs[sub_name].values())
            sub = Subchapter(
                name=sub_name,
                rows=rows,
                totals=StatusTotals(
                    qty=sum(r.qty for r in rows),
                    cnt=sum(r.cnt for r in rows),
                ),
            )
            chapter.subchapters.append(sub)
            chapter.totals.qty += sub.totals.qty
            chapter.totals.cnt += sub.totals.cnt
        report.chapters.append(chapter)
        report.totals.qty += chapter.totals.qty
        report.totals.cnt += chapter.totals.cnt

    logger.info(
        "Measurement status: %d chapters, %d elements", len(report.chapters), report.totals.cnt
    )
    return report
