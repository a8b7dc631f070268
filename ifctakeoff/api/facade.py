"""TakeoffEngine: the single entry point for take-off operations.

Usage::

    from ifctakeoff import TakeoffEngine, Scope

    engine = TakeoffEngine(project_root="/path/to/project")
    engine.load_ifc("building.ifc")
    report = engine.aggregate()
    scope = Scope(project_id="p1")
    engine.save_override({"ifc_category": "IfcWall", "type_name": "Muro 20"}, scope)
    engine.set_highlight_mode(scope, "highlight")
    engine.close()
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from ifctakeoff.aggregation.engine import CategoryGroup, aggregate
from ifctakeoff.aggregation.status import StatusReport, measurement_status
from ifctakeoff.classification.type_resolver import resolve_type_name
from ifctakeoff.extraction.ifc_loader import load_ifc
from ifctakeoff.highlight.state import HighlightMode, HighlightState
from ifctakeoff.highlight.synchronizer import (
    AcceptanceLookup,
    DatabaseAcceptanceLookup,
    HighlightSynchronizer,
    QuantityInspection,
)
from ifctakeoff.measurement.resolver import resolve_value
from ifctakeoff.models.element import MetadataGraph, MetadataObject
from ifctakeoff.models.override import ClassificationOverride, Scope, UnitKind
from ifctakeoff.scene.host import InMemoryHost, RenderingHost
from ifctakeoff.settings import ConfigManager, database_path
from ifctakeoff.storage.database import OverrideDatabase
from ifctakeoff.storage.store import ClassificationStore, OverrideInput

logger = logging.getLogger(__name__)


class TakeoffEngine:
    """The public interface of ifctakeoff.

    Parameters
    ----------
    project_root:
        Directory holding ``.takeoff/config.json`` and ``.env``.
    db_path:
        Override database path.  Defaults to ``TAKEOFF_DB`` from the merged
        configuration, resolved against *project_root*.
    """

    def __init__(
        self,
        project_root: str | Path = ".",
        *,
        db_path: str | Path | None = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.config = ConfigManager().load_config(self.project_root)
        self.model_prefix = self.config["TAKEOFF_MODEL_PREFIX"]

        if db_path is None:
            db_path = database_path(self.config, self.project_root)
        self.database = OverrideDatabase(db_path)

        self.graph = MetadataGraph()
        self.host: RenderingHost = InMemoryHost()
        self.store = ClassificationStore(
            self.database, self.graph, self.host, model_prefix=self.model_prefix
        )
        self._highlighters: dict[tuple, HighlightSynchronizer] = {}

    # -- model ---------------------------------------------------------------

    def load_model(self, graph: MetadataGraph, host: Optional[RenderingHost] = None) -> None:
        """Swap in a new model; highlighting on the old one is restored first."""
        host = host if host is not None else InMemoryHost()
        for synchronizer in self._highlighters.values():
            synchronizer.replace_model(graph, host)
        self.graph = graph
        self.host = host
        self.store.replace_model(graph, host)
        logger.info("Model loaded: %d objects", len(graph.objects))

    def load_ifc(self, ifc_path: str | Path) -> MetadataGraph:
        graph, host = load_ifc(ifc_path)
        self.load_model(graph, host)
        return graph

    def load_metadata(self, data: dict[str, Any], host: Optional[RenderingHost] = None) -> MetadataGraph:
        """Load viewer metadata JSON (``metaObjects`` / ``propertySets``)."""
        graph = MetadataGraph.from_dict(data)
        self.load_model(graph, host)
        return graph

    def _object(self, element_id: str) -> MetadataObject:
        obj = self.graph.objects.get(element_id)
        if obj is None:
            raise KeyError(f"Unknown element: {element_id}")
        return obj

    # -- resolution ----------------------------------------------------------

    def type_name(self, element_id: str) -> str:
        return resolve_type_name(self._object(element_id), self.graph)

    def quantity(self, element_id: str, unit: UnitKind | str) -> float:
        return resolve_value(
            self._object(element_id), unit, self.graph, self.host, model_prefix=self.model_prefix
        )

    def aggregate(self) -> list[CategoryGroup]:
        return aggregate(graph=self.graph, host=self.host, model_prefix=self.model_prefix)

    def measurement_status(self) -> StatusReport:
        return measurement_status(
            self.graph.iter_objects(), self.graph, self.host, model_prefix=self.model_prefix
        )

    # -- overrides -----------------------------------------------------------

    def load_override(self, ifc_category: str, type_name: str, scope: Scope) -> Optional[ClassificationOverride]:
        return self.store.load(ifc_category, type_name, scope)

    def save_override(self, override: OverrideInput, scope: Scope) -> ClassificationOverride:
        saved = self.store.save(override, scope)
        self._refresh(scope)
        return saved

    def delete_override(self, ifc_category: str, type_name: str, scope: Scope) -> bool:
        deleted = self.store.delete(ifc_category, type_name, scope)
        if deleted:
            self._refresh(scope)
        return deleted

    def list_overrides(self, scope: Scope) -> list[ClassificationOverride]:
        return self.store.list_overrides(scope)

    def display_name(self, ifc_category: str, type_name: str, scope: Scope) -> str:
        return self.store.display_name(ifc_category, type_name, scope)

    # -- highlighting --------------------------------------------------------

    def highlighter(
        self,
        scope: Scope,
        acceptance: Optional[AcceptanceLookup] = None,
    ) -> HighlightSynchronizer:
        """Return the synchronizer for *scope*, creating it on first use."""
        key = scope.persisted_ids()
        synchronizer = self._highlighters.get(key)
        if synchronizer is None:
            synchronizer = HighlightSynchronizer(
                self.host,
                self.graph,
                self.store,
                scope,
                acceptance or DatabaseAcceptanceLookup(self.database),
                model_prefix=self.model_prefix,
            )
            self._highlighters[key] = synchronizer
        elif acceptance is not None:
            synchronizer.acceptance = acceptance
        return synchronizer

    def set_highlight_mode(self, scope: Scope, mode: HighlightMode | str) -> HighlightState:
        return self.highlighter(scope).apply_mode(mode)

    def inspect(self, scope: Scope, entity_id: str) -> Optional[QuantityInspection]:
        return self.highlighter(scope).inspect(entity_id)

    def _refresh(self, scope: Scope) -> None:
        # Re-apply the active mode so a saved or deleted override shows at once.
        synchronizer = self._highlighters.get(scope.persisted_ids())
        if synchronizer is not None and synchronizer.mode != HighlightMode.NORMAL:
            synchronizer.apply_mode(synchronizer.mode)

    def close(self) -> None:
        """Restore all highlighting and close the database."""
        for synchronizer in self._highlighters.values():
            synchronizer.close()
        self._highlighters.clear()
        self.database.close()
