"""ClassificationStore: load and save overrides with derived quantities.

A save recomputes the override's measured value and element count from the
current model, allocates its display order, and writes the row, all in one
transaction.  Any database failure surfaces as :class:`StoreError`.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from typing import Any, Iterator, Mapping, Optional, Union

from ifctakeoff.aggregation.engine import elements_of_type
from ifctakeoff.config import DEFAULT_MODEL_PREFIX
from ifctakeoff.errors import SaveInProgressError, StoreError
from ifctakeoff.measurement.resolver import resolve_value
from ifctakeoff.models.element import MetadataGraph
from ifctakeoff.models.override import ClassificationOverride, Scope
from ifctakeoff.scene.host import RenderingHost
from ifctakeoff.storage.database import OverrideDatabase

logger = logging.getLogger(__name__)

OverrideInput = Union[ClassificationOverride, Mapping[str, Any]]


class ClassificationStore:
    """Scope-aware access to classification overrides.

    Parameters
    ----------
    database:
        Backing :class:`OverrideDatabase`.
    graph:
        Current model metadata, used to recompute quantities on save.
    host:
        Optional rendering host for bounding-box quantities.
    """

    def __init__(
        self,
        database: OverrideDatabase,
        graph: Optional[MetadataGraph] = None,
        host: Optional[RenderingHost] = None,
        *,
        model_prefix: str = DEFAULT_MODEL_PREFIX,
    ) -> None:
        self.database = database
        self.graph = graph
        self.host = host
        self.model_prefix = model_prefix
        self._in_flight: set[tuple] = set()
        self._in_flight_lock = threading.Lock()

    def replace_model(
        self,
        graph: Optional[MetadataGraph],
        host: Optional[RenderingHost] = None,
    ) -> None:
        self.graph = graph
        self.host = host

    # -- reads ---------------------------------------------------------------

    def load(self, ifc_category: str, type_name: str, scope: Scope) -> Optional[ClassificationOverride]:
        """Return the override for the pair in *scope*, or None."""
        try:
            return self.database.fetch_override(ifc_category, type_name, scope)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to load override for {ifc_category}:{type_name}: {exc}") from exc

    def list_overrides(self, scope: Scope) -> list[ClassificationOverride]:
        try:
            return self.database.list_overrides(scope)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to list overrides: {exc}") from exc

    def edited_keys(self, scope: Scope) -> set[tuple[str, str]]:
        """``(category, type_name)`` of every override stored in *scope*."""
        return {o.key for o in self.list_overrides(scope)}

    def display_name(self, ifc_category: str, type_name: str, scope: Scope) -> str:
        override = self.load(ifc_category, type_name, scope)
        return override.display_name() if override is not None else type_name

    # -- quantities ----------------------------------------------------------

    def _matching(self, ifc_category: str, type_name: str) -> Iterator:
        if self.graph is None:
            return iter(())
        return elements_of_type(self.graph.iter_objects(), ifc_category, type_name, self.graph)

    def measure(self, override: ClassificationOverride) -> tuple[float, int]:
        """Return ``(measured_value, element_count)`` for the override's type."""
        total = 0.0
        count = 0
        for obj in self._matching(override.ifc_category, override.type_name):
            total += resolve_value(
                obj,
                override.preferred_unit,
                self.graph,
                self.host,
                model_prefix=self.model_prefix,
            )
            count += 1
        return total, count

    # -- writes --------------------------------------------------------------

    def save(self, override: OverrideInput, scope: Scope) -> ClassificationOverride:
        """Persist *override* in *scope* and return the stored row.

        Raises
        ------
        SaveInProgressError
            If a save for the same key is already running.
        StoreError
            If the database rejects the write.
        """
        if not isinstance(override, ClassificationOverride):
            override = ClassificationOverride.model_validate(dict(override))

        project_id, center_id, version_id = scope.persisted_ids()
        key = (override.ifc_category, override.type_name, project_id, center_id, version_id)

        with self._in_flight_lock:
            if key in self._in_flight:
                raise SaveInProgressError(
                    f"A save for {override.ifc_category}:{override.type_name} is already in progress"
                )
            self._in_flight.add(key)

        try:
            return self._save(override, scope)
        except sqlite3.Error as exc:
            raise StoreError(
                f"Failed to save override for {override.ifc_category}:{override.type_name}: {exc}"
            ) from exc
        finally:
            with self._in_flight_lock:
                self._in_flight.discard(key)

    def _save(self, override: ClassificationOverride, scope: Scope) -> ClassificationOverride:
        project_id, center_id, version_id = scope.persisted_ids()
        updates: dict[str, Any] = {
            "project_id": project_id,
            "center_id": center_id,
            "version_id": version_id,
        }
        if self.graph is not None:
            measured_value, element_count = self.measure(override)
            updates["measured_value"] = measured_value
            updates["element_count"] = element_count

        with self.database.transaction():
            existing = self.database.fetch_override(
                override.ifc_category, override.type_name, scope
            )
            if existing is not None:
                updates["id"] = existing.id
                updates["created_at"] = existing.created_at
            else:
                updates["id"] = None

            subsub = override.subsubchapter_id or None
            if subsub is None:
                updates["display_order"] = 1
            elif existing is not None and existing.subsubchapter_id == subsub:
                updates["display_order"] = existing.display_order
            else:
                updates["display_order"] = self.database.next_display_order(scope, subsub)

            row = override.model_copy(update=updates)
            row_id = self.database.write_override(row)
            stored = self.database.get_override(row_id)

        if stored is None:
            raise StoreError(f"Override {row_id} vanished after write")
        logger.info(
            "Saved override %s:%s (code=%s, %d elements)",
            stored.ifc_category,
            stored.type_name,
            stored.full_code,
            stored.element_count,
        )
        return stored

    def delete(self, ifc_category: str, type_name: str, scope: Scope) -> bool:
        """Remove the override; return True if a row was deleted."""
        try:
            deleted = self.database.delete_override(ifc_category, type_name, scope)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to delete override for {ifc_category}:{type_name}: {exc}") from exc
        if deleted:
            logger.info("Deleted override %s:%s", ifc_category, type_name)
        return deleted
