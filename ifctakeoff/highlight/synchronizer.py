"""Keep viewport highlighting in sync with the stored overrides."""

from __future__ import annotations

import abc
import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from ifctakeoff.aggregation.engine import category_of, elements_of_type
from ifctakeoff.classification.type_resolver import resolve_type_name
from ifctakeoff.config import BUDGET_CODE_LEVELS, DEFAULT_MODEL_PREFIX
from ifctakeoff.highlight.state import (
    EntitySnapshot,
    HighlightMode,
    HighlightState,
    Mutation,
    TypeKey,
    transition,
)
from ifctakeoff.measurement.resolver import resolve_value
from ifctakeoff.models.element import MetadataGraph, MetadataObject
from ifctakeoff.models.override import ClassificationOverride, Scope, UnitKind
from ifctakeoff.scene.host import RenderingHost, id_variants
from ifctakeoff.storage.database import OverrideDatabase
from ifctakeoff.storage.store import ClassificationStore

logger = logging.getLogger(__name__)


def truncate_code(code: str, levels: int = BUDGET_CODE_LEVELS) -> str:
    """``"1.2.3.04"`` -> ``"1.2.3"``; shorter codes are returned unchanged."""
    parts = code.split(".")
    return ".".join(parts[:levels]) if len(parts) > levels else code


def normalize_category(name: str) -> str:
    return name.strip().lower()


class AcceptanceLookup(abc.ABC):
    """Source of budget categories and their acceptance status."""

    @abc.abstractmethod
    def category_for_code(self, budget_code: str) -> Optional[str]:
        """Return the budget category filed under a three-level code."""

    @abc.abstractmethod
    def accepted_categories(self, scope: Scope) -> Iterable[str]:
        """Return the categories with an accepted budget in *scope*."""


class StaticAcceptanceLookup(AcceptanceLookup):
    """In-memory lookup, for callers that already hold the data."""

    def __init__(self, mappings: dict[str, str], accepted: Iterable[str] = ()) -> None:
        self.mappings = dict(mappings)
        self.accepted = list(accepted)

    def category_for_code(self, budget_code: str) -> Optional[str]:
        return self.mappings.get(budget_code)

    def accepted_categories(self, scope: Scope) -> Iterable[str]:
        return self.accepted


class DatabaseAcceptanceLookup(AcceptanceLookup):
    """Reads ``budget_category_mappings`` and ``accepted_budgets``.

    Budgets are only accepted per project; a center scope has none.
    """

    def __init__(self, database: OverrideDatabase) -> None:
        self.database = database

    def category_for_code(self, budget_code: str) -> Optional[str]:
        return self.database.budget_category(budget_code)

    def accepted_categories(self, scope: Scope) -> Iterable[str]:
        if not scope.is_project:
            return []
        return self.database.accepted_categories(scope.project_id)  # type: ignore[arg-type]


@dataclass(frozen=True)
class QuantityInspection:
    """Quantities shown when inspecting one highlighted element."""

    entity_id: str
    ifc_category: str
    type_name: str
    display_name: str
    unit: UnitKind
    element_value: float
    type_total: float
    type_count: int
    stored_value: float


class HighlightSynchronizer:
    """Apply highlight modes to a rendering host.

    One transition runs at a time.  Replacing the model bumps a generation
    counter; a pass that notices the bump before applying anything is
    dropped.
    """

    def __init__(
        self,
        host: RenderingHost,
        graph: MetadataGraph,
        store: ClassificationStore,
        scope: Scope,
        acceptance: Optional[AcceptanceLookup] = None,
        *,
        model_prefix: str = DEFAULT_MODEL_PREFIX,
    ) -> None:
        self.host = host
        self.graph = graph
        self.store = store
        self.scope = scope
        self.acceptance = acceptance
        self.model_prefix = model_prefix
        self.state = HighlightState()
        self._lock = threading.Lock()
        self._generation = 0
        self._generation_lock = threading.Lock()
        self._keys: dict[str, Optional[TypeKey]] = {}

    @property
    def mode(self) -> HighlightMode:
        return self.state.mode

    @property
    def generation(self) -> int:
        with self._generation_lock:
            return self._generation

    # -- element lookup ------------------------------------------------------

    def _object_for(self, entity_id: str) -> Optional[MetadataObject]:
        for candidate in id_variants(entity_id, self.model_prefix):
            obj = self.graph.objects.get(candidate)
            if obj is not None:
                return obj
        return None

    def _key_for(self, entity_id: str) -> Optional[TypeKey]:
        if entity_id not in self._keys:
            obj = self._object_for(entity_id)
            self._keys[entity_id] = (
                (category_of(obj), resolve_type_name(obj, self.graph)) if obj is not None else None
            )
        return self._keys[entity_id]

    def _snapshots(self) -> list[EntitySnapshot]:
        return [
            EntitySnapshot(entity_id, self._key_for(entity_id), self.host.get_appearance(entity_id))
            for entity_id in self.host.entity_ids()
        ]

    def accepted_keys(self, overrides: Iterable[ClassificationOverride]) -> set[TypeKey]:
        if self.acceptance is None:
            return set()
        accepted = {normalize_category(c) for c in self.acceptance.accepted_categories(self.scope)}
        keys: set[TypeKey] = set()
        for override in overrides:
            if not override.full_code:
                continue
            category = self.acceptance.category_for_code(truncate_code(override.full_code))
            if category and normalize_category(category) in accepted:
                keys.add(override.key)
        return keys

    # -- transitions ---------------------------------------------------------

    def _apply(self, mutations: list[Mutation]) -> None:
        for mutation in mutations:
            if not self.host.has_entity(mutation.entity_id):
                logger.debug("Skipping mutation for unknown entity %s", mutation.entity_id)
                continue
            self.host.apply_appearance(mutation.entity_id, mutation.appearance)

    def apply_mode(self, mode: HighlightMode | str) -> HighlightState:
        """Switch to *mode* and return the resulting state."""
        mode = HighlightMode(mode)
        with self._lock:
            generation = self.generation
            overrides = self.store.list_overrides(self.scope)
            edited = {o.key for o in overrides}
            accepted = self.accepted_keys(overrides) if mode == HighlightMode.ACCEPTED_BUDGET else set()
            snapshots = self._snapshots()

            if generation != self.generation:
                logger.info("Model replaced during %s pass; dropping it", mode.value)
                return self.state

            self.state, mutations = transition(
                self.state, mode, edited, snapshots, accepted_keys=accepted
            )
            self._apply(mutations)

        logger.info(
            "Highlight mode %s: %d elements affected, %d changed",
            mode.value,
            len(self.state.affected),
            len(self.state.saved),
        )
        return self.state

    def _restore_locked(self) -> None:
        self.state, mutations = transition(self.state, HighlightMode.NORMAL, set(), ())
        self._apply(mutations)

    def replace_model(self, graph: MetadataGraph, host: RenderingHost) -> None:
        """Restore the current host, then switch to a new model."""
        with self._generation_lock:
            self._generation += 1
        with self._lock:
            self._restore_locked()
            self.graph = graph
            self.host = host
            self._keys = {}

    def close(self) -> None:
        """Return every element to its original appearance."""
        with self._lock:
            self._restore_locked()

    def is_affected(self, entity_id: str) -> bool:
        return entity_id in self.state.affected

    # -- inspection ----------------------------------------------------------

    def inspect(self, entity_id: str) -> Optional[QuantityInspection]:
        """Quantities for an affected element, or None for any other."""
        if not self.is_affected(entity_id):
            return None
        obj = self._object_for(entity_id)
        key = self._key_for(entity_id)
        if obj is None or key is None:
            return None
        override = self.store.load(key[0], key[1], self.scope)
        if override is None:
            return None

        unit = override.preferred_unit
        total = 0.0
        count = 0
        for other in elements_of_type(self.graph.iter_objects(), key[0], key[1], self.graph):
            total += resolve_value(other, unit, self.graph, self.host, model_prefix=self.model_prefix)
            count += 1

        return QuantityInspection(
            entity_id=entity_id,
            ifc_category=key[0],
            type_name=key[1],
            display_name=override.display_name(),
            unit=unit,
            element_value=resolve_value(obj, unit, self.graph, self.host, model_prefix=self.model_prefix),
            type_total=total,
            type_count=count,
            stored_value=override.measured_value,
        )
