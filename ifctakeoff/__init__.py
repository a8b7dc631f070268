"""ifctakeoff: IFC element classification and quantity take-off."""

__version__ = "1.0.0"

from ifctakeoff.aggregation.engine import (
    CategoryGroup,
    ElementGroup,
    SortState,
    TypeGroup,
    aggregate,
    sort_elements,
)
from ifctakeoff.aggregation.status import StatusReport, measurement_status
from ifctakeoff.api.facade import TakeoffEngine
from ifctakeoff.classification.type_resolver import resolve_type_name
from ifctakeoff.errors import SaveInProgressError, StoreError, TakeoffError
from ifctakeoff.extraction.ifc_loader import load_ifc
from ifctakeoff.extraction.normalize import normalize_key, to_number
from ifctakeoff.highlight.state import HighlightMode, HighlightState, transition
from ifctakeoff.highlight.synchronizer import (
    AcceptanceLookup,
    DatabaseAcceptanceLookup,
    HighlightSynchronizer,
)
from ifctakeoff.measurement.resolver import (
    Quantities,
    pick_unit_and_value,
    resolve_all,
    resolve_value,
)
from ifctakeoff.models.element import MetadataGraph, MetadataObject, Property, PropertySet
from ifctakeoff.models.override import ClassificationOverride, Scope, UnitKind
from ifctakeoff.scene.host import InMemoryHost, RenderingHost, resolve_entity_id
from ifctakeoff.settings import ConfigManager, configure_logging
from ifctakeoff.storage.database import OverrideDatabase
from ifctakeoff.storage.store import ClassificationStore

__all__ = [
    "__version__",
    # Facade
    "TakeoffEngine",
    # Models
    "ClassificationOverride",
    "MetadataGraph",
    "MetadataObject",
    "Property",
    "PropertySet",
    "Scope",
    "UnitKind",
    # Resolution
    "Quantities",
    "normalize_key",
    "pick_unit_and_value",
    "resolve_all",
    "resolve_type_name",
    "resolve_value",
    "to_number",
    # Aggregation
    "CategoryGroup",
    "ElementGroup",
    "SortState",
    "StatusReport",
    "TypeGroup",
    "aggregate",
    "measurement_status",
    "sort_elements",
    # Storage
    "ClassificationStore",
    "OverrideDatabase",
    "SaveInProgressError",
    "StoreError",
    "TakeoffError",
    # Scene and highlighting
    "AcceptanceLookup",
    "DatabaseAcceptanceLookup",
    "HighlightMode",
    "HighlightState",
    "HighlightSynchronizer",
    "InMemoryHost",
    "RenderingHost",
    "resolve_entity_id",
    "transition",
    # Configuration
    "ConfigManager",
    "configure_logging",
    "load_ifc",
]
