"""Element grouping and measurement reports."""

from ifctakeoff.aggregation.engine import (
    CategoryGroup,
    ElementGroup,
    SortState,
    Totals,
    TypeGroup,
    aggregate,
    elements_of_type,
    sort_elements,
)
from ifctakeoff.aggregation.status import StatusReport, measurement_status

__all__ = [
    "CategoryGroup",
    "ElementGroup",
    "SortState",
    "StatusReport",
    "Totals",
    "TypeGroup",
    "aggregate",
    "elements_of_type",
    "measurement_status",
    "sort_elements",
]
