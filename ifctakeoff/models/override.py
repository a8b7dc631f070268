"""Pydantic models for user-authored classification overrides."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UnitKind(str, Enum):
    """The five measurement kinds, valued by their store codes."""

    COUNT = "UT"
    LENGTH = "ML"
    AREA = "M2"
    VOLUME = "M3"
    MASS = "KG"


class Scope(BaseModel):
    """Where an override lives.

    A project id always wins over a center id.  Versions only partition
    project-scoped rows; center-scoped rows are version-less.
    """

    project_id: Optional[str] = None
    center_id: Optional[str] = None
    version_id: Optional[str] = None

    @model_validator(mode="after")
    def _needs_an_id(self) -> Scope:
        if not self.project_id and not self.center_id:
            raise ValueError("Scope requires a project_id or a center_id")
        return self

    @property
    def is_project(self) -> bool:
        return bool(self.project_id)

    @property
    def scope_id(self) -> str:
        return self.project_id or self.center_id  # type: ignore[return-value]

    @property
    def effective_version(self) -> Optional[str]:
        """Version id used for storage and lookup."""
        return (self.version_id or None) if self.is_project else None

    def persisted_ids(self) -> tuple[Optional[str], Optional[str], Optional[str]]:
        """Return ``(project_id, center_id, version_id)`` as written to a row."""
        if self.is_project:
            return self.project_id, None, self.effective_version
        return None, self.center_id, None


class ClassificationOverride(BaseModel):
    """A user edit for one (IFC category, resolved type) pair."""

    id: Optional[int] = None
    ifc_category: str
    type_name: str

    project_id: Optional[str] = None
    center_id: Optional[str] = None
    version_id: Optional[str] = None

    custom_name: Optional[str] = None
    description: Optional[str] = None
    preferred_unit: UnitKind = UnitKind.COUNT

    chapter_id: Optional[str] = None
    subchapter_id: Optional[str] = None
    subsubchapter_id: Optional[str] = None

    display_order: int = 1
    measured_value: float = 0.0
    element_count: int = 0

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def key(self) -> tuple[str, str]:
        return (self.ifc_category, self.type_name)

    @property
    def full_code(self) -> Optional[str]:
        """Four-level budget code: sub-sub-chapter plus the item sequence."""
        if not self.subsubchapter_id:
            return None
        return f"{self.subsubchapter_id}.{self.display_order:02d}"

    def is_edited(self) -> bool:
        """True when the user changed anything beyond the defaults."""
        return bool(
            self.custom_name
            or self.description
            or self.preferred_unit != UnitKind.COUNT
            or self.chapter_id
            or self.subchapter_id
        )

    def display_name(self) -> str:
        if self.custom_name:
            return f"{self.custom_name} (IFC: {self.type_name})"
        return self.type_name
