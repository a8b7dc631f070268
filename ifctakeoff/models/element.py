"""MetadataObject: one element's type, name and property data.

Two exporter shapes are accepted for property sets:

* embedded: ``{"propertySets": [{"name": ..., "properties": [...]}]}`` on the
  object itself (legacy converters);
* indirect: ``{"propertySetIds": ["ps1", ...]}`` on the object, resolved
  through the model-level ``propertySets`` table held by
  :class:`MetadataGraph` (xeokit metadata JSON).
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Sequence

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BoundingBox(BaseModel):
    """Axis-aligned bounding box. Y is the vertical axis."""

    min_x: float = 0.0
    min_y: float = 0.0
    min_z: float = 0.0
    max_x: float = 0.0
    max_y: float = 0.0
    max_z: float = 0.0

    @classmethod
    def from_aabb(cls, aabb: Sequence[float]) -> BoundingBox:
        """Build from ``[xmin, ymin, zmin, xmax, ymax, zmax]``."""
        if len(aabb) != 6:
            raise ValueError(f"AABB needs 6 values, got {len(aabb)}")
        return cls(
            min_x=aabb[0], min_y=aabb[1], min_z=aabb[2],
            max_x=aabb[3], max_y=aabb[4], max_z=aabb[5],
        )

    def extents(self) -> tuple[float, float, float]:
        """Return absolute ``(dx, dy, dz)``."""
        return (
            abs(self.max_x - self.min_x),
            abs(self.max_y - self.min_y),
            abs(self.max_z - self.min_z),
        )


def _lift_capitalized(data: Any, *names: str) -> Any:
    """Accept ``Name``/``Value`` style keys from exporters that capitalize."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for name in names:
        cap = name[:1].upper() + name[1:]
        if name not in data and cap in data:
            data[name] = data.pop(cap)
    return data


class Property(BaseModel):
    """A single property. ``value`` may itself be a ``{value: ...}`` holder."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    value: Any = None

    @model_validator(mode="before")
    @classmethod
    def _accept_capitalized(cls, data: Any) -> Any:
        data = _lift_capitalized(data, "name", "value")
        if isinstance(data, dict):
            name = data.get("name")
            data["name"] = "" if name is None else str(name)
        return data


class PropertySet(BaseModel):
    """A named group of properties."""

    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    type: str = ""
    properties: list[Property] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_capitalized(cls, data: Any) -> Any:
        data = _lift_capitalized(data, "name", "properties")
        if isinstance(data, dict):
            for key in ("id", "name", "type"):
                value = data.get(key)
                data[key] = "" if value is None else str(value)
            props = data.get("properties")
            if isinstance(props, list):
                data["properties"] = [p for p in props if isinstance(p, (dict, Property))]
            else:
                data["properties"] = []
        return data


class MetadataObject(BaseModel):
    """Read-only metadata for one element of the building model.

    ``id`` is the element identity; the classification identity is the pair
    ``(type, resolved type name)``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    type: str = ""
    name: str | None = None
    props: dict[str, Any] = Field(default_factory=dict)
    property_sets: list[PropertySet] = Field(default_factory=list, alias="propertySets")
    property_set_ids: list[str] = Field(default_factory=list, alias="propertySetIds")

    @model_validator(mode="before")
    @classmethod
    def _clean(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "id" in data and data["id"] is not None:
            data["id"] = str(data["id"])
        data["type"] = "" if data.get("type") is None else str(data["type"])
        if data.get("name") is not None:
            data["name"] = str(data["name"])
        if not isinstance(data.get("props"), dict):
            data.pop("props", None)
        # Some exporters emit objects or nulls instead of lists; drop those.
        for key in ("propertySets", "property_sets"):
            if key in data:
                if isinstance(data[key], list):
                    data[key] = [p for p in data[key] if isinstance(p, (dict, PropertySet))]
                else:
                    del data[key]
        for key in ("propertySetIds", "property_set_ids"):
            if key in data:
                if isinstance(data[key], list):
                    data[key] = [str(i) for i in data[key] if i is not None]
                else:
                    del data[key]
        return data


class MetadataGraph(BaseModel):
    """All metadata objects of one model plus the shared property-set table."""

    objects: dict[str, MetadataObject] = Field(default_factory=dict)
    property_sets: dict[str, PropertySet] = Field(default_factory=dict)

    @classmethod
    def from_objects(
        cls,
        objects: Iterable[MetadataObject],
        property_sets: Iterable[PropertySet] = (),
    ) -> MetadataGraph:
        return cls(
            objects={o.id: o for o in objects},
            property_sets={ps.id: ps for ps in property_sets},
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetadataGraph:
        """Build from xeokit-style metadata JSON (``metaObjects``, ``propertySets``).

        Both keys accept either a list or an id-keyed mapping.
        """
        raw_objects = data.get("metaObjects", data.get("objects", []))
        raw_psets = data.get("propertySets", data.get("property_sets", []))

        if isinstance(raw_objects, dict):
            raw_objects = [{"id": k, **v} for k, v in raw_objects.items()]
        if isinstance(raw_psets, dict):
            raw_psets = [{"id": k, **v} for k, v in raw_psets.items()]

        return cls.from_objects(
            (MetadataObject.model_validate(o) for o in raw_objects),
            (PropertySet.model_validate(p) for p in raw_psets),
        )

    def property_set(self, pset_id: str) -> PropertySet | None:
        return self.property_sets.get(pset_id)

    def iter_objects(self) -> Iterator[MetadataObject]:
        return iter(self.objects.values())
