"""Tests for quantity resolution, geometry estimates and the scene host."""

from __future__ import annotations

import pytest

from ifctakeoff.measurement.geometry import area_from_box, length_from_box, volume_from_box
from ifctakeoff.measurement.resolver import (
    main_value,
    pick_unit_and_value,
    resolve_all,
    resolve_value,
)
from ifctakeoff.models.element import BoundingBox, MetadataGraph, MetadataObject
from ifctakeoff.models.override import UnitKind
from ifctakeoff.scene.host import InMemoryHost, id_variants, lookup_box, resolve_entity_id


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

WALL_BOX = [0, 0, 0, 4, 3, 0.3]


def _obj(obj_id: str = "w1", ifc_type: str = "IfcWall", **props) -> MetadataObject:
    data = {"id": obj_id, "type": ifc_type}
    if props:
        data["propertySets"] = [{
            "name": "Qto",
            "properties": [{"name": k, "value": v} for k, v in props.items()],
        }]
    return MetadataObject.model_validate(data)


def _box(aabb) -> BoundingBox:
    return BoundingBox.from_aabb(aabb)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestGeometry:
    def test_wall_area_uses_run_times_height(self):
        assert area_from_box(_box(WALL_BOX), "IfcWall") == pytest.approx(12.0)
        assert area_from_box(_box(WALL_BOX), "IfcWallStandardCase") == pytest.approx(12.0)

    def test_slab_area_is_footprint(self):
        assert area_from_box(_box([0, 0, 0, 5, 0.25, 4]), "IfcSlab") == pytest.approx(20.0)
        assert area_from_box(_box([0, 0, 0, 5, 0.25, 4]), "IfcCovering_Ceiling") == pytest.approx(20.0)

    def test_door_area_is_larger_vertical_face(self):
        assert area_from_box(_box([0, 0, 0, 0.1, 2, 0.9]), "IfcDoor") == pytest.approx(1.8)

    def test_other_area_is_largest_face(self):
        assert area_from_box(_box([0, 0, 0, 1, 2, 3]), "IfcFurniture") == pytest.approx(6.0)

    def test_length_and_volume(self):
        box = _box([1, 1, 1, 3, 2, 5])
        assert length_from_box(box) == pytest.approx(4.0)
        assert volume_from_box(box) == pytest.approx(8.0)

    def test_inverted_box_uses_absolute_extents(self):
        assert _box([4, 3, 0.3, 0, 0, 0]).extents() == pytest.approx((4, 3, 0.3))

    def test_from_aabb_needs_six_values(self):
        with pytest.raises(ValueError):
            BoundingBox.from_aabb([0, 0, 0])


# ---------------------------------------------------------------------------
# Scene host id variants
# ---------------------------------------------------------------------------


class TestHostLookup:
    def test_variants(self):
        assert id_variants("abc") == ["abc", "myModel#abc"]
        assert id_variants("myModel#abc") == ["myModel#abc", "myModel#myModel#abc", "abc"]

    def test_prefixed_entity_found(self):
        host = InMemoryHost()
        host.add("myModel#w1", WALL_BOX)
        assert resolve_entity_id(host, "w1") == "myModel#w1"
        assert lookup_box(host, "w1").max_x == 4

    def test_stripped_entity_found(self):
        host = InMemoryHost()
        host.add("w1", WALL_BOX)
        assert resolve_entity_id(host, "myModel#w1") == "w1"

    def test_custom_prefix(self):
        host = InMemoryHost()
        host.add("site#w1", WALL_BOX)
        assert resolve_entity_id(host, "w1", "site") == "site#w1"
        assert resolve_entity_id(host, "w1") is None

    def test_missing_box(self):
        host = InMemoryHost()
        host.add("w1")
        assert lookup_box(host, "w1") is None


# ---------------------------------------------------------------------------
# resolve_value
# ---------------------------------------------------------------------------


class TestResolveValue:
    def test_count_is_always_one(self):
        obj = _obj(Count=7, Area=3)
        assert resolve_value(obj, UnitKind.COUNT) == 1.0
        assert resolve_value(obj, "UT") == 1.0

    def test_property_wins_over_geometry(self):
        host = InMemoryHost()
        host.add("w1", WALL_BOX)
        obj = _obj(**{"NetSideArea": "10,5"})
        assert resolve_value(obj, UnitKind.AREA, host=host) == pytest.approx(10.5)

    def test_synonyms_in_other_languages(self):
        assert resolve_value(_obj(Superfície=8), UnitKind.AREA) == 8
        assert resolve_value(_obj(Longitud=2.5), UnitKind.LENGTH) == 2.5
        assert resolve_value(_obj(Volumen=0.9), UnitKind.VOLUME) == 0.9
        assert resolve_value(_obj(Peso=120), UnitKind.MASS) == 120

    def test_indirect_property_sets(self):
        graph = MetadataGraph.from_dict({
            "metaObjects": [{"id": "w1", "type": "IfcWall", "propertySetIds": ["q"]}],
            "propertySets": [{"id": "q", "name": "BaseQuantities",
                              "properties": [{"name": "GrossVolume", "value": {"value": 3.6}}]}],
        })
        assert resolve_value(graph.objects["w1"], UnitKind.VOLUME, graph) == pytest.approx(3.6)

    def test_alternate_value_holders(self):
        obj = MetadataObject.model_validate({
            "id": "w1",
            "type": "IfcWall",
            "propertySets": [{"name": "Qto", "properties": [
                {"name": "NetSideArea", "NominalValue": 12.5},
                {"name": "Length", "val": "4,2"},
                {"name": "NetVolume", "Val": {"value": 3}},
            ]}],
        })
        assert resolve_value(obj, UnitKind.AREA) == pytest.approx(12.5)
        assert resolve_value(obj, UnitKind.LENGTH) == pytest.approx(4.2)
        assert resolve_value(obj, UnitKind.VOLUME) == pytest.approx(3.0)

    def test_geometric_wall_area(self):
        host = InMemoryHost()
        host.add("myModel#w1", WALL_BOX)
        assert resolve_value(_obj(), UnitKind.AREA, host=host) == pytest.approx(12.0)
        assert resolve_value(_obj(), UnitKind.LENGTH, host=host) == pytest.approx(4.0)
        assert resolve_value(_obj(), UnitKind.VOLUME, host=host) == pytest.approx(3.6)

    def test_mass_has_no_geometric_fallback(self):
        host = InMemoryHost()
        host.add("w1", WALL_BOX)
        assert resolve_value(_obj(), UnitKind.MASS, host=host) == 1.0

    def test_zero_geometry_defaults_to_one(self):
        host = InMemoryHost()
        host.add("w1", [1, 1, 1, 1, 1, 1])
        assert resolve_value(_obj(), UnitKind.AREA, host=host) == 1.0

    def test_no_signal_defaults_to_one(self):
        for unit in UnitKind:
            assert resolve_value(_obj(), unit) == 1.0

    def test_non_positive_property_ignored(self):
        assert resolve_value(_obj(Area=0, NetArea=-2), UnitKind.AREA) == 1.0


class TestResolveAll:
    def test_all_magnitudes(self):
        host = InMemoryHost()
        host.add("w1", WALL_BOX)
        q = resolve_all(_obj(Mass=250), host=host)
        assert q.count == 1.0
        assert q.length == pytest.approx(4.0)
        assert q.area == pytest.approx(12.0)
        assert q.volume == pytest.approx(3.6)
        assert q.mass == 250
        assert q.mass_defaulted is False
        assert q.get(UnitKind.AREA) == pytest.approx(12.0)

    def test_mass_defaulted_flag(self):
        q = resolve_all(_obj())
        assert q.mass == 1.0
        assert q.mass_defaulted is True


# ---------------------------------------------------------------------------
# Principal quantity
# ---------------------------------------------------------------------------


class TestPickUnitAndValue:
    def test_area_property_first(self):
        p = pick_unit_and_value(_obj(NetVolume=2, NetArea=9))
        assert (p.unit, p.value, p.approx) == (UnitKind.AREA, 9, False)

    def test_wall_prefers_box_area(self):
        host = InMemoryHost()
        host.add("w1", WALL_BOX)
        p = pick_unit_and_value(_obj(NetVolume=2), host=host)
        assert p.unit == UnitKind.AREA
        assert p.value == pytest.approx(12.0)
        assert p.approx is True

    def test_box_area_before_volume_for_any_class(self):
        host = InMemoryHost()
        host.add("c1", [0, 0, 0, 0.3, 3, 0.3])
        p = pick_unit_and_value(_obj("c1", "IfcColumn", NetVolume=0.5), host=host)
        assert p.unit == UnitKind.AREA
        assert p.value == pytest.approx(0.9)
        assert p.approx is True

    def test_volume_without_box(self):
        p = pick_unit_and_value(_obj("c1", "IfcColumn", NetVolume=0.48))
        assert (p.unit, p.value, p.approx) == (UnitKind.VOLUME, 0.48, False)

    def test_length_then_mass(self):
        assert pick_unit_and_value(_obj("b1", "IfcBeam", Length=6)).unit == UnitKind.LENGTH
        assert pick_unit_and_value(_obj("b1", "IfcBeam", Weight=80)).unit == UnitKind.MASS

    def test_flat_props_are_read(self):
        obj = MetadataObject(id="x", type="IfcPipeSegment", props={"Length": "3,2"})
        assert pick_unit_and_value(obj).value == pytest.approx(3.2)

    def test_count_when_nothing(self):
        p = pick_unit_and_value(_obj("f1", "IfcFurniture"))
        assert (p.unit, p.value) == (UnitKind.COUNT, 1.0)
        assert main_value(_obj("f1", "IfcFurniture")) == 1.0
