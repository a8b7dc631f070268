"""Tests for building a metadata graph and scene from IFC.

All tests create a synthetic IFC in-memory using ifcopenshell's API.
"""

from __future__ import annotations

import ifcopenshell
import ifcopenshell.api
import pytest

from ifctakeoff.aggregation.engine import aggregate
from ifctakeoff.classification.type_resolver import resolve_type_name
from ifctakeoff.extraction.ifc_loader import load_ifc, load_model, z_up_to_y_up
from ifctakeoff.extraction.properties import get_tag
from ifctakeoff.measurement.resolver import resolve_value
from ifctakeoff.models.override import UnitKind


# ---------------------------------------------------------------------------
# Fixtures: synthetic IFC files
# ---------------------------------------------------------------------------


def _build_ifc() -> ifcopenshell.file:
    """Return an IFC4 file with two typed walls, a door and an opening.

    Both walls share an IfcWallType carrying a type-level pset; the first
    wall has a tag and a base-quantities set.
    """
    f = ifcopenshell.file(schema="IFC4")
    ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcProject", name="Takeoff")

    wall_type = ifcopenshell.api.run(
        "root.create_entity", f, ifc_class="IfcWallType", name="Muro de carga 20cm"
    )
    type_pset = ifcopenshell.api.run("pset.add_pset", f, product=wall_type, name="Pset_WallCommon")
    ifcopenshell.api.run("pset.edit_pset", f, pset=type_pset, properties={"FireRating": "EI60"})

    walls = []
    for name in ("Muro:1", "Muro:2"):
        wall = ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcWall", name=name)
        walls.append(wall)
    ifcopenshell.api.run("type.assign_type", f, related_objects=walls, relating_type=wall_type)

    walls[0].Tag = "M-01"
    qto = ifcopenshell.api.run("pset.add_qto", f, product=walls[0], name="Qto_WallBaseQuantities")
    ifcopenshell.api.run(
        "pset.edit_qto", f, qto=qto, properties={"NetSideArea": 12.5, "Length": 5.0}
    )

    ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcDoor", name="Puerta P1")
    ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcOpeningElement", name="Hueco")
    return f


@pytest.fixture
def model():
    f = _build_ifc()
    return f, load_model(f)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestLoadModel:
    def test_elements_loaded_and_openings_skipped(self, model):
        f, (graph, host) = model
        types = sorted(o.type for o in graph.iter_objects())
        assert types == ["IfcDoor", "IfcWall", "IfcWall"]
        assert sorted(host.entity_ids()) == sorted(graph.objects)

    def test_ids_are_global_ids(self, model):
        f, (graph, _) = model
        for wall in f.by_type("IfcWall"):
            assert wall.GlobalId in graph.objects

    def test_type_name_from_type_object(self, model):
        f, (graph, _) = model
        for wall in f.by_type("IfcWall"):
            obj = graph.objects[wall.GlobalId]
            assert resolve_type_name(obj, graph) == "Muro de carga 20cm"

    def test_tag_becomes_marca(self, model):
        f, (graph, _) = model
        first, second = f.by_type("IfcWall")
        assert get_tag(graph.objects[first.GlobalId], graph) == "M-01"
        assert get_tag(graph.objects[second.GlobalId], graph) is None

    def test_quantities_read_through_shared_table(self, model):
        f, (graph, host) = model
        wall = graph.objects[f.by_type("IfcWall")[0].GlobalId]
        assert wall.property_set_ids
        assert resolve_value(wall, UnitKind.AREA, graph, host) == pytest.approx(12.5)
        assert resolve_value(wall, UnitKind.LENGTH, graph, host) == pytest.approx(5.0)

    def test_type_pset_shared_once(self, model):
        f, (graph, _) = model
        fire = [ps for ps in graph.property_sets.values() if ps.name == "Pset_WallCommon"]
        assert len(fire) == 1

    def test_aggregate_loaded_model(self, model):
        _, (graph, host) = model
        report = aggregate(graph=graph, host=host)
        walls = next(c for c in report if c.category == "IfcWall")
        assert walls.types[0].type_name == "Muro de carga 20cm"
        assert walls.totals().count == 2


class TestLoadIfc:
    def test_from_file(self, tmp_path):
        path = tmp_path / "model.ifc"
        _build_ifc().write(str(path))
        graph, host = load_ifc(path)
        assert len(graph.objects) == 3
        assert len(host.entity_ids()) == 3


class TestAxes:
    def test_z_up_to_y_up(self):
        # A wall 4 long (x), 0.3 thick (y), 3 high (z) in IFC axes.
        box = z_up_to_y_up([0, 0, 0, 4, 0.3, 3])
        assert box == [0, 0, -0.3, 4, 3, 0]
