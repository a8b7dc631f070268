"""Tests for key normalization, number parsing and property iteration."""

from __future__ import annotations

import math

import pytest

from ifctakeoff.extraction.normalize import norm_str, normalize_key, to_number
from ifctakeoff.extraction.properties import (
    find_number,
    find_text,
    get_comments,
    get_tag,
    iter_properties,
)
from ifctakeoff.models.element import MetadataGraph, MetadataObject


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _embedded(obj_id: str = "e1", **props) -> MetadataObject:
    return MetadataObject.model_validate({
        "id": obj_id,
        "type": "IfcWall",
        "propertySets": [{
            "name": "Dimensions",
            "properties": [{"name": k, "value": v} for k, v in props.items()],
        }],
    })


# ---------------------------------------------------------------------------
# normalize_key
# ---------------------------------------------------------------------------


class TestNormalizeKey:
    def test_lowercases_and_strips_separators(self):
        assert normalize_key("Net Side_Area") == "netsidearea"
        assert normalize_key("Gross-Volume.") == "grossvolume"

    def test_removes_accents(self):
        assert normalize_key("Superfície") == "superficie"
        assert normalize_key("Capítulo") == "capitulo"

    def test_unwraps_value_holder(self):
        assert normalize_key({"value": "Family Type"}) == "familytype"

    @pytest.mark.parametrize("raw", ["Net Área", "GROSS_volume", "familia y tipo", "x"])
    def test_idempotent(self, raw):
        once = normalize_key(raw)
        assert normalize_key(once) == once

    def test_none_is_empty(self):
        assert normalize_key(None) == ""


class TestNormStr:
    def test_strips(self):
        assert norm_str("  Muro  ") == "Muro"

    def test_unwraps_capitalized_holder(self):
        assert norm_str({"Value": " 20cm "}) == "20cm"

    def test_numbers_are_stringified(self):
        assert norm_str(12) == "12"


# ---------------------------------------------------------------------------
# to_number
# ---------------------------------------------------------------------------


class TestToNumber:
    def test_passthrough(self):
        assert to_number(3) == 3.0
        assert to_number(2.5) == 2.5

    def test_rejects_bool_and_non_finite(self):
        assert to_number(True) is None
        assert to_number(math.inf) is None
        assert to_number(math.nan) is None

    def test_int_beyond_float_range(self):
        assert to_number(10**400) is None

    def test_decimal_comma(self):
        assert to_number("12,5 m2") == pytest.approx(12.5)

    def test_first_number_in_text(self):
        assert to_number("approx. -3.2e2 kg") == pytest.approx(-320.0)

    def test_nested_holders(self):
        assert to_number({"NominalValue": {"value": "4,0"}}) == pytest.approx(4.0)

    def test_non_numeric(self):
        assert to_number("n/a") is None
        assert to_number({"other": 1}) is None
        assert to_number([1, 2]) is None


# ---------------------------------------------------------------------------
# Property iteration
# ---------------------------------------------------------------------------


class TestIterProperties:
    def test_embedded_then_indirect(self):
        graph = MetadataGraph.from_dict({
            "metaObjects": [{
                "id": "w1",
                "type": "IfcWall",
                "propertySets": [{"name": "A", "properties": [{"name": "First", "value": 1}]}],
                "propertySetIds": ["ps1", "missing"],
            }],
            "propertySets": [{"id": "ps1", "name": "B", "properties": [{"Name": "Second", "Value": 2}]}],
        })
        obj = graph.objects["w1"]
        names = [p.name for p in iter_properties(obj, graph)]
        assert names == ["First", "Second"]

    def test_indirect_needs_graph(self):
        obj = MetadataObject(id="x", propertySetIds=["ps1"])
        assert list(iter_properties(obj)) == []

    def test_props_bag_only_on_request(self):
        obj = MetadataObject(id="x", props={"Area": 5, "properties": [{"name": "Volume", "value": 2}]})
        assert list(iter_properties(obj)) == []
        keys = [p.key for p in iter_properties(obj, include_props=True)]
        assert keys == ["volume", "area"]

    def test_nominal_value_holder(self):
        obj = MetadataObject.model_validate({
            "id": "x",
            "propertySets": [{"name": "Identity", "properties": [
                {"name": "Marca", "NominalValue": " M-07 "},
                {"name": "Empty"},
            ]}],
        })
        values = {p.name: p.value for p in iter_properties(obj)}
        assert values["Empty"] is None
        assert get_tag(obj) == "M-07"


class TestFinders:
    def test_find_number_skips_non_positive(self):
        obj = _embedded(**{"Net Area": 0, "Gross Area": "7,5"})
        assert find_number(obj, {"netarea", "grossarea"}) == pytest.approx(7.5)

    def test_find_number_none(self):
        assert find_number(_embedded(Color="red"), {"area"}) is None

    def test_find_text(self):
        assert find_text(_embedded(Chapter="  "), {"chapter"}) == ""
        assert find_text(_embedded(Chapter="E05"), {"chapter"}) == "E05"

    def test_tag_and_comments(self):
        obj = _embedded(Marca="M-01", Comentarios="revisar")
        assert get_tag(obj) == "M-01"
        assert get_comments(obj) == "revisar"

    def test_missing_tag(self):
        assert get_tag(_embedded(Length=1)) is None
