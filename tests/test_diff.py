"""
Tests for grimoire/diff.py -- diff_object, merge_object, apply_patch.
"""

import pytest

from grimoire.diff import apply_patch, diff_object, merge_object


# ======================================================================
# diff_object
# ======================================================================


class TestDiffObject:
    def test_identical_documents_have_empty_diff(self, spell_source):
        assert diff_object(spell_source, spell_source) == {}

    def test_changed_nested_leaf_keeps_only_its_path(self):
        origin = {"name": "Fireball", "data": {"level": {"value": 3}, "range": {"value": "500 feet"}}}
        variant = {"name": "Fireball", "data": {"level": {"value": 5}, "range": {"value": "500 feet"}}}
        assert diff_object(origin, variant) == {"data": {"level": {"value": 5}}}

    def test_added_key_is_included_whole(self):
        origin = {"data": {}}
        variant = {"data": {"area": {"type": "cone", "value": 30}}}
        assert diff_object(origin, variant) == {"data": {"area": {"type": "cone", "value": 30}}}

    def test_removed_key_becomes_deletion_marker(self):
        origin = {"data": {"components": {"verbal": True}, "level": 3}}
        variant = {"data": {"level": 3}}
        assert diff_object(origin, variant) == {"data": {"-=components": None}}

    def test_lists_are_replaced_whole(self):
        origin = {"traditions": ["arcane", "primal"]}
        variant = {"traditions": ["arcane", "divine"]}
        assert diff_object(origin, variant) == {"traditions": ["arcane", "divine"]}

    def test_equal_lists_are_omitted(self):
        assert diff_object({"t": [1, 2]}, {"t": [1, 2]}) == {}

    def test_type_change_from_object_to_scalar(self):
        assert diff_object({"area": {"value": 20}}, {"area": None}) == {"area": None}

    def test_bool_and_int_are_different(self):
        assert diff_object({"flag": 1}, {"flag": True}) == {"flag": True}

    @pytest.mark.parametrize("origin, variant", [
        ({}, {"-=x": 1}),
        ({}, {"data": {"-=x": 1}}),
        ({"data": {"-=x": 1}}, {"data": {"-=x": 2}}),
        ({"data": 5}, {"data": {"-=x": None}}),
    ])
    def test_reserved_prefix_in_changes_is_rejected(self, origin, variant):
        with pytest.raises(ValueError, match="reserved"):
            diff_object(origin, variant)

    def test_unchanged_record_with_markers_is_allowed(self):
        record = {"ovr": {"_id": "ovr", "data": {"-=components": None}}}
        origin = {"name": "Fireball", "overlays": record}
        variant = {"name": "Fireball (Big)", "overlays": record}
        assert diff_object(origin, variant) == {"name": "Fireball (Big)"}

    def test_diff_is_deterministic(self, spell_source):
        variant = apply_patch(spell_source, {"name": "Big Fireball", "data": {"level": {"value": 9}}})
        first = diff_object(spell_source, variant)
        second = diff_object(spell_source, variant)
        assert first == second
        assert list(first) == list(second)

    def test_diff_does_not_alias_variant_values(self):
        variant = {"data": {"area": {"value": 30}}}
        patch = diff_object({}, variant)
        variant["data"]["area"]["value"] = 99
        assert patch["data"]["area"]["value"] == 30


# ======================================================================
# apply_patch / merge_object
# ======================================================================


class TestApplyPatch:
    @pytest.mark.parametrize(
        "origin, variant",
        [
            ({"a": 1}, {"a": 2}),
            ({"a": {"b": 1, "c": 2}}, {"a": {"b": 1}}),
            ({"a": {"b": 1}}, {"a": 5}),
            ({"a": 5}, {"a": {"b": 1}}),
            ({"a": [1, 2], "b": None}, {"a": [2], "c": {"d": [3]}}),
            ({}, {"x": {"y": {"z": True}}}),
        ],
    )
    def test_round_trip(self, origin, variant):
        assert apply_patch(origin, diff_object(origin, variant)) == variant

    def test_round_trip_on_spell(self, spell_source):
        variant = apply_patch(spell_source, {
            "name": "Fireball (Heightened)",
            "data": {"level": {"value": 5}, "-=components": None, "area": {"value": 30}},
        })
        assert apply_patch(spell_source, diff_object(spell_source, variant)) == variant

    def test_inputs_are_not_mutated(self):
        origin = {"data": {"level": {"value": 3}}}
        patch = {"data": {"level": {"value": 4}}}
        result = apply_patch(origin, patch)
        assert result["data"]["level"]["value"] == 4
        assert origin == {"data": {"level": {"value": 3}}}
        assert patch == {"data": {"level": {"value": 4}}}

    def test_deletion_marker_for_missing_key_is_harmless(self):
        assert apply_patch({"a": 1}, {"-=b": None}) == {"a": 1}

    def test_new_key_is_inserted_verbatim(self):
        record = {"_id": "abc", "data": {"-=components": None}}
        result = merge_object({"overlays": {}}, {"overlays": {"abc": record}})
        assert result["overlays"]["abc"] == record

    def test_merge_returns_target(self):
        target = {"a": 1}
        assert merge_object(target, {"b": 2}) is target
        assert target == {"a": 1, "b": 2}
