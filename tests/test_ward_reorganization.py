"""Tests for the Hamamatsu ward reorganization mapping and aggregation."""

import pytest

from machi_lens.estat.ward_reorganization import (
    aggregate_boolean_values,
    aggregate_per_capita_values,
    aggregate_raw_values,
    expand_area_codes,
    expand_population_map,
    get_reorganization,
    is_abolished_code,
    is_reorganized_code,
)


def chuo_mapping():
    _, mapping = expand_area_codes(["22138"])
    return mapping


class TestLookup:
    def test_new_and_old_codes(self):
        assert is_reorganized_code("22138")
        assert is_reorganized_code("221384")  # 6桁（検査数字付き）
        assert not is_reorganized_code("13104")
        assert is_abolished_code("22131")
        assert not is_abolished_code("22138")

    def test_entry_contents(self):
        entry = get_reorganization("22139")
        assert entry.new_label == "浜松市浜名区"
        assert [w.code for w in entry.old_wards] == ["22135", "22136"]
        assert get_reorganization("13104") is None


class TestExpandAreaCodes:
    def test_old_codes_appended_after_new(self):
        expanded, mapping = expand_area_codes(["13104", "22138"])
        assert expanded == ["13104", "22138", "22131", "22132", "22133", "22134"]
        assert list(mapping) == ["22138"]

    def test_no_duplicates(self):
        expanded, _ = expand_area_codes(["22131", "22138", "22138"])
        assert expanded.count("22131") == 1
        assert expanded.count("22138") == 1

    def test_unrelated_codes_untouched(self):
        expanded, mapping = expand_area_codes(["13104", "14100"])
        assert expanded == ["13104", "14100"]
        assert mapping == {}


class TestAggregate:
    def test_raw_values_summed(self):
        values = {"22131": 10, "22132": 5, "22133": 8}
        aggregate_raw_values(values, chuo_mapping())
        assert values["22138"] == 23

    def test_per_capita_weighted_by_census_population(self):
        _, mapping = expand_area_codes(["22139"])
        values = {"22135": 5.0, "22136": 3.0}
        aggregate_per_capita_values(values, mapping)
        expected = (5.0 * 92548 + 3.0 * 99960) / (92548 + 99960)
        assert values["22139"] == pytest.approx(expected)
        assert values["22139"] == pytest.approx(3.96, abs=0.01)

    def test_existing_new_code_value_is_kept(self):
        values = {"22138": 99, "22131": 10, "22132": 5}
        aggregate_raw_values(values, chuo_mapping())
        assert values["22138"] == 99

    def test_no_old_values_leaves_new_code_unset(self):
        values = {"13104": 1.0}
        aggregate_per_capita_values(values, chuo_mapping())
        assert "22138" not in values

    def test_boolean_values_or(self):
        values = {"22131": False, "22132": True}
        aggregate_boolean_values(values, chuo_mapping())
        assert values["22138"] is True

        values = {"22131": False, "22134": False}
        aggregate_boolean_values(values, chuo_mapping())
        assert values["22138"] is False


class TestPopulationMap:
    def test_census_population_added_without_mutation(self):
        population = {"22138": 580000, "22131": 1}
        expanded = expand_population_map(population, chuo_mapping())
        assert expanded["22132"] == 131277
        # 既存の値は上書きしない
        assert expanded["22131"] == 1
        assert "22132" not in population
