"""Tests for the classification resolvers (area, cities, time, age, filters, indicators)."""

import pytest

from conftest import axis
from machi_lens.errors import (
    AgeAxisNotFound,
    AmbiguousCity,
    AreaAxisNotFound,
    CityNotFound,
    ExplicitTimeCodeNotFound,
    KidsCategoryNotFound,
    TimeAxisNotFound,
    TotalCategoryNotFound,
)
from machi_lens.estat.age import is_kids_label, resolve_age_selection
from machi_lens.estat.area import (
    candidate_score,
    is_designated_city_code,
    is_municipality_code,
    resolve_area_class,
    resolve_cities,
    resolve_city,
)
from machi_lens.estat.axes import rank_axes
from machi_lens.estat.filters import (
    apply_overrides,
    is_total_label,
    resolve_default_filters,
    resolve_per_capita_overrides,
)
from machi_lens.estat.indicator import (
    DOMAIN_SCORERS,
    resolve_indicator_class,
    score_crime_label,
    score_elementary_label,
    score_junior_high_label,
    score_pediatrics_label,
    score_station_label,
)
from machi_lens.estat.meta import (
    AreaEntry,
    DefaultFilter,
    IndicatorSelection,
    TimeSelection,
    extract_class_objects,
)
from machi_lens.estat.time import (
    data_year_of,
    resolve_latest_time,
    resolve_time_candidates,
)

ENTRIES = [
    AreaEntry("13104", "新宿区"),
    AreaEntry("13112", "世田谷区"),
    AreaEntry("14100", "横浜市"),
    AreaEntry("13206", "府中市"),
    AreaEntry("34207", "府中市"),
    AreaEntry("22131", "中区"),
    AreaEntry("13102", "中央区"),
]


class TestAreaAxis:
    def test_area_axis_detected(self, population_axes):
        assert resolve_area_class(population_axes).id == "area"

    def test_rank_prefers_id_and_label(self):
        axes = [
            axis("cat01", "地域区分", [("1", "東京")]),
            axis("area", "地域", [("13104", "新宿区")]),
        ]
        ranked = rank_axes(axes, "area")
        assert [a.id for a in ranked] == ["area", "cat01"]

    def test_no_area_axis_fails(self):
        axes = [axis("cat01", "男女", [("1", "男")])]
        with pytest.raises(AreaAxisNotFound) as exc:
            resolve_area_class(axes)
        assert exc.value.hints


class TestResolveCities:
    def test_exact_match(self):
        assert resolve_city("新宿区", ENTRIES).code == "13104"

    def test_prefecture_prefix_stripped(self):
        assert resolve_city("東京都世田谷区", ENTRIES).code == "13112"
        assert resolve_city("神奈川県横浜市", ENTRIES).code == "14100"

    def test_exact_duplicates_are_ambiguous(self):
        with pytest.raises(AmbiguousCity) as exc:
            resolve_city("府中市", ENTRIES)
        assert exc.value.exit_code == 3
        assert "府中市(13206)" in exc.value.candidates
        assert "府中市(34207)" in exc.value.candidates

    def test_katakana_input_resolves(self):
        result = resolve_city("シンジュクク", [AreaEntry("13104", "新宿区"), AreaEntry("13112", "世田谷区")])
        assert result.resolved_label == "新宿区"
        assert result.input_text == "シンジュクク"

    def test_hiragana_reading_resolves(self):
        assert resolve_city("よこはまし", ENTRIES).code == "14100"

    def test_katakana_label_matches_hiragana_input(self):
        entries = [AreaEntry("11100", "さいたま市"), AreaEntry("13104", "新宿区")]
        assert resolve_city("サイタマ市", entries).code == "11100"

    def test_partial_match(self):
        assert resolve_city("世田谷", ENTRIES).code == "13112"

    def test_partial_ambiguous(self):
        with pytest.raises(AmbiguousCity):
            resolve_city("中", ENTRIES)

    def test_not_found_lists_suggestions(self):
        with pytest.raises(CityNotFound) as exc:
            resolve_city("新宿市", ENTRIES)
        # 共通文字数の多い順。「市」だけ共通する候補も含まれる
        assert exc.value.suggestions[0] == "新宿区(13104)"
        assert "横浜市(14100)" in exc.value.suggestions
        assert "世田谷区(13112)" not in exc.value.suggestions
        assert exc.value.exit_code == 3

    def test_resolve_many_keeps_order(self):
        resolved = resolve_cities(["横浜市", "新宿区"], ENTRIES)
        assert [r.code for r in resolved] == ["14100", "13104"]

    def test_candidate_score(self):
        assert candidate_score("新宿区", "新宿区") == 100
        assert candidate_score("新宿", "新宿区") == 70
        assert candidate_score("新宿市", "新宿区") == 2


class TestAreaCodes:
    def test_municipality_code(self):
        assert is_municipality_code("13104")
        assert not is_municipality_code("13000")
        assert not is_municipality_code("131")

    def test_designated_city_code(self):
        assert is_designated_city_code("14100")
        assert not is_designated_city_code("13104")


class TestTime:
    def test_latest_by_default(self, population_axes):
        latest = resolve_latest_time(population_axes)
        assert latest.code == "2020000000"
        assert latest.axis_id == "time"

    def test_candidates_newest_first(self):
        axes = [axis("time", "時間軸（年度次）", [("2019100000", "2019年度"), ("2021100000", "2021年度"), ("2020100000", "2020年度")])]
        assert [t.code for t in resolve_time_candidates(axes)] == ["2021100000", "2020100000", "2019100000"]

    def test_longer_code_is_more_specific(self):
        axes = [axis("time", "時点", [("2021", "2021年"), ("2019100000", "2019年度")])]
        assert resolve_time_candidates(axes)[0].code == "2019100000"

    def test_explicit_code(self, population_axes):
        assert resolve_latest_time(population_axes, "2015000000").label == "2015年"

    def test_explicit_code_missing(self, population_axes):
        with pytest.raises(ExplicitTimeCodeNotFound) as exc:
            resolve_latest_time(population_axes, "1999000000")
        assert "2020000000" in exc.value.hints[0]

    def test_no_time_axis(self):
        axes = [axis("area", "地域", [("13104", "新宿区")])]
        assert resolve_time_candidates(axes) == []
        with pytest.raises(TimeAxisNotFound):
            resolve_latest_time(axes)

    def test_data_year(self):
        assert data_year_of(TimeSelection("time", "2020100000", "2020年度")) == "2020"


class TestAge:
    def test_kids_label_scores(self):
        assert is_kids_label("0～14歳") == 100
        assert is_kids_label("年少人口（0-14歳）") == 95
        assert is_kids_label("15歳未満") == 85
        assert is_kids_label("15～64歳") == 0

    def test_auto_selection(self, population_axes):
        selection = resolve_age_selection(population_axes)
        assert selection.axis_id == "cat01"
        assert selection.param_name == "cdCat01"
        assert selection.total.code == "000"
        assert selection.kids.code == "010"

    def test_missing_kids_reports_diagnostics(self):
        axes = [
            axis("cat01", "年齢", [("000", "総数"), ("020", "15～64歳")]),
            axis("area", "地域", [("13104", "新宿区")]),
        ]
        with pytest.raises(AgeAxisNotFound) as exc:
            resolve_age_selection(axes)
        diag = exc.value.diagnostics[0]
        assert diag.class_id == "cat01"
        assert diag.has_total and not diag.has_kids
        assert "総数○ 0-14歳×" in diag.describe()
        assert any("--class-id" in h for h in exc.value.hints)

    def test_override_codes_skip_label_check(self, population_axes):
        selection = resolve_age_selection(population_axes, class_id="cat01", total_code="000", kids_code="020")
        assert selection.kids.label == "15～64歳"

    def test_override_unknown_code(self, population_axes):
        with pytest.raises(KidsCategoryNotFound):
            resolve_age_selection(population_axes, class_id="cat01", kids_code="999")

    def test_total_not_found(self):
        axes = [axis("cat03", "年齢", [("1", "0～14歳"), ("2", "15歳以上")])]
        with pytest.raises(TotalCategoryNotFound):
            resolve_age_selection(axes, class_id="cat03")


class TestDefaultFilters:
    def test_total_label_scores(self):
        assert is_total_label("総数") == 100
        assert is_total_label("総人口") == 95
        assert is_total_label("男女計") == 90
        assert is_total_label("計") == 80
        assert is_total_label("人口総数") == 70
        assert is_total_label("男") == 0

    def test_filters_for_unpinned_axes(self, population_axes):
        filters = resolve_default_filters(population_axes, {"area", "time", "cat01"})
        assert filters == [DefaultFilter("cdTab", "020"), DefaultFilter("cdCat02", "000")]

    def test_axis_without_aggregate_is_skipped(self):
        axes = [axis("cat01", "産業", [("A", "農業"), ("B", "漁業")])]
        assert resolve_default_filters(axes, set()) == []

    def test_per_capita_override_replaces_actual_figures(self, crime_meta):
        axes = extract_class_objects(crime_meta)
        exclude = {"area", "time", "cat01"}
        filters = resolve_default_filters(axes, exclude)
        overrides = resolve_per_capita_overrides(axes, exclude)
        assert filters == [DefaultFilter("cdCat02", "1")]
        assert overrides == [DefaultFilter("cdCat02", "2")]
        assert apply_overrides(filters, overrides) == [DefaultFilter("cdCat02", "2")]


class TestIndicatorClass:
    def test_crime_scores(self):
        assert score_crime_label("刑法犯認知件数") == 100
        assert score_crime_label("刑法犯認知件数（人口千人当たり）") == 110
        assert score_crime_label("犯罪発生件数") == 70
        assert score_crime_label("交通事故発生件数") == 0

    def test_prefers_per_capita_indicator(self):
        axes = [
            axis("tab", "表章項目", [("K4201", "刑法犯認知件数"), ("K4201P", "刑法犯認知件数（人口千人当たり）")]),
        ]
        selection = resolve_indicator_class(axes, score_crime_label)
        assert selection == IndicatorSelection("tab", "cdTab", "K4201P", "刑法犯認知件数（人口千人当たり）")

    def test_best_item_across_axes(self):
        axes = [
            axis("cat01", "区分", [("1", "犯罪")]),
            axis("cat02", "指標", [("K4201", "刑法犯認知件数")]),
        ]
        assert resolve_indicator_class(axes, score_crime_label).code == "K4201"

    def test_explicit_code_wins(self):
        axes = [axis("cat01", "Ｋ 安全", [("K4201", "刑法犯認知件数"), ("K4101", "交通事故発生件数")])]
        selection = resolve_indicator_class(axes, score_crime_label, explicit_code="K4101")
        assert selection.code == "K4101"

    def test_unknown_explicit_code_falls_back(self):
        axes = [axis("cat01", "Ｋ 安全", [("K4201", "刑法犯認知件数")])]
        assert resolve_indicator_class(axes, score_crime_label, explicit_code="X").code == "K4201"

    def test_no_match_returns_none(self, population_axes):
        assert resolve_indicator_class(population_axes, score_crime_label) is None

    def test_education_and_healthcare_scores(self):
        assert score_elementary_label("小学校数") == 100
        assert score_elementary_label("小学校数（公立）") == 80
        assert score_elementary_label("中学校数") == 0
        assert score_junior_high_label("中学校数") == 100
        assert score_pediatrics_label("小児科標榜施設数") == 100
        assert score_pediatrics_label("小児科の施設") == 80

    def test_station_scores(self):
        assert score_station_label("鉄道駅数") == 100
        assert score_station_label("鉄道の駅数") == 80
        assert score_station_label("駅数") == 70
        assert score_station_label("ＪＲ駅数") == 60
        assert score_station_label("私鉄駅数") == 60
        assert score_station_label("バス停数") == 0

    def test_every_domain_indicator_has_a_scorer(self):
        assert set(DOMAIN_SCORERS) == {
            "crime_rate",
            "elementary_schools_per_capita",
            "junior_high_schools_per_capita",
            "hospitals_per_capita",
            "clinics_per_capita",
            "pediatrics_per_capita",
            "station_count_per_capita",
        }
