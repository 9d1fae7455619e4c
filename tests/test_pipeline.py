"""End-to-end pipeline tests with fake e-Stat and reinfolib clients."""

import pytest

from conftest import FakeEstatClient, FakeReinfoClient
from machi_lens.errors import ApiError, CityNotFound, MissingAreaValue
from machi_lens.estat.population import build_population_report, to_scoring_input
from machi_lens.pipeline.report_pipeline import (
    DisasterRecord,
    PipelineInput,
    fold_disaster_records,
    run_report_pipeline,
)

POPULATION = {
    "13104": {"000": "346235", "010": "27000"},
    "13112": {"000": "943664", "010": "110000"},
    "22138": {"000": "580000", "010": "70000"},
}

CFG = {
    "datasets": {
        "population": {"stats_data_id": "P"},
        "crime": {"stats_data_id": "C"},
    }
}


def population_rows(params):
    rows = []
    for area in params["cdArea"].split(","):
        for code in params["cdCat01"].split(","):
            value = POPULATION.get(area, {}).get(code)
            if value is not None:
                rows.append({"@area": area, "@cat01": code, "@time": params["cdTime"], "$": value})
    return rows


def crime_rows(params):
    if params["cdTime"] != "2020100000":
        return []
    return [
        {"@area": "13104", "@time": "2020100000", "$": "7.5"},
        {"@area": "22131", "@time": "2020100000", "$": "4.0"},
        {"@area": "22132", "@time": "2020100000", "$": "4.0"},
    ]


def handler(params):
    if params["statsDataId"] == "P":
        return population_rows(params)
    return crime_rows(params)


@pytest.fixture
def estat(population_meta, crime_meta):
    return FakeEstatClient({"P": population_meta, "C": crime_meta}, handler)


class TestPopulationReport:
    def test_rows_and_ranks(self, estat):
        report = build_population_report(estat, "P", ["新宿区", "世田谷区"])
        shinjuku, setagaya = report.rows

        assert report.time_code == "2020000000"
        assert report.data_year == "2020"
        assert shinjuku.area_code == "13104"
        assert shinjuku.ratio == pytest.approx(27000 / 346235 * 100)
        assert (shinjuku.total_rank, setagaya.total_rank) == (2, 1)
        assert (shinjuku.ratio_rank, setagaya.ratio_rank) == (2, 1)

        params = estat.data_calls[0]
        assert params["cdCat01"] == "000,010"
        assert params["cdCat02"] == "000"

    def test_scoring_input(self, estat):
        cities = to_scoring_input(build_population_report(estat, "P", ["新宿区"]))
        assert cities[0].raw("population_total") == 346235
        assert cities[0].get("kids_ratio").data_year == "2020"

    def test_missing_value_is_an_error(self, estat):
        with pytest.raises(MissingAreaValue) as exc:
            build_population_report(estat, "P", ["横浜市"])
        assert any("--kids-code" in h for h in exc.value.hints)


class TestRunReportPipeline:
    def test_end_to_end(self, estat):
        disaster = {
            "13104": DisasterRecord(True, False, 10, "2023"),
            "13112": DisasterRecord(False, False, 25, "2023"),
        }
        result = run_report_pipeline(
            PipelineInput(("新宿区", "世田谷区")), CFG, estat, disaster_records=disaster, current_year=2024
        )

        assert [d.id for d in result.definitions] == [
            "population_total",
            "kids_ratio",
            "flood_risk",
            "evacuation_sites",
            "crime_rate",
        ]
        assert result.phases == {"disaster": True, "crime": True}
        assert sorted(r.rank for r in result.results) == [1, 2]

        shinjuku, setagaya = result.scoring_input
        assert shinjuku.raw("crime_rate") == pytest.approx(7.5)
        assert setagaya.get("crime_rate").raw_value is None
        assert shinjuku.raw("flood_risk") == 1

    def test_new_ward_gets_aggregated_crime(self, estat):
        result = run_report_pipeline(PipelineInput(("浜松市中央区",)), CFG, estat, current_year=2024)
        assert result.scoring_input[0].raw("crime_rate") == pytest.approx(4.0)

    def test_failed_domain_is_skipped(self, population_meta, crime_meta):
        def failing(params):
            if params["statsDataId"] == "C":
                raise ApiError("timeout")
            return population_rows(params)

        client = FakeEstatClient({"P": population_meta, "C": crime_meta}, failing)
        result = run_report_pipeline(PipelineInput(("新宿区", "世田谷区")), CFG, client, current_year=2024)

        assert result.phases == {"crime": False}
        assert [d.id for d in result.definitions] == ["population_total", "kids_ratio"]

    def test_price_phase(self, estat):
        trades = {
            "13104": [{"Type": "中古マンション等", "TradePrice": "80000000"}],
            "13112": [{"Type": "中古マンション等", "TradePrice": "60000000"}],
        }
        reinfo = FakeReinfoClient(trades)
        result = run_report_pipeline(
            PipelineInput(("新宿区", "世田谷区"), include_crime=False), CFG, estat, reinfo, current_year=2024
        )
        assert result.phases == {"price": True}
        assert reinfo.calls == [("2023", "13104"), ("2023", "13112")]
        assert result.scoring_input[1].raw("condo_price_median") == 6000

    def test_unknown_city_fails_whole_run(self, estat):
        with pytest.raises(CityNotFound):
            run_report_pipeline(PipelineInput(("存在しない村",)), CFG, estat)

    def test_unknown_preset_falls_back(self, estat):
        result = run_report_pipeline(
            PipelineInput(("新宿区",), preset="nope", include_crime=False), CFG, estat, current_year=2024
        )
        assert result.preset.name == "childcare"


class TestFoldDisaster:
    def test_old_wards_folded(self):
        records = {
            "22131": DisasterRecord(True, False, 3, "2022"),
            "22132": DisasterRecord(False, True, 4, "2023"),
        }
        folded = fold_disaster_records(records, ["22138"])
        record = folded["22138"]
        assert record.flood_risk and record.landslide_risk
        assert record.risk_score == 2
        assert record.evacuation_site_count == 7
        assert record.data_year == "2023"

    def test_existing_record_kept(self):
        records = {
            "22138": DisasterRecord(False, False, 1, "2024"),
            "22131": DisasterRecord(True, True, 3, "2022"),
        }
        assert fold_disaster_records(records, ["22138"])["22138"].evacuation_site_count == 1
