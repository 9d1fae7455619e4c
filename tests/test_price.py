"""Tests for trade price aggregation (Phase 1)."""

import pytest

from conftest import FakeReinfoClient
from machi_lens.reinfo.price import (
    build_price_data,
    calculate_affordability_rate,
    calculate_price_stats,
    filter_by_budget_limit,
    filter_trades_by_type,
    merge_price_into_scoring_input,
    parse_trade_prices,
)
from machi_lens.scoring.types import CityIndicators

TRADES = [
    {"Type": "中古マンション等", "TradePrice": "30000000"},
    {"Type": "中古マンション等", "TradePrice": "50000000"},
    {"Type": "中古マンション等", "TradePrice": "40000000"},
    {"Type": "中古マンション等", "TradePrice": "非公開"},
    {"Type": "中古マンション等", "TradePrice": "0"},
    {"Type": "宅地(土地)", "TradePrice": "10000000"},
]


class TestFilters:
    def test_by_type(self):
        assert len(filter_trades_by_type(TRADES, "condo")) == 5
        assert len(filter_trades_by_type(TRADES, "land")) == 1
        assert len(filter_trades_by_type(TRADES, "all")) == 6

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            filter_trades_by_type(TRADES, "castle")

    def test_invalid_prices_dropped(self):
        prices = parse_trade_prices(filter_trades_by_type(TRADES, "condo"))
        assert prices.tolist() == [30000000.0, 50000000.0, 40000000.0]

    def test_budget_limit(self):
        kept = filter_by_budget_limit(TRADES, 3500)
        assert [t["TradePrice"] for t in kept] == ["30000000", "10000000"]


class TestStats:
    def test_linear_quartiles(self):
        stats = calculate_price_stats([30000000.0, 50000000.0, 40000000.0], "2023")
        assert stats.median == 40000000.0
        assert stats.q25 == 35000000.0
        assert stats.q75 == 45000000.0
        assert stats.count == 3
        assert stats.year == "2023"

    def test_empty(self):
        assert calculate_price_stats([], "2023") is None

    def test_affordability(self):
        rate = calculate_affordability_rate([30000000.0, 50000000.0, 40000000.0], 4000)
        assert rate == pytest.approx(200 / 3)
        assert calculate_affordability_rate([], 4000) == 0.0


class TestBuildPriceData:
    def test_cities_without_trades_are_omitted(self):
        client = FakeReinfoClient({"13104": TRADES})
        data = build_price_data(client, ["13104", "13112"], "2023", budget_man_yen=4000)
        assert set(data) == {"13104"}
        assert data["13104"].median == 40000000.0
        assert data["13104"].affordability_rate == pytest.approx(200 / 3)
        assert data["13104"].property_type_label == "中古マンション等"
        assert client.calls == [("2023", "13104"), ("2023", "13112")]

    def test_merge_stores_median_in_man_yen(self):
        client = FakeReinfoClient({"13104": TRADES})
        data = build_price_data(client, ["13104"], "2023")
        cities = [CityIndicators("新宿区", "13104"), CityIndicators("世田谷区", "13112")]

        merged = merge_price_into_scoring_input(cities, data)

        assert merged[0].raw("condo_price_median") == 4000
        assert merged[0].get("condo_price_median").source_id == "reinfolib"
        assert merged[1].get("condo_price_median").raw_value is None
        assert data["13104"].affordability_rate is None
