"""
Phase 1: 不動産取引価格の集計。

取引レコードを物件種別・予算で絞り、中央値・四分位（線形補間）・件数・予算内割合を出す。
スコアリングには中央値を万円単位（四捨五入）で渡す。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from machi_lens.scoring.merge import merge_indicators
from machi_lens.scoring.types import CityIndicators, IndicatorValue

logger = logging.getLogger(__name__)

MAN_YEN = 10_000
SOURCE_ID = "reinfolib"

PROPERTY_TYPE_LABELS = {
    "condo": "中古マンション等",
    "house": "中古戸建住宅",
    "land": "宅地(土地)",
    "all": "全種別",
}


@dataclass(frozen=True)
class PriceStats:
    median: float
    q25: float
    q75: float
    count: int
    year: str
    affordability_rate: Optional[float] = None
    property_type_label: Optional[str] = None


def filter_trades_by_type(trades: Sequence[Mapping[str, Any]], property_type: str) -> List[Mapping[str, Any]]:
    if property_type not in PROPERTY_TYPE_LABELS:
        raise ValueError(f"未知の物件種別です: {property_type}")
    if property_type == "all":
        return [t for t in trades if t.get("Type")]
    label = PROPERTY_TYPE_LABELS[property_type]
    return [t for t in trades if t.get("Type") == label]


def parse_trade_prices(trades: Sequence[Mapping[str, Any]]) -> pd.Series:
    """TradePrice を数値化し、無効値・0円以下を除いた Series を返す"""
    prices = pd.to_numeric(pd.Series([t.get("TradePrice") for t in trades], dtype="object"), errors="coerce")
    return prices[prices > 0].astype("float64").reset_index(drop=True)


def filter_by_budget_limit(trades: Sequence[Mapping[str, Any]], budget_man_yen: float) -> List[Mapping[str, Any]]:
    limit = budget_man_yen * MAN_YEN
    kept = []
    for t in trades:
        price = pd.to_numeric(t.get("TradePrice"), errors="coerce")
        if pd.notna(price) and 0 < price <= limit:
            kept.append(t)
    return kept


def calculate_affordability_rate(prices: Sequence[float], budget_man_yen: float) -> float:
    """予算上限以下の取引の割合（0-100%）"""
    s = pd.Series(prices, dtype="float64")
    if s.empty:
        return 0.0
    return float((s <= budget_man_yen * MAN_YEN).mean() * 100)


def calculate_price_stats(prices: Sequence[float], year: str) -> Optional[PriceStats]:
    s = pd.Series(prices, dtype="float64").dropna()
    if s.empty:
        return None
    q = s.quantile([0.25, 0.5, 0.75], interpolation="linear")
    return PriceStats(
        median=float(q.loc[0.5]),
        q25=float(q.loc[0.25]),
        q75=float(q.loc[0.75]),
        count=int(s.size),
        year=year,
    )


def build_price_data(
    client,
    area_codes: Sequence[str],
    year: str,
    property_type: str = "condo",
    budget_man_yen: Optional[float] = None,
) -> Dict[str, PriceStats]:
    """都市ごとに取引を取得して価格統計を作る。取引が無い都市は含めない。

    リクエスト間隔はクライアント側の sleep で守る。
    """
    result: Dict[str, PriceStats] = {}
    for code in area_codes:
        trades = filter_trades_by_type(client.fetch_trades(year, code), property_type)
        prices = parse_trade_prices(trades)
        stats = calculate_price_stats(prices.tolist(), year)
        if stats is None:
            logger.warning("不動産価格: %s の %s 年の取引がありません", code, year)
            continue
        rate = calculate_affordability_rate(prices.tolist(), budget_man_yen) if budget_man_yen else None
        result[code] = PriceStats(
            median=stats.median,
            q25=stats.q25,
            q75=stats.q75,
            count=stats.count,
            year=year,
            affordability_rate=rate,
            property_type_label=PROPERTY_TYPE_LABELS[property_type],
        )
    return result


def merge_price_into_scoring_input(
    cities: Sequence[CityIndicators], price_data: Mapping[str, PriceStats]
) -> List[CityIndicators]:
    def extract(stats: Optional[PriceStats]):
        return [
            IndicatorValue(
                "condo_price_median",
                round(stats.median / MAN_YEN) if stats else None,
                stats.year if stats else "",
                SOURCE_ID,
            )
        ]

    return merge_indicators(cities, price_data, extract)
