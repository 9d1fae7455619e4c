"""
全国ベースライン。

市区町村の全国分布から算出した概算の分位点 [p20, p40, p60, p80] を静的に持ち、
生値を全国パーセンタイル（0-100）へ区分線形補間する。
候補都市の組み合わせに依存しない絶対評価（スター評価）に使う。
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple

from machi_lens.scoring.types import LOWER_BETTER

NEUTRAL_PERCENTILE = 50.0


@dataclass(frozen=True)
class NationalBaselineEntry:
    indicator_id: str
    breakpoints: Tuple[float, float, float, float]


NATIONAL_BASELINES: Tuple[NationalBaselineEntry, ...] = (
    NationalBaselineEntry("population_total", (15_000, 50_000, 120_000, 300_000)),
    NationalBaselineEntry("kids_ratio", (9.0, 10.5, 12.0, 13.5)),
    NationalBaselineEntry("condo_price_median", (800, 1_500, 2_500, 4_000)),
    NationalBaselineEntry("crime_rate", (2.0, 4.0, 6.0, 9.0)),
    NationalBaselineEntry("flood_risk", (0, 0, 1, 1)),
    NationalBaselineEntry("evacuation_sites", (3, 8, 20, 50)),
    NationalBaselineEntry("elementary_schools_per_capita", (0.5, 1.0, 1.5, 2.5)),
    NationalBaselineEntry("junior_high_schools_per_capita", (0.25, 0.5, 0.8, 1.2)),
    NationalBaselineEntry("hospitals_per_capita", (3, 5, 7, 10)),
    NationalBaselineEntry("clinics_per_capita", (40, 55, 70, 90)),
    NationalBaselineEntry("pediatrics_per_capita", (5, 8, 12, 18)),
    # 鉄道駅数（人口1万人あたり）
    NationalBaselineEntry("station_count_per_capita", (0.3, 0.6, 1.0, 1.8)),
)

_BY_ID = MappingProxyType({b.indicator_id: b for b in NATIONAL_BASELINES})

_PERCENTILES = (20.0, 40.0, 60.0, 80.0)


def get_national_baseline(indicator_id: str) -> Optional[NationalBaselineEntry]:
    return _BY_ID.get(indicator_id)


def _interpolate(raw_value: float, thresholds: Tuple[float, ...]) -> float:
    p20, _, _, p80 = thresholds

    if raw_value <= p20:
        # p20 以下: 下限を p20 の半分と仮定して 0-20 に補間
        lower = p20 * 0.5
        span = p20 - lower
        return max(0.0, (raw_value - lower) / span * 20) if span > 0 else 10.0

    if raw_value >= p80:
        # p80 以上: 上限を p80 の 1.5 倍と仮定して 80-100 に補間
        upper = p80 * 1.5
        span = upper - p80
        return min(100.0, 80 + (raw_value - p80) / span * 20) if span > 0 else 90.0

    for i in range(len(thresholds) - 1):
        if raw_value <= thresholds[i + 1]:
            span = thresholds[i + 1] - thresholds[i]
            if span <= 0:
                return _PERCENTILES[i]
            return _PERCENTILES[i] + (raw_value - thresholds[i]) / span * 20
    return NEUTRAL_PERCENTILE


def compute_national_percentile(raw_value: float, indicator_id: str, direction: str) -> float:
    """全国パーセンタイル（0-100, 小数1桁）。ベースライン未定義の指標は 50。"""
    baseline = _BY_ID.get(indicator_id)
    if baseline is None:
        return NEUTRAL_PERCENTILE

    pct = _interpolate(float(raw_value), baseline.breakpoints)
    if direction == LOWER_BETTER:
        pct = 100 - pct
    return round(min(100.0, max(0.0, pct)), 1)
