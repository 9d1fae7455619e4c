"""
Phase 0: 国勢調査から都市ごとの総人口・0〜14歳人口を取り、比率と順位をつける。
スコアリング入力（population_total / kids_ratio）の起点になる。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from machi_lens.errors import MissingAreaValue
from machi_lens.estat.age import resolve_age_selection
from machi_lens.estat.area import build_area_entries, resolve_area_class, resolve_cities
from machi_lens.estat.filters import resolve_default_filters
from machi_lens.estat.meta import (
    DataValue,
    extract_class_objects,
    extract_data_values,
    format_selection_preview,
)
from machi_lens.estat.time import resolve_latest_time
from machi_lens.scoring.types import CityIndicators, IndicatorValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PopulationRow:
    input_name: str
    city_resolved: str
    area_code: str
    total: float
    kids: float
    ratio: float
    total_rank: int
    ratio_rank: int


@dataclass(frozen=True)
class PopulationReport:
    stats_data_id: str
    time_code: str
    time_label: str
    rows: Tuple[PopulationRow, ...]

    @property
    def data_year(self) -> str:
        m = re.search(r"\d{4}", self.time_label) or re.search(r"\d{4}", self.time_code)
        return m.group(0) if m else "不明"

    def population_map(self) -> Dict[str, float]:
        return {r.area_code: r.total for r in self.rows}


def _value_for(values: Sequence[DataValue], area: str, axis_id: str, code: str) -> Optional[float]:
    for row in values:
        if row.area == area and row.cats.get(axis_id) == code and row.value is not None:
            return row.value
    return None


def _ranks_desc(values: Sequence[float]) -> List[int]:
    # 降順、同値は入力順（pandas の rank(method="first")）
    return [int(r) for r in pd.Series(values, dtype="float64").rank(ascending=False, method="first")]


def build_population_report(
    client,
    stats_data_id: str,
    city_names: Sequence[str],
    selectors: Optional[Mapping[str, Any]] = None,
    time_code: Optional[str] = None,
) -> PopulationReport:
    """人口統計を取得してレポート行を作る。

    解決エラー（地域・年齢区分・市区町村名）はそのまま送出する。
    解決済みの都市に値が無い場合は MissingAreaValue（分類の選び方の誤りが疑われるため）。
    """
    selectors = selectors or {}
    axes = extract_class_objects(client.get_meta_info(stats_data_id))

    area_axis = resolve_area_class(axes)
    cities = resolve_cities(city_names, build_area_entries(area_axis))
    age = resolve_age_selection(
        axes,
        class_id=selectors.get("class_id"),
        total_code=selectors.get("total_code"),
        kids_code=selectors.get("kids_code"),
    )
    period = resolve_latest_time(axes, time_code)
    filters = resolve_default_filters(axes, {area_axis.id, period.axis_id, age.axis_id})

    params = {
        "statsDataId": stats_data_id,
        "cdArea": ",".join(c.code for c in cities),
        "cdTime": period.code,
        age.param_name: f"{age.total.code},{age.kids.code}",
        **{f.param_name: f.code for f in filters},
    }
    values = [v for v in extract_data_values(client.get_stats_data(params)) if not v.time or v.time == period.code]

    totals, kids_list = [], []
    for city in cities:
        total = _value_for(values, city.code, age.axis_id, age.total.code)
        kids = _value_for(values, city.code, age.axis_id, age.kids.code)
        if total is None or kids is None:
            raise MissingAreaValue(
                f"{city.resolved_label}({city.code}) の人口データを取得できませんでした",
                [
                    "--class-id/--total-code/--kids-code で分類を手動指定してください。",
                    "分類候補:\n" + format_selection_preview(axes),
                ],
            )
        totals.append(total)
        kids_list.append(kids)

    ratios = [k / t * 100 if t > 0 else 0.0 for t, k in zip(totals, kids_list)]
    total_ranks = _ranks_desc(totals)
    ratio_ranks = _ranks_desc(ratios)

    rows = tuple(
        PopulationRow(
            input_name=city.input_text,
            city_resolved=city.resolved_label,
            area_code=city.code,
            total=totals[i],
            kids=kids_list[i],
            ratio=ratios[i],
            total_rank=total_ranks[i],
            ratio_rank=ratio_ranks[i],
        )
        for i, city in enumerate(cities)
    )
    logger.info("人口統計: %d都市 (%s)", len(rows), period.label)
    return PopulationReport(stats_data_id, period.code, period.label, rows)


def to_scoring_input(report: PopulationReport) -> List[CityIndicators]:
    year = report.data_year
    return [
        CityIndicators(
            city_name=row.city_resolved,
            area_code=row.area_code,
            indicators=(
                IndicatorValue("population_total", row.total, year, report.stats_data_id),
                IndicatorValue("kids_ratio", row.ratio, year, report.stats_data_id),
            ),
        )
        for row in report.rows
    ]
