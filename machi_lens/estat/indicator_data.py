"""
ドメイン指標（犯罪・教育・医療・交通）の取得。

どのドメインも
  指標コード検出 → 時点候補を新しい順に試行 → 取得 → 区再編の集約 → 人口当たりに換算
という同じ流れなので、resolve_and_fetch_indicator に一本化し、ドメイン差分
（ラベル採点関数・人口当たりの単位・比率分類の優先有無）は IndicatorSpec で渡す。

指標が検出できない・どの時点にもデータが無い場合は例外にせず空の dict を返す。
呼び出し側は「この実行ではその指標が使えない」と扱う。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from machi_lens.estat.filters import (
    apply_overrides,
    is_per_capita_label,
    resolve_default_filters,
    resolve_per_capita_overrides,
)
from machi_lens.estat.indicator import DOMAIN_SCORERS, LabelScorer, resolve_indicator_class
from machi_lens.estat.meta import extract_class_objects, extract_data_values, values_by_area
from machi_lens.estat.time import data_year_of, resolve_latest_time, resolve_time_candidates
from machi_lens.estat.ward_reorganization import (
    aggregate_per_capita_values,
    aggregate_raw_values,
    expand_area_codes,
    expand_population_map,
)
from machi_lens.scoring.types import IndicatorValue

logger = logging.getLogger(__name__)

# メタ情報上の最新年にデータが無い場合に遡る最大時点数
MAX_TIME_FALLBACK = 5

SOURCE_ID = "estat"


@dataclass(frozen=True)
class IndicatorSpec:
    indicator_id: str
    label: str
    scorer: LabelScorer
    per_capita_unit: int
    # 「人口千人当たり」分類があれば実数より優先する（犯罪統計）
    prefer_per_capita_filters: bool = False


@dataclass(frozen=True)
class DomainConfig:
    name: str
    label: str
    stats_data_id: str
    indicators: Tuple[IndicatorSpec, ...]
    time_code: Optional[str] = None
    indicator_code: Optional[str] = None


def _spec(indicator_id: str, label: str, unit: int, prefer: bool = False) -> IndicatorSpec:
    return IndicatorSpec(indicator_id, label, DOMAIN_SCORERS[indicator_id], unit, prefer)


DOMAIN_INDICATORS: Mapping[str, Tuple[IndicatorSpec, ...]] = {
    "crime": (_spec("crime_rate", "刑法犯認知件数", 1_000, prefer=True),),
    "education": (
        _spec("elementary_schools_per_capita", "小学校数", 10_000),
        _spec("junior_high_schools_per_capita", "中学校数", 10_000),
    ),
    "healthcare": (
        _spec("hospitals_per_capita", "一般病院数", 100_000),
        _spec("clinics_per_capita", "一般診療所数", 100_000),
        _spec("pediatrics_per_capita", "小児科標榜施設数", 100_000),
    ),
    "transport": (_spec("station_count_per_capita", "鉄道駅数", 10_000),),
}

DOMAIN_LABELS = {
    "crime": "犯罪統計",
    "education": "教育統計",
    "healthcare": "医療統計",
    "transport": "交通統計",
}


def domain_config(name: str, dataset_cfg: Mapping[str, Any]) -> DomainConfig:
    """config の datasets.<name> から DomainConfig を作る。"""
    return DomainConfig(
        name=name,
        label=DOMAIN_LABELS.get(name, name),
        stats_data_id=str(dataset_cfg["stats_data_id"]),
        indicators=DOMAIN_INDICATORS[name],
        time_code=dataset_cfg.get("time_code"),
        indicator_code=dataset_cfg.get("indicator_code"),
    )


def _lookup_population(
    code: str, population: Optional[Mapping[str, float]], expanded: Optional[Mapping[str, float]]
) -> Optional[float]:
    if population and population.get(code):
        return population[code]
    if expanded and expanded.get(code):
        return expanded[code]
    return None


def resolve_and_fetch_indicator(
    client,
    stats_data_id: str,
    area_codes: Sequence[str],
    spec: IndicatorSpec,
    population: Optional[Mapping[str, float]] = None,
    time_code: Optional[str] = None,
    indicator_code: Optional[str] = None,
    domain_label: str = "",
) -> Dict[str, IndicatorValue]:
    """1指標を取得し、要求した area コードごとの人口当たり値を返す。

    最新時点から順に最大 MAX_TIME_FALLBACK 時点を試し、対象都市の値が1件でも
    得られた時点で打ち切る。time_code 指定時はその時点のみ試す。
    人口データが無く人口当たりに換算できない都市は結果に含めない。
    """
    label = domain_label or spec.label
    result: Dict[str, IndicatorValue] = {}
    if not area_codes:
        return result

    expanded_codes, mapping = expand_area_codes(area_codes)
    expanded_population = expand_population_map(population, mapping) if population else None

    axes = extract_class_objects(client.get_meta_info(stats_data_id))
    selection = resolve_indicator_class(axes, spec.scorer, indicator_code)
    if selection is None:
        logger.warning("%s: %s の分類を自動検出できませんでした", label, spec.label)
        return result

    if time_code:
        candidates = [resolve_latest_time(axes, time_code)]
    else:
        candidates = resolve_time_candidates(axes)[:MAX_TIME_FALLBACK]
    if not candidates:
        logger.warning("%s: 時間軸を特定できませんでした", label)
        return result

    exclude_ids = {"area", "time", candidates[0].axis_id, selection.axis_id}
    filters = resolve_default_filters(axes, exclude_ids)
    overrides = resolve_per_capita_overrides(axes, exclude_ids) if spec.prefer_per_capita_filters else []
    filters = apply_overrides(filters, overrides)
    already_per_capita = is_per_capita_label(selection.label) or bool(overrides)

    base_params = {
        "statsDataId": stats_data_id,
        "cdArea": ",".join(expanded_codes),
        selection.param_name: selection.code,
        **{f.param_name: f.code for f in filters},
    }

    requested = set(area_codes)
    for period in candidates:
        response = client.get_stats_data({**base_params, "cdTime": period.code})
        area_map = values_by_area(extract_data_values(response), period.code)

        if mapping:
            if already_per_capita:
                aggregate_per_capita_values(area_map, mapping)
            else:
                aggregate_raw_values(area_map, mapping)

        if not area_map:
            continue

        data_year = data_year_of(period)
        for code in area_codes:
            value = area_map.get(code)
            if value is None:
                continue
            if not already_per_capita:
                pop = _lookup_population(code, population, expanded_population)
                if not pop or pop <= 0:
                    continue
                value = value / pop * spec.per_capita_unit
            result[code] = IndicatorValue(spec.indicator_id, value, data_year, SOURCE_ID)

        if result:
            if period != candidates[0]:
                logger.info(
                    "%s: 最新時点(%s)にデータがないため、%s のデータを使用します",
                    label, candidates[0].label, period.label,
                )
            if not already_per_capita:
                logger.info("%s: %s を人口データで人口当たりに換算しました", label, spec.label)
            return result

        sample = ", ".join(list(area_map)[:5])
        if not requested.intersection(area_map):
            logger.warning(
                "%s: 取得した%d件のコードが対象都市コード(%s)と一致しません。例: [%s]",
                label, len(area_map), ",".join(area_codes), sample,
            )

    tried = ", ".join(c.label for c in candidates)
    logger.warning("%s: %s を試しましたがデータが見つかりませんでした", label, tried)
    return result


def build_domain_data(
    client,
    area_codes: Sequence[str],
    config: DomainConfig,
    population: Optional[Mapping[str, float]] = None,
) -> Dict[str, Dict[str, IndicatorValue]]:
    """ドメイン内の全指標を取得し {area_code: {indicator_id: IndicatorValue}} にまとめる。

    指標ごとに独立して時点フォールバックするため、指標によってデータ年が異なることがある。
    indicator_code は単一指標のドメインでのみ使う。
    """
    data: Dict[str, Dict[str, IndicatorValue]] = {}
    explicit = config.indicator_code if len(config.indicators) == 1 else None
    for spec in config.indicators:
        values = resolve_and_fetch_indicator(
            client,
            config.stats_data_id,
            area_codes,
            spec,
            population=population,
            time_code=config.time_code,
            indicator_code=explicit,
            domain_label=config.label,
        )
        for code, value in values.items():
            data.setdefault(code, {})[spec.indicator_id] = value
    return data


def indicator_ids_of(config: DomainConfig) -> List[str]:
    return [spec.indicator_id for spec in config.indicators]
