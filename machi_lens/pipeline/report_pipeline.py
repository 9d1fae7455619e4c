"""
レポート生成パイプライン。

Phase 0: 人口（必須。解決エラーはそのまま送出）
Phase 1: 不動産価格
Phase 2a: 犯罪
Phase 2b: 災害リスク（外部で取得済みのレコードを受け取って区再編を畳み込む）
Phase 3-5: 教育・医療・交通
最後に score_cities でスコアリングする。

Phase 1 以降は任意フェーズで、失敗してもログを出して残りのデータで続行する。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from machi_lens.errors import MachiLensError
from machi_lens.estat.indicator_data import build_domain_data, domain_config, indicator_ids_of
from machi_lens.estat.population import PopulationReport, build_population_report, to_scoring_input
from machi_lens.estat.ward_reorganization import (
    aggregate_boolean_values,
    aggregate_raw_values,
    expand_area_codes,
)
from machi_lens.reinfo.price import PriceStats, build_price_data, merge_price_into_scoring_input
from machi_lens.scoring.engine import score_cities
from machi_lens.scoring.merge import merge_indicators, merge_values_into_scoring_input
from machi_lens.scoring.presets import (
    CHILDCARE_FOCUSED,
    DISASTER_INDICATORS,
    EDUCATION_INDICATORS,
    HEALTHCARE_INDICATORS,
    POPULATION_INDICATORS,
    PRICE_INDICATORS,
    SAFETY_INDICATORS,
    TRANSPORT_INDICATORS,
    find_preset,
)
from machi_lens.scoring.types import (
    CityIndicators,
    CityScoreResult,
    IndicatorDefinition,
    IndicatorValue,
    WeightPreset,
)

logger = logging.getLogger(__name__)

DOMAIN_DEFINITIONS = {
    "crime": SAFETY_INDICATORS,
    "education": EDUCATION_INDICATORS,
    "healthcare": HEALTHCARE_INDICATORS,
    "transport": TRANSPORT_INDICATORS,
}

DOMAIN_ORDER = ("crime", "education", "healthcare", "transport")


@dataclass(frozen=True)
class DisasterRecord:
    flood_risk: bool
    landslide_risk: bool
    evacuation_site_count: int
    data_year: str = ""

    @property
    def risk_score(self) -> int:
        return int(self.flood_risk) + int(self.landslide_risk)


@dataclass(frozen=True)
class PipelineInput:
    city_names: Tuple[str, ...]
    preset: str = "childcare"
    include_price: bool = True
    include_crime: bool = True
    include_disaster: bool = True
    include_education: bool = True
    include_healthcare: bool = True
    include_transport: bool = True
    price_year: Optional[str] = None
    property_type: str = "condo"
    budget_man_yen: Optional[float] = None
    time_code: Optional[str] = None


@dataclass(frozen=True)
class PipelineResult:
    results: Tuple[CityScoreResult, ...]
    definitions: Tuple[IndicatorDefinition, ...]
    scoring_input: Tuple[CityIndicators, ...]
    population: PopulationReport
    preset: WeightPreset
    phases: Mapping[str, bool] = field(default_factory=dict)


def fold_disaster_records(
    records: Mapping[str, DisasterRecord], area_codes: Sequence[str]
) -> Dict[str, DisasterRecord]:
    """旧区コードの災害レコードを新区コードへ畳み込む。

    リスク有無は論理和、避難場所数は合計。新コードのレコードが既にあれば変更しない。
    """
    _, mapping = expand_area_codes(area_codes)
    folded = dict(records)
    if not mapping:
        return folded

    flood = {c: r.flood_risk for c, r in records.items()}
    landslide = {c: r.landslide_risk for c, r in records.items()}
    sites = {c: r.evacuation_site_count for c, r in records.items()}
    aggregate_boolean_values(flood, mapping)
    aggregate_boolean_values(landslide, mapping)
    aggregate_raw_values(sites, mapping)

    for new_code, wards in mapping.items():
        if new_code in folded or new_code not in flood:
            continue
        years = [records[w.code].data_year for w in wards if w.code in records and records[w.code].data_year]
        folded[new_code] = DisasterRecord(
            flood_risk=flood[new_code],
            landslide_risk=landslide[new_code],
            evacuation_site_count=int(sites[new_code]),
            data_year=max(years) if years else "",
        )
    return folded


def merge_disaster_into_scoring_input(
    cities: Sequence[CityIndicators], disaster_data: Mapping[str, DisasterRecord]
) -> List[CityIndicators]:
    def extract(record: Optional[DisasterRecord]):
        year = record.data_year if record else ""
        return [
            IndicatorValue("flood_risk", record.risk_score if record else None, year, "reinfolib"),
            IndicatorValue("evacuation_sites", record.evacuation_site_count if record else None, year, "reinfolib"),
        ]

    return merge_indicators(cities, disaster_data, extract)


def _optional_phase(label: str, func, *args, **kwargs):
    try:
        return func(*args, **kwargs)
    except (MachiLensError, requests.RequestException) as e:
        logger.warning("%sの取得に失敗しました: %s", label, getattr(e, "message", e))
        return None


def run_report_pipeline(
    pipeline_input: PipelineInput,
    cfg: Mapping[str, Any],
    estat_client,
    reinfo_client=None,
    disaster_records: Optional[Mapping[str, DisasterRecord]] = None,
    current_year: Optional[int] = None,
) -> PipelineResult:
    preset = find_preset(pipeline_input.preset)
    if preset is None:
        logger.warning("プリセット %s が見つからないため childcare を使います", pipeline_input.preset)
        preset = CHILDCARE_FOCUSED

    datasets = cfg.get("datasets", {})
    population_cfg = datasets.get("population", {})

    # Phase 0
    report = build_population_report(
        estat_client,
        str(population_cfg["stats_data_id"]),
        pipeline_input.city_names,
        selectors=population_cfg.get("selectors"),
        time_code=pipeline_input.time_code or population_cfg.get("time_code"),
    )
    scoring_input = to_scoring_input(report)
    definitions: List[IndicatorDefinition] = list(POPULATION_INDICATORS)
    area_codes = [r.area_code for r in report.rows]
    population_map = report.population_map()
    phases: Dict[str, bool] = {}

    # Phase 1
    if pipeline_input.include_price and reinfo_client is not None:
        year = pipeline_input.price_year or str((current_year or date.today().year) - 1)
        price_data: Optional[Dict[str, PriceStats]] = _optional_phase(
            "不動産価格データ",
            build_price_data,
            reinfo_client,
            area_codes,
            year,
            pipeline_input.property_type,
            pipeline_input.budget_man_yen,
        )
        phases["price"] = bool(price_data)
        if price_data:
            scoring_input = merge_price_into_scoring_input(scoring_input, price_data)
            definitions.extend(PRICE_INDICATORS)

    enabled = {
        "crime": pipeline_input.include_crime,
        "education": pipeline_input.include_education,
        "healthcare": pipeline_input.include_healthcare,
        "transport": pipeline_input.include_transport,
    }

    # Phase 2b
    if pipeline_input.include_disaster and disaster_records:
        folded = fold_disaster_records(disaster_records, area_codes)
        phases["disaster"] = any(c in folded for c in area_codes)
        if phases["disaster"]:
            scoring_input = merge_disaster_into_scoring_input(scoring_input, folded)
            definitions.extend(DISASTER_INDICATORS)

    for name in DOMAIN_ORDER:
        if not enabled[name] or name not in datasets:
            continue
        config = domain_config(name, datasets[name])
        data = _optional_phase(
            config.label, build_domain_data, estat_client, area_codes, config, population_map
        )
        phases[name] = bool(data)
        if data:
            scoring_input = merge_values_into_scoring_input(scoring_input, data, indicator_ids_of(config))
            definitions.extend(DOMAIN_DEFINITIONS[name])

    results = score_cities(scoring_input, definitions, preset, current_year=current_year)
    return PipelineResult(
        results=tuple(results),
        definitions=tuple(definitions),
        scoring_input=tuple(scoring_input),
        population=report,
        preset=preset,
        phases=phases,
    )
