"""
候補都市セットのスコアリング。

生値の収集 → 候補内正規化（Choice Score）→ 候補内パーセンタイル（Baseline）
→ 全国パーセンタイルとスター評価 → 加重合成スコア → 信頼度 → 順位付け
を1回の純粋関数呼び出しで行う。実行間で状態は持たない。
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence

import pandas as pd

from machi_lens.scoring.composite import calculate_composite_score
from machi_lens.scoring.confidence import evaluate_confidence
from machi_lens.scoring.national_baseline import compute_national_percentile
from machi_lens.scoring.normalize import normalize_within_candidates
from machi_lens.scoring.percentile import calculate_percentile
from machi_lens.scoring.star_rating import compute_composite_stars, percentile_to_stars
from machi_lens.scoring.types import (
    BaselineScore,
    ChoiceScore,
    CityIndicators,
    CityScoreResult,
    IndicatorDefinition,
    IndicatorStarRating,
    WeightPreset,
)

BASELINE_NAME = "候補内"
UNKNOWN_YEAR = "不明"


def indicator_stars_for(
    city: CityIndicators, definitions: Sequence[IndicatorDefinition]
) -> List[IndicatorStarRating]:
    stars = []
    for definition in definitions:
        raw = city.raw(definition.id)
        if raw is None:
            continue
        pct = compute_national_percentile(raw, definition.id, definition.direction)
        stars.append(IndicatorStarRating(definition.id, percentile_to_stars(pct), pct))
    return stars


def star_weights_for(
    indicator_stars: Sequence[IndicatorStarRating],
    definitions: Sequence[IndicatorDefinition],
    preset: WeightPreset,
) -> Dict[str, float]:
    by_id = {d.id: d for d in definitions}
    weights = {}
    for rating in indicator_stars:
        definition = by_id.get(rating.indicator_id)
        weights[rating.indicator_id] = preset.weights.get(definition.category, 0.0) if definition else 0.0
    return weights


def _latest_year(city: CityIndicators) -> str:
    years = [i.data_year for i in city.indicators if i.data_year]
    return max(years) if years else UNKNOWN_YEAR


def score_cities(
    cities: Sequence[CityIndicators],
    definitions: Sequence[IndicatorDefinition],
    preset: WeightPreset,
    current_year: Optional[int] = None,
) -> List[CityScoreResult]:
    # 同名の都市（府中市など）があり得るため、都市は入力位置で識別する
    choice_by_city: List[List[ChoiceScore]] = [[] for _ in cities]
    baseline_by_city: List[List[BaselineScore]] = [[] for _ in cities]

    for definition in definitions:
        raws = [c.raw(definition.id) for c in cities]
        keyed = [(str(i), v) for i, v in enumerate(raws)]
        for choice in normalize_within_candidates(keyed, definition):
            i = int(choice.city_name)
            choice_by_city[i].append(replace(choice, city_name=cities[i].city_name))

        population = [v for v in raws if v is not None]
        for i, city in enumerate(cities):
            if city.get(definition.id) is None:
                continue
            baseline = calculate_percentile(city.raw(definition.id), population, definition, BASELINE_NAME)
            baseline_by_city[i].append(replace(baseline, population_size=len(cities)))

    defined_ids = {d.id for d in definitions}
    unscored = []
    for i, city in enumerate(cities):
        choices = choice_by_city[i]
        composite = calculate_composite_score(choices, definitions, preset)

        stars = indicator_stars_for(city, definitions)
        star_rating = (
            compute_composite_stars(stars, star_weights_for(stars, definitions, preset)) if stars else None
        )

        total = len(definitions)
        available = sum(1 for v in city.indicators if v.indicator_id in defined_ids and v.raw_value is not None)
        missing = max(0, total - available)
        missing_rate = missing / total if total > 0 else 1.0
        confidence = evaluate_confidence(_latest_year(city), None, missing_rate, current_year)

        notes = (f"{total}指標中{missing}件のデータが欠損",) if missing_rate > 0 else ()

        unscored.append(
            CityScoreResult(
                city_name=city.city_name,
                area_code=city.area_code,
                baseline=tuple(baseline_by_city[i]),
                choice=tuple(choices),
                composite_score=composite.score,
                confidence=confidence,
                rank=0,
                star_rating=star_rating,
                indicator_stars=tuple(stars),
                notes=notes,
            )
        )

    # 同点は入力順を保持（安定ソート）
    order = sorted(range(len(unscored)), key=lambda i: -unscored[i].composite_score)
    ranks = {idx: pos + 1 for pos, idx in enumerate(order)}
    return [replace(r, rank=ranks[i]) for i, r in enumerate(unscored)]


def results_to_frame(
    results: Sequence[CityScoreResult], definitions: Sequence[IndicatorDefinition]
) -> pd.DataFrame:
    """1都市1行の表（順位昇順）。指標ごとの Choice Score は choice__<id> 列。"""
    rows = []
    for r in results:
        row = {
            "rank": r.rank,
            "city_name": r.city_name,
            "area_code": r.area_code,
            "composite_score": r.composite_score,
            "star_rating": r.star_rating,
            "confidence": r.confidence.level,
            "confidence_reason": r.confidence.reason,
            "notes": " / ".join(r.notes),
        }
        choice = r.choice_by_id()
        for d in definitions:
            row[f"choice__{d.id}"] = choice.get(d.id)
        rows.append(row)
    df = pd.DataFrame(rows)
    if df.empty:
        return df
    return df.sort_values("rank", kind="stable").reset_index(drop=True)
