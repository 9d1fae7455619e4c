"""
単一都市の全国ベースライン基準スコアリング。

score_cities は2都市以上の候補セット比較（min-max 正規化）が前提のため、
1都市だけを評価する場合はこちらで全国パーセンタイルとスター評価のみ算出する。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from machi_lens.scoring.engine import indicator_stars_for, star_weights_for
from machi_lens.scoring.star_rating import (
    NEUTRAL_STARS,
    apply_data_coverage_penalty,
    compute_composite_stars,
)
from machi_lens.scoring.types import (
    CityIndicators,
    IndicatorDefinition,
    IndicatorStarRating,
    WeightPreset,
)


@dataclass(frozen=True)
class SingleCityScore:
    city_name: str
    area_code: str
    star_rating: float
    indicator_stars: Tuple[IndicatorStarRating, ...]


def score_single_city(
    city: CityIndicators,
    definitions: Sequence[IndicatorDefinition],
    preset: WeightPreset,
) -> SingleCityScore:
    stars = indicator_stars_for(city, definitions)
    raw_rating = (
        compute_composite_stars(stars, star_weights_for(stars, definitions, preset)) if stars else NEUTRAL_STARS
    )
    # 指標が揃っていない都市は中立側へ寄せる
    rating = apply_data_coverage_penalty(raw_rating, len(stars), len(definitions))
    return SingleCityScore(
        city_name=city.city_name,
        area_code=city.area_code,
        star_rating=rating,
        indicator_stars=tuple(stars),
    )
