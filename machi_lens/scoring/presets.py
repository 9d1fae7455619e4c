"""重みプリセットと指標定義カタログ。"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from machi_lens.scoring.types import (
    CATEGORIES,
    HIGHER_BETTER,
    LOWER_BETTER,
    IndicatorDefinition,
    WeightPreset,
)

CHILDCARE_FOCUSED = WeightPreset(
    name="childcare",
    label="子育て重視",
    weights=MappingProxyType(
        {"childcare": 0.35, "price": 0.2, "safety": 0.15, "disaster": 0.05, "transport": 0.05, "education": 0.2}
    ),
)

PRICE_FOCUSED = WeightPreset(
    name="price",
    label="価格重視",
    weights=MappingProxyType(
        {"childcare": 0.1, "price": 0.5, "safety": 0.1, "disaster": 0.1, "transport": 0.1, "education": 0.1}
    ),
)

SAFETY_FOCUSED = WeightPreset(
    name="safety",
    label="安全重視",
    weights=MappingProxyType(
        {"childcare": 0.15, "price": 0.1, "safety": 0.35, "disaster": 0.2, "transport": 0.1, "education": 0.1}
    ),
)

BALANCED = WeightPreset(
    name="balanced",
    label="バランス",
    weights=MappingProxyType(
        {
            "childcare": 0.15,
            "price": 0.15,
            "safety": 0.15,
            "disaster": 0.15,
            "transport": 0.1,
            "education": 0.15,
            "healthcare": 0.15,
        }
    ),
)

ALL_PRESETS: Tuple[WeightPreset, ...] = (CHILDCARE_FOCUSED, PRICE_FOCUSED, SAFETY_FOCUSED, BALANCED)


def find_preset(name: str) -> Optional[WeightPreset]:
    for preset in ALL_PRESETS:
        if preset.name == name:
            return preset
    return None


def validate_weights(weights: Mapping[str, float]) -> List[str]:
    """重みを検証する。不正（負値・非有限・全ゼロ・未知カテゴリ）は ValueError。

    合計が 1.0 でない場合は例外にせず、警告文のリストを返す。
    """
    for category, weight in weights.items():
        if category not in CATEGORIES:
            raise ValueError(f"未知のカテゴリです: {category}")
        if not isinstance(weight, (int, float)) or not math.isfinite(weight) or weight < 0:
            raise ValueError(f"重みは0以上の有限数である必要があります: {category}={weight}")
    total = sum(weights.values())
    if total <= 0:
        raise ValueError("重みの合計が0です")
    warnings = []
    if abs(total - 1.0) > 1e-6:
        warnings.append(f"重みの合計が1.0ではありません（{total:.3f}）。相対比として扱います。")
    return warnings


# Phase 0: 人口
POPULATION_INDICATORS = (
    IndicatorDefinition("population_total", "総人口", "人", HIGHER_BETTER, "childcare", 0),
    IndicatorDefinition("kids_ratio", "0-14歳比率", "%", HIGHER_BETTER, "childcare", 1),
)

# Phase 1: 不動産価格
PRICE_INDICATORS = (
    IndicatorDefinition("condo_price_median", "中古マンション価格（中央値）", "万円", LOWER_BETTER, "price", 0),
)

# Phase 2a: 犯罪
SAFETY_INDICATORS = (
    IndicatorDefinition("crime_rate", "刑法犯認知件数（人口千人当たり）", "件/千人", LOWER_BETTER, "safety", 2),
)

# Phase 2b: 災害
DISASTER_INDICATORS = (
    IndicatorDefinition("flood_risk", "洪水・土砂災害リスク", "リスクスコア", LOWER_BETTER, "disaster", 0),
    IndicatorDefinition("evacuation_sites", "避難場所数", "箇所", HIGHER_BETTER, "disaster", 0),
)

# Phase 3: 教育
EDUCATION_INDICATORS = (
    IndicatorDefinition("elementary_schools_per_capita", "小学校数（人口1万人あたり）", "校/万人", HIGHER_BETTER, "education", 2),
    IndicatorDefinition("junior_high_schools_per_capita", "中学校数（人口1万人あたり）", "校/万人", HIGHER_BETTER, "education", 2),
)

# Phase 4: 医療
HEALTHCARE_INDICATORS = (
    IndicatorDefinition("hospitals_per_capita", "一般病院数（人口10万人あたり）", "施設/10万人", HIGHER_BETTER, "healthcare", 1),
    IndicatorDefinition("clinics_per_capita", "一般診療所数（人口10万人あたり）", "施設/10万人", HIGHER_BETTER, "healthcare", 1),
    IndicatorDefinition("pediatrics_per_capita", "小児科標榜施設数（人口10万人あたり）", "施設/10万人", HIGHER_BETTER, "healthcare", 1),
)

# Phase 5: 交通
TRANSPORT_INDICATORS = (
    IndicatorDefinition("station_count_per_capita", "鉄道駅数（人口1万人あたり）", "駅/万人", HIGHER_BETTER, "transport", 2),
)

ALL_INDICATORS: Tuple[IndicatorDefinition, ...] = (
    POPULATION_INDICATORS
    + PRICE_INDICATORS
    + SAFETY_INDICATORS
    + DISASTER_INDICATORS
    + EDUCATION_INDICATORS
    + HEALTHCARE_INDICATORS
    + TRANSPORT_INDICATORS
)
