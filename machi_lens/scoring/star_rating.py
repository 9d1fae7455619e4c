"""全国パーセンタイル → 5段階スター評価と、表示用ヘルパー。"""

from __future__ import annotations

from typing import Mapping, Sequence

from machi_lens.scoring.types import IndicatorStarRating

NEUTRAL_STARS = 3.0

# (下限パーセンタイル, スター数)
STAR_THRESHOLDS = ((80, 5), (60, 4), (40, 3), (20, 2), (0, 1))

STAR_LABELS = {
    5: "とても良い",
    4: "良い",
    3: "普通",
    2: "やや低い",
    1: "要注意",
}


def percentile_to_stars(percentile: float) -> int:
    clamped = max(0.0, min(100.0, percentile))
    for min_pct, stars in STAR_THRESHOLDS:
        if clamped >= min_pct:
            return stars
    return 1


def render_star_text(stars: float) -> str:
    """例: 3.7 → '★★★★☆'"""
    full = int(round(max(1.0, min(5.0, stars))))
    return "★" * full + "☆" * (5 - full)


def star_label(stars: int) -> str:
    return STAR_LABELS[stars]


def compute_composite_stars(
    indicator_stars: Sequence[IndicatorStarRating], weights: Mapping[str, float]
) -> float:
    """重み付き平均のスター値（1.0-5.0, 小数1桁）。

    weights に無い指標は重み 1 として扱う。入力なし・重み合計 0 は中立の 3.0。
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for rating in indicator_stars:
        weight = weights.get(rating.indicator_id, 1.0)
        weighted_sum += rating.stars * weight
        total_weight += weight
    if total_weight == 0:
        return NEUTRAL_STARS
    return round(weighted_sum / total_weight, 1)


def apply_data_coverage_penalty(star_rating: float, available: int, total: int) -> float:
    """指標の欠損割合に応じて、スター値を中立の 3.0 側へ引き寄せる。"""
    if total <= 0:
        return star_rating
    coverage = max(0.0, min(1.0, available / total))
    return round(NEUTRAL_STARS + (star_rating - NEUTRAL_STARS) * coverage, 1)
