"""
分類（軸）の種別判定。種別ごとのスコア関数を AXIS_SCORERS に登録し、
最高スコアの分類を採用する。新しい軸種別はここに関数を足すだけでよい。
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Sequence

from machi_lens.estat.meta import ClassificationAxis
from machi_lens.normalize.label import normalize_label

AxisScorer = Callable[[ClassificationAxis], int]

_MUNICIPAL_SUFFIX = re.compile(r"(市|区|町|村)")


def score_area_axis(axis: ClassificationAxis) -> int:
    axis_id = normalize_label(axis.id)
    name = normalize_label(axis.label)
    score = 0
    if "area" in axis_id:
        score += 4
    if "地域" in name:
        score += 4
    if "地域事項" in name or "地域区分" in name:
        score += 3
    sample = " ".join(item.label for item in axis.items[:10])
    if _MUNICIPAL_SUFFIX.search(sample):
        score += 1
    return score


def score_time_axis(axis: ClassificationAxis) -> int:
    axis_id = normalize_label(axis.id)
    name = normalize_label(axis.label)
    score = 0
    if "time" in axis_id:
        score += 4
    if "時間" in name:
        score += 4
    if "時間軸" in name or "時点" in name:
        score += 2
    return score


def score_age_axis(axis: ClassificationAxis) -> int:
    axis_id = normalize_label(axis.id)
    name = normalize_label(axis.label)
    score = 0
    if axis_id.startswith("cat"):
        score += 2
    if "年齢" in name or "分類" in name:
        score += 3
    return score


AXIS_SCORERS: Dict[str, AxisScorer] = {
    "area": score_area_axis,
    "time": score_time_axis,
    "age": score_age_axis,
}


def rank_axes(axes: Sequence[ClassificationAxis], kind: str) -> List[ClassificationAxis]:
    """スコア降順（同点は元の順序を保持）で、スコア > 0 の分類のみ返す。"""
    scorer = AXIS_SCORERS[kind]
    scored = [(scorer(axis), axis) for axis in axes]
    scored = [pair for pair in scored if pair[0] > 0]
    scored.sort(key=lambda pair: -pair[0])
    return [axis for _, axis in scored]


def best_axis(axes: Sequence[ClassificationAxis], kind: str) -> Optional[ClassificationAxis]:
    ranked = rank_axes(axes, kind)
    return ranked[0] if ranked else None
