"""
ドメイン指標（犯罪・教育・医療・交通）の分類コード検出。

指標ごとにラベル → スコアの関数を DOMAIN_SCORERS に登録しておき、
cat/tab 分類の全項目を採点して最高スコアのコードを採用する。
新しい指標はスコア関数を1つ足すだけで検出対象になる。
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Sequence

from machi_lens.estat.filters import is_per_capita_label
from machi_lens.estat.meta import (
    ClassificationAxis,
    IndicatorSelection,
    is_category_axis,
    to_cd_param_name,
)
from machi_lens.normalize.label import normalize_label

logger = logging.getLogger(__name__)

LabelScorer = Callable[[str], int]


def score_crime_label(name: str) -> int:
    """刑法犯認知件数を優先し、「千人当たり」の比率指標には +10 のボーナス"""
    normalized = normalize_label(name)
    bonus = 10 if is_per_capita_label(name) else 0
    if "刑法犯" in normalized and "認知件数" in normalized:
        return 100 + bonus
    if "刑法犯" in normalized:
        return 80 + bonus
    if "犯罪" in normalized and "件数" in normalized:
        return 70 + bonus
    if "犯罪" in normalized:
        return 50 + bonus
    return 0


def _count_label_scorer(keyword: str) -> LabelScorer:
    # 「<keyword>数」ちょうどなら100、keyword と「数」を含めば80
    def scorer(name: str) -> int:
        normalized = normalize_label(name)
        if keyword in normalized and "数" in normalized:
            return 100 if normalized == f"{keyword}数" else 80
        return 0

    scorer.__name__ = f"score_{keyword}_count"
    return scorer


score_elementary_label = _count_label_scorer("小学校")
score_junior_high_label = _count_label_scorer("中学校")
score_hospital_label = _count_label_scorer("一般病院")
score_clinic_label = _count_label_scorer("一般診療所")


def score_pediatrics_label(name: str) -> int:
    normalized = normalize_label(name)
    if "小児科" in normalized and "標榜" in normalized:
        return 100
    if "小児科" in normalized and "施設" in normalized:
        return 80
    return 0


def score_station_label(name: str) -> int:
    # normalize_label で小文字化されるため "JR" は "jr" で比較する
    normalized = normalize_label(name)
    if "駅" not in normalized or "数" not in normalized:
        return 0
    if "鉄道" in normalized:
        return 100 if normalized == "鉄道駅数" else 80
    if normalized == "駅数":
        return 70
    if "jr" in normalized or "私鉄" in normalized:
        return 60
    return 0


DOMAIN_SCORERS: Dict[str, LabelScorer] = {
    "crime_rate": score_crime_label,
    "elementary_schools_per_capita": score_elementary_label,
    "junior_high_schools_per_capita": score_junior_high_label,
    "hospitals_per_capita": score_hospital_label,
    "clinics_per_capita": score_clinic_label,
    "pediatrics_per_capita": score_pediatrics_label,
    "station_count_per_capita": score_station_label,
}


def resolve_indicator_class(
    axes: Sequence[ClassificationAxis],
    scorer: LabelScorer,
    explicit_code: Optional[str] = None,
) -> Optional[IndicatorSelection]:
    """cat/tab 分類を走査し、指標を表すコードを返す。見つからなければ None。

    explicit_code がどこかの分類に存在すればそれを優先する。
    社会・人口統計体系では指標が tab（表章項目）に入るため tab も対象にする。
    """
    indicator_axes = [a for a in axes if is_category_axis(a)]
    if not indicator_axes:
        return None

    if explicit_code:
        for axis in indicator_axes:
            matched = axis.find(explicit_code)
            if matched is not None:
                return IndicatorSelection(
                    axis_id=axis.id,
                    param_name=to_cd_param_name(axis.id),
                    code=matched.code,
                    label=matched.label,
                )
        logger.warning("指標コード %s がメタ情報に存在しないため自動検出します", explicit_code)

    best = None
    best_score = 0
    for axis in indicator_axes:
        for item in axis.items:
            score = scorer(item.label)
            if score > best_score:
                best, best_score = (axis, item), score

    if best is None:
        return None
    axis, item = best
    return IndicatorSelection(
        axis_id=axis.id,
        param_name=to_cd_param_name(axis.id),
        code=item.code,
        label=item.label,
    )
