from __future__ import annotations

from typing import Sequence

from machi_lens.scoring.types import ChoiceScore, CompositeResult, IndicatorDefinition, WeightPreset


def calculate_composite_score(
    choice_scores: Sequence[ChoiceScore],
    definitions: Sequence[IndicatorDefinition],
    preset: WeightPreset,
) -> CompositeResult:
    """カテゴリ重みによる Choice Score の加重平均。

    分母は「値がある指標」の重みの合計にする（欠損指標のぶん不利にならない）。
    定義に無い指標IDは無視する。有効なスコアが無ければ 0。
    """
    by_id = {d.id: d for d in definitions}
    weighted_sum = 0.0
    used_weight = 0.0
    used = 0
    for choice in choice_scores:
        definition = by_id.get(choice.indicator_id)
        if definition is None:
            continue
        weight = preset.weights.get(definition.category, 0.0)
        weighted_sum += choice.score * weight
        used_weight += weight
        used += 1

    score = weighted_sum / used_weight if used_weight > 0 else 0.0
    return CompositeResult(score=round(score, 1), used_count=used, total_count=len(definitions))
