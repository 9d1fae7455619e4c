from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from machi_lens.scoring.types import LOWER_BETTER, ChoiceScore, IndicatorDefinition


def normalize_within_candidates(
    values: Sequence[Tuple[str, Optional[float]]], definition: IndicatorDefinition
) -> List[ChoiceScore]:
    """候補都市内の min-max 正規化で 0-100 の Choice Score を返す。

    values は (都市名, 生値) の列。生値が None の都市は結果に含めない（0点扱いにしない）。
    - 有効値が1件のみ → 100
    - 全都市同値 → 全員 50
    - lower_better → 100 - score
    """
    valid = [(name, v) for name, v in values if v is not None]
    if not valid:
        return []

    if len(valid) == 1:
        name, _ = valid[0]
        return [ChoiceScore(indicator_id=definition.id, score=100.0, city_name=name)]

    nums = [v for _, v in valid]
    lo, hi = min(nums), max(nums)
    span = hi - lo

    scores = []
    for name, v in valid:
        if span == 0:
            score = 50.0
        else:
            score = (v - lo) / span * 100
            if definition.direction == LOWER_BETTER:
                score = 100 - score
        scores.append(ChoiceScore(indicator_id=definition.id, score=score, city_name=name))
    return scores
