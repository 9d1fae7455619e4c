from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from machi_lens.scoring.types import LOWER_BETTER, BaselineScore, IndicatorDefinition


def calculate_percentile(
    target: Optional[float],
    population: Sequence[float],
    definition: IndicatorDefinition,
    baseline_name: str,
) -> BaselineScore:
    """母集団内での順位パーセンタイル (below + 0.5*equal) / n * 100。

    target が None（データなし）の場合は 0 を返す。低い実スコアとは区別される前提。
    """
    values = np.asarray(population, dtype=float)
    size = int(values.size)
    if target is None or size == 0:
        return BaselineScore(definition.id, 0.0, size, baseline_name)

    below = int(np.count_nonzero(values < target))
    equal = int(np.count_nonzero(values == target))
    pct = (below + 0.5 * equal) / size * 100
    if definition.direction == LOWER_BETTER:
        pct = 100 - pct
    return BaselineScore(definition.id, round(pct, 1), size, baseline_name)
