"""時間軸（cdTime）の特定と、新しい順の時点候補リスト。"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from machi_lens.errors import EmptyTimeAxis, ExplicitTimeCodeNotFound, TimeAxisNotFound
from machi_lens.estat.axes import best_axis
from machi_lens.estat.meta import ClassificationAxis, ClassificationItem, TimeSelection

_NON_DIGIT = re.compile(r"\D")


def _time_sort_key(item: ClassificationItem) -> Tuple[int, str]:
    # 数字部分の桁数が多い（年+四半期など詳細な）コードを優先し、同桁なら降順
    digits = _NON_DIGIT.sub("", item.code)
    return len(digits), digits or item.code


def _sorted_newest_first(items: Sequence[ClassificationItem]) -> List[ClassificationItem]:
    return sorted(items, key=_time_sort_key, reverse=True)


def resolve_time_class(axes: Sequence[ClassificationAxis]) -> Optional[ClassificationAxis]:
    return best_axis(axes, "time")


def resolve_time_candidates(axes: Sequence[ClassificationAxis]) -> List[TimeSelection]:
    """time 分類のコードを新しい順に並べて返す。時間軸が無ければ空リスト。

    最新年にデータが無い場合のフォールバック検索に使う。
    """
    time_axis = resolve_time_class(axes)
    if time_axis is None:
        return []
    return [
        TimeSelection(axis_id=time_axis.id, code=item.code, label=item.label)
        for item in _sorted_newest_first(time_axis.items)
    ]


def resolve_latest_time(
    axes: Sequence[ClassificationAxis], explicit_code: Optional[str] = None
) -> TimeSelection:
    time_axis = resolve_time_class(axes)
    if time_axis is None:
        raise TimeAxisNotFound(
            "時間軸(cdTime)をメタ情報から特定できませんでした",
            ["--time-code で明示指定してください。"],
        )

    if explicit_code:
        matched = time_axis.find(explicit_code)
        if matched is None:
            examples = ", ".join(f"{i.code}({i.label})" for i in time_axis.items[-8:])
            raise ExplicitTimeCodeNotFound(
                f"--time-code '{explicit_code}' は存在しません",
                [f"利用可能な時間コード例: {examples}"],
            )
        return TimeSelection(axis_id=time_axis.id, code=matched.code, label=matched.label)

    ordered = _sorted_newest_first(time_axis.items)
    if not ordered:
        raise EmptyTimeAxis("時間軸に値が存在しません", ["別の statsDataId を選択してください。"])
    latest = ordered[0]
    return TimeSelection(axis_id=time_axis.id, code=latest.code, label=latest.label)


def data_year_of(selection: TimeSelection) -> str:
    """時間コード先頭4桁の数字を西暦年として返す（例: 2020000000 → '2020'）"""
    return _NON_DIGIT.sub("", selection.code)[:4]
