"""
デフォルト（集約）フィルタの検出。

解決済みの地域・時間・指標以外の cat/tab 分類について「総数」「実数」に当たる
コードを選び、API パラメータに追加する。男女別・構成比などのクロス集計行を
取り込んで二重計上しないため。見つからない分類は単に無視する。
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from machi_lens.estat.meta import (
    ClassificationAxis,
    ClassificationItem,
    DefaultFilter,
    is_category_axis,
    to_cd_param_name,
)
from machi_lens.normalize.label import normalize_label

# 人口当たり比率であることを示すラベル
PER_CAPITA_KEYWORDS = ("千人当たり", "千人当り", "1000人当")


def is_total_label(name: str) -> int:
    """「総数」「総人口」「男女計」「計」に該当するラベルのスコア"""
    normalized = normalize_label(name)
    if normalized == "総数":
        return 100
    if normalized == "総人口":
        return 95
    if normalized == "男女計":
        return 90
    if normalized == "計":
        return 80
    if "総数" in normalized or "総人口" in normalized:
        return 70
    return 0


def is_default_label(name: str) -> int:
    total_score = is_total_label(name)
    if total_score > 0:
        return total_score
    normalized = normalize_label(name)
    if normalized == "実数":
        return 100
    if "実数" in normalized:
        return 80
    if normalized in ("人", "人口"):
        return 60
    return 0


def is_per_capita_label(name: str) -> bool:
    normalized = normalize_label(name)
    return any(keyword in normalized for keyword in PER_CAPITA_KEYWORDS)


def _find_default_item(axis: ClassificationAxis) -> Optional[ClassificationItem]:
    best = None
    best_score = 0
    for item in axis.items:
        score = is_default_label(item.label)
        if score > best_score:
            best, best_score = item, score
    return best


def _open_axes(
    axes: Sequence[ClassificationAxis], exclude_ids: Iterable[str]
) -> List[ClassificationAxis]:
    excluded = set(exclude_ids)
    return [a for a in axes if a.id not in excluded and is_category_axis(a)]


def resolve_default_filters(
    axes: Sequence[ClassificationAxis], exclude_ids: Iterable[str]
) -> List[DefaultFilter]:
    filters = []
    for axis in _open_axes(axes, exclude_ids):
        item = _find_default_item(axis)
        if item is None:
            continue
        filters.append(DefaultFilter(param_name=to_cd_param_name(axis.id), code=item.code))
    return filters


def resolve_per_capita_overrides(
    axes: Sequence[ClassificationAxis], exclude_ids: Iterable[str]
) -> List[DefaultFilter]:
    """「人口千人当たり」を表す項目を持つ分類があれば、そのコードを返す。

    デフォルトフィルタ（実数）より優先して使うと、件数ではなく比率を取得できる。
    """
    overrides = []
    for axis in _open_axes(axes, exclude_ids):
        for item in axis.items:
            if is_per_capita_label(item.label):
                overrides.append(
                    DefaultFilter(param_name=to_cd_param_name(axis.id), code=item.code)
                )
                break
    return overrides


def apply_overrides(
    filters: Sequence[DefaultFilter], overrides: Sequence[DefaultFilter]
) -> List[DefaultFilter]:
    """同じパラメータ名のフィルタを overrides で置き換える。"""
    replaced = {o.param_name: o for o in overrides}
    merged = [replaced.pop(f.param_name, f) for f in filters]
    merged.extend(replaced.values())
    return merged
