"""年齢区分（総数 / 0〜14歳）の分類とコードを特定する。"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from machi_lens.errors import (
    AgeAxisNotFound,
    AxisDiagnostic,
    KidsCategoryNotFound,
    TotalCategoryNotFound,
)
from machi_lens.estat.axes import rank_axes
from machi_lens.estat.filters import is_total_label
from machi_lens.estat.meta import (
    AgeSelection,
    ClassificationAxis,
    ClassificationItem,
    to_cd_param_name,
)
from machi_lens.normalize.label import normalize_label

RECOMMENDED_POPULATION_TABLE = "0003448299"

_KIDS_EXACT = re.compile(r"^0[~\-]14歳$")
_KIDS_RANGE = re.compile(r"0[~\-]14")


def is_kids_label(name: str) -> int:
    normalized = normalize_label(name)
    if _KIDS_EXACT.search(normalized):
        return 100
    if _KIDS_RANGE.search(normalized):
        return 95
    if "0歳" in normalized and "14歳" in normalized:
        return 90
    if "15歳未満" in normalized:
        return 85
    if "14歳以下" in normalized:
        return 80
    return 0


def _best_score(axis: ClassificationAxis, scorer) -> int:
    return max((scorer(item.label) for item in axis.items), default=0)


def _argmax(axis: ClassificationAxis, scorer) -> Optional[ClassificationItem]:
    best = None
    best_score = None
    for item in axis.items:
        score = scorer(item.label)
        if best_score is None or score > best_score:
            best, best_score = item, score
    return best


def _pick(axis, code, scorer) -> Optional[ClassificationItem]:
    if code:
        return axis.find(code)
    return _argmax(axis, scorer)


def _item_examples(axis: ClassificationAxis) -> str:
    return ", ".join(f"{i.code}:{i.label}" for i in axis.items[:12])


def resolve_age_selection(
    axes: Sequence[ClassificationAxis],
    class_id: Optional[str] = None,
    total_code: Optional[str] = None,
    kids_code: Optional[str] = None,
) -> AgeSelection:
    """総数と0〜14歳の両方を持つ分類を選ぶ。

    class_id / total_code / kids_code を指定すると自動判定を上書きする。
    見つからない場合は候補分類ごとの診断結果を持つ AgeAxisNotFound を送出する。
    """
    candidates = rank_axes(axes, "age")

    if class_id:
        selected = next((a for a in candidates if a.id == class_id), None)
    else:
        selected = next(
            (
                a for a in candidates
                if _best_score(a, is_total_label) > 0 and _best_score(a, is_kids_label) > 0
            ),
            None,
        )

    if selected is None:
        diagnostics = [
            AxisDiagnostic(
                class_id=a.id,
                name=a.label,
                has_total=_best_score(a, is_total_label) > 0,
                has_kids=_best_score(a, is_kids_label) > 0,
                sample=", ".join(i.label for i in a.items[:6]),
            )
            for a in candidates[:5]
        ]
        if diagnostics:
            first_hint = "候補分類の診断:\n" + "\n".join(d.describe() for d in diagnostics)
        else:
            first_hint = "分類候補が見つかりませんでした。"
        raise AgeAxisNotFound(
            "年齢区分（総数/0〜14）を特定できませんでした",
            diagnostics,
            [
                first_hint,
                "--class-id/--total-code/--kids-code で手動指定するか、別の statsDataId を試してください。",
                f"推奨統計表: --stats-data-id {RECOMMENDED_POPULATION_TABLE}",
            ],
        )

    total = _pick(selected, total_code, is_total_label)
    kids = _pick(selected, kids_code, is_kids_label)

    # 手動指定されたコードはラベル判定をしない
    if total is None or (not total_code and is_total_label(total.label) <= 0):
        raise TotalCategoryNotFound(
            "総数カテゴリを特定できませんでした",
            [f"分類 {selected.id} の候補例: {_item_examples(selected)}", "--total-code で手動指定してください。"],
        )
    if kids is None or (not kids_code and is_kids_label(kids.label) <= 0):
        raise KidsCategoryNotFound(
            "0〜14歳カテゴリを特定できませんでした",
            [f"分類 {selected.id} の候補例: {_item_examples(selected)}", "--kids-code で手動指定してください。"],
        )

    return AgeSelection(
        axis_id=selected.id,
        param_name=to_cd_param_name(selected.id),
        total=total,
        kids=kids,
    )
