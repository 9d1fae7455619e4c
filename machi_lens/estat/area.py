"""
地域分類（cdArea）の特定と、市区町村名 → エリアコードの解決。

名称解決は以下の順に段階的に試し、ちょうど1件に絞れた段階で確定する:
  1. 正規化ラベルの完全一致（都道府県名を除いた形も比較）
  2. カナ正規化の完全一致（カタカナ入力 vs ひらがな表記）
  3. 読み仮名辞書による逆引き（かな入力）
  4. 部分一致
段階1で複数ヒットした場合は緩い段階へは進まず即座に曖昧エラーとする。
"""

from __future__ import annotations

import re
from typing import List, Sequence

from machi_lens.errors import AmbiguousCity, AreaAxisNotFound, CityNotFound
from machi_lens.estat.axes import best_axis
from machi_lens.estat.meta import AreaEntry, ClassificationAxis, CityResolution
from machi_lens.normalize.label import normalize_label, normalize_label_with_kana
from machi_lens.normalize.readings import find_by_reading

MAX_SUGGESTIONS = 8

_PREFECTURE_PREFIX = re.compile(r"^(北海道|東京都|京都府|大阪府|.{2,3}県)")

# 政令指定都市の市コード（区を持つ親コード）
DESIGNATED_CITY_CODES = frozenset(
    {
        "01100", "04100", "11100", "12100", "14100", "14130", "14150",
        "15100", "22100", "22130", "23100", "26100", "27100", "27140",
        "28100", "33100", "34100", "40100", "40130", "43100",
    }
)


def resolve_area_class(axes: Sequence[ClassificationAxis]) -> ClassificationAxis:
    selected = best_axis(axes, "area")
    if selected is None:
        raise AreaAxisNotFound(
            "地域事項(cdArea)をメタ情報から特定できませんでした",
            [
                "statsDataId が市区町村を含む統計表か確認してください。",
                "キーワード「市区町村 人口」で統計表を再検索してください。",
            ],
        )
    return selected


def build_area_entries(area_axis: ClassificationAxis) -> List[AreaEntry]:
    return [AreaEntry(code=item.code, label=item.label) for item in area_axis.items]


def is_municipality_code(code: str) -> bool:
    """5桁の市区町村コードか（都道府県・全国の集計コードは除く）"""
    core = str(code)[:5]
    return len(core) == 5 and core.isdigit() and not core.endswith("000")


def is_designated_city_code(code: str) -> bool:
    return str(code)[:5] in DESIGNATED_CITY_CODES


def strip_prefecture(text: str) -> str:
    return _PREFECTURE_PREFIX.sub("", text.strip())


def candidate_score(text: str, target: str) -> int:
    """候補提示用の類似度: 完全一致=100, 包含=70, それ以外は共通文字数"""
    a = normalize_label(text)
    b = normalize_label(target)
    if a == b:
        return 100
    if a and b and (a in b or b in a):
        return 70
    return sum(1 for ch in set(a) if ch in b)


def _fmt(entries: Sequence[AreaEntry]) -> str:
    return ", ".join(f"{e.label}({e.code})" for e in entries[:MAX_SUGGESTIONS])


def _resolved(text: str, entry: AreaEntry) -> CityResolution:
    return CityResolution(input_text=text, resolved_label=entry.label, code=entry.code)


def resolve_city(text: str, area_entries: Sequence[AreaEntry]) -> CityResolution:
    normalized_input = normalize_label(text)
    stripped_input = normalize_label(strip_prefecture(text))

    # 1) 完全一致
    exact = [
        e for e in area_entries
        if normalize_label(e.label) in (normalized_input, stripped_input)
    ]
    if len(exact) == 1:
        return _resolved(text, exact[0])
    if len(exact) > 1:
        raise AmbiguousCity(
            f"市区町村名 '{text}' は複数候補があります",
            [f"{e.label}({e.code})" for e in exact[:MAX_SUGGESTIONS]],
            [f"候補: {_fmt(exact)}", "都道府県を含む正式名称で指定してください。"],
        )

    # 2) カナ正規化一致
    kana_input = normalize_label_with_kana(text)
    kana_stripped = normalize_label_with_kana(strip_prefecture(text))
    kana_match = [
        e for e in area_entries
        if normalize_label_with_kana(e.label) in (kana_input, kana_stripped)
    ]
    if len(kana_match) == 1:
        return _resolved(text, kana_match[0])

    # 3) 読み仮名の逆引き
    reading_names = set(find_by_reading(kana_input)) | set(find_by_reading(kana_stripped))
    if reading_names:
        reading_match = [e for e in area_entries if e.label in reading_names]
        if len(reading_match) == 1:
            return _resolved(text, reading_match[0])

    # 4) 部分一致
    partial = []
    for e in area_entries:
        name = normalize_label(e.label)
        if not name:
            continue
        for needle in (normalized_input, stripped_input):
            if needle and (needle in name or name in needle):
                partial.append(e)
                break
    if len(partial) == 1:
        return _resolved(text, partial[0])
    if len(partial) > 1:
        raise AmbiguousCity(
            f"市区町村名 '{text}' は曖昧です",
            [f"{e.label}({e.code})" for e in partial[:MAX_SUGGESTIONS]],
            [f"候補: {_fmt(partial)}", "より具体的な名称で再実行してください。"],
        )

    scored = sorted(
        ((candidate_score(text, e.label), e) for e in area_entries),
        key=lambda pair: -pair[0],
    )
    suggestions = [f"{e.label}({e.code})" for score, e in scored[:MAX_SUGGESTIONS] if score > 0]
    raise CityNotFound(
        f"市区町村名 '{text}' を解決できませんでした",
        suggestions,
        [
            f"近い候補: {', '.join(suggestions)}" if suggestions else "メタ情報に候補がありません。",
            "statsDataId が市区町村粒度の統計か確認してください。",
        ],
    )


def resolve_cities(
    names: Sequence[str], area_entries: Sequence[AreaEntry]
) -> List[CityResolution]:
    return [resolve_city(name, area_entries) for name in names]
