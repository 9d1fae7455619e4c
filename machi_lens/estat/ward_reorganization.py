"""
政令指定都市の区再編マッピング。

2024年1月1日施行の浜松市区再編（旧7区 → 新3区）に対応する。
国勢調査（人口）は新コードに更新済みだが、社会・人口統計体系（犯罪・教育・医療・交通）は
旧コードのままの場合があるため、
  - 取得時: 新コードの要求に旧コードを追加する（expand_area_codes）
  - 取得後: 旧コードの値を新コードへ集約する（aggregate_*）
集約は新コードの値が既にある場合は何もしない（上流が移行済みなら無変更）。

北区(22135)の三方原地区は実際には中央区に編入されたが、データは旧区単位でしか
取得できないため北区全体を浜名区に割り当てる。
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple


@dataclass(frozen=True)
class OldWard:
    code: str
    label: str
    census_population: int  # 令和2年国勢調査（加重平均の重み）


@dataclass(frozen=True)
class WardReorganizationEntry:
    new_code: str
    new_label: str
    old_wards: Tuple[OldWard, ...]


HAMAMATSU_REORGANIZATION: Tuple[WardReorganizationEntry, ...] = (
    WardReorganizationEntry(
        "22138",
        "浜松市中央区",
        (
            OldWard("22131", "中区", 234839),
            OldWard("22132", "東区", 131277),
            OldWard("22133", "西区", 113455),
            OldWard("22134", "南区", 100612),
        ),
    ),
    WardReorganizationEntry(
        "22139",
        "浜松市浜名区",
        (
            OldWard("22135", "北区", 92548),
            OldWard("22136", "浜北区", 99960),
        ),
    ),
    WardReorganizationEntry(
        "22140",
        "浜松市天竜区",
        (OldWard("22137", "天竜区", 27632),),
    ),
)

# 再編を追加する場合はここに足す
ALL_REORGANIZATIONS: Tuple[WardReorganizationEntry, ...] = HAMAMATSU_REORGANIZATION

NEW_TO_OLD = MappingProxyType({e.new_code: e for e in ALL_REORGANIZATIONS})
ABOLISHED_CODES = frozenset(w.code for e in ALL_REORGANIZATIONS for w in e.old_wards)

WardMapping = Mapping[str, Sequence[OldWard]]


def is_reorganized_code(code: str) -> bool:
    """再編後の新コードか"""
    return str(code)[:5] in NEW_TO_OLD


def is_abolished_code(code: str) -> bool:
    """再編で廃止された旧コードか"""
    return str(code)[:5] in ABOLISHED_CODES


def get_reorganization(code: str) -> Optional[WardReorganizationEntry]:
    return NEW_TO_OLD.get(str(code)[:5])


def expand_area_codes(area_codes: Sequence[str]) -> Tuple[List[str], Dict[str, Tuple[OldWard, ...]]]:
    """新コードを含む要求に旧コードを追加する。

    Returns:
        (重複なしの展開済みコード, 新コード → 旧区一覧)
    """
    expanded: List[str] = []
    seen = set()
    mapping: Dict[str, Tuple[OldWard, ...]] = {}

    def add(code: str) -> None:
        if code not in seen:
            seen.add(code)
            expanded.append(code)

    for code in area_codes:
        add(code)
        entry = get_reorganization(code)
        if entry is None:
            continue
        mapping[code] = entry.old_wards
        for ward in entry.old_wards:
            add(ward.code)
    return expanded, mapping


def _present(values: Mapping[str, object], wards: Sequence[OldWard]) -> List[Tuple[OldWard, object]]:
    return [(w, values[w.code]) for w in wards if values.get(w.code) is not None]


def aggregate_raw_values(values: MutableMapping[str, float], mapping: WardMapping) -> None:
    """旧区の実数（件数など）を合計して新コードに設定する。値がある旧区だけを合算する。"""
    for new_code, wards in mapping.items():
        if values.get(new_code) is not None:
            continue
        present = _present(values, wards)
        if not present:
            continue
        values[new_code] = sum(v for _, v in present)


def aggregate_per_capita_values(values: MutableMapping[str, float], mapping: WardMapping) -> None:
    """旧区の人口当たり値を、国勢調査人口による加重平均で新コードに設定する。"""
    for new_code, wards in mapping.items():
        if values.get(new_code) is not None:
            continue
        present = _present(values, wards)
        if not present:
            continue
        total_pop = sum(w.census_population for w, _ in present)
        if total_pop <= 0:
            continue
        values[new_code] = sum(v * w.census_population for w, v in present) / total_pop


def aggregate_boolean_values(values: MutableMapping[str, bool], mapping: WardMapping) -> None:
    """旧区の真偽値（災害リスク有無など）を論理和で新コードに設定する。"""
    for new_code, wards in mapping.items():
        if values.get(new_code) is not None:
            continue
        present = _present(values, wards)
        if not present:
            continue
        values[new_code] = any(bool(v) for _, v in present)


def expand_population_map(
    population: Mapping[str, float], mapping: WardMapping
) -> Dict[str, float]:
    """旧区の国勢調査人口を追加した人口マップを返す（元のマップは変更しない）。"""
    expanded = dict(population)
    for wards in mapping.values():
        for ward in wards:
            expanded.setdefault(ward.code, ward.census_population)
    return expanded
