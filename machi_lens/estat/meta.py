"""
e-Stat のメタ情報（CLASS_INF）と統計データ（DATA_INF）を、
解決ロジックが扱う汎用形へ変換する。
- 分類ツリー: ClassificationAxis のリスト（area / time / catXX / tab）
- 値テーブル: DataValue のリスト（area, time, cats, value）
HTTP や JSON エンベロープの知識はこのモジュールで閉じる。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

# e-Stat が欠損を表す記号
NA_TOKENS = {"", "-", "...", "x", "X", "***", "…"}


@dataclass(frozen=True)
class ClassificationItem:
    code: str
    label: str


@dataclass(frozen=True)
class ClassificationAxis:
    id: str
    label: str
    items: Tuple[ClassificationItem, ...] = ()

    def find(self, code: str) -> Optional[ClassificationItem]:
        for item in self.items:
            if item.code == code:
                return item
        return None


@dataclass(frozen=True)
class AreaEntry:
    code: str
    label: str


@dataclass(frozen=True)
class CityResolution:
    input_text: str
    resolved_label: str
    code: str


@dataclass(frozen=True)
class TimeSelection:
    axis_id: str
    code: str
    label: str


@dataclass(frozen=True)
class AgeSelection:
    axis_id: str
    param_name: str
    total: ClassificationItem
    kids: ClassificationItem


@dataclass(frozen=True)
class DefaultFilter:
    param_name: str
    code: str


@dataclass(frozen=True)
class IndicatorSelection:
    axis_id: str
    param_name: str
    code: str
    label: str


@dataclass(frozen=True)
class DataValue:
    area: Optional[str]
    time: Optional[str]
    cats: Mapping[str, str] = field(default_factory=dict)
    value: Optional[float] = None


def arrify(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def text_from(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict) and "$" in value:
        return text_from(value["$"])
    return ""


def parse_number(value: Any) -> Optional[float]:
    raw = text_from(value).strip()
    if raw in NA_TOKENS:
        return None
    try:
        parsed = float(raw.replace(",", ""))
    except ValueError:
        return None
    if parsed != parsed or parsed in (float("inf"), float("-inf")):
        return None
    return parsed


def to_cd_param_name(axis_id: str) -> str:
    """分類ID → getStatsData のパラメータ名（cat01 → cdCat01, tab → cdTab）"""
    if not axis_id:
        return ""
    return f"cd{axis_id[0].upper()}{axis_id[1:]}"


def is_category_axis(axis: ClassificationAxis) -> bool:
    return axis.id.startswith("cat") or axis.id == "tab"


def extract_class_objects(meta_info: Mapping[str, Any]) -> List[ClassificationAxis]:
    """getMetaInfo のレスポンス（またはその METADATA_INF）から分類ツリーを取り出す。"""
    root = meta_info.get("GET_META_INFO", meta_info) if isinstance(meta_info, Mapping) else {}
    metadata = root.get("METADATA_INF", root) if isinstance(root, Mapping) else {}
    class_inf = metadata.get("CLASS_INF") or {}

    axes: List[ClassificationAxis] = []
    for class_obj in arrify(class_inf.get("CLASS_OBJ")):
        axis_id = text_from(class_obj.get("@id"))
        if not axis_id:
            continue
        items = []
        for item in arrify(class_obj.get("CLASS")):
            code = text_from(item.get("@code"))
            if not code:
                continue
            items.append(ClassificationItem(code=code, label=text_from(item.get("@name"))))
        axes.append(
            ClassificationAxis(
                id=axis_id, label=text_from(class_obj.get("@name")), items=tuple(items)
            )
        )
    return axes


def extract_data_values(data: Mapping[str, Any]) -> List[DataValue]:
    root = data.get("GET_STATS_DATA", data) if isinstance(data, Mapping) else {}
    statistical = root.get("STATISTICAL_DATA") or {}
    data_inf = statistical.get("DATA_INF") or {}

    values: List[DataValue] = []
    for row in arrify(data_inf.get("VALUE")):
        area = time = None
        cats: Dict[str, str] = {}
        for key, raw in row.items():
            if not key.startswith("@"):
                continue
            name = key[1:]
            if name == "area":
                area = text_from(raw)
            elif name == "time":
                time = text_from(raw)
            elif name.startswith("cat") or name == "tab":
                cats[name] = text_from(raw)
        values.append(DataValue(area=area, time=time, cats=cats, value=parse_number(row.get("$"))))
    return values


def values_by_area(values: Iterable[DataValue], time_code: str) -> Dict[str, float]:
    """指定時点の値を area コード単位の dict にする。

    time を持たない行は対象時点の値として扱う。
    同一 area が重複した場合は最初の値を保持する（上書きしない）。
    """
    by_area: Dict[str, float] = {}
    for row in values:
        if not row.area:
            continue
        if row.time and row.time != time_code:
            continue
        if row.value is None:
            continue
        if row.area not in by_area:
            by_area[row.area] = row.value
    return by_area


def format_selection_preview(axes: Iterable[ClassificationAxis]) -> str:
    previews = []
    for axis in [a for a in axes if a.id.startswith("cat")][:5]:
        sample = " | ".join(f"{item.code}:{item.label}" for item in axis.items[:5])
        previews.append(f"{axis.id}({axis.label}) => {sample}")
    return "\n".join(previews)
