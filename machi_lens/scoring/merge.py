from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, TypeVar

from machi_lens.scoring.types import CityIndicators, IndicatorValue

T = TypeVar("T")


def merge_indicators(
    cities: Sequence[CityIndicators],
    data_map: Mapping[str, T],
    extractor: Callable[[Optional[T]], Iterable[IndicatorValue]],
) -> List[CityIndicators]:
    """データソースの値を各都市の指標に追記した新しいリストを返す。

    data_map に無い都市には extractor(None) の結果を追記する（rawValue=None の欠損扱い）。
    既存の IndicatorValue は変更しない。
    """
    merged = []
    for city in cities:
        added = tuple(extractor(data_map.get(city.area_code)))
        merged.append(replace(city, indicators=city.indicators + added))
    return merged


def merge_values_into_scoring_input(
    cities: Sequence[CityIndicators],
    data_map: Mapping[str, Mapping[str, IndicatorValue]],
    indicator_ids: Sequence[str],
    source_id: str = "estat",
) -> List[CityIndicators]:
    """{area_code: {indicator_id: IndicatorValue}} 形式のドメインデータを追記する。"""

    def extract(values: Optional[Mapping[str, IndicatorValue]]) -> List[IndicatorValue]:
        values = values or {}
        return [
            values.get(i) or IndicatorValue(indicator_id=i, raw_value=None, data_year="", source_id=source_id)
            for i in indicator_ids
        ]

    return merge_indicators(cities, data_map, extract)
