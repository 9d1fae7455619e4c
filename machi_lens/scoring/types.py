"""スコアリングで使う不変データ型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

HIGHER_BETTER = "higher_better"
LOWER_BETTER = "lower_better"

CATEGORIES = ("childcare", "price", "safety", "disaster", "transport", "education", "healthcare")


@dataclass(frozen=True)
class IndicatorValue:
    indicator_id: str
    raw_value: Optional[float]
    data_year: str = ""
    source_id: str = ""


@dataclass(frozen=True)
class CityIndicators:
    city_name: str
    area_code: str
    indicators: Tuple[IndicatorValue, ...] = ()

    def get(self, indicator_id: str) -> Optional[IndicatorValue]:
        for indicator in self.indicators:
            if indicator.indicator_id == indicator_id:
                return indicator
        return None

    def raw(self, indicator_id: str) -> Optional[float]:
        indicator = self.get(indicator_id)
        return indicator.raw_value if indicator else None


@dataclass(frozen=True)
class IndicatorDefinition:
    id: str
    label: str
    unit: str
    direction: str
    category: str
    precision: int = 0


@dataclass(frozen=True)
class WeightPreset:
    name: str
    label: str
    weights: Mapping[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ChoiceScore:
    indicator_id: str
    score: float
    city_name: str = ""


@dataclass(frozen=True)
class BaselineScore:
    indicator_id: str
    percentile: float
    population_size: int
    baseline_name: str


@dataclass(frozen=True)
class IndicatorStarRating:
    indicator_id: str
    stars: int
    national_percentile: float


@dataclass(frozen=True)
class CompositeResult:
    score: float
    used_count: int
    total_count: int


@dataclass(frozen=True)
class ConfidenceResult:
    level: str  # high | medium | low
    reason: str


@dataclass(frozen=True)
class CityScoreResult:
    city_name: str
    area_code: str
    baseline: Tuple[BaselineScore, ...]
    choice: Tuple[ChoiceScore, ...]
    composite_score: float
    confidence: ConfidenceResult
    rank: int
    star_rating: Optional[float] = None
    indicator_stars: Tuple[IndicatorStarRating, ...] = ()
    notes: Tuple[str, ...] = ()

    def choice_by_id(self) -> Dict[str, float]:
        return {c.indicator_id: c.score for c in self.choice}
