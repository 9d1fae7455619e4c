from __future__ import annotations

from datetime import date
from typing import Optional

from machi_lens.scoring.types import ConfidenceResult

HIGH_MAX_AGE = 2
MEDIUM_MAX_AGE = 4
HIGH_MAX_MISSING = 0.1
MEDIUM_MAX_MISSING = 0.3
MIN_SAMPLE = 30


def _data_age(data_year: str, current_year: int) -> Optional[int]:
    digits = "".join(ch for ch in str(data_year) if ch.isdigit())[:4]
    if len(digits) < 4:
        return None
    return current_year - int(digits)


def evaluate_confidence(
    data_year: str,
    sample_count: Optional[int],
    missing_rate: float,
    current_year: Optional[int] = None,
) -> ConfidenceResult:
    """データの鮮度・欠損率・サンプル数から信頼度 high/medium/low を判定する。

    年が読み取れない場合（'不明' など）は鮮度条件を満たさないものとして扱う。
    """
    year = current_year if current_year is not None else date.today().year
    age = _data_age(data_year, year)
    sample_ok = sample_count is None or sample_count >= MIN_SAMPLE

    if age is not None and age <= HIGH_MAX_AGE and missing_rate < HIGH_MAX_MISSING and sample_ok:
        return ConfidenceResult("high", "データが新しく、欠損も少ない")

    if age is not None and age <= MEDIUM_MAX_AGE and missing_rate < MEDIUM_MAX_MISSING:
        return ConfidenceResult("medium", "一部データに古さまたは欠損あり")

    reasons = []
    if age is None:
        reasons.append("データ年が不明")
    elif age > MEDIUM_MAX_AGE:
        reasons.append(f"データが{age}年前")
    if missing_rate >= MEDIUM_MAX_MISSING:
        reasons.append(f"欠損率が{round(missing_rate * 100)}%")
    if sample_count is not None and sample_count < MIN_SAMPLE:
        reasons.append(f"サンプル数が{sample_count}件")
    return ConfidenceResult("low", "、".join(reasons) or "信頼度の条件を満たしていません")
