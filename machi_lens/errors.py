"""Typed errors raised by the resolvers and API clients.

解決エラー（分類・市区町村名が特定できない）は利用者が手動指定で直せるため、
次アクションのヒントを必ず添える。データ欠損はエラーにしない。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence


class MachiLensError(Exception):
    def __init__(
        self,
        message: str,
        hints: Optional[Sequence[str]] = None,
        details: Optional[str] = None,
        exit_code: int = 1,
    ):
        super().__init__(message)
        self.message = message
        self.hints: List[str] = list(hints or [])
        self.details = details
        self.exit_code = exit_code


class ConfigError(MachiLensError):
    pass


class ApiError(MachiLensError):
    pass


class ResolutionError(MachiLensError):
    """統計表のラベルがヒューリスティクスに合わず、分類を特定できない。"""


class EmptyClassification(ResolutionError):
    pass


class AreaAxisNotFound(ResolutionError):
    pass


class TimeAxisNotFound(ResolutionError):
    pass


class ExplicitTimeCodeNotFound(ResolutionError):
    pass


class EmptyTimeAxis(ResolutionError):
    pass


@dataclass(frozen=True)
class AxisDiagnostic:
    """年齢分類の候補ごとの診断結果"""

    class_id: str
    name: str
    has_total: bool
    has_kids: bool
    sample: str

    def describe(self) -> str:
        total = "○" if self.has_total else "×"
        kids = "○" if self.has_kids else "×"
        return f"  {self.class_id}({self.name}): 総数{total} 0-14歳{kids} → {self.sample}"


class AgeAxisNotFound(ResolutionError):
    def __init__(self, message: str, diagnostics: Sequence[AxisDiagnostic], hints=None):
        super().__init__(message, hints)
        self.diagnostics = list(diagnostics)


class TotalCategoryNotFound(ResolutionError):
    pass


class KidsCategoryNotFound(ResolutionError):
    pass


class CityNotFound(ResolutionError):
    def __init__(self, message: str, suggestions: Sequence[str], hints=None):
        super().__init__(message, hints, exit_code=3)
        self.suggestions = list(suggestions)


class AmbiguousCity(ResolutionError):
    def __init__(self, message: str, candidates: Sequence[str], hints=None):
        super().__init__(message, hints, exit_code=3)
        self.candidates = list(candidates)


class MissingAreaValue(MachiLensError):
    pass


def format_error(error: BaseException) -> str:
    if isinstance(error, MachiLensError):
        lines = [f"[ERROR] {error.message}"]
        if error.details:
            lines.append(f"詳細: {error.details}")
        if error.hints:
            lines.append("次アクション:")
            for hint in error.hints:
                lines.append(f"- {hint}")
        return "\n".join(lines)
    if isinstance(error, Exception):
        return f"[ERROR] {error}"
    return "[ERROR] 不明なエラーが発生しました"
