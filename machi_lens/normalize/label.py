"""
ラベル正規化。e-Stat の分類ラベルは全角/半角・波ダッシュ類の表記ゆれが多いため、
比較の前に必ずここを通す。
- NFKC で全角英数・半角カナを統一
- 波ダッシュ類は '~'、ダッシュ類は '-' に寄せる
- 小文字化し、空白をすべて除去
"""

from __future__ import annotations

import re
import unicodedata

from machi_lens.normalize.kana import katakana_to_hiragana

# NFKC で畳まれない記号の表記ゆれ
_SYMBOL_MAP = {
    "〜": "~",  # WAVE DASH
    "～": "~",  # FULLWIDTH TILDE (NFKC 後は '~' だが念のため)
    "−": "-",
    "－": "-",
    "–": "-",
    "—": "-",
    "‐": "-",
}

_SPACE_RE = re.compile(r"\s+")


def normalize_label(text: str | None) -> str:
    if text is None:
        return ""
    s = unicodedata.normalize("NFKC", str(text))
    s = "".join(_SYMBOL_MAP.get(ch, ch) for ch in s)
    s = s.lower()
    return _SPACE_RE.sub("", s)


def normalize_label_with_kana(text: str | None) -> str:
    """normalize_label + カタカナ→ひらがな統一。表記ゆれ比較用。"""
    return katakana_to_hiragana(normalize_label(text))
